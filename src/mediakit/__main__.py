"""Allow ``python -m mediakit`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m mediakit`` behaves identically to the ``mediakit``
console script.
"""

from __future__ import annotations

from mediakit.cli.app import cli

if __name__ == "__main__":
    cli()
