"""Shared utilities — pure helpers with no I/O.

Rules
-----
* No business logic.
* No I/O.
* Importable by any layer.
"""

from mediakit.utils.shell_escape import escape, escape_string, split

__all__: list[str] = ["escape", "escape_string", "split"]
