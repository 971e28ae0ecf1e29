"""Protocols (interfaces) consumed by callers of the driver layer.

Callers depend ONLY on :class:`Driver` — never on a concrete variant —
so a production driver and the fake one are interchangeable.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Driver(Protocol):
    """Contract for executing one external tool.

    Any object exposing :attr:`bin`, :meth:`run` and :meth:`command` with
    these signatures satisfies this protocol structurally (no explicit
    inheritance required).
    """

    @property
    def bin(self) -> str:
        """Path or bare name of the target binary."""
        ...  # pragma: no cover

    def run(self, *args: Any, **options: Any) -> Any:
        """Execute the tool once and return its captured standard output.

        *args* is either a single pre-formed argument string, a single
        sequence of tokens, or the tokens themselves.  *options* are
        process-level settings (``cwd``, ``env``, ``timeout``, ``input``)
        passed through to the process runner.

        Raises
        ------
        ConfigurationError
            When the binary cannot be located or executed.
        FailError
            When the process exits unsuccessfully; the message is the
            captured standard error.
        """
        ...  # pragma: no cover

    def command(self, *args: Any) -> str:
        """Return the command line :meth:`run` would execute, without running it."""
        ...  # pragma: no cover
