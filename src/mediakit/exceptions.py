"""Custom exception hierarchy for mediakit.

All exceptions that cross layer boundaries must inherit from
:class:`MediakitError`.  Low-level signals raised by the infrastructure
layer (:class:`~mediakit.infra.process_runner.CommandNotFoundError`,
:class:`~mediakit.infra.command_line.ExitStatusError`, raw ``OSError``)
must NEVER propagate beyond a driver — they must be caught and re-raised
as a :class:`DriverError` subclass defined here.

Hierarchy
---------
MediakitError
├── EnvironmentError
└── DriverError
    ├── ConfigurationError
    ├── FailError
    ├── ArgumentEscapeError
    ├── UnknownDriverTypeError
    ├── UnknownToolError
    └── UnknownOptionError
"""

from __future__ import annotations


class MediakitError(Exception):
    """Base exception for all mediakit errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str = "", *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Environment / optional dependencies -----------------------------------

class EnvironmentError(MediakitError):
    """Raised when an optional runtime dependency is not available."""


# --- Drivers ---------------------------------------------------------------

class DriverError(MediakitError):
    """Base class for every failure surfaced by a driver or a factory.

    Callers can catch this single type regardless of which driver
    variant they hold.
    """


class ConfigurationError(DriverError):
    """Raised when the target binary cannot be found or executed.

    This is a setup problem, distinct from the tool itself failing.
    """


class FailError(DriverError):
    """Raised when the tool ran but exited unsuccessfully.

    The message is the captured standard-error text, verbatim.
    """


class ArgumentEscapeError(DriverError):
    """Raised when a pre-joined argument string cannot be tokenised."""


class UnknownDriverTypeError(DriverError, ValueError):
    """Raised when a factory is asked for a driver type it does not know."""


class UnknownToolError(DriverError, ValueError):
    """Raised when no factory is registered for a tool name."""


class UnknownOptionError(DriverError, ValueError):
    """Raised when a driver is given a process option it does not support."""
