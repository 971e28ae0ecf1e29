"""Infrastructure layer — operating-system process integration.

This layer owns every ``subprocess`` call and every ``PATH`` lookup.
It reports failures with its own low-level exception types, which the
core drivers translate into :class:`~mediakit.exceptions.DriverError`
subclasses.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from mediakit.infra.command_line import CommandLine, ExitStatusError
from mediakit.infra.process_runner import (
    CommandNotFoundError,
    ProcessRunner,
    WorkingDirectoryError,
)
from mediakit.infra.tool_detector import ToolStatus, detect_tool, require_tool

__all__: list[str] = [
    "CommandLine",
    "CommandNotFoundError",
    "ExitStatusError",
    "ProcessRunner",
    "WorkingDirectoryError",
    "ToolStatus",
    "detect_tool",
    "require_tool",
]
