"""Domain models for mediakit.

Models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O and no dependencies
on external packages.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Process execution outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Outcome of a single external process invocation.

    Transient: produced by one ``run`` call and discarded once the
    caller has consumed it.  Unpacks as ``(stdout, stderr, success)``::

        stdout, stderr, ok = runner.run("ffprobe", "-version")
    """

    stdout: str
    """Captured standard output, decoded as UTF-8."""

    stderr: str
    """Captured standard error, decoded as UTF-8."""

    returncode: int | None
    """Process exit status, or ``None`` when the process was killed on timeout."""

    timed_out: bool = False
    """Whether the process was killed for exceeding its timeout."""

    @property
    def success(self) -> bool:
        """``True`` when the process exited with status ``0`` in time."""
        return self.returncode == 0 and not self.timed_out

    def __iter__(self) -> Iterator[str | bool]:
        yield self.stdout
        yield self.stderr
        yield self.success
