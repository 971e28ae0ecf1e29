"""Direct process spawning for the ``popen`` driver.

This module owns the ``subprocess`` call used by
:class:`~mediakit.core.drivers.DirectDriver`.  The binary is executed
from an argv list — never through a shell — after the escaped argument
string has been split back into tokens.

Raw ``OSError`` from spawning is translated into
:class:`CommandNotFoundError` or :class:`WorkingDirectoryError`; non-zero exits and timeouts are reported
through :class:`~mediakit.core.models.ExecutionResult`, not raised.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Mapping

from mediakit.core.models import ExecutionResult

logger = logging.getLogger(__name__)


class CommandNotFoundError(Exception):
    """Raised when the binary cannot be resolved to an executable."""

    def __init__(self, bin: str) -> None:
        super().__init__(f"command not found: {bin}")
        self.bin = bin


class WorkingDirectoryError(Exception):
    """Raised when the child cannot be started in the requested directory."""

    def __init__(self, cwd: str | os.PathLike[str]) -> None:
        super().__init__(f"cannot use working directory: {os.fspath(cwd)}")
        self.cwd = cwd


def is_cwd_failure(exc: OSError, cwd: str | os.PathLike[str] | None) -> bool:
    """Return True when a spawn *exc* was caused by *cwd*, not the binary."""
    if cwd is None:
        return False
    if exc.filename is not None and os.fsdecode(exc.filename) == os.fsdecode(cwd):
        return True
    return not os.path.isdir(cwd)


class ProcessRunner:
    """Run one binary with a shell-escaped argument string.

    Parameters
    ----------
    cwd:
        Working directory for the child process.
    env:
        Environment overrides merged onto the parent environment.
    timeout:
        Seconds before the child is killed.  A timed-out run is reported
        as unsuccessful.
    input:
        Text fed to the child's standard input.
    """

    def __init__(
        self,
        *,
        cwd: str | os.PathLike[str] | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        input: str | None = None,
    ) -> None:
        self.cwd = cwd
        self.env = env
        self.timeout = timeout
        self.input = input

    def _build_env(self) -> dict[str, str] | None:
        if self.env is None:
            return None
        merged = dict(os.environ)
        merged.update(self.env)
        return merged

    @staticmethod
    def resolve(bin: str) -> str:
        """Return the executable path for *bin* or raise :class:`CommandNotFoundError`."""
        resolved = shutil.which(bin)
        if resolved is None:
            raise CommandNotFoundError(bin)
        return resolved

    def run(self, bin: str, escaped_args: str = "") -> ExecutionResult:
        """Execute *bin* with *escaped_args* and capture both streams.

        Raises
        ------
        CommandNotFoundError
            When *bin* is not on ``PATH``, is not executable, or the OS
            refuses to spawn it.
        WorkingDirectoryError
            When *cwd* is missing or is not a directory.
        """
        argv = [self.resolve(bin), *shlex.split(escaped_args)]
        logger.debug("spawning %s", shlex.join(argv))

        try:
            proc = subprocess.run(
                argv,
                cwd=self.cwd,
                env=self._build_env(),
                input=self.input,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except OSError as exc:
            if is_cwd_failure(exc, self.cwd):
                raise WorkingDirectoryError(self.cwd) from exc
            raise CommandNotFoundError(bin) from exc
        except subprocess.TimeoutExpired as exc:
            # subprocess.run has already killed and reaped the child.
            logger.warning("%s timed out after %s seconds", bin, self.timeout)
            note = f"{bin} timed out after {self.timeout} seconds"
            partial = _as_text(exc.stderr)
            return ExecutionResult(
                stdout=_as_text(exc.stdout),
                stderr=f"{partial}\n{note}" if partial else note,
                returncode=None,
                timed_out=True,
            )

        if proc.returncode != 0:
            logger.warning("%s exited with status %d", bin, proc.returncode)
        return ExecutionResult(
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )


def _as_text(data: str | bytes | None) -> str:
    """Normalise partial output captured before a timeout."""
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
