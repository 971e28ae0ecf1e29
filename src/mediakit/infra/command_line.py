"""Shell-string command wrapper backing the legacy ``cocaine`` driver.

:class:`CommandLine` takes a binary and an already-joined parameter
string, assembles them into one command and hands it to ``/bin/sh``.
It performs **no quoting of the parameters** — callers that accept
untrusted input must escape them first (the legacy driver does).

Failures are reported with this module's own exception types;
:class:`~mediakit.core.drivers.LegacyDriver` maps them into the
mediakit error taxonomy.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shlex
import shutil
import signal
import subprocess
from collections.abc import Iterable, Mapping

from mediakit.infra.process_runner import is_cwd_failure

logger = logging.getLogger(__name__)


class CommandLineError(Exception):
    """Base class for :class:`CommandLine` failures."""


class CommandNotFoundError(CommandLineError):
    """Raised when the binary is not an executable on ``PATH``."""


class WorkingDirectoryError(CommandLineError):
    """Raised when the shell cannot be started in the requested directory."""

    def __init__(self, cwd: str | os.PathLike[str]) -> None:
        super().__init__(f"cannot use working directory: {os.fspath(cwd)}")
        self.cwd = cwd


class ExitStatusError(CommandLineError):
    """Raised when the command exits with an unexpected status."""

    def __init__(self, message: str, *, exit_status: int | None = None) -> None:
        super().__init__(message)
        self.exit_status = exit_status


class CommandLine:
    """A single shell command built from *bin* and a raw *params* string.

    Parameters
    ----------
    bin:
        Binary to run; quoted when it contains shell-special characters.
    params:
        Parameter string inserted verbatim after the binary.
    swallow_stderr:
        Capture standard error instead of letting it reach the parent's
        stream.  Captured text is included in :class:`ExitStatusError`.
    expected_outcodes:
        Exit statuses treated as success.
    cwd, env, timeout:
        Passed through to the child process; *env* is merged onto the
        parent environment.
    """

    def __init__(
        self,
        bin: str,
        params: str = "",
        *,
        swallow_stderr: bool = False,
        expected_outcodes: Iterable[int] = (0,),
        cwd: str | os.PathLike[str] | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.bin = bin
        self.params = params
        self.swallow_stderr = swallow_stderr
        self.expected_outcodes = tuple(expected_outcodes)
        self.cwd = cwd
        self.env = env
        self.timeout = timeout
        self.exit_status: int | None = None

    @property
    def command(self) -> str:
        """The exact string handed to the shell."""
        return f"{shlex.quote(self.bin)} {self.params}".rstrip()

    def run(self) -> str:
        """Execute :attr:`command` through the shell and return its stdout.

        Raises
        ------
        CommandNotFoundError
            When *bin* does not resolve to an executable.  The binary is
            looked up before spawning, so every exit status, 127 included,
            belongs to the command itself.
        WorkingDirectoryError
            When *cwd* is missing or is not a directory.
        ExitStatusError
            When the status is not in :attr:`expected_outcodes`, or the
            command exceeded :attr:`timeout`.
        """
        if shutil.which(self.bin) is None:
            raise CommandNotFoundError(self.bin)
        command = self.command
        logger.debug("sh -c %s", command)

        env = None
        if self.env is not None:
            env = dict(os.environ)
            env.update(self.env)

        # A new session lets a timeout kill the shell and everything it started.
        try:
            proc = subprocess.Popen(
                command,
                shell=True,
                cwd=self.cwd,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE if self.swallow_stderr else None,
                encoding="utf-8",
                errors="replace",
                start_new_session=True,
            )
        except OSError as exc:
            if is_cwd_failure(exc, self.cwd):
                raise WorkingDirectoryError(self.cwd) from exc
            raise CommandNotFoundError(self.bin) from exc

        with proc:
            try:
                stdout, stderr = proc.communicate(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                with contextlib.suppress(ProcessLookupError):
                    os.killpg(proc.pid, signal.SIGKILL)
                proc.communicate()
                self.exit_status = proc.returncode
                logger.warning("%s timed out after %s seconds", self.bin, self.timeout)
                raise ExitStatusError(
                    f"Command '{command}' timed out after {self.timeout} seconds",
                    exit_status=proc.returncode,
                ) from None

        self.exit_status = proc.returncode
        if self.exit_status not in self.expected_outcodes:
            logger.warning("%s exited with status %d", self.bin, self.exit_status)
            raise ExitStatusError(
                self._failure_message(command, stderr),
                exit_status=self.exit_status,
            )
        return stdout

    def _failure_message(self, command: str, stderr: str | None) -> str:
        expected = ", ".join(str(code) for code in self.expected_outcodes)
        message = f"Command '{command}' returned {self.exit_status}. Expected {expected}"
        if stderr:
            message += f"\n{stderr}"
        return message
