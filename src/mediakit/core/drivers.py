"""Driver variants — interchangeable executors for one external tool.

Three classes satisfy :class:`~mediakit.core.protocols.Driver`:

* :class:`DirectDriver` (``"popen"``) spawns the binary directly.
* :class:`LegacyDriver` (``"cocaine"``) goes through the shell-string
  :class:`~mediakit.infra.command_line.CommandLine` wrapper.
* :class:`FakeDriver` (``"fake"``) never runs anything.

Every variant raises only :class:`~mediakit.exceptions.ConfigurationError`
or :class:`~mediakit.exceptions.FailError` on execution failure, so
callers need not know which one they hold.

Drivers are immutable and hold no per-call state; one instance may be
used repeatedly and from several threads.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

from mediakit.exceptions import ConfigurationError, FailError, UnknownOptionError
from mediakit.infra import command_line
from mediakit.infra.command_line import CommandLine
from mediakit.infra.process_runner import (
    CommandNotFoundError,
    ProcessRunner,
    WorkingDirectoryError,
)
from mediakit.utils.shell_escape import escape, escape_string, split

logger = logging.getLogger(__name__)

# Process options each real variant forwards.
DIRECT_OPTIONS: frozenset[str] = frozenset({"cwd", "env", "timeout", "input"})
LEGACY_OPTIONS: frozenset[str] = frozenset({"cwd", "env", "timeout"})


# ---------------------------------------------------------------------------
# Argument normalisation
# ---------------------------------------------------------------------------

def _split_options(
    args: tuple[Any, ...], options: dict[str, Any],
) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """Pop a trailing options mapping off *args*; keyword options win."""
    if args and isinstance(args[-1], Mapping):
        merged = dict(args[-1])
        merged.update(options)
        return args[:-1], merged
    return args, options


def _tokens(args: tuple[Any, ...]) -> list[str]:
    """Flatten the accepted argument forms into a list of raw tokens.

    * ``("-i in.mp4",)`` — one pre-formed string, split with shell rules.
    * ``(["-i", "in.mp4"],)`` — one sequence of tokens.
    * ``("-i", "in.mp4")`` — the tokens themselves.
    """
    if len(args) == 1:
        (only,) = args
        if isinstance(only, str):
            return split(only)
        if isinstance(only, Sequence):
            return [os.fspath(token) for token in only]
    return [os.fspath(token) for token in args]


def _check_options(
    options: Mapping[str, Any], supported: frozenset[str], bin: str,
) -> None:
    """Reject option names the variant would not forward."""
    unknown = sorted(set(options) - supported)
    if unknown:
        raise UnknownOptionError(
            f"unsupported option(s) for {bin}: {', '.join(unknown)}",
            hint=f"Use one of: {', '.join(sorted(supported))}.",
        )


def _cwd_error(cwd: Any) -> ConfigurationError:
    return ConfigurationError(
        f"cannot use working directory {os.fspath(cwd)}.",
        hint="Pass an existing directory as cwd.",
    )


def _joined(args: str | Sequence[str | os.PathLike[str]]) -> str:
    """Return *args* as one string; token sequences are escaped and joined."""
    if isinstance(args, str):
        return args
    return escape(*args)


# ---------------------------------------------------------------------------
# Direct spawn
# ---------------------------------------------------------------------------

class DirectDriver:
    """Spawn the binary directly with individually escaped arguments.

    Usage::

        driver = DirectDriver("ffprobe")
        out = driver.run("-v", "error", "-show_format", "in file.mp4", timeout=30)
    """

    def __init__(self, bin: str) -> None:
        self._bin = bin

    @property
    def bin(self) -> str:
        return self._bin

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._bin!r})"

    def run(self, *args: Any, **options: Any) -> str:
        """Execute the binary once and return its standard output.

        Recognised *options* are those of
        :class:`~mediakit.infra.process_runner.ProcessRunner`
        (``cwd``, ``env``, ``timeout``, ``input``).

        Raises
        ------
        ConfigurationError
            When the binary cannot be found or executed, or *cwd* is not
            a usable directory.
        FailError
            When the process exits non-zero or times out.
        UnknownOptionError
            When *options* names anything the runner does not accept.
        """
        args, options = _split_options(args, options)
        _check_options(options, DIRECT_OPTIONS, self._bin)
        escaped_args = escape(*_tokens(args))
        runner = ProcessRunner(**options)
        try:
            stdout, stderr, success = runner.run(self._bin, escaped_args)
        except WorkingDirectoryError as exc:
            raise _cwd_error(exc.cwd) from exc
        except CommandNotFoundError as exc:
            raise ConfigurationError(
                f"can't find bin in {self._bin}.",
                hint="Install the tool or configure its path on the factory.",
            ) from exc
        if not success:
            raise FailError(stderr)
        return stdout

    def command(self, *args: Any) -> str:
        """Return the shell-safe command line :meth:`run` would execute."""
        args, _ = _split_options(args, {})
        escaped_args = escape(*_tokens(args))
        return " ".join(part for part in (escape(self._bin), escaped_args) if part)


# ---------------------------------------------------------------------------
# Legacy shell wrapper
# ---------------------------------------------------------------------------

class LegacyDriver:
    """Run through :class:`~mediakit.infra.command_line.CommandLine`.

    The wrapper inserts its parameter string into a shell command as-is,
    so :meth:`run` re-escapes the whole string first.  :meth:`command`
    reports the wrapper's own assembly of the *unescaped* string, which
    can differ from what :meth:`run` executes.
    """

    def __init__(self, bin: str) -> None:
        self._bin = bin

    @property
    def bin(self) -> str:
        return self._bin

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._bin!r})"

    def run(
        self,
        args: str | Sequence[str | os.PathLike[str]] = "",
        **options: Any,
    ) -> str:
        """Execute the command through the shell and return its stdout.

        *options* (``cwd``, ``env``, ``timeout``) are forwarded to the
        wrapper.

        Raises
        ------
        ConfigurationError
            When the binary is not an executable on ``PATH``, or *cwd*
            is not a usable directory.
        FailError
            When the command exits unsuccessfully; the message is the
            wrapper's exit-status report, which embeds standard error.
        UnknownOptionError
            When *options* names anything the wrapper does not accept.
        """
        _check_options(options, LEGACY_OPTIONS, self._bin)
        escaped_args = escape_string(_joined(args))
        line = CommandLine(self._bin, escaped_args, swallow_stderr=True, **options)
        try:
            return line.run()
        except command_line.CommandNotFoundError as exc:
            raise ConfigurationError(f"can't find bin in {self._bin}.") from exc
        except command_line.WorkingDirectoryError as exc:
            raise _cwd_error(exc.cwd) from exc
        except command_line.ExitStatusError as exc:
            raise FailError(str(exc)) from exc

    def command(self, args: str | Sequence[str | os.PathLike[str]] = "") -> str:
        return CommandLine(self._bin, _joined(args)).command


# ---------------------------------------------------------------------------
# No-op stand-in
# ---------------------------------------------------------------------------

class FakeDriver:
    """Driver for tests and dry runs: nothing is ever executed."""

    def __init__(self, bin: str) -> None:
        self._bin = bin

    @property
    def bin(self) -> str:
        return self._bin

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._bin!r})"

    def run(self, *args: Any, **options: Any) -> bool:
        logger.debug("fake run of %s skipped", self._bin)
        return True

    def command(self, args: str | Sequence[str | os.PathLike[str]] = "") -> str:
        """Return ``bin`` and the raw arguments concatenated with no separator."""
        if not isinstance(args, str):
            args = " ".join(os.fspath(token) for token in args)
        return self._bin + args
