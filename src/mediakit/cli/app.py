"""CLI application entry point and command routing for mediakit.

This module is the **sole error boundary** for the entire application.
It catches :class:`~mediakit.exceptions.MediakitError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No driver logic lives here — all work is delegated to the factories
  and drivers of the core layer.
* Tool output is written to stdout untouched; everything else goes to
  the Rich console on stderr.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys

from mediakit.cli import exit_codes
from mediakit.cli.console import configure_logging, console
from mediakit.core.factory import FACTORIES, DriverFactory, DriverType, ToolRegistry, factory_for
from mediakit.exceptions import MediakitError
from mediakit.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_driver_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by ``run`` and ``command``.

    Options must precede TOOL; everything after TOOL is passed to it.
    """
    parser.add_argument(
        "--driver",
        choices=[member.value for member in DriverType],
        default=DriverType.POPEN.value,
        help="Driver variant used to execute the tool (default: popen).",
    )
    parser.add_argument(
        "--bin",
        dest="bin_path",
        default=None,
        metavar="PATH",
        help="Binary path, overriding MEDIAKIT_<TOOL>_BIN.",
    )
    parser.add_argument("tool", choices=sorted(FACTORIES), help="Tool to drive.")
    parser.add_argument(
        "tool_args",
        nargs=argparse.REMAINDER,
        metavar="ARGS",
        help="Arguments for the tool (separate with '--').",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``mediakit run TOOL -- ARGS``      — execute a tool, print its stdout
    * ``mediakit command TOOL -- ARGS``  — print the command line only
    * ``mediakit doctor``                — environment diagnostics
    """
    parser = argparse.ArgumentParser(
        prog="mediakit",
        description="Run external media tools through mediakit drivers.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log assembled commands and process outcomes.",
    )

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run a tool and print its output.")
    run_parser.add_argument(
        "--cwd", default=None, metavar="DIR", help="Working directory for the tool.",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Kill the tool after this many seconds.",
    )
    _add_driver_arguments(run_parser)

    command_parser = subparsers.add_parser(
        "command", help="Print the command line a driver would run.",
    )
    _add_driver_arguments(command_parser)

    subparsers.add_parser("doctor", help="Check which tools are available.")
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _tool_args(args: argparse.Namespace) -> list[str]:
    tool_args: list[str] = list(args.tool_args)
    if tool_args and tool_args[0] == "--":
        tool_args = tool_args[1:]
    return tool_args


def _factory(args: argparse.Namespace) -> DriverFactory:
    """Build the factory for ``args.tool`` from the environment plus ``--bin``."""
    factory = factory_for(args.tool, ToolRegistry.from_environ())
    if args.bin_path:
        factory.configure(lambda f: setattr(f, "bin_path", args.bin_path))
    return factory


def _handle_run(args: argparse.Namespace) -> int:
    """Execute the tool once and copy its stdout to ours."""
    driver = _factory(args).new(args.driver)
    tool_args = _tool_args(args)

    options: dict[str, object] = {}
    if args.cwd is not None:
        options["cwd"] = args.cwd
    if args.timeout is not None:
        options["timeout"] = args.timeout

    output = driver.run(tool_args, **options)
    if isinstance(output, str):
        sys.stdout.write(output)
    else:
        console.print("[dim]fake driver: nothing was executed.[/dim]")
    return exit_codes.SUCCESS


def _handle_command(args: argparse.Namespace) -> int:
    """Print the assembled command line without running it."""
    driver = _factory(args).new(args.driver)
    sys.stdout.write(driver.command(_tool_args(args)) + "\n")
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from mediakit.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the mediakit CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        configure_logging(verbose=True)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.command == "doctor":
        return _handle_doctor()

    if args.command == "command":
        return _handle_command(args)

    return _handle_run(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except MediakitError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
