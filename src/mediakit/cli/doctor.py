"""``mediakit doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising which
media tools the drivers will be able to run.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No driver logic resides here;
it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from mediakit.cli import exit_codes
from mediakit.cli.console import console
from mediakit.core.factory import FACTORIES, ToolRegistry
from mediakit.infra.tool_detector import ToolStatus, detect_tool
from mediakit.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    major, minor = sys.version_info[:2]
    ok = major >= 3 and minor >= 10
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _tool_check(status_obj: ToolStatus) -> tuple[str, str, str]:
    """Return (label, value, status) for one tool row."""
    if status_obj.found:
        path_str = str(status_obj.path) if status_obj.path else "found"
        return status_obj.name, path_str, "[green]OK[/green]"
    return status_obj.name, "not found", "[yellow]WARN[/yellow]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    release = platform.release()
    machine = platform.machine()
    value = f"{system_display} {release} ({machine})"
    return "OS", value, "[green]OK[/green]"


def _mediakit_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the mediakit version row."""
    return "mediakit", __version__, "[green]OK[/green]"


def _detect_tools(registry: ToolRegistry) -> list[ToolStatus]:
    """Probe every known tool, honouring configured binary paths."""
    return [
        detect_tool(name, factory(registry).bin)
        for name, factory in FACTORIES.items()
    ]


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nmediakit doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        plain_status = _status_plain(status)
        print(f"{label:<12} {value:<32} {plain_status:<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(registry: ToolRegistry | None = None) -> int:
    """Execute all diagnostic checks and render a summary table.

    Missing tools only warn: a driver for a missing tool fails later with
    :class:`~mediakit.exceptions.ConfigurationError`.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    if registry is None:
        registry = ToolRegistry.from_environ()

    tool_statuses = _detect_tools(registry)
    checks = [
        _mediakit_version_check(),
        _python_version_check(),
        *(_tool_check(status) for status in tool_statuses),
        _os_check(),
    ]

    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="mediakit doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)

        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    # Show install guidance for missing tools.
    for status_obj in tool_statuses:
        if status_obj.found or not status_obj.install_commands:
            continue
        if rich_available:
            console.print(f"[yellow]{status_obj.name} is not installed.[/yellow]")
            console.print("Install using one of the following commands:\n")
            for cmd in status_obj.install_commands:
                console.print(f"  [bold]{cmd}[/bold]")
            console.print()
        else:
            print(f"{status_obj.name} is not installed.", file=sys.stderr)
            print("Install using one of the following commands:\n", file=sys.stderr)
            for cmd in status_obj.install_commands:
                print(f"  {cmd}", file=sys.stderr)
            print(file=sys.stderr)

    if has_failure:
        if rich_available:
            console.print("[bold red]Some checks failed.[/bold red]")
        else:
            print("Some checks failed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR

    if rich_available:
        console.print("[bold green]All checks passed.[/bold green]")
    else:
        print("All checks passed.", file=sys.stderr)
    return exit_codes.SUCCESS
