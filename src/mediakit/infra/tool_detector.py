"""Infrastructure: media tool detection and platform guidance.

This module locates a tool binary (``ffmpeg``, ``ffprobe``, ``sox``)
and provides platform-specific installation guidance when it is
missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No permanent PATH modification.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from mediakit.exceptions import ConfigurationError


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of a tool detection probe.

    Attributes
    ----------
    name : str
        The tool that was probed.
    found : bool
        Whether the binary was located.
    path : Path | None
        Absolute path to the binary, or ``None``.
    version_hint : str
        Human-readable status string (e.g. ``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested shell commands for installing the tool on the current
        platform.  Empty when the tool is already present.
    """

    name: str
    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(name: str, bin: str | None = None) -> ToolStatus:
    """Probe the system for tool *name*.

    *bin* is the configured binary path or name to look up; it defaults
    to *name*.  Returns a :class:`ToolStatus` regardless of whether the
    tool is present — the caller decides whether to abort or merely warn.
    """
    result = shutil.which(bin or name)

    if result is not None:
        resolved = Path(result).resolve()
        return ToolStatus(
            name=name,
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return ToolStatus(
        name=name,
        found=False,
        path=None,
        version_hint="not found",
        install_commands=_platform_install_commands(name),
    )


def require_tool(name: str, bin: str | None = None) -> Path:
    """Locate tool *name* or raise :class:`ConfigurationError`."""
    status = detect_tool(name, bin)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append(f"Install {name} using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise ConfigurationError(
            f"can't find bin in {bin or name}.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

# ffprobe ships inside the ffmpeg package everywhere.
_PACKAGES: dict[str, str] = {
    "ffmpeg": "ffmpeg",
    "ffprobe": "ffmpeg",
    "sox": "sox",
}

_DOWNLOAD_PAGES: dict[str, str] = {
    "ffmpeg": "https://ffmpeg.org/download.html",
    "sox": "https://sourceforge.net/projects/sox/",
}


def _platform_install_commands(name: str) -> tuple[str, ...]:
    """Return install commands for *name* appropriate for the current OS."""
    package = _PACKAGES.get(name)
    if package is None:
        return ()

    system = platform.system().lower()
    if system == "windows":
        if package == "ffmpeg":
            return (
                "winget install Gyan.FFmpeg",
                "choco install ffmpeg",
            )
        return ("choco install sox.portable",)
    if system == "linux":
        return (
            f"sudo apt install {package}",
            f"sudo dnf install {package}",
            f"sudo pacman -S {package}",
        )
    if system == "darwin":
        return (f"brew install {package}",)
    # Fallback — generic guidance.
    return (f"Please install {package} from {_DOWNLOAD_PAGES[package]}",)
