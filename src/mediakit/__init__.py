"""mediakit — driver layer for external command-line media tools.

Callers obtain a driver for ``ffmpeg``, ``ffprobe`` or ``sox`` from a
per-tool factory and run argument lists through it, without knowing
whether the command is spawned directly, routed through the legacy
shell wrapper, or faked for tests.
"""

from mediakit.core.drivers import DirectDriver, FakeDriver, LegacyDriver
from mediakit.core.factory import (
    DriverFactory,
    DriverType,
    FFmpeg,
    FFprobe,
    Sox,
    ToolRegistry,
    default_registry,
    factory_for,
)
from mediakit.core.protocols import Driver
from mediakit.exceptions import (
    ConfigurationError,
    DriverError,
    FailError,
    MediakitError,
    UnknownDriverTypeError,
    UnknownOptionError,
)
from mediakit.version import __version__

__all__: list[str] = [
    "ConfigurationError",
    "DirectDriver",
    "Driver",
    "DriverError",
    "DriverFactory",
    "DriverType",
    "FFmpeg",
    "FFprobe",
    "FailError",
    "FakeDriver",
    "LegacyDriver",
    "MediakitError",
    "Sox",
    "ToolRegistry",
    "UnknownDriverTypeError",
    "UnknownOptionError",
    "__version__",
    "default_registry",
    "factory_for",
]
