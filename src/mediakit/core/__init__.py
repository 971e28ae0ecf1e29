"""Core layer — the driver contract, its variants and the factories.

Rules
-----
* No ``print()`` calls.
* No direct ``subprocess`` use; process work goes through ``infra``.
* No imports from ``cli``.
"""

from mediakit.core.models import ExecutionResult
from mediakit.core.protocols import Driver
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

__all__: list[str] = [
    "DirectDriver",
    "Driver",
    "DriverFactory",
    "DriverType",
    "ExecutionResult",
    "FFmpeg",
    "FFprobe",
    "FakeDriver",
    "LegacyDriver",
    "Sox",
    "ToolRegistry",
    "default_registry",
    "factory_for",
]
