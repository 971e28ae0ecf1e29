"""Per-tool driver factories and the binary-path registry behind them.

A :class:`ToolRegistry` holds one configured binary path per tool name.
Each :class:`DriverFactory` subclass (:class:`FFmpeg`, :class:`FFprobe`,
:class:`Sox`) is a view over a registry for one tool: it resolves the
binary and builds the requested driver variant.

Usage::

    registry = ToolRegistry.from_environ()
    ffmpeg = FFmpeg(registry).configure(lambda f: setattr(f, "bin_path", "/opt/bin/ffmpeg"))
    driver = ffmpeg.new()          # DirectDriver("/opt/bin/ffmpeg")
    driver.run("-i", "in.mp4", "out.webm")

Configure every factory once at startup, before drivers are built;
reconfiguring while other threads call :meth:`DriverFactory.new` is a
race the registry does not guard against.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Callable, Mapping
from typing import ClassVar

from mediakit.core.drivers import DirectDriver, FakeDriver, LegacyDriver
from mediakit.core.protocols import Driver
from mediakit.exceptions import UnknownDriverTypeError, UnknownToolError

logger = logging.getLogger(__name__)

# Environment variable template read by ToolRegistry.from_environ().
ENV_BIN_TEMPLATE: str = "MEDIAKIT_{name}_BIN"


# ---------------------------------------------------------------------------
# Driver type selector
# ---------------------------------------------------------------------------

class DriverType(str, enum.Enum):
    """Driver variants a factory can build."""

    POPEN = "popen"
    COCAINE = "cocaine"
    FAKE = "fake"

    @classmethod
    def parse(cls, value: str | DriverType) -> DriverType:
        """Return the member for *value* (case-insensitive).

        Raises
        ------
        UnknownDriverTypeError
            When *value* names no driver variant.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise UnknownDriverTypeError(
                f"unknown driver type {value!r}",
                hint=f"Use one of: {choices}.",
            ) from None


_DRIVER_CLASSES: dict[DriverType, Callable[[str], Driver]] = {
    DriverType.POPEN: DirectDriver,
    DriverType.COCAINE: LegacyDriver,
    DriverType.FAKE: FakeDriver,
}


# ---------------------------------------------------------------------------
# Configuration registry
# ---------------------------------------------------------------------------

class ToolRegistry:
    """Configured binary path per tool name.

    A tool absent from the registry is *unconfigured*: its factories fall
    back to the bare tool name and rely on ``PATH`` lookup.
    """

    def __init__(self, paths: Mapping[str, str] | None = None) -> None:
        self._paths: dict[str, str] = {}
        for name, path in (paths or {}).items():
            self.set(name, path)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ToolRegistry:
        """Build a registry seeded from ``MEDIAKIT_<TOOL>_BIN`` variables.

        Only tools with a registered factory are looked up; empty values
        are ignored.
        """
        environ = os.environ if environ is None else environ
        registry = cls()
        for name in FACTORIES:
            value = environ.get(ENV_BIN_TEMPLATE.format(name=name.upper()), "")
            if value:
                logger.debug("%s bin from environment: %s", name, value)
                registry.set(name, value)
        return registry

    def get(self, name: str) -> str | None:
        return self._paths.get(name.lower())

    def set(self, name: str, path: str | os.PathLike[str]) -> None:
        self._paths[name.lower()] = os.fspath(path)

    def unset(self, name: str) -> None:
        self._paths.pop(name.lower(), None)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._paths

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._paths!r})"


default_registry = ToolRegistry()
"""Process-wide registry used by factories built without an explicit one."""


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class DriverFactory:
    """Resolve one tool's binary and construct drivers bound to it.

    Subclasses only need a class name: :attr:`name` is the lowercased
    class name (``FFmpeg`` → ``"ffmpeg"``).
    """

    name: ClassVar[str] = ""

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls.name = cls.__name__.lower()

    def __init__(self, registry: ToolRegistry | None = None) -> None:
        self.registry: ToolRegistry = default_registry if registry is None else registry

    def __repr__(self) -> str:
        return f"{type(self).__name__}(bin={self.bin!r})"

    @property
    def bin_path(self) -> str | None:
        """Explicitly configured binary path, or ``None`` when unconfigured."""
        return self.registry.get(self.name)

    @bin_path.setter
    def bin_path(self, path: str | os.PathLike[str] | None) -> None:
        if path is None:
            self.registry.unset(self.name)
        else:
            self.registry.set(self.name, path)

    @property
    def bin(self) -> str:
        """The binary drivers will run: the configured path, else :attr:`name`."""
        return self.bin_path or self.name

    @property
    def configured(self) -> bool:
        return self.bin_path is not None

    def configure(self, callback: Callable[[DriverFactory], object]) -> DriverFactory:
        """Hand this factory to *callback* so it can set :attr:`bin_path`.

        May be called any number of times; the last value set wins.
        """
        callback(self)
        logger.debug("%s configured, bin=%s", self.name, self.bin)
        return self

    def reset(self) -> None:
        """Forget the configured path; :attr:`bin` falls back to :attr:`name`."""
        self.bin_path = None

    def new(self, type: str | DriverType = DriverType.POPEN) -> Driver:
        """Build a driver of *type* bound to the current :attr:`bin`.

        Raises
        ------
        UnknownDriverTypeError
            When *type* is not ``"popen"``, ``"cocaine"`` or ``"fake"``.
        """
        driver_type = DriverType.parse(type)
        return _DRIVER_CLASSES[driver_type](self.bin)


class FFmpeg(DriverFactory):
    """Factory for the ``ffmpeg`` transcoder."""


class FFprobe(DriverFactory):
    """Factory for the ``ffprobe`` media prober."""


class Sox(DriverFactory):
    """Factory for the ``sox`` audio tool."""


FACTORIES: dict[str, type[DriverFactory]] = {
    factory.name: factory for factory in (FFmpeg, FFprobe, Sox)
}


def factory_for(name: str, registry: ToolRegistry | None = None) -> DriverFactory:
    """Return a factory instance for tool *name* (case-insensitive).

    Raises
    ------
    UnknownToolError
        When no factory exists for *name*.
    """
    try:
        factory_class = FACTORIES[name.lower()]
    except KeyError:
        raise UnknownToolError(
            f"no driver factory for tool {name!r}",
            hint=f"Known tools: {', '.join(sorted(FACTORIES))}.",
        ) from None
    return factory_class(registry)
