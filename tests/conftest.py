"""Shared pytest fixtures and configuration for the mediakit test suite.

Guidelines
----------
* Real processes are spawned only from ``sys.executable`` or ``/bin/sh``.
* Media tools (ffmpeg, ffprobe, sox) are never required; PATH lookups
  that matter are mocked.
* No test may leave configuration behind in the default registry.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator

import pytest

from mediakit.core import factory as factory_module
from mediakit.core.factory import ToolRegistry


@pytest.fixture
def registry() -> ToolRegistry:
    """A fresh, empty registry isolated from the process-wide one."""
    return ToolRegistry()


@pytest.fixture(autouse=True)
def _isolate_default_registry(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(factory_module, "default_registry", ToolRegistry())
    for name in factory_module.FACTORIES:
        monkeypatch.delenv(f"MEDIAKIT_{name.upper()}_BIN", raising=False)
    yield


@pytest.fixture
def python_bin() -> str:
    """Absolute path of the running interpreter, used as a stand-in tool."""
    return sys.executable
