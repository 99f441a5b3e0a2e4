"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from tidyctl.engine.selector import to_epoch_ns

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and state directories at a throwaway location."""
    base = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    return base


@pytest.fixture
def now() -> datetime:
    """Fixed 'current' time used by selector clocks in tests."""
    return FIXED_NOW


@pytest.fixture
def clock(now: datetime) -> Callable[[], datetime]:
    """Clock callable returning the fixed time."""
    return lambda: now


@pytest.fixture
def make_file(now: datetime) -> Callable[..., Path]:
    """Factory creating a file with given content and age relative to ``now``."""

    def _make(path: Path, content: bytes | str = b"data", age_days: float = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        path.write_bytes(content)
        mtime_ns = to_epoch_ns(now - timedelta(days=age_days))
        os.utime(path, ns=(mtime_ns, mtime_ns))
        return path

    return _make

