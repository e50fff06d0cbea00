"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from logkeeper.retention.policy import RetentionPolicy

# Fixed reference time for age decisions
REFERENCE_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """Reference time passed to engine cycles."""
    return REFERENCE_NOW


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Empty managed log directory."""
    directory = tmp_path / "logs"
    directory.mkdir()
    return directory


@pytest.fixture
def make_log(log_dir: Path, now: datetime) -> Callable[..., Path]:
    """Factory creating a file in the log directory with a given age."""

    def _make(
        name: str,
        age: timedelta = timedelta(0),
        content: bytes = b"I0601 12:00:00.000000 1 main.go:1] hello\n",
    ) -> Path:
        path = log_dir / name
        path.write_bytes(content)
        timestamp = (now - age).timestamp()
        os.utime(path, (timestamp, timestamp))
        return path

    return _make


@pytest.fixture
def make_policy(log_dir: Path) -> Callable[..., RetentionPolicy]:
    """Factory creating a policy for the log directory."""

    def _make(**overrides: object) -> RetentionPolicy:
        data: dict[str, object] = {
            "path": log_dir,
            "prefix": "app",
            "interval": timedelta(seconds=1),
            "reserve": timedelta(hours=72),
        }
        data.update(overrides)
        return RetentionPolicy.model_validate(data)

    return _make


@pytest.fixture
def snapshot_dir(log_dir: Path) -> Callable[[], dict[str, tuple[bytes, float]]]:
    """Capture name, content and mtime of every regular file in the log directory."""

    def _snapshot() -> dict[str, tuple[bytes, float]]:
        result: dict[str, tuple[bytes, float]] = {}
        for path in sorted(log_dir.iterdir()):
            if path.is_symlink() or not path.is_file():
                continue
            result[path.name] = (path.read_bytes(), path.stat().st_mtime)
        return result

    return _snapshot
