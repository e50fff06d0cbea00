"""Tests for directory listing."""

import os
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest
from logkeeper.retention.errors import DirectoryUnavailableError, ListingError
from logkeeper.retention.scanner import directory_exists, list_entries


class TestDirectoryExists:
    """Tests for directory_exists."""

    def test_existing_directory(self, log_dir: Path) -> None:
        """An existing directory is reported as present."""
        assert directory_exists(log_dir) is True

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing directory is not an error."""
        assert directory_exists(tmp_path / "not-yet-created") is False

    def test_stat_failure_raises(self, log_dir: Path) -> None:
        """Stat failures other than absence are reported as unavailable."""
        with (
            patch("logkeeper.retention.scanner.os.stat", side_effect=PermissionError("denied")),
            pytest.raises(DirectoryUnavailableError),
        ):
            directory_exists(log_dir)


class TestListEntries:
    """Tests for list_entries."""

    def test_empty_directory(self, log_dir: Path) -> None:
        """An empty directory yields no entries."""
        assert list_entries(log_dir) == []

    def test_entries_sorted_and_typed(
        self, log_dir: Path, make_log: Callable[..., Path], now: datetime
    ) -> None:
        """Entries carry name, type flags, size and mtime, sorted by name."""
        make_log("app.log.2", age=timedelta(hours=1), content=b"12345")
        make_log("app.log.1")
        (log_dir / "archive").mkdir()
        os.symlink("app.log.2", log_dir / "app.INFO")

        entries = {e.name: e for e in list_entries(log_dir)}

        assert [e.name for e in list_entries(log_dir)] == sorted(entries)
        assert entries["archive"].is_dir is True
        assert entries["app.INFO"].is_symlink is True
        assert entries["app.INFO"].is_dir is False
        assert entries["app.log.2"].size_bytes == 5
        assert entries["app.log.2"].mtime == now - timedelta(hours=1)
        assert entries["app.log.2"].mtime.tzinfo is not None

    def test_symlink_to_directory_not_followed(self, log_dir: Path, tmp_path: Path) -> None:
        """A link to a directory is reported as a symlink, not a directory."""
        target = tmp_path / "elsewhere"
        target.mkdir()
        os.symlink(target, log_dir / "app.WARNING")

        (entry,) = list_entries(log_dir)

        assert entry.is_symlink is True
        assert entry.is_dir is False

    def test_listing_failure_raises(self, log_dir: Path) -> None:
        """Listing errors are wrapped in ListingError."""
        with (
            patch("logkeeper.retention.scanner.os.listdir", side_effect=OSError("EIO")),
            pytest.raises(ListingError),
        ):
            list_entries(log_dir)

    def test_vanished_entry_skipped(self, log_dir: Path, make_log: Callable[..., Path]) -> None:
        """Entries removed between listing and lstat are skipped."""
        make_log("app.log.1")

        with patch(
            "logkeeper.retention.scanner.os.listdir",
            return_value=["app.log.0", "app.log.1"],
        ):
            entries = list_entries(log_dir)

        assert [e.name for e in entries] == ["app.log.1"]
