"""Tests for the background RetentionCleaner."""

import logging
import os
import threading
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from logkeeper.retention.cleaner import RetentionCleaner, start_cleaner
from logkeeper.retention.engine import RetentionEngine
from logkeeper.retention.policy import PolicyError, RetentionPolicy

PolicyFactory = Callable[..., RetentionPolicy]


def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll until predicate is true or the timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _age_file(path: Path, age: timedelta) -> None:
    timestamp = time.time() - age.total_seconds()
    os.utime(path, (timestamp, timestamp))


class TestStartCleaner:
    """Tests for start_cleaner."""

    def test_first_cycle_runs_immediately(self, log_dir: Path, make_policy: PolicyFactory) -> None:
        """The first cycle runs without waiting for the interval."""
        old = log_dir / "app.log.1"
        old.write_text("expired")
        _age_file(old, timedelta(hours=100))

        cleaner = start_cleaner(make_policy(interval=timedelta(hours=1)))
        try:
            assert cleaner.is_running is True
            assert _wait_until(lambda: not old.exists())
            assert _wait_until(lambda: cleaner.cycles == 1)
        finally:
            cleaner.stop()

    def test_accepts_mapping(self, log_dir: Path) -> None:
        """A plain mapping with the recognized options is accepted."""
        cleaner = start_cleaner(
            {"path": str(log_dir), "prefix": "app", "interval": "1h", "reserve": "72h"}
        )
        try:
            assert cleaner.policy.prefix == "app"
            assert cleaner.policy.reserve == timedelta(hours=72)
        finally:
            cleaner.stop()

    def test_invalid_mapping_raises(self) -> None:
        """Configuration errors surface before any thread starts."""
        with pytest.raises(PolicyError):
            start_cleaner({"path": "/tmp", "prefix": ""})

    def test_missing_directory_keeps_running(
        self, tmp_path: Path, make_policy: PolicyFactory
    ) -> None:
        """A missing directory never stops the loop; it starts managing once created."""
        directory = tmp_path / "later"
        cleaner = start_cleaner(make_policy(path=directory, interval=timedelta(milliseconds=20)))
        try:
            assert _wait_until(lambda: cleaner.cycles >= 2)
            assert cleaner.last_report is not None
            assert cleaner.last_report.skipped is True

            directory.mkdir()
            old = directory / "app.log.1"
            old.write_text("expired")
            _age_file(old, timedelta(hours=100))

            assert _wait_until(lambda: not old.exists())
            assert cleaner.is_running is True
        finally:
            cleaner.stop()


class TestRetentionCleaner:
    """Tests for RetentionCleaner lifecycle."""

    def test_stop_ends_thread(self, make_policy: PolicyFactory) -> None:
        """stop() makes the loop exit and the thread finish."""
        cleaner = RetentionCleaner(make_policy(interval=timedelta(hours=1)))
        cleaner.start()
        assert cleaner.is_running is True

        cleaner.stop()

        assert cleaner.is_running is False
        assert cleaner.wait(timeout=0) is True

    def test_start_twice_is_noop(self, make_policy: PolicyFactory) -> None:
        """Starting an already running cleaner does not spawn a second thread."""
        engine = MagicMock(spec=RetentionEngine)
        cleaner = RetentionCleaner(make_policy(interval=timedelta(hours=1)), engine=engine)
        cleaner.start()
        try:
            thread = cleaner._thread
            cleaner.start()
            assert cleaner._thread is thread
        finally:
            cleaner.stop()

    def test_runs_on_interval(self, make_policy: PolicyFactory) -> None:
        """Cycles repeat after each interval."""
        engine = MagicMock(spec=RetentionEngine)
        cleaner = RetentionCleaner(
            make_policy(interval=timedelta(milliseconds=10)),
            engine=engine,
        )
        cleaner.start()
        try:
            assert _wait_until(lambda: engine.run_cycle.call_count >= 3)
        finally:
            cleaner.stop()

    def test_unexpected_error_does_not_kill_loop(
        self, make_policy: PolicyFactory, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An exception escaping a cycle is logged and the loop continues."""
        engine = MagicMock(spec=RetentionEngine)
        engine.run_cycle.side_effect = [RuntimeError("boom"), MagicMock(results=())]
        cleaner = RetentionCleaner(
            make_policy(interval=timedelta(milliseconds=10)),
            engine=engine,
        )

        with caplog.at_level(logging.ERROR, logger="logkeeper"):
            cleaner.start()
            try:
                assert _wait_until(lambda: cleaner.cycles == 1)
            finally:
                cleaner.stop()

        assert "Unexpected error in retention cycle" in caplog.text

    def test_run_now(self, log_dir: Path, make_policy: PolicyFactory) -> None:
        """run_now executes a cycle synchronously without starting a thread."""
        old = log_dir / "app.log.1"
        old.write_text("expired")
        _age_file(old, timedelta(hours=100))
        cleaner = RetentionCleaner(make_policy())

        report = cleaner.run_now()

        assert report.deleted == ["app.log.1"]
        assert cleaner.cycles == 1
        assert cleaner.is_running is False

    def test_run_now_waits_for_background_cycle(self, make_policy: PolicyFactory) -> None:
        """run_now never overlaps a cycle already running on the loop thread."""
        active = 0
        peak = 0
        counter_lock = threading.Lock()
        entered = threading.Event()

        def _slow_cycle() -> MagicMock:
            nonlocal active, peak
            with counter_lock:
                active += 1
                peak = max(peak, active)
            entered.set()
            time.sleep(0.3)
            with counter_lock:
                active -= 1
            return MagicMock(results=())

        engine = MagicMock(spec=RetentionEngine)
        engine.run_cycle.side_effect = _slow_cycle
        cleaner = RetentionCleaner(make_policy(interval=timedelta(hours=1)), engine=engine)

        cleaner.start()
        try:
            assert entered.wait(5.0)
            cleaner.run_now()
        finally:
            cleaner.stop()

        assert peak == 1
        assert cleaner.cycles == 2

    def test_independent_cleaners(self, tmp_path: Path, make_policy: PolicyFactory) -> None:
        """Cleaners for different policies run side by side without interference."""
        dirs = [tmp_path / "a", tmp_path / "b"]
        files = []
        for directory in dirs:
            directory.mkdir()
            path = directory / "app.log.1"
            path.write_text("expired")
            _age_file(path, timedelta(hours=100))
            files.append(path)

        cleaners = [start_cleaner(make_policy(path=d, interval=timedelta(hours=1))) for d in dirs]
        try:
            assert _wait_until(lambda: not any(f.exists() for f in files))
        finally:
            for cleaner in cleaners:
                cleaner.stop()

        assert all(not c.is_running for c in cleaners)
