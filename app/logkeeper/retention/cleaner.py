"""Background cleaner running retention cycles on a fixed interval.

Each cleaner owns one daemon thread and one engine. The first cycle
runs as soon as the cleaner starts; afterwards the thread waits for
the policy interval between cycles. Cleaners share no state, so any
number of them can run side by side, one per policy.

Example:
    >>> cleaner = start_cleaner(
    ...     {"path": "/var/log/app", "prefix": "app", "interval": "1m", "reserve": "72h"}
    ... )
    >>> # ... host process runs ...
    >>> cleaner.stop()
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from logkeeper.retention.engine import RetentionEngine
from logkeeper.retention.models import CycleReport
from logkeeper.retention.policy import RetentionPolicy, coerce_policy

logger = logging.getLogger(__name__)


class RetentionCleaner:
    """Periodic retention task bound to one policy.

    States alternate between idle (waiting for the interval) and
    scanning (one engine cycle). The loop exits once ``stop`` is
    called; a cycle in progress always completes first.

    Attributes:
        _engine: Engine executing each cycle.
        _stop_event: Set when the cleaner is asked to stop.
        _cycle_lock: Serializes cycles from the loop and run_now.
        _thread: Background thread, None until started.
    """

    def __init__(self, policy: RetentionPolicy, engine: RetentionEngine | None = None) -> None:
        """Initialize the RetentionCleaner.

        Args:
            policy: Policy governing the managed directory.
            engine: Optional engine override, bound to the same policy.
        """
        self._policy = policy
        self._engine = engine or RetentionEngine(policy)
        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._cycles = 0
        self._last_report: CycleReport | None = None

    @property
    def policy(self) -> RetentionPolicy:
        """Policy governing this cleaner."""
        return self._policy

    @property
    def is_running(self) -> bool:
        """True while the background thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def cycles(self) -> int:
        """Number of cycles completed so far."""
        return self._cycles

    @property
    def last_report(self) -> CycleReport | None:
        """Report of the most recent completed cycle."""
        return self._last_report

    def start(self) -> None:
        """Start the background loop. Does nothing if already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name=f"logkeeper-{self._policy.prefix}",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "Retention cleaner started for %s (prefix=%s, interval=%s, reserve=%s)",
            self._policy.path,
            self._policy.prefix,
            self._policy.interval,
            self._policy.reserve,
        )

    def stop(self, timeout: float | None = 10.0) -> None:
        """Stop the background loop and wait for the thread to exit.

        Args:
            timeout: Maximum seconds to wait for the thread to stop.
        """
        self._stop_event.set()

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Retention cleaner for %s did not stop in time", self._policy.path)
                return
            self._thread = None

        logger.info("Retention cleaner stopped for %s", self._policy.path)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the cleaner is stopped.

        Args:
            timeout: Maximum seconds to wait, None to wait indefinitely.

        Returns:
            True if the cleaner was stopped, False on timeout.
        """
        return self._stop_event.wait(timeout)

    def run_now(self) -> CycleReport:
        """Run one cycle immediately on the calling thread.

        Waits for a cycle already running in the background to finish
        first; cycles of one cleaner never overlap.
        """
        return self._run_cycle()

    def _run_loop(self) -> None:
        """Main loop: scan, then sleep for the interval, until stopped."""
        interval = self._policy.interval.total_seconds()

        while not self._stop_event.is_set():
            try:
                self._run_cycle()
            except Exception:
                logger.exception("Unexpected error in retention cycle for %s", self._policy.path)
            self._stop_event.wait(interval)

    def _run_cycle(self) -> CycleReport:
        """Run one engine cycle and record its report."""
        with self._cycle_lock:
            report = self._engine.run_cycle()
            self._cycles += 1
            self._last_report = report

        if report.results:
            logger.debug(
                "Retention cycle for %s: %d compressed, %d deleted, %d failed",
                self._policy.path,
                len(report.compressed),
                len(report.deleted),
                len(report.failures),
            )
        return report


def start_cleaner(policy: RetentionPolicy | Mapping[str, Any]) -> RetentionCleaner:
    """Create a cleaner for a policy and start it immediately.

    The first cycle begins without delay; the returned handle can be
    used to stop the cleaner.

    Args:
        policy: A RetentionPolicy or a mapping with at least ``path``,
            ``prefix``, ``interval`` and ``reserve``.

    Returns:
        The running RetentionCleaner.

    Raises:
        PolicyError: If the policy mapping is invalid.
    """
    cleaner = RetentionCleaner(coerce_policy(policy))
    cleaner.start()
    return cleaner
