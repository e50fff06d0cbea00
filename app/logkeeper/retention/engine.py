"""Retention engine: one scan cycle over a managed directory.

A cycle lists the directory, computes the files protected by the
current-log symlinks, filters entries by the naming grammar, and
compresses or deletes each remaining file according to its age.
Every failure is logged and confined to the unit of work it affects:
the whole cycle for directory errors, a single file otherwise.
"""

import logging
from collections.abc import Iterator
from datetime import UTC, datetime

from logkeeper.retention.age import classify_age
from logkeeper.retention.errors import DirectoryUnavailableError, ListingError
from logkeeper.retention.models import ActionResult, CycleReport, DirectoryEntry, RetentionAction
from logkeeper.retention.naming import is_in_scope
from logkeeper.retention.operator import RetentionOperator
from logkeeper.retention.policy import RetentionPolicy
from logkeeper.retention.scanner import directory_exists, list_entries
from logkeeper.retention.symlinks import resolve_protected_targets

logger = logging.getLogger(__name__)


class RetentionEngine:
    """Applies a retention policy to its directory, one cycle at a time.

    The engine holds no state between cycles: the listing and the
    protected set are rebuilt on every call.

    Args:
        policy: Policy governing the managed directory.
        operator: Optional operator override. Defaults to one bound to
            the policy's directory and dry-run/append options.
    """

    def __init__(self, policy: RetentionPolicy, operator: RetentionOperator | None = None) -> None:
        self._policy = policy
        self._operator = operator or RetentionOperator(
            policy.path,
            dry_run=policy.dry_run,
            append=policy.append_artifacts,
        )

    @property
    def policy(self) -> RetentionPolicy:
        """Policy governing this engine."""
        return self._policy

    def run_cycle(self, now: datetime | None = None) -> CycleReport:
        """Run one scan cycle.

        Args:
            now: Reference time for age decisions. Defaults to the
                current time.

        Returns:
            CycleReport describing what was protected and acted upon.
        """
        started_at = now or datetime.now(tz=UTC)

        snapshot = self._snapshot()
        if snapshot is None:
            return CycleReport(started_at=started_at, skipped=True)

        entries, protected = snapshot
        results: list[ActionResult] = []

        for entry, action in self._decide(entries, protected, started_at):
            if action == RetentionAction.DELETE:
                result = self._operator.delete(entry.name)
            else:
                result = self._operator.compress(entry.name)
            self._report(result)
            results.append(result)

        return CycleReport(
            started_at=started_at,
            protected=protected,
            results=tuple(results),
        )

    def plan(self, now: datetime | None = None) -> list[tuple[DirectoryEntry, RetentionAction]]:
        """Decide the action for every managed entry without acting.

        Args:
            now: Reference time for age decisions. Defaults to the
                current time.

        Returns:
            (entry, action) pairs for each in-scope, unprotected file,
            including those that would be kept. Empty when the cycle
            would be skipped.
        """
        reference = now or datetime.now(tz=UTC)

        snapshot = self._snapshot()
        if snapshot is None:
            return []

        entries, protected = snapshot
        return list(self._decide(entries, protected, reference, include_keep=True))

    def _snapshot(self) -> tuple[list[DirectoryEntry], frozenset[str]] | None:
        """List the directory and compute the protected set.

        Returns:
            The listing and protected names, or None if the cycle must
            be skipped.
        """
        directory = self._policy.path

        try:
            if not directory_exists(directory):
                return None
            entries = list_entries(directory)
        except (DirectoryUnavailableError, ListingError) as e:
            logger.error("Skipping retention cycle: %s", e)
            return None

        protected = resolve_protected_targets(directory, entries, self._policy.prefix)
        return entries, protected

    def _decide(
        self,
        entries: list[DirectoryEntry],
        protected: frozenset[str],
        now: datetime,
        *,
        include_keep: bool = False,
    ) -> Iterator[tuple[DirectoryEntry, RetentionAction]]:
        """Yield the action decided for each eligible entry."""
        policy = self._policy

        for entry in entries:
            if entry.is_dir or entry.is_symlink:
                continue
            if entry.name in protected:
                continue
            if not is_in_scope(entry.name, policy.prefix, policy.naming):
                continue

            action = classify_age(
                entry.name,
                entry.mtime,
                now,
                policy.reserve,
                policy.compress_after,
            )
            if action == RetentionAction.COMPRESS and not policy.compress:
                action = RetentionAction.KEEP

            if action != RetentionAction.KEEP or include_keep:
                yield entry, action

    def _report(self, result: ActionResult) -> None:
        """Log the outcome of a single action."""
        if not result.success:
            logger.error("Failed to %s %s: %s", result.action.value, result.name, result.error)
        elif result.dry_run:
            return
        elif result.action == RetentionAction.COMPRESS:
            logger.info("Compressed %s to %s", result.name, result.artifact)
        else:
            logger.info("Deleted %s", result.name)
