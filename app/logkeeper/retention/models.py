"""Retention domain models.

This module defines the data structures shared by the retention
components: the lifecycle actions, the severity levels that name the
current-log symlinks, directory entries captured during a scan, and
the per-file and per-cycle results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# Suffix given to compressed artifacts
GZIP_SUFFIX = ".gz"


class RetentionAction(str, Enum):
    """Lifecycle transition decided for a managed file.

    Attributes:
        KEEP: File is fresh enough to stay as-is.
        COMPRESS: File is aging and should be gzip-compressed.
        DELETE: File is older than the reserve duration.
    """

    KEEP = "keep"
    COMPRESS = "compress"
    DELETE = "delete"


class NamingMode(str, Enum):
    """Grammar used to decide whether a file is managed.

    Attributes:
        PREFIX: Any name starting with the prefix is managed.
        STRUCTURED: Name must also have the glog shape
            ``<prefix>.<host>.<user>.log.<SEVERITY>.<timestamp>.<pid>``.
    """

    PREFIX = "prefix"
    STRUCTURED = "structured"


class Severity(str, Enum):
    """Severity levels that own a current-log symlink."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"

    def symlink_name(self, prefix: str) -> str:
        """Name of the symlink pointing at this severity's current log."""
        return f"{prefix}.{self.value}"


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A directory entry captured during one scan.

    Attributes:
        name: Base name of the entry.
        mtime: Last modification time (timezone-aware, UTC).
        is_dir: True for directories (symlinks are not followed).
        is_symlink: True for symbolic links, dangling or not.
        size_bytes: Size reported by lstat.
    """

    name: str
    mtime: datetime
    is_dir: bool = False
    is_symlink: bool = False
    size_bytes: int = 0

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.name:
            msg = "Entry name cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of a single compression or deletion.

    Attributes:
        name: File name that was operated on.
        action: Transition that was attempted.
        success: Whether the operation completed successfully.
        error: Error message if the operation failed, None otherwise.
        dry_run: Whether this was a dry-run (no filesystem change).
        artifact: Name of the compressed artifact, for compressions.
    """

    name: str
    action: RetentionAction
    success: bool
    error: str | None = None
    dry_run: bool = False
    artifact: str | None = None


@dataclass(frozen=True, slots=True)
class CycleReport:
    """Outcome of one scan cycle.

    Attributes:
        started_at: When the cycle began.
        skipped: True when the directory was missing or unreadable.
        protected: File names shielded by a current-log symlink this cycle.
        results: One result per compression or deletion attempted.
    """

    started_at: datetime
    skipped: bool = False
    protected: frozenset[str] = field(default_factory=frozenset)
    results: tuple[ActionResult, ...] = ()

    @property
    def compressed(self) -> list[str]:
        """Names successfully compressed during the cycle."""
        return [
            r.name for r in self.results if r.success and r.action == RetentionAction.COMPRESS
        ]

    @property
    def deleted(self) -> list[str]:
        """Names successfully deleted during the cycle."""
        return [r.name for r in self.results if r.success and r.action == RetentionAction.DELETE]

    @property
    def failures(self) -> list[ActionResult]:
        """Results that did not succeed."""
        return [r for r in self.results if not r.success]
