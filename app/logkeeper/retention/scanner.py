"""Directory listing for the managed log directory.

Captures a fresh snapshot of every top-level entry at the start of a
cycle. Symlinks are never followed: each entry is described by lstat.
"""

import logging
import os
import stat
from datetime import UTC, datetime
from pathlib import Path

from logkeeper.retention.errors import DirectoryUnavailableError, ListingError
from logkeeper.retention.models import DirectoryEntry

logger = logging.getLogger(__name__)


def directory_exists(directory: Path) -> bool:
    """Check whether the managed directory exists.

    Args:
        directory: Directory to check.

    Returns:
        True if the directory exists, False if it is missing.

    Raises:
        DirectoryUnavailableError: If the directory cannot be stat'ed for
            any reason other than being absent.
    """
    try:
        os.stat(directory)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise DirectoryUnavailableError(f"Cannot stat directory {directory}: {e}") from e
    return True


def list_entries(directory: Path) -> list[DirectoryEntry]:
    """List the top-level entries of a directory, sorted by name.

    Entries that disappear between listing and lstat are skipped.

    Args:
        directory: Directory to list.

    Returns:
        One DirectoryEntry per entry.

    Raises:
        ListingError: If the directory cannot be listed.
    """
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        raise ListingError(f"Cannot list directory {directory}: {e}") from e

    entries: list[DirectoryEntry] = []
    for name in names:
        try:
            st = os.lstat(directory / name)
        except OSError:
            logger.debug("Entry vanished during scan: %s", directory / name)
            continue

        entries.append(
            DirectoryEntry(
                name=name,
                mtime=datetime.fromtimestamp(st.st_mtime, tz=UTC),
                is_dir=stat.S_ISDIR(st.st_mode),
                is_symlink=stat.S_ISLNK(st.st_mode),
                size_bytes=st.st_size,
            )
        )

    return entries
