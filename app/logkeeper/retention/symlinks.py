"""Current-log symlink resolution.

The logging front end keeps one ``<prefix>.<SEVERITY>`` symlink per
severity pointing at the file it is writing. Whatever those links
resolve to at the start of a cycle must not be touched during it.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from logkeeper.retention.errors import SymlinkResolutionError
from logkeeper.retention.models import DirectoryEntry
from logkeeper.retention.naming import current_log_names

logger = logging.getLogger(__name__)


def resolve_link_target(link: Path) -> str:
    """Resolve a symlink chain to the base name of its final target.

    Args:
        link: Path of the symbolic link.

    Returns:
        Base name of the file the link ultimately points at.

    Raises:
        SymlinkResolutionError: If the link is dangling, loops, or
            cannot be read.
    """
    try:
        target = Path(os.path.realpath(link, strict=True))
    except (OSError, RuntimeError) as e:
        raise SymlinkResolutionError(f"Cannot resolve symlink {link}: {e}") from e
    return target.name


def resolve_protected_targets(
    directory: Path,
    entries: Iterable[DirectoryEntry],
    prefix: str,
) -> frozenset[str]:
    """Build the set of file names protected by current-log symlinks.

    Only entries that carry a recognized current-log name and are
    actually symlinks are considered. A link that fails to resolve is
    skipped and protects nothing.

    Args:
        directory: Managed directory containing the entries.
        entries: Directory listing captured for this cycle.
        prefix: Configured file-name prefix.

    Returns:
        Base names of the files currently targeted by a recognized link.
    """
    link_names = current_log_names(prefix)
    protected: set[str] = set()

    for entry in entries:
        if not entry.is_symlink or entry.name not in link_names:
            continue
        try:
            protected.add(resolve_link_target(directory / entry.name))
        except SymlinkResolutionError as e:
            logger.debug("Skipping unresolvable current-log link: %s", e)

    return frozenset(protected)
