"""Naming classification for managed log files.

Decides which directory entries belong to the configured naming scheme
and derives the names of the current-log symlinks.
"""

from logkeeper.retention.models import GZIP_SUFFIX, NamingMode, Severity

# <prefix>.<host>.<user>.log.<SEVERITY>.<timestamp>.<pid>
_STRUCTURED_SEGMENTS = 7
_STRUCTURED_LOG_INDEX = 3
_STRUCTURED_LOG_TOKEN = "log"


def is_in_scope(name: str, prefix: str, mode: NamingMode = NamingMode.PREFIX) -> bool:
    """Check if a file name is managed under the given naming grammar.

    In structured mode the compressed artifact of a structured name is
    also in scope, so that it keeps aging until deleted.

    Args:
        name: Base file name.
        prefix: Configured file-name prefix.
        mode: Grammar selecting how strictly names are matched.

    Returns:
        True if the file participates in retention decisions.
    """
    if not name.startswith(prefix):
        return False

    if mode == NamingMode.PREFIX:
        return True

    if name.endswith(GZIP_SUFFIX):
        name = name[: -len(GZIP_SUFFIX)]

    segments = name.split(".")
    return (
        len(segments) == _STRUCTURED_SEGMENTS
        and segments[_STRUCTURED_LOG_INDEX] == _STRUCTURED_LOG_TOKEN
    )


def current_log_names(prefix: str) -> frozenset[str]:
    """Names of the per-severity current-log symlinks for a prefix."""
    return frozenset(severity.symlink_name(prefix) for severity in Severity)
