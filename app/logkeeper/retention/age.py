"""Age-based lifecycle classification."""

from datetime import datetime, timedelta

from logkeeper.retention.models import GZIP_SUFFIX, RetentionAction


def classify_age(
    name: str,
    mtime: datetime,
    now: datetime,
    reserve: timedelta,
    compress_after: timedelta,
) -> RetentionAction:
    """Decide the lifecycle transition for a managed file.

    Deletion wins over compression: a file old enough to delete is
    removed outright rather than compressed first. Already-compressed
    artifacts are never compressed again.

    Args:
        name: Base file name.
        mtime: Last modification time of the file.
        now: Reference time of the current cycle.
        reserve: Maximum age before deletion.
        compress_after: Age after which uncompressed files are compressed.

    Returns:
        The single action that applies.
    """
    age = now - mtime

    if age > reserve:
        return RetentionAction.DELETE

    if age > compress_after and not name.endswith(GZIP_SUFFIX):
        return RetentionAction.COMPRESS

    return RetentionAction.KEEP
