"""Retention error taxonomy.

None of these escape a scan cycle: the engine and operator catch them,
report them through logging, and skip the affected unit of work.
"""


class RetentionError(Exception):
    """Base exception for retention errors."""


class DirectoryUnavailableError(RetentionError):
    """Raised when the managed directory cannot be stat'ed."""


class ListingError(RetentionError):
    """Raised when the managed directory cannot be listed."""


class SymlinkResolutionError(RetentionError):
    """Raised when a current-log symlink cannot be resolved."""


class CompressionError(RetentionError):
    """Raised when a file cannot be compressed."""


class DeletionError(RetentionError):
    """Raised when a file cannot be removed."""
