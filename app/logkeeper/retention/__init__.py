"""Log retention module.

This module provides the retention engine for managed log directories:
naming classification, current-log symlink protection, age-based
lifecycle decisions, compression and deletion, and the background
cleaner that runs cycles on an interval.
"""

from logkeeper.retention.age import classify_age
from logkeeper.retention.cleaner import RetentionCleaner, start_cleaner
from logkeeper.retention.engine import RetentionEngine
from logkeeper.retention.errors import (
    CompressionError,
    DeletionError,
    DirectoryUnavailableError,
    ListingError,
    RetentionError,
    SymlinkResolutionError,
)
from logkeeper.retention.models import (
    ActionResult,
    CycleReport,
    DirectoryEntry,
    NamingMode,
    RetentionAction,
    Severity,
)
from logkeeper.retention.naming import current_log_names, is_in_scope
from logkeeper.retention.operator import RetentionOperator
from logkeeper.retention.policy import (
    PolicyError,
    PolicyNotFoundError,
    PolicyParseError,
    RetentionPolicy,
    load_policies,
    save_policies,
)
from logkeeper.retention.symlinks import resolve_protected_targets

__all__ = [
    "ActionResult",
    "CompressionError",
    "CycleReport",
    "DeletionError",
    "DirectoryEntry",
    "DirectoryUnavailableError",
    "ListingError",
    "NamingMode",
    "PolicyError",
    "PolicyNotFoundError",
    "PolicyParseError",
    "RetentionAction",
    "RetentionCleaner",
    "RetentionEngine",
    "RetentionError",
    "RetentionOperator",
    "RetentionPolicy",
    "Severity",
    "SymlinkResolutionError",
    "classify_age",
    "current_log_names",
    "is_in_scope",
    "load_policies",
    "resolve_protected_targets",
    "save_policies",
    "start_cleaner",
]
