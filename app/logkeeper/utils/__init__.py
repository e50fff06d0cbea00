"""Utility modules for logkeeper.

This module exports commonly used utility functions.
"""

from logkeeper.utils.formatting import (
    console,
    create_plan_table,
    create_results_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_plan_table",
    "create_results_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
