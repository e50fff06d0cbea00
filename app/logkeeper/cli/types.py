"""Shared types and utilities for CLI commands."""

from enum import Enum
from pathlib import Path

import typer

from logkeeper.core.paths import get_policy_path
from logkeeper.retention.policy import (
    PolicyError,
    PolicyNotFoundError,
    RetentionPolicy,
    load_policies,
)
from logkeeper.utils.formatting import print_error, print_info


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def require_policies(policy_path: Path | None = None) -> list[RetentionPolicy]:
    """Load retention policies or exit with a helpful error message.

    Args:
        policy_path: Optional custom policy file path.

    Returns:
        Loaded and validated policies.

    Raises:
        typer.Exit: If the policies cannot be loaded.
    """
    path = policy_path or get_policy_path()
    try:
        return load_policies(path)
    except PolicyNotFoundError as e:
        print_error(f"Policy file not found: {path}")
        print_info("Run 'logkeeper config init --path DIR --prefix NAME' to create one.")
        raise typer.Exit(code=1) from e
    except PolicyError as e:
        print_error(f"Failed to load policies: {e}")
        raise typer.Exit(code=1) from e
