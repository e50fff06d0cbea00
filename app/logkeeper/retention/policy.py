"""Retention policy model and TOML I/O.

A policy describes one managed directory: where it is, which files in
it are managed, how often it is scanned, and how old files may grow
before they are compressed or deleted.

Policies are stored in ~/.config/logkeeper/retention.toml as an array
of ``[[policy]]`` tables. Durations may be written as a number of
seconds or as a string with a unit suffix (``"90s"``, ``"3m"``,
``"72h"``, ``"7d"``).
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from logkeeper.core.paths import get_policy_path
from logkeeper.retention.models import NamingMode

# Age at which aging files are compressed before eventual deletion
DEFAULT_COMPRESS_AFTER = timedelta(minutes=3)

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd])\s*$")
_DURATION_UNITS: dict[str, int] = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class RetentionPolicy(BaseModel):
    """Immutable configuration governing one managed log directory.

    Attributes:
        path: Directory to manage.
        prefix: File-name prefix selecting managed files and naming the
            current-log symlinks.
        interval: Time between scan cycles.
        reserve: Maximum age before a file is deleted.
        compress_after: Age after which uncompressed files are compressed.
        naming: Grammar used to decide which files are managed.
        compress: If False, aging files are kept until deleted.
        append_artifacts: If True, compression appends to an existing
            ``.gz`` artifact instead of refusing it.
        dry_run: If True, cycles report decisions without acting.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Annotated[Path, Field(description="Directory to manage")]
    prefix: Annotated[str, Field(min_length=1, description="Managed file-name prefix")]
    interval: Annotated[timedelta, Field(description="Time between scan cycles")]
    reserve: Annotated[timedelta, Field(description="Deletion threshold")]
    compress_after: Annotated[
        timedelta,
        Field(description="Compression threshold"),
    ] = DEFAULT_COMPRESS_AFTER
    naming: Annotated[
        NamingMode,
        Field(description="File-name grammar (prefix or structured)"),
    ] = NamingMode.PREFIX
    compress: Annotated[bool, Field(description="Compress aging files")] = True
    append_artifacts: Annotated[
        bool,
        Field(description="Append to existing compressed artifacts"),
    ] = False
    dry_run: Annotated[bool, Field(description="Report without acting")] = False

    @field_validator("path", mode="before")
    @classmethod
    def reject_empty_path(cls, v: object) -> object:
        """Reject blank paths, which would otherwise resolve to the working directory."""
        if isinstance(v, str) and not v.strip():
            msg = "path must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("interval", "reserve", "compress_after", mode="before")
    @classmethod
    def parse_duration(cls, v: object) -> object:
        """Accept durations written with a unit suffix."""
        if isinstance(v, str):
            match = _DURATION_PATTERN.match(v)
            if match:
                return timedelta(seconds=float(match.group(1)) * _DURATION_UNITS[match.group(2)])
        return v

    @model_validator(mode="after")
    def validate_durations(self) -> RetentionPolicy:
        """Validate that durations are positive and correctly ordered."""
        if self.interval <= timedelta(0):
            msg = f"interval must be positive, got {self.interval}"
            raise ValueError(msg)
        if self.reserve <= timedelta(0):
            msg = f"reserve must be positive, got {self.reserve}"
            raise ValueError(msg)
        if self.compress and self.compress_after >= self.reserve:
            msg = (
                f"compress_after ({self.compress_after}) must be shorter "
                f"than reserve ({self.reserve})"
            )
            raise ValueError(msg)
        return self


class PolicyError(Exception):
    """Base exception for retention policy errors."""


class PolicyNotFoundError(PolicyError):
    """Raised when the policy file is not found."""


class PolicyParseError(PolicyError):
    """Raised when the policy file cannot be parsed."""


def coerce_policy(policy: RetentionPolicy | Mapping[str, Any]) -> RetentionPolicy:
    """Build a RetentionPolicy from a policy or a plain mapping.

    Args:
        policy: An existing policy or a mapping of policy options.

    Returns:
        Validated RetentionPolicy.

    Raises:
        PolicyError: If the mapping doesn't match the schema.
    """
    if isinstance(policy, RetentionPolicy):
        return policy
    try:
        return RetentionPolicy.model_validate(dict(policy))
    except ValidationError as e:
        raise PolicyError(f"Invalid retention policy: {e}") from e


def load_policies(path: Path | None = None) -> list[RetentionPolicy]:
    """Load retention policies from a TOML file.

    Args:
        path: Path to the policy file. If None, uses the default policy path.

    Returns:
        One validated RetentionPolicy per ``[[policy]]`` table.

    Raises:
        PolicyNotFoundError: If the policy file doesn't exist.
        PolicyParseError: If the TOML syntax is invalid.
        PolicyError: If the content doesn't match the schema.
    """
    policy_path = path or get_policy_path()

    if not policy_path.exists():
        raise PolicyNotFoundError(f"Policy file not found: {policy_path}")

    try:
        with open(policy_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise PolicyParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise PolicyError(f"Failed to read policy file: {e}") from e

    tables = data.get("policy")
    if not isinstance(tables, list) or not tables:
        raise PolicyError(f"No [[policy]] tables defined in {policy_path}")

    return [coerce_policy(table) for table in tables]


def save_policies(policies: list[RetentionPolicy], path: Path | None = None) -> Path:
    """Save retention policies to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        policies: Policies to save.
        path: Path to save to. If None, uses the default policy path.

    Returns:
        Path where the policies were saved.

    Raises:
        PolicyError: If the file cannot be written.
    """
    policy_path = path or get_policy_path()
    policy_path.parent.mkdir(parents=True, exist_ok=True)

    data = {"policy": [_policy_to_dict(p) for p in policies]}

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=policy_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(policy_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise PolicyError(f"Failed to write policy file: {e}") from e

    return policy_path


def format_duration(value: timedelta) -> str:
    """Format a duration using the largest unit that divides it exactly.

    Args:
        value: Duration to format.

    Returns:
        String such as ``"72h"`` or ``"90s"``, parseable by RetentionPolicy.
    """
    seconds = value.total_seconds()
    for unit in ("d", "h", "m"):
        size = _DURATION_UNITS[unit]
        if seconds >= size and seconds % size == 0:
            return f"{int(seconds // size)}{unit}"
    if seconds.is_integer():
        return f"{int(seconds)}s"
    return f"{seconds}s"


def _policy_to_dict(policy: RetentionPolicy) -> dict[str, object]:
    """Convert a RetentionPolicy to a dictionary for TOML serialization.

    Options left at their default are omitted to keep the file clean.

    Args:
        policy: The policy to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {
        "path": str(policy.path),
        "prefix": policy.prefix,
        "interval": format_duration(policy.interval),
        "reserve": format_duration(policy.reserve),
    }

    if policy.compress_after != DEFAULT_COMPRESS_AFTER:
        result["compress_after"] = format_duration(policy.compress_after)
    if policy.naming != NamingMode.PREFIX:
        result["naming"] = policy.naming.value
    if not policy.compress:
        result["compress"] = False
    if policy.append_artifacts:
        result["append_artifacts"] = True
    if policy.dry_run:
        result["dry_run"] = True

    return result
