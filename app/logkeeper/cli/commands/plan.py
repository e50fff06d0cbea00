"""Plan command implementation.

Shows the lifecycle decision for every managed file without touching
the filesystem.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from logkeeper.cli.types import OutputFormat, require_policies
from logkeeper.retention.engine import RetentionEngine
from logkeeper.retention.models import DirectoryEntry, RetentionAction
from logkeeper.retention.policy import RetentionPolicy
from logkeeper.utils.formatting import console, create_plan_table, print_info

app = typer.Typer(
    help="Show what a retention cycle would do.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def plan(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Policy file (default: ~/.config/logkeeper/retention.toml).",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Show what a retention cycle would do."""
    policies = require_policies(config)
    plans = [(policy, RetentionEngine(policy).plan()) for policy in policies]

    if output_format == OutputFormat.JSON:
        _print_json(plans)
        return

    for policy, decisions in plans:
        if not decisions:
            print_info(f"{policy.path}: no managed files.")
            continue
        console.print(create_plan_table(decisions, title=f"Retention Plan: {policy.path}"))


def _print_json(
    plans: list[tuple[RetentionPolicy, list[tuple[DirectoryEntry, RetentionAction]]]],
) -> None:
    """Print plans as JSON to stdout."""
    data = [
        {
            "path": str(policy.path),
            "prefix": policy.prefix,
            "files": [
                {
                    "name": entry.name,
                    "action": action.value,
                    "mtime": entry.mtime.isoformat(),
                    "size_bytes": entry.size_bytes,
                }
                for entry, action in decisions
            ],
        }
        for policy, decisions in plans
    ]
    console.print_json(json.dumps(data))
