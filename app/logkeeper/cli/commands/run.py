"""Run command implementation.

Starts one background cleaner per configured policy and keeps the
process alive until interrupted, or runs a single cycle with --once.
"""

from pathlib import Path
from typing import Annotated

import typer

from logkeeper.cli.types import require_policies
from logkeeper.retention.cleaner import RetentionCleaner, start_cleaner
from logkeeper.retention.engine import RetentionEngine
from logkeeper.retention.policy import RetentionPolicy
from logkeeper.utils.formatting import (
    console,
    create_results_table,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Enforce retention policies on their log directories.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def run(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Policy file (default: ~/.config/logkeeper/retention.toml).",
        ),
    ] = None,
    once: Annotated[
        bool,
        typer.Option("--once", help="Run a single cycle per policy and exit."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Report what would change without acting."),
    ] = False,
) -> None:
    """Enforce retention policies on their log directories."""
    policies = require_policies(config)
    if dry_run:
        policies = [p.model_copy(update={"dry_run": True}) for p in policies]

    if once:
        _run_once(policies)
        return

    cleaners = [start_cleaner(policy) for policy in policies]
    print_info(f"Started {len(cleaners)} cleaner(s). Press Ctrl-C to stop.")
    _wait_for_interrupt(cleaners)


def _run_once(policies: list[RetentionPolicy]) -> None:
    """Run one cycle for each policy and print the results.

    Raises:
        typer.Exit: With code 1 if any action failed.
    """
    failed = False

    for policy in policies:
        report = RetentionEngine(policy).run_cycle()

        if report.skipped:
            print_warning(f"Skipped {policy.path}: directory missing or unreadable.")
            continue

        if not report.results:
            print_success(f"{policy.path}: nothing to do.")
            continue

        console.print(create_results_table(list(report.results)))
        if report.failures:
            failed = True

    if failed:
        raise typer.Exit(code=1)


def _wait_for_interrupt(cleaners: list[RetentionCleaner]) -> None:
    """Block until Ctrl-C, then stop every cleaner."""
    try:
        for cleaner in cleaners:
            cleaner.wait()
    except KeyboardInterrupt:
        print_info("Stopping cleaners...")
    finally:
        for cleaner in cleaners:
            cleaner.stop()
