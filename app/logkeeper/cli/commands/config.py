"""Policy configuration commands.

Provides commands to create retention policies and to show the
policies currently configured.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from logkeeper.cli.types import require_policies
from logkeeper.core.paths import get_policy_path
from logkeeper.retention.models import NamingMode
from logkeeper.retention.policy import (
    PolicyError,
    RetentionPolicy,
    coerce_policy,
    format_duration,
    load_policies,
    save_policies,
)
from logkeeper.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Manage retention policies.",
    no_args_is_help=True,
)


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Option("--path", "-p", help="Log directory to manage."),
    ],
    prefix: Annotated[
        str,
        typer.Option("--prefix", help="File-name prefix of managed logs."),
    ],
    interval: Annotated[
        str,
        typer.Option("--interval", help="Time between scans (e.g. 30s, 1m)."),
    ] = "1m",
    reserve: Annotated[
        str,
        typer.Option("--reserve", help="Age after which files are deleted (e.g. 72h, 7d)."),
    ] = "72h",
    compress_after: Annotated[
        str,
        typer.Option("--compress-after", help="Age after which files are compressed."),
    ] = "3m",
    naming: Annotated[
        NamingMode,
        typer.Option("--naming", help="File-name grammar.", case_sensitive=False),
    ] = NamingMode.PREFIX,
    no_compress: Annotated[
        bool,
        typer.Option("--no-compress", help="Keep aging files uncompressed until deleted."),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Policy file to write."),
    ] = None,
    replace: Annotated[
        bool,
        typer.Option("--replace", help="Replace existing policies instead of adding."),
    ] = False,
) -> None:
    """Add a retention policy to the policy file."""
    config_path = config or get_policy_path()

    try:
        policy = coerce_policy(
            {
                "path": path.expanduser().resolve(),
                "prefix": prefix,
                "interval": interval,
                "reserve": reserve,
                "compress_after": compress_after,
                "naming": naming,
                "compress": not no_compress,
            }
        )
    except PolicyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    policies: list[RetentionPolicy] = []
    if config_path.exists() and not replace:
        try:
            policies = load_policies(config_path)
        except PolicyError as e:
            print_error(f"Cannot extend existing policy file: {e}")
            raise typer.Exit(code=1) from e

    policies.append(policy)

    try:
        saved = save_policies(policies, config_path)
    except PolicyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Policy for {policy.path} saved to {saved}")


@app.command()
def show(
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Policy file to read."),
    ] = None,
) -> None:
    """Show configured retention policies."""
    policies = require_policies(config)

    table = Table(
        title="Retention Policies",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Directory", no_wrap=True)
    table.add_column("Prefix")
    table.add_column("Naming", style="muted")
    table.add_column("Interval", justify="right")
    table.add_column("Compress after", justify="right")
    table.add_column("Reserve", justify="right")

    for policy in policies:
        table.add_row(
            str(policy.path),
            policy.prefix,
            policy.naming.value,
            format_duration(policy.interval),
            format_duration(policy.compress_after) if policy.compress else "-",
            format_duration(policy.reserve),
        )

    console.print(table)
