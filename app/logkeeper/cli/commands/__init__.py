"""CLI commands for logkeeper.

This package contains all subcommand implementations.
"""

from logkeeper.cli.commands import config, plan, run

__all__ = ["config", "plan", "run"]
