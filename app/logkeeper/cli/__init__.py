"""CLI package for logkeeper.

This package contains the Typer application and all subcommands.
"""

from logkeeper.cli.main import app

__all__ = ["app"]
