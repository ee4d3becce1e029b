"""CLI package for dirsnap.

This package contains the Typer application and all subcommands.
"""

from dirsnap.cli.main import app

__all__ = ["app"]
