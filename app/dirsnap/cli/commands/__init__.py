"""CLI commands for dirsnap.

This package contains all subcommand implementations.
"""

from dirsnap.cli.commands import compare, config, create, info, validate

__all__ = ["compare", "config", "create", "info", "validate"]
