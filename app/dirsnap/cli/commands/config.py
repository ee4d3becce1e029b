"""Config commands.

Provides commands to show, initialize and locate the scan defaults file.
"""

import json
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from dirsnap.core.config import ConfigError, ScanConfig, load_config_or_default, save_config
from dirsnap.core.paths import get_config_path
from dirsnap.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage scan defaults.",
    no_args_is_help=True,
)


def _create_config_table(config: ScanConfig) -> Table:
    table = Table(show_header=False, border_style="border", title="Scan Defaults")
    table.add_column("Option", style="bold_header")
    table.add_column("Value")

    table.add_row("machine_id", escape(config.machine_id))
    table.add_row(
        "max_depth",
        str(config.max_depth) if config.max_depth is not None else "[muted]unbounded[/muted]",
    )
    table.add_row("exclude_paths", escape("\n".join(config.exclude_paths)) or "[muted]-[/muted]")
    table.add_row(
        "exclude_patterns", escape("\n".join(config.exclude_patterns)) or "[muted]-[/muted]"
    )
    table.add_row("skip_unreadable", str(config.skip_unreadable).lower())
    for key, value in config.metadata.items():
        table.add_row(f"[muted]metadata.{escape(key)}[/muted]", escape(str(value)))
    return table


@app.command()
def show(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Show the effective scan defaults."""
    try:
        config = load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(config.model_dump()))
        return

    console.print(_create_config_table(config))
    console.print(f"\n[muted]Source: {escape(str(get_config_path()))}[/muted]")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the built-in defaults."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(ScanConfig())
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")


@app.command()
def path() -> None:
    """Print the path of the config file."""
    typer.echo(str(get_config_path()))
