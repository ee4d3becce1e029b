"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from dirsnap import __version__
from dirsnap.cli.commands import compare, config, create, info, validate
from dirsnap.utils.formatting import configure_logging

# Create main Typer app
app = typer.Typer(
    name="dirsnap",
    help="Directory snapshots and change reports.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dirsnap version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """dirsnap - Directory snapshots and change reports.

    Record the state of a directory tree in a snapshot file and
    compare snapshots to see what was added, deleted, moved or changed.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose=verbose, quiet=quiet)


# Register commands
app.command(name="create")(create.create_command)
app.command(name="validate")(validate.validate_command)
app.command(name="info")(info.info_command)
app.command(name="compare")(compare.compare_command)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
