"""Create command implementation.

Scans a directory and writes its snapshot file.
"""

import re
from pathlib import Path
from typing import Annotated, Any

import typer

from dirsnap.core.config import ConfigError, ScanConfig, load_config_or_default
from dirsnap.core.hashing import generate_snapshot_name
from dirsnap.core.writer import create_snapshot
from dirsnap.utils.formatting import print_error, print_info, print_success


def _parse_metadata(items: list[str]) -> dict[str, Any]:
    """Parse KEY=VALUE pairs into a dictionary.

    Raises:
        typer.BadParameter: If an item has no '=' or an empty key.
    """
    metadata: dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint="--meta")
        metadata[key] = value
    return metadata


def _merge_options(
    config: ScanConfig,
    exclude: list[str],
    pattern: list[str],
    max_depth: int | None,
    machine_id: str | None,
    metadata: dict[str, Any],
    skip_unreadable: bool,
) -> dict[str, Any]:
    """Combine config defaults with command line options.

    Exclusions are additive; scalar options override the config.
    """
    return {
        "exclude_paths": [*config.exclude_paths, *exclude],
        "exclude_patterns": [*config.exclude_patterns, *pattern],
        "max_depth": max_depth if max_depth is not None else config.max_depth,
        "machine_id": machine_id or config.machine_id,
        "metadata": {**config.metadata, **metadata},
        "skip_unreadable": skip_unreadable or config.skip_unreadable,
    }


def create_command(
    directory: Annotated[
        Path,
        typer.Argument(
            help="Directory to snapshot.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Snapshot file to write (default: timestamped file in current directory).",
        ),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            "-x",
            help="Exact path to exclude (repeatable).",
        ),
    ] = None,
    pattern: Annotated[
        list[str] | None,
        typer.Option(
            "--pattern",
            "-p",
            help="Regular expression matched against absolute paths (repeatable).",
        ),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option(
            "--max-depth",
            "-d",
            min=0,
            help="Deepest level to descend into (0 = direct children only).",
        ),
    ] = None,
    machine_id: Annotated[
        str | None,
        typer.Option(
            "--machine-id",
            "-m",
            help="Identifier written to the snapshot header.",
        ),
    ] = None,
    meta: Annotated[
        list[str] | None,
        typer.Option(
            "--meta",
            help="Extra header field as KEY=VALUE (repeatable).",
        ),
    ] = None,
    skip_unreadable: Annotated[
        bool,
        typer.Option(
            "--skip-unreadable",
            help="Skip entries without read permission instead of aborting.",
        ),
    ] = False,
) -> None:
    """Create a snapshot of a directory.

    Records every file and directory below DIRECTORY with its timestamps,
    and for regular files their size and SHA-256 hash.

    Examples:
        dirsnap create ~/project
        dirsnap create ~/project -o monday.ndjson
        dirsnap create ~/project -x ~/project/node_modules -p '/\\.git'
        dirsnap create ~/project --max-depth 2 --meta project=demo
    """
    metadata = _parse_metadata(meta or [])

    try:
        config = load_config_or_default()
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e

    options = _merge_options(
        config,
        exclude or [],
        pattern or [],
        max_depth,
        machine_id,
        metadata,
        skip_unreadable,
    )

    output_file = output or Path.cwd() / generate_snapshot_name()

    try:
        completed = create_snapshot(output_file, directory, **options)
    except re.error as e:
        print_error(f"Invalid exclude pattern: {e}")
        raise typer.Exit(code=1) from e
    except OSError as e:
        print_error(f"Failed to write snapshot {output_file}: {e}")
        raise typer.Exit(code=1) from e

    if not completed:
        print_error(f"Snapshot aborted, see error footer in {output_file}")
        raise typer.Exit(code=1)

    print_success(f"Snapshot written to {output_file}")
    print_info(f"Root: {directory}")
