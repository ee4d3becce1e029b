"""Info command implementation.

Shows the header and entry statistics of a snapshot.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from dirsnap.cli.display import create_header_table
from dirsnap.core.errors import SnapshotError
from dirsnap.core.snapshot import Snapshot
from dirsnap.models.records import DirectoryRecord, FileRecord
from dirsnap.utils.formatting import console, format_size, print_error


def _collect_stats(snapshot: Snapshot) -> dict[str, Any]:
    """Count entries by type and sum the sizes of regular files."""
    files = 0
    directories = 0
    total_size = 0
    for entry in snapshot.entries.values():
        if isinstance(entry, DirectoryRecord):
            directories += 1
        elif isinstance(entry, FileRecord):
            files += 1
            total_size += entry.size or 0
    return {
        "entries": files + directories,
        "files": files,
        "directories": directories,
        "totalSize": total_size,
    }


def info_command(
    file: Annotated[
        Path,
        typer.Argument(help="Snapshot file to inspect."),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Show information about a snapshot.

    Examples:
        dirsnap info monday.ndjson
        dirsnap info monday.ndjson --json
    """
    try:
        snapshot = Snapshot(file)
        snapshot.open()
    except FileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except (SnapshotError, OSError) as e:
        print_error(f"Cannot open snapshot: {e}")
        raise typer.Exit(code=1) from e

    stats = _collect_stats(snapshot)

    if json_output:
        data = {"header": snapshot.header.to_dict(), "stats": stats}
        console.print_json(json.dumps(data))
        return

    console.print(create_header_table(snapshot.header))
    console.print(
        f"\n{stats['entries']} entries: "
        f"{stats['files']} files, {stats['directories']} directories, "
        f"{format_size(stats['totalSize'])}"
    )
