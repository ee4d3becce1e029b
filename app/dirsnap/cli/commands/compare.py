"""Compare command implementation.

Compares two snapshots of the same directory and shows what changed.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from dirsnap.cli.display import create_report_table, print_report_summary
from dirsnap.core.compare import compare_snapshots
from dirsnap.core.errors import IncomparableSnapshotsError, SnapshotError
from dirsnap.utils.formatting import console, print_error, print_success


def compare_command(
    old: Annotated[
        Path,
        typer.Argument(help="First snapshot file."),
    ],
    new: Annotated[
        Path,
        typer.Argument(help="Second snapshot file."),
    ],
    brief: Annotated[
        bool,
        typer.Option(
            "--brief",
            "-b",
            help="Show summary counts only.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Compare two snapshots of the same directory.

    The snapshots may be given in any order; the older one is picked by
    its creation time.

    Change types:
      [+] Added: Entry only in the newer snapshot
      [-] Deleted: Entry only in the older snapshot
      [>] Moved: File with the same content at a new path
      [~] Content changed: File hash or size differs
      [*] Metadata changed: Creation or modification time differs

    Examples:
        dirsnap compare monday.ndjson tuesday.ndjson
        dirsnap compare monday.ndjson tuesday.ndjson --brief
        dirsnap compare monday.ndjson tuesday.ndjson --json
    """
    try:
        report = compare_snapshots(old, new)
    except FileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except IncomparableSnapshotsError as e:
        print_error(f"Cannot compare snapshots: {e}")
        raise typer.Exit(code=1) from e
    except (SnapshotError, OSError) as e:
        print_error(f"Cannot open snapshot: {e}")
        raise typer.Exit(code=1) from e

    # JSON output
    if json_output:
        console.print_json(json.dumps(report.to_dict()))
        return

    # Brief output (summary only)
    if brief:
        if report.is_empty:
            print_success("Snapshots are identical.")
        else:
            console.print(f"[added]Added:[/added] {len(report.added)}")
            console.print(f"[deleted]Deleted:[/deleted] {len(report.deleted)}")
            console.print(f"[moved]Moved:[/moved] {len(report.moved)}")
            console.print(
                f"[content_changed]Content changed:[/content_changed] "
                f"{len(report.content_changed)}"
            )
            console.print(
                f"[metadata_changed]Metadata changed:[/metadata_changed] "
                f"{len(report.metadata_changed)}"
            )
            console.print(f"[muted]Total changes: {report.total_changes}[/muted]")
        return

    # Full output (table)
    if report.is_empty:
        print_success("Snapshots are identical.")
        return

    console.print(create_report_table(report))
    print_report_summary(report)
