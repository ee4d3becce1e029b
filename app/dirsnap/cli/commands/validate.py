"""Validate command implementation.

Checks that a snapshot file is well-formed and complete.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from dirsnap.core.validator import ValidationStatus, check_snapshot
from dirsnap.utils.formatting import console, print_error, print_success, print_warning


def validate_command(
    file: Annotated[
        Path,
        typer.Argument(help="Snapshot file to validate."),
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
    """Validate a snapshot file.

    Exit codes:
      0  Snapshot is valid
      1  Snapshot is malformed or incomplete
      2  Snapshot file cannot be read

    Examples:
        dirsnap validate monday.ndjson
        dirsnap validate monday.ndjson --json
    """
    try:
        result = check_snapshot(file)
    except OSError as e:
        print_error(f"Cannot read snapshot {file}: {e}")
        raise typer.Exit(code=2) from e

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
    elif result.is_valid:
        print_success(f"Snapshot is valid: {file}")
    else:
        location = f" (line {result.line_number})" if result.line_number is not None else ""
        reason = escape(result.reason or "")
        if result.status == ValidationStatus.INCOMPLETE:
            print_warning(f"Snapshot is incomplete{location}: {reason}")
        else:
            print_error(f"Snapshot is malformed{location}: {reason}")

    if not result.is_valid:
        raise typer.Exit(code=1)
