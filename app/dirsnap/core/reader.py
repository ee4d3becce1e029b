"""Full snapshot parser.

Reads a snapshot that has already passed validation into its header,
a path-keyed entry table and its footer.
"""

import json
from dataclasses import dataclass
from pathlib import Path

from dirsnap.core.errors import SnapshotFormatError
from dirsnap.models.records import (
    FileEntry,
    SnapshotFooter,
    SnapshotHeader,
    parse_record,
)


@dataclass(frozen=True, slots=True)
class SnapshotContents:
    """Parsed content of a snapshot file.

    Attributes:
        header: Snapshot header.
        entries: Entries keyed by path.
        footer: Snapshot footer.
    """

    header: SnapshotHeader
    entries: dict[str, FileEntry]
    footer: SnapshotFooter


def read_snapshot(path: str | Path) -> SnapshotContents:
    """Parse every line of a snapshot file.

    Blank lines are ignored. A later entry with the same path replaces
    an earlier one; validated snapshots never repeat a path.

    Args:
        path: Snapshot file to read.

    Returns:
        SnapshotContents with header, entries and footer.

    Raises:
        SnapshotFormatError: If a line cannot be parsed, or the header or
            footer is missing.
        OSError: If the file cannot be read.
    """
    header: SnapshotHeader | None = None
    footer: SnapshotFooter | None = None
    entries: dict[str, FileEntry] = {}

    with open(path, encoding="utf-8") as f:
        for line_num, line in enumerate(f, start=1):
            if not line.strip():
                continue

            try:
                record = parse_record(line)
            except (json.JSONDecodeError, KeyError, ValueError) as e:
                msg = f"Cannot parse line {line_num} of {path}: {e}"
                raise SnapshotFormatError(msg) from e

            if isinstance(record, SnapshotHeader):
                header = record
            elif isinstance(record, SnapshotFooter):
                footer = record
            else:
                entries[record.path] = record

    if header is None or footer is None:
        msg = f"Invalid snapshot file format: {path}"
        raise SnapshotFormatError(msg)

    return SnapshotContents(header=header, entries=entries, footer=footer)
