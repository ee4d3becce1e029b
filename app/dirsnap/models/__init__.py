"""Data models for dirsnap.

This module exports the snapshot records and the comparison report.
"""

from dirsnap.models.records import (
    DirectoryRecord,
    EntryType,
    FileEntry,
    FileRecord,
    FooterStatus,
    SnapshotFooter,
    SnapshotHeader,
    SnapshotRecord,
    entry_from_dict,
    parse_record,
    to_json_line,
)
from dirsnap.models.report import ChangedEntry, MovedEntry, Report, ReportPeriod

__all__ = [
    "ChangedEntry",
    "DirectoryRecord",
    "EntryType",
    "FileEntry",
    "FileRecord",
    "FooterStatus",
    "MovedEntry",
    "Report",
    "ReportPeriod",
    "SnapshotFooter",
    "SnapshotHeader",
    "SnapshotRecord",
    "entry_from_dict",
    "parse_record",
    "to_json_line",
]
