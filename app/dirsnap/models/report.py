"""Comparison report model.

The Report is the result of comparing two snapshots of the same root.
It holds read-only references to the entries of both snapshots and is
never written back into them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from dirsnap.models.records import FileEntry


@dataclass(frozen=True, slots=True)
class ReportPeriod:
    """Time span covered by a report.

    Attributes:
        start: createdAt of the older snapshot.
        end: createdAt of the newer snapshot.
    """

    start: str
    end: str


@dataclass(frozen=True, slots=True)
class MovedEntry:
    """A file that disappeared from one path and reappeared at another."""

    src: FileEntry
    dst: FileEntry


@dataclass(frozen=True, slots=True)
class ChangedEntry:
    """An entry present at the same path in both snapshots with changes."""

    old_value: FileEntry
    new_value: FileEntry

    @property
    def path(self) -> str:
        return self.new_value.path


@dataclass(frozen=True, slots=True)
class Report:
    """Differences between an older and a newer snapshot.

    Every entry of either snapshot appears in at most one category.
    Entries listed in ``moved`` never appear in ``added`` or ``deleted``.

    Attributes:
        period: createdAt of the older and newer snapshot.
        added: Entries only present in the newer snapshot.
        deleted: Entries only present in the older snapshot.
        moved: File pairs matched by size and content hash.
        metadata_changed: Entries whose ctime or mtime changed.
        content_changed: Files whose hash or size changed.
    """

    period: ReportPeriod
    added: tuple[FileEntry, ...] = ()
    deleted: tuple[FileEntry, ...] = ()
    moved: tuple[MovedEntry, ...] = ()
    metadata_changed: tuple[ChangedEntry, ...] = ()
    content_changed: tuple[ChangedEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True if nothing changed between the two snapshots."""
        return self.total_changes == 0

    @property
    def total_changes(self) -> int:
        return (
            len(self.added)
            + len(self.deleted)
            + len(self.moved)
            + len(self.metadata_changed)
            + len(self.content_changed)
        )

    def summary(self) -> dict[str, int]:
        """Count of entries per category."""
        return {
            "added": len(self.added),
            "deleted": len(self.deleted),
            "moved": len(self.moved),
            "metaDataChanged": len(self.metadata_changed),
            "contentChanged": len(self.content_changed),
            "total": self.total_changes,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Entries are rendered in their on-disk form.
        """
        return {
            "period": {"start": self.period.start, "end": self.period.end},
            "summary": self.summary(),
            "added": [entry.to_dict() for entry in self.added],
            "deleted": [entry.to_dict() for entry in self.deleted],
            "moved": [
                {"src": pair.src.to_dict(), "dst": pair.dst.to_dict()} for pair in self.moved
            ],
            "metaDataChanged": [_changed_to_dict(change) for change in self.metadata_changed],
            "contentChanged": [_changed_to_dict(change) for change in self.content_changed],
        }


def _changed_to_dict(change: ChangedEntry) -> dict[str, Any]:
    return {"oldValue": change.old_value.to_dict(), "newValue": change.new_value.to_dict()}
