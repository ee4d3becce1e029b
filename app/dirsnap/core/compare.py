"""Snapshot comparator.

Computes the differences between two opened snapshots of the same
root directory, independent of argument order: the snapshots are
always ordered by their creation time.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from datetime import datetime
from pathlib import Path

from dirsnap.core.errors import IncomparableSnapshotsError, SnapshotNotOpenError
from dirsnap.core.snapshot import Snapshot
from dirsnap.models.records import FileEntry, FileRecord
from dirsnap.models.report import ChangedEntry, MovedEntry, Report, ReportPeriod

logger = logging.getLogger(__name__)

# Key used to pair deleted and added files as moves
_MoveKey = tuple[int | None, str]


class SnapshotComparator:
    """Engine for computing differences between two snapshots.

    Example:
        >>> older = Snapshot("monday.ndjson")
        >>> newer = Snapshot("tuesday.ndjson")
        >>> older.open()
        >>> newer.open()
        >>> report = SnapshotComparator(older, newer).compare()
        >>> [pair.dst.path for pair in report.moved]
        ['/data/renamed.txt']

    Args:
        snapshot_a: An opened snapshot.
        snapshot_b: Another opened snapshot of the same root.

    Raises:
        SnapshotNotOpenError: If either snapshot is not opened.
        IncomparableSnapshotsError: If the roots differ or both snapshots
            have the same creation time.
    """

    def __init__(self, snapshot_a: Snapshot, snapshot_b: Snapshot) -> None:
        for snapshot in (snapshot_a, snapshot_b):
            if not snapshot.is_opened:
                raise SnapshotNotOpenError(f"Snapshot is not opened: {snapshot.path}")

        header_a = snapshot_a.header
        header_b = snapshot_b.header

        if header_a.root_path != header_b.root_path:
            msg = (
                "Snapshots are not for the same directory: "
                f"{header_a.root_path} vs {header_b.root_path}"
            )
            raise IncomparableSnapshotsError(msg)

        created_a = _parse_created_at(header_a.created_at)
        created_b = _parse_created_at(header_b.created_at)
        if created_a == created_b:
            msg = f"Snapshots have the same creation time: {header_a.created_at}"
            raise IncomparableSnapshotsError(msg)

        if created_a < created_b:
            self.older, self.newer = snapshot_a, snapshot_b
        else:
            self.older, self.newer = snapshot_b, snapshot_a

    def compare(self) -> Report:
        """Classify every changed entry of the two snapshots.

        Each entry receives at most one classification, checked in this
        order: type change (deleted + added), content change (hash, then
        size), metadata change (ctime, then mtime). Afterwards, deleted
        and added files with the same size and hash are paired as moves.

        Returns:
            Report with the differences.
        """
        old_entries = self.older.entries
        new_entries = self.newer.entries

        added: list[FileEntry] = []
        deleted: list[FileEntry] = []
        metadata_changed: list[ChangedEntry] = []
        content_changed: list[ChangedEntry] = []

        for path, entry in new_entries.items():
            old_entry = old_entries.get(path)

            if old_entry is None:
                added.append(entry)
                continue

            if entry.type != old_entry.type:
                deleted.append(old_entry)
                added.append(entry)
                continue

            if _content_differs(old_entry, entry):
                content_changed.append(ChangedEntry(old_value=old_entry, new_value=entry))
                continue

            if entry.ctime != old_entry.ctime or entry.mtime != old_entry.mtime:
                metadata_changed.append(ChangedEntry(old_value=old_entry, new_value=entry))

        for path, old_entry in old_entries.items():
            if path not in new_entries:
                deleted.append(old_entry)

        # Path order makes move tie-breaking independent of file order
        added.sort(key=lambda e: e.path)
        deleted.sort(key=lambda e: e.path)
        metadata_changed.sort(key=lambda c: c.path)
        content_changed.sort(key=lambda c: c.path)

        moved, added, deleted = detect_moves(added, deleted)

        report = Report(
            period=ReportPeriod(
                start=self.older.header.created_at,
                end=self.newer.header.created_at,
            ),
            added=tuple(added),
            deleted=tuple(deleted),
            moved=tuple(moved),
            metadata_changed=tuple(metadata_changed),
            content_changed=tuple(content_changed),
        )
        logger.debug(
            "Compared %s and %s: %s", self.older.path, self.newer.path, report.summary()
        )
        return report


def detect_moves(
    added: list[FileEntry],
    deleted: list[FileEntry],
) -> tuple[list[MovedEntry], list[FileEntry], list[FileEntry]]:
    """Pair deleted and added files with identical size and content hash.

    Added files are bucketed by (size, sha256), each bucket keeping the
    order of ``added``. Deleted files are visited in order and each one
    claims the first unclaimed added file in its bucket, so ties are
    broken by the order of ``added``. Files without a hash never match.

    Args:
        added: Entries only present in the newer snapshot.
        deleted: Entries only present in the older snapshot.

    Returns:
        Tuple of (moves, remaining added, remaining deleted).
    """
    candidates: defaultdict[_MoveKey, deque[int]] = defaultdict(deque)
    for index, entry in enumerate(added):
        key = _move_key(entry)
        if key is not None:
            candidates[key].append(index)

    moved: list[MovedEntry] = []
    claimed: set[int] = set()
    remaining_deleted: list[FileEntry] = []

    for entry in deleted:
        key = _move_key(entry)
        bucket = candidates.get(key) if key is not None else None
        if not bucket:
            remaining_deleted.append(entry)
            continue

        index = bucket.popleft()
        claimed.add(index)
        moved.append(MovedEntry(src=entry, dst=added[index]))

    remaining_added = [entry for index, entry in enumerate(added) if index not in claimed]
    return moved, remaining_added, remaining_deleted


def _move_key(entry: FileEntry) -> _MoveKey | None:
    if not isinstance(entry, FileRecord) or entry.sha256 is None:
        return None
    return (entry.size, entry.sha256)


def _content_differs(old_entry: FileEntry, new_entry: FileEntry) -> bool:
    """Hash is authoritative; size is the fallback signal."""
    if not isinstance(old_entry, FileRecord) or not isinstance(new_entry, FileRecord):
        return False
    if old_entry.sha256 != new_entry.sha256:
        return True
    return old_entry.size != new_entry.size


def _parse_created_at(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def compare(snapshot_a: Snapshot, snapshot_b: Snapshot) -> Report:
    """Compare two opened snapshots of the same root.

    Argument order does not matter; the older snapshot is determined by
    createdAt.

    Raises:
        SnapshotNotOpenError: If either snapshot is not opened.
        IncomparableSnapshotsError: If roots differ or createdAt is equal.
    """
    return SnapshotComparator(snapshot_a, snapshot_b).compare()


def compare_snapshots(path_a: str | Path, path_b: str | Path) -> Report:
    """Open two snapshot files and compare them.

    Args:
        path_a: First snapshot file.
        path_b: Second snapshot file.

    Returns:
        Report of the differences.

    Raises:
        FileNotFoundError: If a snapshot file does not exist.
        InvalidSnapshotError: If a snapshot is malformed or incomplete.
        IncomparableSnapshotsError: If roots differ or createdAt is equal.
    """
    snapshot_a = Snapshot(path_a)
    snapshot_b = Snapshot(path_b)
    snapshot_a.open()
    snapshot_b.open()
    return compare(snapshot_a, snapshot_b)
