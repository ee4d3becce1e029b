"""Snapshot creation, validation, parsing and comparison."""

from dirsnap.core.compare import SnapshotComparator, compare, compare_snapshots
from dirsnap.core.errors import (
    IncomparableSnapshotsError,
    InvalidSnapshotError,
    SnapshotError,
    SnapshotFormatError,
    SnapshotNotOpenError,
    SnapshotReopenError,
)
from dirsnap.core.hashing import calculate_file_hash, generate_snapshot_name
from dirsnap.core.reader import SnapshotContents, read_snapshot
from dirsnap.core.snapshot import Snapshot
from dirsnap.core.validator import (
    SnapshotValidator,
    ValidationResult,
    ValidationStatus,
    check_snapshot,
    validate_snapshot,
)
from dirsnap.core.writer import SnapshotWriter, create_snapshot

__all__ = [
    "IncomparableSnapshotsError",
    "InvalidSnapshotError",
    "Snapshot",
    "SnapshotComparator",
    "SnapshotContents",
    "SnapshotError",
    "SnapshotFormatError",
    "SnapshotNotOpenError",
    "SnapshotReopenError",
    "SnapshotValidator",
    "SnapshotWriter",
    "ValidationResult",
    "ValidationStatus",
    "calculate_file_hash",
    "check_snapshot",
    "compare",
    "compare_snapshots",
    "create_snapshot",
    "generate_snapshot_name",
    "read_snapshot",
    "validate_snapshot",
]
