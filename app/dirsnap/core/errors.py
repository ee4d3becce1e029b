"""Exceptions raised by snapshot operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dirsnap.core.validator import ValidationResult


class SnapshotError(Exception):
    """Base exception for snapshot-related errors."""


class SnapshotFormatError(SnapshotError):
    """Raised when a snapshot file cannot be parsed into header, entries and footer."""


class InvalidSnapshotError(SnapshotError):
    """Raised when opening a snapshot that failed validation.

    Attributes:
        result: Validation outcome explaining why the snapshot was rejected.
    """

    def __init__(self, message: str, result: ValidationResult) -> None:
        super().__init__(message)
        self.result = result


class SnapshotNotOpenError(SnapshotError):
    """Raised when accessing snapshot data before open() succeeded."""


class SnapshotReopenError(SnapshotError):
    """Raised when open() is called on an already opened snapshot."""


class IncomparableSnapshotsError(SnapshotError):
    """Raised when two snapshots cannot be meaningfully compared."""
