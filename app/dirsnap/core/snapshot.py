"""Opened, read-only view of a snapshot file."""

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from dirsnap.core.errors import (
    InvalidSnapshotError,
    SnapshotNotOpenError,
    SnapshotReopenError,
)
from dirsnap.core.reader import read_snapshot
from dirsnap.core.validator import check_snapshot
from dirsnap.models.records import FileEntry, SnapshotFooter, SnapshotHeader

logger = logging.getLogger(__name__)


class Snapshot:
    """A snapshot file and, once opened, its parsed content.

    A Snapshot is bound to a file at construction and starts unopened.
    ``open()`` validates and parses the file exactly once; afterwards the
    header, entries and footer are available and never change.

    Example:
        >>> snapshot = Snapshot("snapshot.2024-05-15.14-30-45.ndjson")
        >>> snapshot.open()
        >>> snapshot.header.root_path
        '/home/user/project'

    Args:
        path: Snapshot file.

    Raises:
        FileNotFoundError: If the snapshot file does not exist.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        if not self._path.exists():
            msg = f"Snapshot file does not exist: {self._path}"
            raise FileNotFoundError(msg)

        self._header: SnapshotHeader | None = None
        self._entries: Mapping[str, FileEntry] | None = None
        self._footer: SnapshotFooter | None = None

    @property
    def path(self) -> Path:
        """Snapshot file this instance is bound to."""
        return self._path

    @property
    def is_opened(self) -> bool:
        return self._header is not None

    @property
    def header(self) -> SnapshotHeader:
        """Snapshot header.

        Raises:
            SnapshotNotOpenError: If the snapshot has not been opened.
        """
        if self._header is None:
            raise SnapshotNotOpenError(f"Snapshot is not opened: {self._path}")
        return self._header

    @property
    def entries(self) -> Mapping[str, FileEntry]:
        """Read-only mapping of path to entry.

        Raises:
            SnapshotNotOpenError: If the snapshot has not been opened.
        """
        if self._entries is None:
            raise SnapshotNotOpenError(f"Snapshot is not opened: {self._path}")
        return self._entries

    @property
    def footer(self) -> SnapshotFooter:
        """Snapshot footer.

        Raises:
            SnapshotNotOpenError: If the snapshot has not been opened.
        """
        if self._footer is None:
            raise SnapshotNotOpenError(f"Snapshot is not opened: {self._path}")
        return self._footer

    def open(self) -> None:
        """Validate and load the snapshot file.

        Raises:
            SnapshotReopenError: If the snapshot is already opened.
            InvalidSnapshotError: If the file is malformed or incomplete.
            SnapshotFormatError: If the file cannot be parsed.
            OSError: If the file cannot be read.
        """
        if self.is_opened:
            msg = "Cannot open snapshot again. Create a new Snapshot instance instead."
            raise SnapshotReopenError(msg)

        result = check_snapshot(self._path)
        if not result.is_valid:
            msg = f"Snapshot file is invalid: {self._path} ({result.reason})"
            raise InvalidSnapshotError(msg, result)

        contents = read_snapshot(self._path)
        logger.debug("Opened snapshot %s with %d entries", self._path, len(contents.entries))

        self._entries = MappingProxyType(contents.entries)
        self._footer = contents.footer
        self._header = contents.header

    def __repr__(self) -> str:
        state = "opened" if self.is_opened else "unopened"
        return f"Snapshot({str(self._path)!r}, {state})"
