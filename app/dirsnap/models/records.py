"""Snapshot record models.

This module defines the three kinds of line stored in a snapshot file
(header, entry, footer) and the discriminating parser used at the
file boundary. Entries are a tagged union of FileRecord and
DirectoryRecord keyed by the ``type`` field.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

FORMAT_VERSION = "1.0"
SNAPSHOT_TYPE = "dir-snapshot"

HEADER_KEYS: tuple[str, ...] = ("version", "type", "createdAt", "machineId", "rootPath")
ENTRY_KEYS: tuple[str, ...] = ("path", "type", "ctime", "mtime", "depth")

_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO 8601 UTC with millisecond precision.

    Args:
        value: Timezone-aware or naive (assumed UTC) datetime.

    Returns:
        String like ``2024-05-01T12:30:00.123Z``.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp_from_epoch(seconds: float) -> str:
    """Format a POSIX timestamp (as found in stat results)."""
    return format_timestamp(datetime.fromtimestamp(seconds, tz=UTC))


def now_timestamp() -> str:
    """Current time in snapshot timestamp format."""
    return format_timestamp(datetime.now(UTC))


def is_iso_timestamp(value: object) -> bool:
    """Check whether a value is a snapshot timestamp string."""
    return isinstance(value, str) and _ISO_TIMESTAMP.match(value) is not None


def normalize_path(path: str) -> str:
    """Normalize path separators to forward slashes."""
    return path.replace("\\", "/")


class EntryType(str, Enum):
    """Type of a snapshot entry.

    Attributes:
        FILE: Anything that is not a directory (regular files, symlinks, ...).
        DIRECTORY: Directory.
    """

    FILE = "file"
    DIRECTORY = "directory"


class FooterStatus(str, Enum):
    """Completion status written in the snapshot footer."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class SnapshotHeader:
    """First line of a snapshot.

    Attributes:
        created_at: Scan start time (ISO 8601 UTC, milliseconds).
        root_path: Absolute, slash-normalized path that was scanned.
        machine_id: Identifier of the producing host.
        version: Snapshot format version.
        type: Format discriminator, always ``dir-snapshot``.
        metadata: Caller-supplied key/value pairs merged into the header.
    """

    created_at: str
    root_path: str
    machine_id: str = "unknown"
    version: str = FORMAT_VERSION
    type: str = SNAPSHOT_TYPE
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk dictionary.

        Metadata is merged last, so a metadata key that collides with a
        reserved header key replaces it.
        """
        return {
            "version": self.version,
            "type": self.type,
            "createdAt": self.created_at,
            "machineId": self.machine_id,
            "rootPath": self.root_path,
            **self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SnapshotHeader:
        """Deserialize from the on-disk dictionary.

        Raises:
            KeyError: If a required header key is missing.
        """
        metadata = {key: value for key, value in data.items() if key not in HEADER_KEYS}
        return cls(
            created_at=data["createdAt"],
            root_path=data["rootPath"],
            machine_id=data["machineId"],
            version=data["version"],
            type=data["type"],
            metadata=metadata,
        )


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Snapshot entry for a non-directory filesystem object.

    ``size`` and ``sha256`` are only known for regular files. For
    symlinks and special files both are None and are omitted on disk.

    Attributes:
        path: Absolute, slash-normalized path (unique within a snapshot).
        ctime: Status change time (ISO 8601).
        mtime: Modification time (ISO 8601).
        depth: Distance from the root; direct children of the root are 0.
        size: Content length in bytes.
        sha256: Lowercase hex SHA-256 of the full content.
    """

    path: str
    ctime: str
    mtime: str
    depth: int
    size: int | None = None
    sha256: str | None = None

    @property
    def type(self) -> EntryType:
        return EntryType.FILE

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "path": self.path,
            "type": self.type.value,
            "ctime": self.ctime,
            "mtime": self.mtime,
            "depth": self.depth,
        }
        if self.size is not None:
            result["size"] = self.size
        if self.sha256 is not None:
            result["sha256"] = self.sha256
        return result


@dataclass(frozen=True, slots=True)
class DirectoryRecord:
    """Snapshot entry for a directory.

    Attributes:
        path: Absolute, slash-normalized path (unique within a snapshot).
        ctime: Status change time (ISO 8601).
        mtime: Modification time (ISO 8601).
        depth: Distance from the root; direct children of the root are 0.
    """

    path: str
    ctime: str
    mtime: str
    depth: int

    @property
    def type(self) -> EntryType:
        return EntryType.DIRECTORY

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "type": self.type.value,
            "ctime": self.ctime,
            "mtime": self.mtime,
            "depth": self.depth,
        }


FileEntry = FileRecord | DirectoryRecord


def entry_from_dict(data: dict[str, Any]) -> FileEntry:
    """Build the entry variant selected by the ``type`` field.

    Args:
        data: Dictionary read from a snapshot line.

    Returns:
        FileRecord or DirectoryRecord.

    Raises:
        KeyError: If a required entry key is missing.
        ValueError: If the type is unknown, depth is not a non-negative
            integer, or a directory carries file-only fields.
    """
    entry_type = EntryType(data["type"])
    path = data["path"]
    ctime = data["ctime"]
    mtime = data["mtime"]
    depth = data["depth"]

    if not isinstance(path, str) or not path:
        msg = f"Entry path must be a non-empty string, got {path!r}"
        raise ValueError(msg)
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
        msg = f"Entry depth must be a non-negative integer, got {depth!r}"
        raise ValueError(msg)

    if entry_type == EntryType.DIRECTORY:
        if "size" in data or "sha256" in data:
            msg = f"Directory entry cannot carry size or sha256: {path}"
            raise ValueError(msg)
        return DirectoryRecord(path=path, ctime=ctime, mtime=mtime, depth=depth)

    size = data.get("size")
    if size is not None and (isinstance(size, bool) or not isinstance(size, int) or size < 0):
        msg = f"File size must be a non-negative integer, got {size!r}"
        raise ValueError(msg)
    return FileRecord(
        path=path,
        ctime=ctime,
        mtime=mtime,
        depth=depth,
        size=size,
        sha256=data.get("sha256"),
    )


@dataclass(frozen=True, slots=True)
class SnapshotFooter:
    """Last line of a snapshot.

    Attributes:
        status: Whether the scan completed.
        message: Failure description (only for ERROR status).
    """

    status: FooterStatus
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == FooterStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status.value}
        if self.status == FooterStatus.ERROR and self.message is not None:
            result["message"] = self.message
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SnapshotFooter:
        """Deserialize from the on-disk dictionary.

        Raises:
            KeyError: If status is missing.
            ValueError: If status is not a known value.
        """
        return cls(status=FooterStatus(data["status"]), message=data.get("message"))

    @classmethod
    def success(cls) -> SnapshotFooter:
        return cls(status=FooterStatus.SUCCESS)

    @classmethod
    def error(cls, message: str) -> SnapshotFooter:
        return cls(status=FooterStatus.ERROR, message=message)


SnapshotRecord = SnapshotHeader | FileRecord | DirectoryRecord | SnapshotFooter


def to_json_line(record: SnapshotRecord) -> str:
    """Serialize a record as a single compact JSON line (no newline)."""
    return json.dumps(record.to_dict(), separators=(",", ":"), ensure_ascii=False)


def load_json_object(line: str) -> dict[str, Any]:
    """Parse a snapshot line into a JSON object.

    Raises:
        json.JSONDecodeError: If the line is not valid JSON.
        ValueError: If the JSON value is not an object.
    """
    data = json.loads(line)
    if not isinstance(data, dict):
        msg = f"Expected a JSON object, got {type(data).__name__}"
        raise ValueError(msg)
    return data


def parse_record(line: str) -> SnapshotRecord:
    """Parse a snapshot line into the record it represents.

    Discrimination is structural: an object with ``rootPath`` is the
    header, one with ``status`` is the footer, one with ``path`` is an
    entry.

    Args:
        line: Single line from a snapshot file.

    Returns:
        The parsed record.

    Raises:
        json.JSONDecodeError: If the line is not valid JSON.
        KeyError: If required fields are missing.
        ValueError: If the object matches no record kind or holds invalid data.
    """
    data = load_json_object(line.strip())
    if "rootPath" in data:
        return SnapshotHeader.from_dict(data)
    if "status" in data:
        return SnapshotFooter.from_dict(data)
    if "path" in data:
        return entry_from_dict(data)
    msg = "Line is neither a header, an entry nor a footer"
    raise ValueError(msg)
