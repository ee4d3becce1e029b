"""Unit tests for snapshot record models.

Tests for header, entry and footer records and the line parser.
"""

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest
from dirsnap.models.records import (
    DirectoryRecord,
    EntryType,
    FileRecord,
    FooterStatus,
    SnapshotFooter,
    SnapshotHeader,
    entry_from_dict,
    format_timestamp,
    is_iso_timestamp,
    normalize_path,
    parse_record,
    to_json_line,
)


class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_format_timestamp_milliseconds(self) -> None:
        """Timestamps use millisecond precision and a Z suffix."""
        value = datetime(2024, 5, 1, 12, 30, 0, 123456, tzinfo=UTC)
        assert format_timestamp(value) == "2024-05-01T12:30:00.123Z"

    def test_format_timestamp_converts_to_utc(self) -> None:
        """Aware datetimes are converted to UTC."""
        value = datetime(2024, 5, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2024-05-01T12:00:00.000Z"

    def test_format_timestamp_naive_is_utc(self) -> None:
        """Naive datetimes are treated as UTC."""
        assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-05-01T12:30:00.123Z", True),
            ("2024-05-01T12:30:00Z", False),
            ("2024-05-01 12:30:00.123Z", False),
            (1714566600, False),
            (None, False),
        ],
    )
    def test_is_iso_timestamp(self, value: object, expected: bool) -> None:
        """is_iso_timestamp only accepts the snapshot timestamp format."""
        assert is_iso_timestamp(value) is expected

    def test_normalize_path(self) -> None:
        """Backslashes are converted to forward slashes."""
        assert normalize_path("C:\\data\\file.txt") == "C:/data/file.txt"


class TestSnapshotHeader:
    """Tests for SnapshotHeader."""

    def test_to_dict_field_order(self) -> None:
        """Header keys are written in a fixed order."""
        header = SnapshotHeader(created_at="2024-05-01T10:00:00.000Z", root_path="/data")
        assert list(header.to_dict()) == [
            "version",
            "type",
            "createdAt",
            "machineId",
            "rootPath",
        ]

    def test_defaults(self) -> None:
        """Header defaults to format 1.0 and an unknown machine."""
        header = SnapshotHeader(created_at="2024-05-01T10:00:00.000Z", root_path="/data")
        data = header.to_dict()
        assert data["version"] == "1.0"
        assert data["type"] == "dir-snapshot"
        assert data["machineId"] == "unknown"

    def test_metadata_merged_last(self) -> None:
        """Metadata keys are added to the header and win on collision."""
        header = SnapshotHeader(
            created_at="2024-05-01T10:00:00.000Z",
            root_path="/data",
            metadata={"project": "demo", "machineId": "override"},
        )
        data = header.to_dict()
        assert data["project"] == "demo"
        assert data["machineId"] == "override"

    def test_from_dict_separates_metadata(self) -> None:
        """Unknown header keys are collected as metadata."""
        header = SnapshotHeader.from_dict(
            {
                "version": "1.0",
                "type": "dir-snapshot",
                "createdAt": "2024-05-01T10:00:00.000Z",
                "machineId": "host",
                "rootPath": "/data",
                "project": "demo",
            }
        )
        assert header.machine_id == "host"
        assert header.root_path == "/data"
        assert header.metadata == {"project": "demo"}

    def test_from_dict_missing_key(self) -> None:
        """from_dict raises KeyError when a required key is missing."""
        with pytest.raises(KeyError):
            SnapshotHeader.from_dict({"rootPath": "/data"})


class TestEntries:
    """Tests for FileRecord and DirectoryRecord."""

    def test_file_record_type(self) -> None:
        """FileRecord reports the file type."""
        record = FileRecord(path="/a", ctime="c", mtime="m", depth=0, size=1, sha256="ab")
        assert record.type == EntryType.FILE

    def test_directory_record_type(self) -> None:
        """DirectoryRecord reports the directory type."""
        record = DirectoryRecord(path="/a", ctime="c", mtime="m", depth=0)
        assert record.type == EntryType.DIRECTORY

    def test_file_to_dict_omits_unknown_size_and_hash(self) -> None:
        """Size and hash are omitted when not known."""
        record = FileRecord(path="/link", ctime="c", mtime="m", depth=1)
        assert record.to_dict() == {
            "path": "/link",
            "type": "file",
            "ctime": "c",
            "mtime": "m",
            "depth": 1,
        }

    def test_file_to_dict_with_size_and_hash(self) -> None:
        """Size and hash are written for regular files."""
        record = FileRecord(path="/a", ctime="c", mtime="m", depth=0, size=0, sha256="e3b0")
        data = record.to_dict()
        assert data["size"] == 0
        assert data["sha256"] == "e3b0"

    def test_records_are_frozen(self) -> None:
        """Records cannot be modified."""
        record = DirectoryRecord(path="/a", ctime="c", mtime="m", depth=0)
        with pytest.raises(AttributeError):
            record.path = "/b"  # type: ignore[misc]


class TestEntryFromDict:
    """Tests for entry_from_dict."""

    def test_builds_directory(self) -> None:
        """type 'directory' yields a DirectoryRecord."""
        record = entry_from_dict(
            {"path": "/d", "type": "directory", "ctime": "c", "mtime": "m", "depth": 2}
        )
        assert record == DirectoryRecord(path="/d", ctime="c", mtime="m", depth=2)

    def test_builds_file(self) -> None:
        """type 'file' yields a FileRecord."""
        record = entry_from_dict(
            {
                "path": "/f",
                "type": "file",
                "ctime": "c",
                "mtime": "m",
                "depth": 0,
                "size": 3,
                "sha256": "abc",
            }
        )
        assert record == FileRecord(path="/f", ctime="c", mtime="m", depth=0, size=3, sha256="abc")

    def test_unknown_type(self) -> None:
        """An unknown type is rejected."""
        with pytest.raises(ValueError):
            entry_from_dict({"path": "/x", "type": "socket", "ctime": "c", "mtime": "m", "depth": 0})

    @pytest.mark.parametrize("depth", [-1, "0", 1.5, True])
    def test_invalid_depth(self, depth: object) -> None:
        """depth must be a non-negative integer."""
        with pytest.raises(ValueError, match="depth"):
            entry_from_dict({"path": "/x", "type": "file", "ctime": "c", "mtime": "m", "depth": depth})

    def test_empty_path(self) -> None:
        """An empty path is rejected."""
        with pytest.raises(ValueError, match="path"):
            entry_from_dict({"path": "", "type": "file", "ctime": "c", "mtime": "m", "depth": 0})

    def test_directory_with_size(self) -> None:
        """Directories cannot carry file-only fields."""
        with pytest.raises(ValueError, match="Directory"):
            entry_from_dict(
                {"path": "/d", "type": "directory", "ctime": "c", "mtime": "m", "depth": 0, "size": 1}
            )

    def test_negative_size(self) -> None:
        """File size must not be negative."""
        with pytest.raises(ValueError, match="size"):
            entry_from_dict(
                {"path": "/f", "type": "file", "ctime": "c", "mtime": "m", "depth": 0, "size": -1}
            )

    def test_missing_key(self) -> None:
        """A missing key raises KeyError."""
        with pytest.raises(KeyError):
            entry_from_dict({"path": "/f", "type": "file", "ctime": "c", "depth": 0})


class TestSnapshotFooter:
    """Tests for SnapshotFooter."""

    def test_success(self) -> None:
        """Success footers serialize to a bare status."""
        footer = SnapshotFooter.success()
        assert footer.is_success
        assert footer.to_dict() == {"status": "success"}

    def test_error(self) -> None:
        """Error footers carry their message."""
        footer = SnapshotFooter.error("Permission denied")
        assert not footer.is_success
        assert footer.to_dict() == {"status": "error", "message": "Permission denied"}

    def test_from_dict_unknown_status(self) -> None:
        """Unknown status values are rejected."""
        with pytest.raises(ValueError):
            SnapshotFooter.from_dict({"status": "partial"})

    def test_from_dict(self) -> None:
        """from_dict restores status and message."""
        footer = SnapshotFooter.from_dict({"status": "error", "message": "boom"})
        assert footer.status == FooterStatus.ERROR
        assert footer.message == "boom"


class TestJsonLines:
    """Tests for to_json_line and parse_record."""

    def test_to_json_line_is_compact(self) -> None:
        """Lines are compact JSON without a trailing newline."""
        line = to_json_line(SnapshotFooter.success())
        assert line == '{"status":"success"}'

    def test_to_json_line_keeps_unicode(self) -> None:
        """Non-ASCII paths are written as-is."""
        record = DirectoryRecord(path="/données", ctime="c", mtime="m", depth=0)
        assert "/données" in to_json_line(record)

    def test_parse_header(self) -> None:
        """Objects with rootPath are headers."""
        header = SnapshotHeader(created_at="2024-05-01T10:00:00.000Z", root_path="/data")
        assert parse_record(to_json_line(header)) == header

    def test_parse_footer(self) -> None:
        """Objects with status are footers."""
        assert parse_record('{"status":"success"}\n') == SnapshotFooter.success()

    def test_parse_entry(self) -> None:
        """Objects with path are entries."""
        record = FileRecord(path="/a", ctime="c", mtime="m", depth=0, size=1, sha256="ab")
        assert parse_record(to_json_line(record)) == record

    def test_parse_unknown_object(self) -> None:
        """Objects that match no record kind are rejected."""
        with pytest.raises(ValueError, match="neither"):
            parse_record('{"foo": 1}')

    def test_parse_non_object(self) -> None:
        """JSON values other than objects are rejected."""
        with pytest.raises(ValueError, match="JSON object"):
            parse_record("[1, 2]")

    def test_parse_invalid_json(self) -> None:
        """Invalid JSON raises JSONDecodeError."""
        with pytest.raises(json.JSONDecodeError):
            parse_record("{not json")
