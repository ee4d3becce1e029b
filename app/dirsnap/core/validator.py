"""Streaming snapshot validator.

Checks the structure of a snapshot file in a single forward pass
keeping only the set of entry paths seen so far. The file must consist
of exactly one header line, any number of entry lines with distinct
paths, one footer line and nothing after it except blank lines. Lines
are classified in the same order the reader uses: header keys first,
then footer status, then entry fields.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dirsnap.models.records import (
    ENTRY_KEYS,
    HEADER_KEYS,
    SNAPSHOT_TYPE,
    FooterStatus,
    entry_from_dict,
    is_iso_timestamp,
    load_json_object,
)

logger = logging.getLogger(__name__)


class ValidationState(Enum):
    """Position of the validator in the snapshot grammar."""

    EXPECT_HEADER = "expect_header"
    EXPECT_ENTRY_OR_FOOTER = "expect_entry_or_footer"
    EXPECT_NOTHING = "expect_nothing"


class ValidationStatus(str, Enum):
    """Outcome of validating a snapshot.

    Attributes:
        VALID: Well-formed with a success footer.
        MALFORMED: Violates the line grammar or ordering.
        INCOMPLETE: Well-formed, but the footer reports a failed scan.
    """

    VALID = "valid"
    MALFORMED = "malformed"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Detailed validation outcome.

    Attributes:
        status: Overall outcome.
        line_number: 1-based line where validation failed (None if valid
            or if the input ended early).
        reason: Human-readable cause of the failure.
    """

    status: ValidationStatus
    line_number: int | None = None
    reason: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == ValidationStatus.VALID

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"valid": self.is_valid, "status": self.status.value}
        if self.line_number is not None:
            result["line"] = self.line_number
        if self.reason is not None:
            result["reason"] = self.reason
        return result


_VALID = ValidationResult(status=ValidationStatus.VALID)


class _Rejected(Exception):
    """Internal signal carrying the failure result."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.reason)
        self.result = result


class SnapshotValidator:
    """Line-oriented state machine for snapshot validation.

    Example:
        >>> validator = SnapshotValidator()
        >>> result = validator.validate_lines(open("snap.ndjson", encoding="utf-8"))
        >>> result.is_valid
        True
    """

    def __init__(self) -> None:
        self._state = ValidationState.EXPECT_HEADER
        self._seen_paths: set[str] = set()

    @property
    def state(self) -> ValidationState:
        return self._state

    def validate_lines(self, lines: Iterable[str]) -> ValidationResult:
        """Run the state machine over all lines.

        The validator is single-use; create a new instance per snapshot.

        Args:
            lines: Snapshot lines, with or without trailing newlines.

        Returns:
            ValidationResult describing the outcome.
        """
        try:
            for line_number, line in enumerate(lines, start=1):
                self._feed(line.rstrip("\r\n"), line_number)
        except _Rejected as rejected:
            return rejected.result
        except UnicodeDecodeError as e:
            return _malformed(None, f"Snapshot is not valid UTF-8: {e}")

        if self._state == ValidationState.EXPECT_HEADER:
            return _malformed(None, "Snapshot is empty")
        if self._state == ValidationState.EXPECT_ENTRY_OR_FOOTER:
            return _malformed(None, "Snapshot ends without a footer")
        return _VALID

    def _feed(self, line: str, line_number: int) -> None:
        if self._state == ValidationState.EXPECT_HEADER:
            self._check_header(line, line_number)
            self._state = ValidationState.EXPECT_ENTRY_OR_FOOTER
        elif self._state == ValidationState.EXPECT_ENTRY_OR_FOOTER:
            data = _load(line, line_number)
            if "rootPath" in data:
                raise _Rejected(_malformed(line_number, "Unexpected header after the first line"))
            if "status" in data:
                self._state = ValidationState.EXPECT_NOTHING
                self._check_footer(data, line_number)
            else:
                self._check_entry(data, line_number)
        elif line.strip():
            raise _Rejected(_malformed(line_number, "Unexpected data after footer"))

    @staticmethod
    def _check_header(line: str, line_number: int) -> None:
        data = _load(line, line_number)
        missing = [key for key in HEADER_KEYS if key not in data]
        if missing:
            raise _Rejected(
                _malformed(line_number, f"Header is missing keys: {', '.join(missing)}")
            )
        if data["type"] != SNAPSHOT_TYPE:
            raise _Rejected(_malformed(line_number, f"Unknown snapshot type: {data['type']!r}"))
        if not is_iso_timestamp(data["createdAt"]):
            raise _Rejected(
                _malformed(line_number, f"Invalid createdAt timestamp: {data['createdAt']!r}")
            )

    def _check_entry(self, data: dict[str, Any], line_number: int) -> None:
        missing = [key for key in ENTRY_KEYS if key not in data]
        if missing:
            raise _Rejected(
                _malformed(line_number, f"Entry is missing keys: {', '.join(missing)}")
            )
        try:
            entry_from_dict(data)
        except (KeyError, ValueError) as e:
            raise _Rejected(_malformed(line_number, f"Invalid entry: {e}")) from e

        path = data["path"]
        if path in self._seen_paths:
            raise _Rejected(_malformed(line_number, f"Duplicate entry path: {path!r}"))
        self._seen_paths.add(path)

    @staticmethod
    def _check_footer(data: dict[str, Any], line_number: int) -> None:
        status = data["status"]
        if status == FooterStatus.SUCCESS.value:
            return
        message = data.get("message")
        reason = f"Snapshot has status {status!r}"
        if message:
            reason = f"{reason}: {message}"
        raise _Rejected(
            ValidationResult(
                status=ValidationStatus.INCOMPLETE, line_number=line_number, reason=reason
            )
        )


def _malformed(line_number: int | None, reason: str) -> ValidationResult:
    return ValidationResult(
        status=ValidationStatus.MALFORMED, line_number=line_number, reason=reason
    )


def _load(line: str, line_number: int) -> dict[str, Any]:
    try:
        return load_json_object(line)
    except (json.JSONDecodeError, ValueError) as e:
        raise _Rejected(_malformed(line_number, f"Line is not a JSON object: {e}")) from e


def check_snapshot(path: str | Path) -> ValidationResult:
    """Validate a snapshot file and report why it is invalid.

    Args:
        path: Snapshot file to check.

    Returns:
        ValidationResult with status, failing line and reason.

    Raises:
        OSError: If the file cannot be opened or read (e.g. not found).
    """
    with open(path, encoding="utf-8") as f:
        result = SnapshotValidator().validate_lines(f)

    if not result.is_valid:
        if result.line_number is not None:
            logger.warning(
                "Snapshot %s is %s (line %d): %s",
                path,
                result.status.value,
                result.line_number,
                result.reason,
            )
        else:
            logger.warning("Snapshot %s is %s: %s", path, result.status.value, result.reason)
    return result


def validate_snapshot(path: str | Path) -> bool:
    """Check whether a snapshot file is well-formed and complete.

    Never raises for a structurally invalid file.

    Args:
        path: Snapshot file to check.

    Returns:
        True if the snapshot is valid, False otherwise.

    Raises:
        OSError: If the file cannot be opened or read (e.g. not found).
    """
    return check_snapshot(path).is_valid
