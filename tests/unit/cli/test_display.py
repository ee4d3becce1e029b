"""Unit tests for cli/display.py.

Tests for shared Rich display functions used by the info and compare commands.
"""

import io

import pytest
from dirsnap.cli import display
from dirsnap.cli.display import create_header_table, create_report_table, print_report_summary
from dirsnap.core.theme import get_theme
from dirsnap.models.records import DirectoryRecord, FileRecord, SnapshotHeader
from dirsnap.models.report import ChangedEntry, MovedEntry, Report, ReportPeriod
from rich.console import Console

PERIOD = ReportPeriod(start="2024-05-01T10:00:00.000Z", end="2024-05-02T10:00:00.000Z")


def _file(path: str, sha256: str = "aa", size: int = 10) -> FileRecord:
    return FileRecord(path=path, ctime="c", mtime="m", depth=0, size=size, sha256=sha256)


def _render(renderable: object) -> str:
    buffer = io.StringIO()
    Console(file=buffer, theme=get_theme(), width=200).print(renderable)
    return buffer.getvalue()


@pytest.fixture
def captured_console(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    """Replace the display console with one writing to a buffer."""
    buffer = io.StringIO()
    monkeypatch.setattr(display, "console", Console(file=buffer, theme=get_theme(), width=200))
    return buffer


class TestCreateReportTable:
    """Tests for create_report_table."""

    def test_one_row_per_change(self) -> None:
        """Every change becomes a table row."""
        report = Report(
            period=PERIOD,
            added=(_file("/data/new"),),
            deleted=(DirectoryRecord(path="/data/old", ctime="c", mtime="m", depth=0),),
            moved=(MovedEntry(src=_file("/data/a", "mv"), dst=_file("/data/b", "mv")),),
            content_changed=(
                ChangedEntry(old_value=_file("/data/c", "x"), new_value=_file("/data/c", "y")),
            ),
            metadata_changed=(
                ChangedEntry(old_value=_file("/data/m"), new_value=_file("/data/m")),
            ),
        )
        table = create_report_table(report)

        assert table.row_count == 5
        output = _render(table)
        assert "/data/old/" in output
        assert "Moved from /data/a" in output

    def test_paths_are_escaped(self) -> None:
        """Paths containing markup are printed literally."""
        report = Report(period=PERIOD, added=(_file("/data/[bold]x"),))
        assert "/data/[bold]x" in _render(create_report_table(report))


class TestPrintReportSummary:
    """Tests for print_report_summary."""

    def test_empty(self, captured_console: io.StringIO) -> None:
        """An empty report prints a no-differences message."""
        print_report_summary(Report(period=PERIOD))
        assert "No differences found" in captured_console.getvalue()

    def test_counts(self, captured_console: io.StringIO) -> None:
        """The summary lists the non-empty categories."""
        print_report_summary(Report(period=PERIOD, added=(_file("/a"), _file("/b"))))
        output = captured_console.getvalue()
        assert "2 added" in output
        assert "deleted" not in output


class TestCreateHeaderTable:
    """Tests for create_header_table."""

    def test_includes_metadata(self) -> None:
        """Header fields and metadata are listed."""
        header = SnapshotHeader(
            created_at="2024-05-01T10:00:00.000Z",
            root_path="/data",
            machine_id="laptop",
            metadata={"project": "demo"},
        )
        output = _render(create_header_table(header))

        assert "/data" in output
        assert "laptop" in output
        assert "project" in output
        assert "demo" in output
