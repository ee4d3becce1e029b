"""Shared Rich display functions for snapshots and reports."""

from rich.markup import escape
from rich.table import Table

from dirsnap.models.records import EntryType, FileEntry, FileRecord, SnapshotHeader
from dirsnap.models.report import Report
from dirsnap.utils.formatting import console, format_size


def _entry_size(entry: FileEntry) -> str:
    if isinstance(entry, FileRecord):
        return format_size(entry.size)
    return "-"


def _entry_label(entry: FileEntry) -> str:
    label = f"{entry.path}/" if entry.type == EntryType.DIRECTORY else entry.path
    return escape(label)


def create_report_table(report: Report) -> Table:
    """Create a Rich table listing every change in a report.

    Rows are grouped by category: added, deleted, moved, content changed
    and metadata changed.

    Args:
        report: The report to display.

    Returns:
        Rich Table configured for report display.
    """
    table = Table(
        title=f"Changes {report.period.start} → {report.period.end}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Path", no_wrap=True)
    table.add_column("Size", justify="right", style="muted")
    table.add_column("Note")

    for entry in report.added:
        table.add_row(
            "[added][+][/added]",
            f"[added]{_entry_label(entry)}[/added]",
            _entry_size(entry),
            "[muted]Added[/muted]",
        )

    for entry in report.deleted:
        table.add_row(
            "[deleted][-][/deleted]",
            f"[deleted]{_entry_label(entry)}[/deleted]",
            _entry_size(entry),
            "[muted]Deleted[/muted]",
        )

    for pair in report.moved:
        table.add_row(
            "[moved][>][/moved]",
            f"[moved]{escape(pair.dst.path)}[/moved]",
            _entry_size(pair.dst),
            f"[muted]Moved from {escape(pair.src.path)}[/muted]",
        )

    for change in report.content_changed:
        old_size = _entry_size(change.old_value)
        new_size = _entry_size(change.new_value)
        note = "Content changed" if old_size == new_size else f"Content changed ({old_size})"
        table.add_row(
            "[content_changed][~][/content_changed]",
            f"[content_changed]{escape(change.path)}[/content_changed]",
            new_size,
            f"[muted]{note}[/muted]",
        )

    for change in report.metadata_changed:
        table.add_row(
            "[metadata_changed][*][/metadata_changed]",
            f"[metadata_changed]{_entry_label(change.new_value)}[/metadata_changed]",
            _entry_size(change.new_value),
            "[muted]Metadata changed[/muted]",
        )

    return table


def print_report_summary(report: Report) -> None:
    """Print a one-line summary of a report.

    Args:
        report: The report to summarize.
    """
    parts: list[str] = []

    if report.added:
        parts.append(f"[added]{len(report.added)} added[/added]")
    if report.deleted:
        parts.append(f"[deleted]{len(report.deleted)} deleted[/deleted]")
    if report.moved:
        parts.append(f"[moved]{len(report.moved)} moved[/moved]")
    if report.content_changed:
        parts.append(
            f"[content_changed]{len(report.content_changed)} content changed[/content_changed]"
        )
    if report.metadata_changed:
        parts.append(
            f"[metadata_changed]{len(report.metadata_changed)} metadata changed"
            "[/metadata_changed]"
        )

    if parts:
        summary = ", ".join(parts)
        console.print(f"\nSummary: {summary} ({report.total_changes} total changes)")
    else:
        console.print("\n[muted]No differences found.[/muted]")


def create_header_table(header: SnapshotHeader) -> Table:
    """Create a two-column table with the header fields of a snapshot."""
    table = Table(show_header=False, border_style="border", title="Snapshot")
    table.add_column("Field", style="bold_header")
    table.add_column("Value")

    table.add_row("Root", escape(header.root_path))
    table.add_row("Created", header.created_at)
    table.add_row("Machine", escape(header.machine_id))
    table.add_row("Version", header.version)
    for key, value in header.metadata.items():
        table.add_row(f"[muted]{escape(key)}[/muted]", escape(str(value)))

    return table
