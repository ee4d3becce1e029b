"""dirsnap - Directory snapshots and change reports.

Captures the state of a directory tree into a line-oriented snapshot
file and compares two snapshots to report added, deleted, moved and
changed entries.
"""

from dirsnap.core import (
    Snapshot,
    compare,
    compare_snapshots,
    create_snapshot,
    generate_snapshot_name,
    validate_snapshot,
)
from dirsnap.models import Report

__version__ = "0.1.0"

__all__ = [
    "Report",
    "Snapshot",
    "__version__",
    "compare",
    "compare_snapshots",
    "create_snapshot",
    "generate_snapshot_name",
    "validate_snapshot",
]
