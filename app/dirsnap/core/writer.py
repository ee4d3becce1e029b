"""Snapshot writer.

Walks a directory tree depth-first and streams one JSON line per visited
entry to the output file, framed by a header written before the walk
starts and a footer written after it ends. A failed walk still ends
with a footer (status "error") so readers can tell an aborted snapshot
from a truncated one.
"""

import logging
import os
import stat
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any, TextIO

from dirsnap.core.exclude import (
    ExactPathRule,
    ExcludeRule,
    ExcludeRuleInput,
    absolute_path,
    build_rules,
    is_excluded,
)
from dirsnap.core.hashing import calculate_file_hash
from dirsnap.models.records import (
    HEADER_KEYS,
    DirectoryRecord,
    FileEntry,
    FileRecord,
    SnapshotFooter,
    SnapshotHeader,
    SnapshotRecord,
    normalize_path,
    now_timestamp,
    timestamp_from_epoch,
    to_json_line,
)

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Serializes a directory tree into a snapshot file.

    Args:
        exclude_paths: Exact paths (str/PathLike) or compiled regular
            expressions. Evaluated in order, first match wins.
        exclude_patterns: Regular expression sources, evaluated after
            ``exclude_paths``.
        max_depth: Deepest level whose directories are descended into.
            Direct children of the root are depth 0. None is unbounded.
        machine_id: Identifier of this host, stored in the header.
        metadata: Extra header fields. Keys colliding with reserved
            header keys replace them.
        skip_unreadable: If True, entries that raise PermissionError are
            logged and skipped instead of aborting the scan.
    """

    def __init__(
        self,
        *,
        exclude_paths: Iterable[ExcludeRuleInput] = (),
        exclude_patterns: Iterable[str] = (),
        max_depth: int | None = None,
        machine_id: str = "unknown",
        metadata: Mapping[str, Any] | None = None,
        skip_unreadable: bool = False,
    ) -> None:
        if max_depth is not None and max_depth < 0:
            msg = f"max_depth must be non-negative, got {max_depth}"
            raise ValueError(msg)

        self._rules: list[ExcludeRule] = build_rules(exclude_paths, exclude_patterns)
        self._max_depth = max_depth
        self._machine_id = machine_id
        self._metadata = dict(metadata or {})
        self._skip_unreadable = skip_unreadable

        collisions = sorted(set(self._metadata) & set(HEADER_KEYS))
        if collisions:
            logger.warning("Metadata overrides reserved header keys: %s", ", ".join(collisions))

    def write(self, output_file: str | Path, dir_path: str | Path) -> bool:
        """Scan ``dir_path`` and write the snapshot to ``output_file``.

        The output file is truncated if it exists. If it lies inside the
        scanned tree it is excluded from the scan.

        Args:
            output_file: Destination snapshot file.
            dir_path: Root directory to scan.

        Returns:
            True if the scan completed, False if it was aborted by a
            filesystem error (the file then ends with an error footer).

        Raises:
            OSError: If the output file cannot be opened or written.
        """
        root_path = absolute_path(dir_path)
        rules = [*self._rules, ExactPathRule(absolute_path(output_file))]

        header = SnapshotHeader(
            created_at=now_timestamp(),
            root_path=_record_path(root_path),
            machine_id=self._machine_id,
            metadata=self._metadata,
        )

        logger.info("Creating snapshot of %s in %s", root_path, output_file)

        with open(output_file, "w", encoding="utf-8", newline="\n") as out:
            _write_line(out, header)

            try:
                count = 0
                for record in self.walk(root_path, rules):
                    _write_line(out, record)
                    count += 1
            except (OSError, UnicodeEncodeError) as e:
                logger.error("Snapshot of %s aborted: %s", root_path, e)
                _write_line(out, SnapshotFooter.error(str(e)))
                return False

            _write_line(out, SnapshotFooter.success())

        logger.info("Snapshot of %s complete: %d entries", root_path, count)
        return True

    def walk(
        self,
        root_path: str,
        rules: list[ExcludeRule] | None = None,
    ) -> Iterator[FileEntry]:
        """Yield records for the tree under ``root_path`` in depth-first order.

        Each entry is yielded before its children. Children are visited
        in sorted name order.

        Args:
            root_path: Absolute, slash-normalized root directory.
            rules: Exclusion rules; defaults to the writer's rules.

        Yields:
            FileRecord or DirectoryRecord for each non-excluded entry.

        Raises:
            OSError: On any filesystem error that is not skipped.
        """
        rules = self._rules if rules is None else rules

        if is_excluded(root_path, rules):
            logger.warning("Scan root %s is excluded, snapshot will be empty", root_path)
            return

        # Stack of (remaining children, depth of those children)
        stack: list[tuple[Iterator[str], int]] = [(iter(self._list_children(root_path)), 0)]

        while stack:
            children, depth = stack[-1]
            path = next(children, None)
            if path is None:
                stack.pop()
                continue

            entry_path = _record_path(path)
            if is_excluded(entry_path, rules):
                logger.debug("Excluded: %s", entry_path)
                continue

            try:
                record = self._build_record(path, entry_path, depth)
            except PermissionError as e:
                if not self._skip_unreadable:
                    raise
                logger.warning("Skipping unreadable entry %s: %s", path, e)
                continue

            yield record

            if isinstance(record, DirectoryRecord) and self._descends_into(depth):
                try:
                    grandchildren = self._list_children(path)
                except PermissionError as e:
                    if not self._skip_unreadable:
                        raise
                    logger.warning("Skipping unreadable directory %s: %s", path, e)
                    continue
                stack.append((iter(grandchildren), depth + 1))

    def _descends_into(self, depth: int) -> bool:
        return self._max_depth is None or depth < self._max_depth

    @staticmethod
    def _list_children(directory: str) -> list[str]:
        """List absolute child paths in name order."""
        return [os.path.join(directory, name) for name in sorted(os.listdir(directory))]

    @staticmethod
    def _build_record(path: str, entry_path: str, depth: int) -> FileEntry:
        """Stat (and for regular files, hash) a single entry.

        Symlinks are never followed. Anything that is not a directory is
        recorded as a file; only regular files get a size and digest.
        """
        st = os.lstat(path)
        ctime = timestamp_from_epoch(st.st_ctime)
        mtime = timestamp_from_epoch(st.st_mtime)

        if stat.S_ISDIR(st.st_mode):
            return DirectoryRecord(path=entry_path, ctime=ctime, mtime=mtime, depth=depth)

        if stat.S_ISREG(st.st_mode):
            sha256, size = calculate_file_hash(path)
            return FileRecord(
                path=entry_path, ctime=ctime, mtime=mtime, depth=depth, size=size, sha256=sha256
            )

        return FileRecord(path=entry_path, ctime=ctime, mtime=mtime, depth=depth)


def _record_path(path: str) -> str:
    """Slash-normalize a path and escape bytes that are not valid UTF-8.

    Names that do not decode under the filesystem encoding come back from
    os.listdir with lone surrogates, which cannot be written to the
    snapshot. Those bytes are recorded as \\xNN escapes instead.
    """
    return os.fsencode(normalize_path(path)).decode("utf-8", "backslashreplace")


def _write_line(out: TextIO, record: SnapshotRecord) -> None:
    out.write(to_json_line(record) + "\n")


def create_snapshot(
    output_file: str | Path,
    dir_path: str | Path,
    exclude_paths: Iterable[ExcludeRuleInput] = (),
    max_depth: int | None = None,
    machine_id: str = "unknown",
    metadata: Mapping[str, Any] | None = None,
    *,
    exclude_patterns: Iterable[str] = (),
    skip_unreadable: bool = False,
) -> bool:
    """Scan a directory and write its snapshot.

    Example:
        >>> import re
        >>> create_snapshot(
        ...     "project.ndjson",
        ...     ".",
        ...     exclude_paths=["node_modules", re.compile(r"/\\.git")],
        ...     max_depth=10,
        ...     machine_id="build-server-01",
        ...     metadata={"project": "my-project"},
        ... )
        True

    Args:
        output_file: Destination snapshot file (truncated if it exists).
        dir_path: Root directory to scan.
        exclude_paths: Exact paths or compiled regular expressions.
        max_depth: Deepest level descended into (None is unbounded).
        machine_id: Identifier stored in the header.
        metadata: Extra header fields.
        exclude_patterns: Regular expression sources.
        skip_unreadable: Skip entries that raise PermissionError.

    Returns:
        True if the scan completed, False if it was aborted.
    """
    writer = SnapshotWriter(
        exclude_paths=exclude_paths,
        exclude_patterns=exclude_patterns,
        max_depth=max_depth,
        machine_id=machine_id,
        metadata=metadata,
        skip_unreadable=skip_unreadable,
    )
    return writer.write(output_file, dir_path)
