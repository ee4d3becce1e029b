"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

SnapshotWriterFn = Callable[..., Path]
TreeBuilder = Callable[[dict[str, Any]], Path]

CREATED_AT = "2024-05-01T10:00:00.000Z"
LATER_CREATED_AT = "2024-05-02T10:00:00.000Z"
ENTRY_TIME = "2024-04-30T08:00:00.000Z"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG config directory at an empty temporary directory."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "dirsnap"


@pytest.fixture
def make_tree(tmp_path: Path) -> TreeBuilder:
    """Build a directory tree from a nested dict.

    String values become files with that content, dict values become
    directories.
    """

    def _build(layout: dict[str, Any], root: Path | None = None) -> Path:
        base = root or tmp_path / "tree"
        base.mkdir(parents=True, exist_ok=True)
        for name, content in layout.items():
            target = base / name
            if isinstance(content, dict):
                _build(content, target)
            else:
                target.write_text(content, encoding="utf-8")
        return base

    return _build


def header_line(
    root_path: str = "/data",
    created_at: str = CREATED_AT,
    machine_id: str = "test-host",
    **extra: Any,
) -> dict[str, Any]:
    """Header dict as stored on disk."""
    return {
        "version": "1.0",
        "type": "dir-snapshot",
        "createdAt": created_at,
        "machineId": machine_id,
        "rootPath": root_path,
        **extra,
    }


def file_line(
    path: str,
    size: int | None = None,
    sha256: str | None = None,
    depth: int = 0,
    ctime: str = ENTRY_TIME,
    mtime: str = ENTRY_TIME,
) -> dict[str, Any]:
    """File entry dict as stored on disk."""
    data: dict[str, Any] = {
        "path": path,
        "type": "file",
        "ctime": ctime,
        "mtime": mtime,
        "depth": depth,
    }
    if size is not None:
        data["size"] = size
    if sha256 is not None:
        data["sha256"] = sha256
    return data


def dir_line(
    path: str,
    depth: int = 0,
    ctime: str = ENTRY_TIME,
    mtime: str = ENTRY_TIME,
) -> dict[str, Any]:
    """Directory entry dict as stored on disk."""
    return {"path": path, "type": "directory", "ctime": ctime, "mtime": mtime, "depth": depth}


@pytest.fixture
def write_snapshot(tmp_path: Path) -> SnapshotWriterFn:
    """Write a hand-built snapshot file and return its path."""

    def _write(
        name: str,
        entries: Iterable[dict[str, Any]] = (),
        header: dict[str, Any] | None = None,
        footer: dict[str, Any] | None = None,
    ) -> Path:
        records = [header or header_line(), *entries, footer or {"status": "success"}]
        path = tmp_path / name
        path.write_text(
            "".join(json.dumps(record) + "\n" for record in records),
            encoding="utf-8",
        )
        return path

    return _write
