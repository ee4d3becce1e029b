"""Unit tests for create command.

Tests for the CLI create command implementation.
"""

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from conftest import TreeBuilder
from dirsnap.cli.main import app
from dirsnap.core.validator import validate_snapshot
from typer.testing import CliRunner

runner = CliRunner()


def _read_lines(path: Path) -> list[dict[str, Any]]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


@pytest.fixture
def tree(make_tree: TreeBuilder) -> Path:
    """A small directory tree."""
    return make_tree({"a.txt": "a", "app.log": "log", "sub": {"b.txt": "b"}})


class TestCreateCommandHelp:
    """Tests for create command help."""

    def test_create_help(self) -> None:
        """Create command shows help."""
        result = runner.invoke(app, ["create", "--help"])
        assert result.exit_code == 0
        assert "Create a snapshot of a directory" in result.stdout

    def test_create_help_shows_options(self) -> None:
        """Create help shows all available options."""
        result = runner.invoke(app, ["create", "--help"])
        for option in ("--output", "--exclude", "--pattern", "--max-depth", "--meta"):
            assert option in result.stdout


class TestCreateCommand:
    """Tests for create command execution."""

    def test_writes_valid_snapshot(self, tree: Path, tmp_path: Path) -> None:
        """create writes a valid snapshot to the given file."""
        output = tmp_path / "out.ndjson"
        result = runner.invoke(app, ["create", str(tree), "-o", str(output)])

        assert result.exit_code == 0
        assert "Snapshot written" in result.stdout
        assert validate_snapshot(output)

    def test_default_output_name(
        self, tree: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without --output, a timestamped file is created in the working directory."""
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["create", str(tree)])

        assert result.exit_code == 0
        created = list(tmp_path.glob("snapshot.*.ndjson"))
        assert len(created) == 1

    def test_options_are_applied(self, tree: Path, tmp_path: Path) -> None:
        """Exclusions, depth, machine id and metadata reach the snapshot."""
        output = tmp_path / "out.ndjson"
        result = runner.invoke(
            app,
            [
                "create",
                str(tree),
                "-o",
                str(output),
                "-x",
                str(tree / "a.txt"),
                "-p",
                r"\.log$",
                "-d",
                "0",
                "-m",
                "ci-runner",
                "--meta",
                "build=42",
            ],
        )

        assert result.exit_code == 0
        lines = _read_lines(output)
        assert lines[0]["machineId"] == "ci-runner"
        assert lines[0]["build"] == "42"
        assert [line["path"].rsplit("/", 1)[-1] for line in lines[1:-1]] == ["sub"]

    def test_config_defaults(self, tree: Path, tmp_path: Path, isolated_config: Path) -> None:
        """Scan defaults from config.toml are merged with the options."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.toml").write_text(
            'machine_id = "configured"\nexclude_patterns = ["\\\\.log$"]\n',
            encoding="utf-8",
        )
        output = tmp_path / "out.ndjson"
        result = runner.invoke(app, ["create", str(tree), "-o", str(output)])

        assert result.exit_code == 0
        lines = _read_lines(output)
        assert lines[0]["machineId"] == "configured"
        assert not any(line.get("path", "").endswith("app.log") for line in lines)

    def test_invalid_config(self, tree: Path, tmp_path: Path, isolated_config: Path) -> None:
        """An invalid config file aborts with exit code 1."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.toml").write_text("max_depth = [", encoding="utf-8")

        result = runner.invoke(app, ["create", str(tree), "-o", str(tmp_path / "out.ndjson")])

        assert result.exit_code == 1
        assert "Failed to load config" in result.output

    def test_invalid_meta(self, tree: Path, tmp_path: Path) -> None:
        """--meta without '=' is rejected."""
        result = runner.invoke(
            app, ["create", str(tree), "-o", str(tmp_path / "out.ndjson"), "--meta", "oops"]
        )
        assert result.exit_code != 0
        assert not (tmp_path / "out.ndjson").exists()

    def test_invalid_pattern(self, tree: Path, tmp_path: Path) -> None:
        """An invalid regular expression exits with code 1."""
        result = runner.invoke(
            app, ["create", str(tree), "-o", str(tmp_path / "out.ndjson"), "-p", "("]
        )
        assert result.exit_code == 1
        assert "Invalid exclude pattern" in result.output

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing directory is rejected by argument validation."""
        result = runner.invoke(app, ["create", str(tmp_path / "missing")])
        assert result.exit_code == 2

    def test_aborted_scan(self, tree: Path, tmp_path: Path) -> None:
        """A scan aborted by a filesystem error exits with code 1."""
        output = tmp_path / "out.ndjson"
        with patch(
            "dirsnap.core.writer.calculate_file_hash",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            result = runner.invoke(app, ["-q", "create", str(tree), "-o", str(output)])

        assert result.exit_code == 1
        assert "aborted" in result.output
        assert _read_lines(output)[-1]["status"] == "error"

    def test_skip_unreadable(self, tree: Path, tmp_path: Path) -> None:
        """--skip-unreadable completes the scan despite unreadable files."""
        output = tmp_path / "out.ndjson"
        with patch(
            "dirsnap.core.writer.calculate_file_hash",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            result = runner.invoke(
                app, ["-q", "create", str(tree), "-o", str(output), "--skip-unreadable"]
            )

        assert result.exit_code == 0
        lines = _read_lines(output)
        assert [line["type"] for line in lines[1:-1]] == ["directory"]
