"""Scan defaults configuration.

This module provides the configuration model and I/O functions for the
defaults applied to ``dirsnap create`` when options are not given on
the command line.

Configuration is stored in ~/.config/dirsnap/config.toml
"""

import os
import re
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dirsnap.core.paths import get_config_path


class ScanConfig(BaseModel):
    """Default options for snapshot creation.

    Attributes:
        machine_id: Identifier written to the snapshot header.
        max_depth: Deepest level descended into (None is unbounded).
        exclude_paths: Exact paths to exclude.
        exclude_patterns: Regular expressions matched against absolute paths.
        skip_unreadable: Skip entries that cannot be read instead of aborting.
        metadata: Extra header fields.
    """

    model_config = ConfigDict(extra="forbid")

    machine_id: Annotated[str, Field(min_length=1, description="Host identifier")] = "unknown"
    max_depth: Annotated[
        int | None,
        Field(ge=0, description="Maximum recursion depth (None = unbounded)"),
    ] = None
    exclude_paths: Annotated[
        list[str],
        Field(default_factory=list, description="Exact paths to exclude"),
    ]
    exclude_patterns: Annotated[
        list[str],
        Field(default_factory=list, description="Regular expressions to exclude"),
    ]
    skip_unreadable: Annotated[
        bool,
        Field(description="Skip unreadable entries instead of aborting"),
    ] = False
    metadata: Annotated[
        dict[str, Any],
        Field(default_factory=dict, description="Extra header fields"),
    ]

    @field_validator("exclude_patterns")
    @classmethod
    def validate_patterns(cls, patterns: list[str]) -> list[str]:
        """Validate that every pattern is a valid regular expression."""
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                msg = f"Invalid exclude pattern {pattern!r}: {e}"
                raise ValueError(msg) from e
        return patterns


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> ScanConfig:
    """Load scan defaults from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated ScanConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ScanConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> ScanConfig:
    """Load scan defaults, falling back to built-in defaults if absent.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return ScanConfig()


def save_config(config: ScanConfig, path: Path | None = None) -> Path:
    """Save scan defaults to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The ScanConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: ScanConfig) -> dict[str, Any]:
    """Convert ScanConfig to a dictionary for TOML serialization.

    TOML has no null, so an unbounded max_depth is omitted.
    """
    result: dict[str, Any] = {
        "machine_id": config.machine_id,
        "exclude_paths": list(config.exclude_paths),
        "exclude_patterns": list(config.exclude_patterns),
        "skip_unreadable": config.skip_unreadable,
    }
    if config.max_depth is not None:
        result["max_depth"] = config.max_depth
    if config.metadata:
        result["metadata"] = dict(config.metadata)
    return result
