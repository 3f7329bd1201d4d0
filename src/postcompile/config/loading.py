# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Config loading with layered precedence and traceability."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .models import ConfigError, PostCompileConfig
from .sources import (
    ConfigSource,
    DefaultConfigSource,
    OverrideConfigSource,
    PyProjectConfigSource,
    TomlConfigSource,
)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
STANDALONE_FILENAME: Final[str] = ".postcompile.toml"


@dataclass(frozen=True, slots=True)
class FieldUpdate:
    """Record which source last set a configuration field."""

    field: str
    source: str
    value: Any


@dataclass(frozen=True, slots=True)
class ConfigLoadResult:
    """Validated configuration together with its provenance."""

    config: PostCompileConfig
    updates: tuple[FieldUpdate, ...]
    sources: tuple[str, ...]


def default_sources(root: Path, *, config_path: Path | None = None) -> list[ConfigSource]:
    """Return the file sources consulted for ``root`` in precedence order.

    Args:
        root: Project root holding ``pyproject.toml``.
        config_path: Explicit standalone TOML file; defaults to
            ``.postcompile.toml`` under ``root``.

    Returns:
        list[ConfigSource]: Defaults, ``pyproject.toml``, then the standalone file.
    """

    standalone = config_path if config_path is not None else root / STANDALONE_FILENAME
    return [
        DefaultConfigSource(),
        PyProjectConfigSource(root / PYPROJECT_FILENAME),
        TomlConfigSource(standalone),
    ]


def load_config(
    root: Path,
    *,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    sources: Sequence[ConfigSource] | None = None,
) -> ConfigLoadResult:
    """Merge configuration sources for ``root`` and validate the result.

    Later sources override earlier ones field by field; command-line
    ``overrides`` always win.

    Args:
        root: Project root used to locate configuration files.
        config_path: Optional explicit standalone configuration file.
        overrides: Field overrides supplied on the command line.
        sources: Replacement source list, mainly for tests.

    Returns:
        ConfigLoadResult: Validated configuration and per-field provenance.

    Raises:
        ConfigError: When an explicit ``config_path`` is missing or the merged
            data fails validation.
    """

    root = root.resolve()
    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")
    layered = list(sources) if sources is not None else default_sources(root, config_path=config_path)
    if overrides:
        layered.append(OverrideConfigSource(overrides, base_dir=root))

    merged: dict[str, Any] = {}
    updates: list[FieldUpdate] = []
    described: list[str] = []
    for source in layered:
        fragment = source.load()
        if not fragment:
            continue
        described.append(source.describe())
        for field, value in fragment.items():
            merged[field] = value
            updates.append(FieldUpdate(field=field, source=source.name, value=value))

    try:
        config = PostCompileConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid post-compile configuration: {exc}") from exc
    if not config.output_directory.is_absolute():
        config = config.model_copy(update={"output_directory": root / config.output_directory})
    return ConfigLoadResult(config=config, updates=tuple(updates), sources=tuple(described))


__all__ = [
    "PYPROJECT_FILENAME",
    "STANDALONE_FILENAME",
    "ConfigLoadResult",
    "FieldUpdate",
    "default_sources",
    "load_config",
]
