# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Concrete configuration sources (defaults, TOML, pyproject, overrides)."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Iterable, Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final, Protocol

from .models import ConfigError, PostCompileConfig

DEFAULT_INCLUDE_KEY: Final[str] = "include"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "postcompile"
PATH_KEYS: Final[frozenset[str]] = frozenset({"output_directory"})
PATH_LIST_KEYS: Final[frozenset[str]] = frozenset({"artifacts"})

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class ConfigSource(Protocol):
    """Provide a configuration fragment and a description of its origin."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the configuration fragment supplied by the source."""
        ...

    def describe(self) -> str:
        """Return a human-readable description of the source."""
        ...


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return PostCompileConfig().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a TOML document with include support."""

    def __init__(
        self,
        path: Path,
        *,
        name: str | None = None,
        include_key: str = DEFAULT_INCLUDE_KEY,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._root_path = path
        self.name = name or str(path)
        self._include_key = include_key
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        return self._load(self._root_path, ())

    def _load(self, path: Path, stack: tuple[Path, ...]) -> Mapping[str, Any]:
        if not path.exists():
            return {}
        resolved = path.resolve()
        if resolved in stack:
            include_chain = " -> ".join(str(entry) for entry in (*stack, resolved))
            raise ConfigError(f"Circular include detected: {include_chain}")
        try:
            with resolved.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
        document = self._select(data)
        if not isinstance(document, MutableMapping):
            raise ConfigError(f"Configuration at {path} must be a table")
        document = normalise_keys(document)
        includes = document.pop(self._include_key, None)
        merged: dict[str, Any] = {}
        for include_path in self._coerce_includes(includes, resolved.parent):
            fragment = self._load(include_path, (*stack, resolved))
            merged.update(fragment)
        expanded = _expand_env(document, self._env)
        merged.update(resolve_paths(expanded, resolved.parent))
        return merged

    def _select(self, data: Mapping[str, Any]) -> Any:
        return dict(data)

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        if raw is None:
            return []
        if isinstance(raw, (str, Path)):
            return [self._resolve_path(Path(raw), base_dir)]
        if isinstance(raw, Iterable):
            return [self._resolve_path(Path(item), base_dir) for item in raw]
        raise ConfigError(f"Unsupported include declaration: {raw!r}")

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        return path if path.is_absolute() else (base_dir / path)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.postcompile]`` within ``pyproject.toml``."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        super().__init__(path, name=str(path), env=env)

    def _select(self, data: Mapping[str, Any]) -> Any:
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY, {})
        return dict(section) if isinstance(section, Mapping) else section

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


class OverrideConfigSource:
    """Expose command-line overrides as the highest-precedence fragment."""

    name = "overrides"

    def __init__(self, overrides: Mapping[str, Any], *, base_dir: Path) -> None:
        self._overrides = {key: value for key, value in normalise_keys(overrides).items() if value is not None}
        self._base_dir = base_dir

    def load(self) -> Mapping[str, Any]:
        return resolve_paths(self._overrides, self._base_dir)

    def describe(self) -> str:
        return "Command-line overrides"


def normalise_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``data`` with kebab-case keys converted to snake case."""

    return {str(key).replace("-", "_"): value for key, value in data.items()}


def resolve_paths(data: Mapping[str, Any], base_dir: Path) -> dict[str, Any]:
    """Return ``data`` with relative path settings anchored at ``base_dir``."""

    resolved: dict[str, Any] = dict(data)
    for key in PATH_KEYS & resolved.keys():
        if isinstance(resolved[key], (str, Path)):
            resolved[key] = _anchor(Path(resolved[key]), base_dir)
    for key in PATH_LIST_KEYS & resolved.keys():
        value = resolved[key]
        if isinstance(value, (list, tuple)):
            resolved[key] = [
                _anchor(Path(item), base_dir) if isinstance(item, (str, Path)) else item for item in value
            ]
    return resolved


def _anchor(path: Path, base_dir: Path) -> Path:
    path = path.expanduser()
    return path if path.is_absolute() else base_dir / path


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _expand_env_string(value, env)
    if isinstance(value, Mapping):
        return {k: _expand_env_value(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(v, env) for v in value]
    return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key is None:
            return match.group(0)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


__all__ = [
    "ConfigSource",
    "DEFAULT_INCLUDE_KEY",
    "DefaultConfigSource",
    "OverrideConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "normalise_keys",
    "resolve_paths",
]
