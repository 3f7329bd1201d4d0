# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Dataclasses describing the project context and its assembled classpath."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Artifact:
    """Resolved dependency artifact reported by the host build.

    ``file`` is ``None`` when the host could not resolve the artifact to a
    location on disk.
    """

    file: Path | None
    identifier: str = ""

    def describe(self) -> str:
        """Return a human-readable label for diagnostics."""

        if self.identifier:
            return self.identifier
        return str(self.file) if self.file is not None else "<unresolved artifact>"


@dataclass(frozen=True, slots=True)
class ProjectContext:
    """Read-only view of the project being built."""

    output_directory: Path
    dependency_artifacts: tuple[Artifact, ...] = field(default_factory=tuple)

    @classmethod
    def from_paths(cls, output_directory: Path, artifacts: Iterable[Path] = ()) -> ProjectContext:
        """Return a context whose artifacts are plain file locations."""

        return cls(
            output_directory=output_directory,
            dependency_artifacts=tuple(Artifact(file=path, identifier=path.name) for path in artifacts),
        )


@dataclass(frozen=True, slots=True)
class ClasspathEntry:
    """One location contributing modules to a loading scope.

    Attributes:
        location: URL form of the entry, as reported in diagnostics.
        path: Filesystem path for ``file:`` locations; ``None`` for remote
            locations that cannot be searched locally.
    """

    location: str
    path: Path | None = None

    @property
    def is_local(self) -> bool:
        """Return ``True`` when the entry maps to a filesystem location."""

        return self.path is not None

    def __str__(self) -> str:
        return self.location


ClasspathEntries = tuple[ClasspathEntry, ...]


def format_entries(entries: Sequence[ClasspathEntry]) -> str:
    """Return ``entries`` joined for a single diagnostic line."""

    return ", ".join(entry.location for entry in entries)


__all__ = [
    "Artifact",
    "ClasspathEntries",
    "ClasspathEntry",
    "ProjectContext",
    "format_entries",
]
