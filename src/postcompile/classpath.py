# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Assemble the classpath of a built project.

The classpath is always ``[output directory] + [artifacts] + [resources]``
in that order.  Entries are never synthesized, reordered, or de-duplicated.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final
from urllib.parse import unquote, urlsplit
from urllib.request import url2pathname

from .errors import PostCompileFailure
from .interfaces import BuildLog
from .models import Artifact, ClasspathEntries, ClasspathEntry, ProjectContext, format_entries

FILE_SCHEME: Final[str] = "file"
NETWORK_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https", "ftp"})
ARCHIVE_SCHEME: Final[str] = "jar"
ARCHIVE_SEPARATOR: Final[str] = "!/"
KNOWN_SCHEMES: Final[frozenset[str]] = NETWORK_SCHEMES | {FILE_SCHEME, ARCHIVE_SCHEME}


class MalformedLocationError(ValueError):
    """Raised when a classpath location cannot be parsed as a resource locator."""


def log_debug(logger: BuildLog, message: str, *args: object) -> None:
    """Emit ``message`` followed by ``args`` when debug output is enabled.

    Args:
        logger: Build log receiving the message.
        message: Leading text of the debug line.
        *args: Values appended to the message, comma separated.
    """

    if not logger.debug_enabled:
        return
    if args:
        message = message + ", ".join(str(arg) for arg in args)
    logger.debug(message)


def path_entry(path: Path) -> ClasspathEntry:
    """Return the classpath entry for a filesystem ``path``."""

    resolved = path.expanduser().resolve()
    location = resolved.as_uri()
    if resolved.is_dir():
        location += "/"
    return ClasspathEntry(location=location, path=resolved)


def artifact_entry(artifact: Artifact) -> ClasspathEntry:
    """Return the classpath entry for a resolved dependency ``artifact``.

    Raises:
        MalformedLocationError: When the artifact has no resolved file.
    """

    if artifact.file is None:
        raise MalformedLocationError(f"Artifact {artifact.describe()} has no resolved file")
    return path_entry(artifact.file)


def parse_resource(resource: str) -> ClasspathEntry:
    """Parse an additional resource locator into a classpath entry.

    Args:
        resource: URL such as ``file:///opt/extra/`` or ``https://host/lib.zip``.

    Returns:
        ClasspathEntry: Entry carrying a local path for ``file:`` locators.

    Raises:
        MalformedLocationError: When ``resource`` has no known scheme or lacks
            the components its scheme requires.
    """

    text = resource.strip()
    try:
        parts = urlsplit(text)
    except ValueError as exc:
        raise MalformedLocationError(f"no protocol: {resource}") from exc
    scheme = parts.scheme.lower()
    if not scheme:
        raise MalformedLocationError(f"no protocol: {resource}")
    if scheme not in KNOWN_SCHEMES:
        raise MalformedLocationError(f"unknown protocol: {scheme}")
    if scheme == FILE_SCHEME:
        if parts.netloc not in ("", "localhost") or not parts.path:
            raise MalformedLocationError(f"invalid file location: {resource}")
        return ClasspathEntry(location=text, path=Path(url2pathname(unquote(parts.path))))
    if scheme == ARCHIVE_SCHEME:
        if ARCHIVE_SEPARATOR not in text:
            raise MalformedLocationError(f"no {ARCHIVE_SEPARATOR} in spec: {resource}")
        return ClasspathEntry(location=text)
    if not parts.netloc:
        raise MalformedLocationError(f"missing host: {resource}")
    return ClasspathEntry(location=text)


def assemble_classpath(
    project: ProjectContext,
    additional_resources: Sequence[str] = (),
    *,
    logger: BuildLog,
) -> ClasspathEntries | PostCompileFailure:
    """Return the ordered classpath of ``project`` or the failure that stopped it.

    Args:
        project: Project supplying the output directory and artifacts.
        additional_resources: Extra resource locators appended last.
        logger: Build log receiving debug traces.

    Returns:
        ClasspathEntries | PostCompileFailure: ``1 + N + M`` entries, or a
        ``CLASSPATH_INVALID`` failure carrying the entries accumulated so far.
    """

    entries: list[ClasspathEntry] = []
    try:
        entries.append(path_entry(project.output_directory))
        for artifact in project.dependency_artifacts:
            entries.append(artifact_entry(artifact))
        log_debug(logger, "Additional resources:", list(additional_resources))
        for resource in additional_resources:
            entries.append(parse_resource(resource))
    except (MalformedLocationError, OSError) as exc:
        return PostCompileFailure.classpath_invalid(tuple(entries), exc)

    log_debug(logger, "Found class path urls:", format_entries(entries))
    return tuple(entries)


__all__ = [
    "KNOWN_SCHEMES",
    "MalformedLocationError",
    "artifact_entry",
    "assemble_classpath",
    "log_debug",
    "parse_resource",
    "path_entry",
]
