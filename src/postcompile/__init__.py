# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core package metadata and the public post-compile invocation API."""

from __future__ import annotations

from importlib import metadata

from .errors import Completed, ErrorKind, Failed, InvocationOutcome, PostCompileError, PostCompileFailure
from .models import Artifact, ClasspathEntry, ProjectContext
from .runner import run_post_compile

__all__ = [
    "Artifact",
    "ClasspathEntry",
    "Completed",
    "ErrorKind",
    "Failed",
    "InvocationOutcome",
    "PostCompileError",
    "PostCompileFailure",
    "ProjectContext",
    "__version__",
    "run_post_compile",
]

try:
    __version__ = metadata.version("postcompile")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
