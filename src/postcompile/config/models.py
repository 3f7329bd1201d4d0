# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for post-compile invocations."""

from __future__ import annotations

from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from ..models import ProjectContext

DEFAULT_OUTPUT_DIRECTORY: Final[Path] = Path("build") / "lib"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class PostCompileConfig(BaseModel):
    """Settings controlling which units run and against which classpath.

    ``execution_classes`` may be empty here; an invocation with no usable
    class names reports ``NO_EXECUTION_CLASSES_CONFIGURED`` instead of failing
    validation, so the failure surfaces through the normal outcome path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    execution_classes: tuple[str, ...] = Field(default_factory=tuple)
    additional_resources: tuple[str, ...] = Field(default_factory=tuple)
    output_directory: Path = DEFAULT_OUTPUT_DIRECTORY
    artifacts: tuple[Path, ...] = Field(default_factory=tuple)

    def project_context(self) -> ProjectContext:
        """Return the project context described by this configuration."""

        return ProjectContext.from_paths(self.output_directory, self.artifacts)

    def to_dict(self) -> dict[str, object]:
        """Return a plain mapping suitable for layering under other sources."""

        return self.model_dump(mode="python")


__all__ = ["DEFAULT_OUTPUT_DIRECTORY", "ConfigError", "PostCompileConfig"]
