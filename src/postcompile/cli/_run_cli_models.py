# SPDX-License-Identifier: MIT
"""Data structures for the post-compile CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root holding pyproject.toml."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Standalone TOML configuration file."),
]
EXECUTION_CLASS_OPTION = Annotated[
    list[str] | None,
    typer.Option(
        "--execution-class",
        "-e",
        help="Fully qualified class to run; repeat to run several in order.",
    ),
]
RESOURCE_OPTION = Annotated[
    list[str] | None,
    typer.Option("--resource", help="Additional resource URL appended to the classpath."),
]
OUTPUT_DIR_OPTION = Annotated[
    Path | None,
    typer.Option("--output-dir", "-o", help="Project output directory."),
]
ARTIFACT_OPTION = Annotated[
    list[Path] | None,
    typer.Option("--artifact", "-a", help="Dependency artifact location; repeat in classpath order."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Print debug traces of the classpath and units."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
NO_COLOR_OPTION = Annotated[
    bool,
    typer.Option("--no-color", help="Disable ANSI colour output."),
]


@dataclass(slots=True)
class RunCLIOptions:
    """Capture CLI options shared by ``run`` and ``classpath``."""

    root: Path
    config_path: Path | None
    execution_classes: tuple[str, ...] | None
    additional_resources: tuple[str, ...] | None
    output_directory: Path | None
    artifacts: tuple[Path, ...] | None
    debug: bool
    emoji: bool
    no_color: bool

    @classmethod
    def from_cli(
        cls,
        *,
        root: Path,
        config: Path | None,
        execution_class: list[str] | None,
        resource: list[str] | None,
        output_dir: Path | None,
        artifact: list[Path] | None,
        debug: bool,
        emoji: bool,
        no_color: bool,
    ) -> RunCLIOptions:
        """Return options parsed from CLI arguments.

        Repeatable options left unset stay ``None`` so configuration files
        keep precedence for them.
        """

        return cls(
            root=root.resolve(),
            config_path=config.resolve() if config is not None else None,
            execution_classes=tuple(execution_class) if execution_class else None,
            additional_resources=tuple(resource) if resource else None,
            output_directory=output_dir,
            artifacts=tuple(artifact) if artifact else None,
            debug=debug,
            emoji=emoji,
            no_color=no_color,
        )

    def overrides(self) -> dict[str, Any]:
        """Return configuration overrides for every option supplied."""

        return {
            "execution_classes": self.execution_classes,
            "additional_resources": self.additional_resources,
            "output_directory": self.output_directory,
            "artifacts": self.artifacts,
        }


__all__ = [
    "ARTIFACT_OPTION",
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "EXECUTION_CLASS_OPTION",
    "NO_COLOR_OPTION",
    "OUTPUT_DIR_OPTION",
    "RESOURCE_OPTION",
    "ROOT_OPTION",
    "RunCLIOptions",
]
