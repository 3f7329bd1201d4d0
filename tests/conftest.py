# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from pathlib import Path

import pytest


@dataclass
class RecordingLog:
    """Build log capturing debug lines and errors for assertions."""

    debug_enabled: bool = True
    messages: list[str] = field(default_factory=list)
    errors: list[BaseException | str] = field(default_factory=list)

    def debug(self, message: str) -> None:
        self.messages.append(message)

    def error(self, cause: BaseException | str) -> None:
        self.errors.append(cause)


@dataclass
class UnitProject:
    """Temporary project whose output directory holds unit modules."""

    root: Path
    output_directory: Path

    def write(self, relative: str, source: str, *, base: Path | None = None) -> Path:
        """Write dedented ``source`` to ``relative`` under ``base`` or the output directory."""

        target = (base or self.output_directory) / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(source), encoding="utf-8")
        return target

    @property
    def run_log(self) -> Path:
        return self.root / "runs.log"

    def runs(self) -> list[str]:
        """Return unit names recorded by :func:`recording_unit` sources."""

        if not self.run_log.exists():
            return []
        return self.run_log.read_text(encoding="utf-8").split()


def recording_unit(name: str, log_path: Path, *, fail: bool = False) -> str:
    """Return module source defining a unit class that records its runs."""

    body = f'raise RuntimeError("{name} failed")' if fail else "pass"
    return f"""
from pathlib import Path


class {name}:
    def __init__(self):
        with Path({str(log_path)!r}).open("a", encoding="utf-8") as handle:
            handle.write("init:{name}\\n")

    def run(self):
        with Path({str(log_path)!r}).open("a", encoding="utf-8") as handle:
            handle.write("run:{name}\\n")
        {body}
"""


@pytest.fixture
def build_log() -> RecordingLog:
    return RecordingLog()


@pytest.fixture
def unit_project(tmp_path: Path) -> UnitProject:
    output = tmp_path / "build" / "lib"
    output.mkdir(parents=True)
    return UnitProject(root=tmp_path, output_directory=output)
