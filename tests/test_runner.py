# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the invocation composition root."""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field

import pytest

from conftest import RecordingLog, UnitProject, recording_unit
from postcompile import ErrorKind, PostCompileError, run_post_compile
from postcompile.config import PostCompileConfig
from postcompile.errors import Completed, Failed
from postcompile.interfaces import BuildLog
from postcompile.loader import ClassNotFound, IsolatedLoader
from postcompile.models import ClasspathEntry, ProjectContext


@dataclass
class CountingLoader:
    """Loader scope double recording lifecycle calls."""

    delegate: IsolatedLoader | None = None
    close_error: Exception | None = None
    closes: int = 0
    mounted: list[ClasspathEntry] = field(default_factory=list)
    requested: list[str] = field(default_factory=list)

    def mount(self, entries: Iterable[ClasspathEntry]) -> None:
        self.mounted = list(entries)
        if self.delegate is not None:
            self.delegate.mount(self.mounted)

    def load_class(self, qualified_name: str) -> object:
        self.requested.append(qualified_name)
        if self.delegate is None:
            raise ClassNotFound(qualified_name)
        return self.delegate.load_class(qualified_name)

    def activate(self) -> AbstractContextManager[None]:
        if self.delegate is None:
            return nullcontext()
        return self.delegate.activate()

    def close(self) -> None:
        self.closes += 1
        if self.delegate is not None:
            self.delegate.close()
        if self.close_error is not None:
            raise self.close_error


def _factory(loader: CountingLoader, *, isolated: bool = True):
    def build(logger: BuildLog) -> CountingLoader:
        if isolated:
            loader.delegate = IsolatedLoader(logger=logger)
        return loader

    return build


def _config(*classes: str, resources: tuple[str, ...] = ()) -> PostCompileConfig:
    return PostCompileConfig(execution_classes=classes, additional_resources=resources)


def test_successful_invocation_closes_loader_once(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write("jobs/gen.py", recording_unit("Gen", unit_project.run_log))
    loader = CountingLoader()
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(project, _config("jobs.gen.Gen"), logger=build_log, loader_factory=_factory(loader))

    assert isinstance(outcome, Completed)
    assert outcome.ok
    assert loader.closes == 1
    assert len(outcome.classpath) == 1
    assert unit_project.runs() == ["init:Gen", "run:Gen"]


def test_blank_class_names_fail_before_loading(unit_project: UnitProject, build_log: RecordingLog) -> None:
    loader = CountingLoader()
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(project, _config("", "   "), logger=build_log, loader_factory=_factory(loader))

    assert isinstance(outcome, Failed)
    assert outcome.failure.kind is ErrorKind.NO_EXECUTION_CLASSES_CONFIGURED
    assert loader.mounted == []
    assert loader.requested == []
    assert loader.closes == 1


def test_only_non_blank_names_are_attempted(unit_project: UnitProject, build_log: RecordingLog) -> None:
    loader = CountingLoader()
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(
        project,
        _config("", "  ", "a.B"),
        logger=build_log,
        loader_factory=_factory(loader, isolated=False),
    )

    assert isinstance(outcome, Failed)
    assert outcome.failure.kind is ErrorKind.EXECUTION_CLASS_NOT_FOUND
    assert loader.requested == ["a.B"]
    assert loader.closes == 1


def test_assembly_failure_closes_loader(unit_project: UnitProject, build_log: RecordingLog) -> None:
    loader = CountingLoader()
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(
        project,
        _config("a.B", resources=("no-scheme/path",)),
        logger=build_log,
        loader_factory=_factory(loader),
    )

    assert isinstance(outcome, Failed)
    assert outcome.failure.kind is ErrorKind.CLASSPATH_INVALID
    assert len(outcome.failure.classpath) == 1
    assert loader.requested == []
    assert loader.closes == 1


def test_unit_failure_stops_later_units(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write("jobs/bad.py", recording_unit("Bad", unit_project.run_log, fail=True))
    unit_project.write("jobs/good.py", recording_unit("Good", unit_project.run_log))
    loader = CountingLoader()
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(
        project,
        _config("jobs.bad.Bad", "jobs.good.Good"),
        logger=build_log,
        loader_factory=_factory(loader),
    )

    assert isinstance(outcome, Failed)
    assert outcome.failure.class_name == "jobs.bad.Bad"
    assert loader.requested == ["jobs.bad.Bad"]
    assert "init:Good" not in unit_project.runs()
    assert loader.closes == 1
    with pytest.raises(PostCompileError) as excinfo:
        outcome.raise_for_failure()
    assert excinfo.value.kind is ErrorKind.EXECUTION_UNIT_FAILED
    assert excinfo.value.exit_code == 1
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_release_errors_are_logged_not_raised(unit_project: UnitProject, build_log: RecordingLog) -> None:
    loader = CountingLoader(close_error=OSError("handle busy"))
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(
        project,
        _config("a.B"),
        logger=build_log,
        loader_factory=_factory(loader, isolated=False),
    )

    assert isinstance(outcome, Failed)
    assert outcome.failure.kind is ErrorKind.EXECUTION_CLASS_NOT_FOUND
    assert loader.closes == 1
    assert len(build_log.errors) == 1
    assert str(build_log.errors[0]) == "handle busy"


def test_default_loader_hides_host_modules(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write(
        "jobs/peek.py",
        """
        import pydantic


        class Peek:
            def run(self):
                pass
        """,
    )
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(project, _config("jobs.peek.Peek"), logger=build_log)

    assert isinstance(outcome, Failed)
    assert outcome.failure.kind is ErrorKind.EXECUTION_UNIT_FAILED
    assert isinstance(outcome.failure.cause, ModuleNotFoundError)
    assert outcome.failure.kind.exit_code == 1


def test_class_names_are_validated_before_the_classpath(
    unit_project: UnitProject, build_log: RecordingLog
) -> None:
    loader = CountingLoader()
    project = ProjectContext.from_paths(unit_project.output_directory)

    outcome = run_post_compile(
        project,
        _config(" ", resources=("no-scheme/path",)),
        logger=build_log,
        loader_factory=_factory(loader),
    )

    assert isinstance(outcome, Failed)
    assert outcome.failure.kind is ErrorKind.NO_EXECUTION_CLASSES_CONFIGURED
    assert loader.mounted == []
    assert loader.closes == 1
