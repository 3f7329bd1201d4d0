# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for sequential unit execution."""

from __future__ import annotations

import sys

import pytest

from conftest import RecordingLog, UnitProject, recording_unit
from postcompile.classpath import path_entry
from postcompile.errors import Completed, ErrorKind, Failed
from postcompile.executor import execute_unit, execute_units, normalise_execution_classes
from postcompile.loader import IsolatedLoader


def _loader(project: UnitProject, log: RecordingLog) -> IsolatedLoader:
    return IsolatedLoader([path_entry(project.output_directory)], logger=log)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (["", "  ", "a.B"], ("a.B",)),
        ([" a.B ", "\tc.D\n"], ("a.B", "c.D")),
        ([], ()),
        (["   "], ()),
        (None, ()),
    ],
)
def test_normalise_execution_classes(raw: list[str] | None, expected: tuple[str, ...]) -> None:
    assert normalise_execution_classes(raw) == expected


def test_units_run_in_configured_order(unit_project: UnitProject, build_log: RecordingLog) -> None:
    log_path = unit_project.run_log
    unit_project.write("units/first.py", recording_unit("First", log_path))
    unit_project.write("units/second.py", recording_unit("Second", log_path))

    with _loader(unit_project, build_log) as loader:
        outcome = execute_units(loader, ["units.second.Second", "units.first.First"], logger=build_log)

    assert isinstance(outcome, Completed)
    assert outcome.executed == ("units.second.Second", "units.first.First")
    assert unit_project.runs() == ["init:Second", "run:Second", "init:First", "run:First"]
    assert any(message.startswith("Loaded execution class:") for message in build_log.messages)
    assert "Completed run() method of units.first.First" in build_log.messages


def test_first_failure_aborts_remaining_units(unit_project: UnitProject, build_log: RecordingLog) -> None:
    log_path = unit_project.run_log
    unit_project.write("units/broken.py", recording_unit("Broken", log_path, fail=True))
    unit_project.write("units/after.py", recording_unit("After", log_path))

    with _loader(unit_project, build_log) as loader:
        outcome = execute_units(loader, ["units.broken.Broken", "units.after.After"], logger=build_log)

    assert isinstance(outcome, Failed)
    assert outcome.executed == ()
    assert outcome.failure.kind is ErrorKind.EXECUTION_UNIT_FAILED
    assert outcome.failure.class_name == "units.broken.Broken"
    assert str(outcome.failure.cause) == "Broken failed"
    assert unit_project.runs() == ["init:Broken", "run:Broken"]


def test_missing_class_is_not_found(unit_project: UnitProject, build_log: RecordingLog) -> None:
    with _loader(unit_project, build_log) as loader:
        failure = execute_unit(loader, "absent.module.Unit", logger=build_log)

    assert failure is not None
    assert failure.kind is ErrorKind.EXECUTION_CLASS_NOT_FOUND
    assert failure.message == "Execution class name is invalid:absent.module.Unit"


def test_class_without_run_is_not_runnable(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write("units/idle.py", "class Idle:\n    def start(self):\n        pass\n")

    with _loader(unit_project, build_log) as loader:
        failure = execute_unit(loader, "units.idle.Idle", logger=build_log)

    assert failure is not None
    assert failure.kind is ErrorKind.EXECUTION_CLASS_NOT_RUNNABLE
    assert failure.class_name == "units.idle.Idle"


def test_constructor_with_arguments_is_not_constructible(
    unit_project: UnitProject, build_log: RecordingLog
) -> None:
    unit_project.write(
        "units/needy.py",
        """
        class Needy:
            def __init__(self, target):
                self.target = target

            def run(self):
                pass
        """,
    )

    with _loader(unit_project, build_log) as loader:
        failure = execute_unit(loader, "units.needy.Needy", logger=build_log)

    assert failure is not None
    assert failure.kind is ErrorKind.EXECUTION_CLASS_NOT_CONSTRUCTIBLE


def test_raising_constructor_is_init_failure(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write(
        "units/fragile.py",
        """
        class Fragile:
            def __init__(self):
                raise OSError("no workspace")

            def run(self):
                pass
        """,
    )

    with _loader(unit_project, build_log) as loader:
        failure = execute_unit(loader, "units.fragile.Fragile", logger=build_log)

    assert failure is not None
    assert failure.kind is ErrorKind.EXECUTION_CLASS_INIT_FAILED
    assert isinstance(failure.cause, OSError)
    assert failure.message == "Can`t initialize class:units.fragile.Fragile"


def test_module_errors_are_unit_failures(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write("units/host_only.py", "import rich\n\nclass HostOnly:\n    def run(self):\n        pass\n")

    with _loader(unit_project, build_log) as loader:
        failure = execute_unit(loader, "units.host_only.HostOnly", logger=build_log)

    assert failure is not None
    assert failure.kind is ErrorKind.EXECUTION_UNIT_FAILED
    assert isinstance(failure.cause, ModuleNotFoundError)
    assert failure.cause.name == "rich"


def test_units_find_their_module_through_sys_modules(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write(
        "units/typed.py",
        """
        import inspect
        import pickle
        import typing


        class Typed:
            count: "int" = 1

            def run(self):
                hints = typing.get_type_hints(Typed)
                if hints != {"count": int}:
                    raise AssertionError(hints)
                clone = pickle.loads(pickle.dumps(Typed()))
                if type(clone) is not Typed:
                    raise AssertionError(clone)
                if inspect.getmodule(Typed) is None:
                    raise AssertionError("module of Typed is not registered")
        """,
    )

    with _loader(unit_project, build_log) as loader:
        failure = execute_unit(loader, "units.typed.Typed", logger=build_log)

    assert failure is None
    assert "units.typed" not in sys.modules


def test_dynamic_imports_cannot_reach_host_packages(unit_project: UnitProject, build_log: RecordingLog) -> None:
    unit_project.write(
        "units/dynamic.py",
        """
        import importlib
        import sys


        class Dynamic:
            def run(self):
                visible = [name for name in ("postcompile", "pydantic", "pytest") if name in sys.modules]
                if visible:
                    raise AssertionError(visible)
                importlib.import_module("pydantic")
        """,
    )
    host_path = list(sys.path)

    with _loader(unit_project, build_log) as loader:
        failure = execute_unit(loader, "units.dynamic.Dynamic", logger=build_log)

    assert failure is not None
    assert failure.kind is ErrorKind.EXECUTION_UNIT_FAILED
    assert isinstance(failure.cause, ModuleNotFoundError)
    assert failure.cause.name == "pydantic"
    assert "postcompile" in sys.modules
    assert sys.path == host_path


@pytest.mark.parametrize(
    ("module", "source"),
    [
        ("exits_on_run", "import sys\n\nclass Exits:\n    def run(self):\n        sys.exit(3)\n"),
        ("exits_on_import", "import sys\n\nsys.exit(3)\n\nclass Exits:\n    def run(self):\n        pass\n"),
    ],
)
def test_sys_exit_is_a_unit_failure(
    module: str, source: str, unit_project: UnitProject, build_log: RecordingLog
) -> None:
    unit_project.write(f"units/{module}.py", source)

    with _loader(unit_project, build_log) as loader:
        outcome = execute_units(loader, [f"units.{module}.Exits"], logger=build_log)

    assert isinstance(outcome, Failed)
    assert outcome.failure.kind is ErrorKind.EXECUTION_UNIT_FAILED
    assert isinstance(outcome.failure.cause, SystemExit)
    assert outcome.failure.cause.code == 3
