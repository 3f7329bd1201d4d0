# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Failure taxonomy and invocation outcomes for post-compile runs.

Every stage of an invocation reports failure by returning a
:class:`PostCompileFailure` rather than raising.  The runner turns the first
failure into a :class:`Failed` outcome; callers that prefer exceptions can
call :meth:`Failed.raise_for_failure` to obtain a :class:`PostCompileError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Literal, TypeAlias

from .models import ClasspathEntry, format_entries


class ErrorKind(str, Enum):
    """Enumerate the terminal failure kinds of an invocation."""

    CLASSPATH_INVALID = "classpath-invalid"
    NO_EXECUTION_CLASSES_CONFIGURED = "no-execution-classes-configured"
    EXECUTION_CLASS_NOT_FOUND = "execution-class-not-found"
    EXECUTION_CLASS_NOT_RUNNABLE = "execution-class-not-runnable"
    EXECUTION_CLASS_NOT_CONSTRUCTIBLE = "execution-class-not-constructible"
    EXECUTION_CLASS_INIT_FAILED = "execution-class-init-failed"
    EXECUTION_UNIT_FAILED = "execution-unit-failed"

    @property
    def stage(self) -> str:
        """Return the invocation stage that produces this kind of failure."""

        return _STAGES[self]

    @property
    def exit_code(self) -> int:
        """Return the process exit status associated with this kind.

        Unit failures are build failures (``1``); every other kind is a
        build error caused by configuration or loading (``2``).
        """

        return EXIT_UNIT_FAILURE if self is ErrorKind.EXECUTION_UNIT_FAILED else EXIT_BUILD_ERROR


EXIT_UNIT_FAILURE: Final[int] = 1
EXIT_BUILD_ERROR: Final[int] = 2

_STAGES: Final[dict[ErrorKind, str]] = {
    ErrorKind.CLASSPATH_INVALID: "classpath assembly",
    ErrorKind.NO_EXECUTION_CLASSES_CONFIGURED: "configuration validation",
    ErrorKind.EXECUTION_CLASS_NOT_FOUND: "class loading",
    ErrorKind.EXECUTION_CLASS_NOT_RUNNABLE: "class loading",
    ErrorKind.EXECUTION_CLASS_NOT_CONSTRUCTIBLE: "class instantiation",
    ErrorKind.EXECUTION_CLASS_INIT_FAILED: "class instantiation",
    ErrorKind.EXECUTION_UNIT_FAILED: "unit execution",
}


@dataclass(frozen=True, slots=True)
class PostCompileFailure:
    """Describe the single terminal failure of an invocation.

    Attributes:
        kind: Failure kind from :class:`ErrorKind`.
        message: Human-readable summary naming the offending subject.
        class_name: Execution class involved, when the failure concerns one.
        classpath: Classpath entries accumulated when the failure occurred.
        cause: Underlying exception, when one was raised.
    """

    kind: ErrorKind
    message: str
    class_name: str | None = None
    classpath: tuple[ClasspathEntry, ...] = ()
    cause: BaseException | None = None

    def describe(self) -> str:
        """Return a one-line description including stage and cause."""

        text = f"[{self.kind.stage}] {self.message}"
        if self.cause is not None:
            text = f"{text} ({type(self.cause).__name__}: {self.cause})"
        return text

    @classmethod
    def classpath_invalid(cls, entries: tuple[ClasspathEntry, ...], cause: BaseException) -> PostCompileFailure:
        return cls(
            kind=ErrorKind.CLASSPATH_INVALID,
            message=f"Class path is invalid:[{format_entries(entries)}]",
            classpath=entries,
            cause=cause,
        )

    @classmethod
    def no_execution_classes(cls, raw: object) -> PostCompileFailure:
        return cls(
            kind=ErrorKind.NO_EXECUTION_CLASSES_CONFIGURED,
            message=f"Execution classes are not configured:{raw!r}",
        )

    @classmethod
    def for_class(
        cls,
        kind: ErrorKind,
        class_name: str,
        *,
        cause: BaseException | None = None,
        classpath: tuple[ClasspathEntry, ...] = (),
    ) -> PostCompileFailure:
        """Return a failure of ``kind`` naming ``class_name``."""

        return cls(
            kind=kind,
            message=f"{_CLASS_MESSAGES[kind]}{class_name}",
            class_name=class_name,
            classpath=classpath,
            cause=cause,
        )


_CLASS_MESSAGES: Final[dict[ErrorKind, str]] = {
    ErrorKind.EXECUTION_CLASS_NOT_FOUND: "Execution class name is invalid:",
    ErrorKind.EXECUTION_CLASS_NOT_RUNNABLE: "Execution class should expose a no-argument run() method:",
    ErrorKind.EXECUTION_CLASS_NOT_CONSTRUCTIBLE: "Not accessible method run() or constructor without params of class:",
    ErrorKind.EXECUTION_CLASS_INIT_FAILED: "Can`t initialize class:",
    ErrorKind.EXECUTION_UNIT_FAILED: "Failed execution class:",
}


class PostCompileError(RuntimeError):
    """Exception form of a :class:`PostCompileFailure`."""

    def __init__(self, failure: PostCompileFailure) -> None:
        super().__init__(failure.describe())
        self.failure = failure

    @property
    def kind(self) -> ErrorKind:
        """Return the failure kind carried by the error."""

        return self.failure.kind

    @property
    def exit_code(self) -> int:
        """Return the exit status associated with the failure kind."""

        return self.failure.kind.exit_code


@dataclass(frozen=True, slots=True)
class Completed:
    """Outcome of an invocation in which every unit ran to completion."""

    executed: tuple[str, ...]
    classpath: tuple[ClasspathEntry, ...] = ()
    status: Literal["completed"] = field(default="completed", init=False)

    @property
    def ok(self) -> bool:
        return True

    def raise_for_failure(self) -> None:
        """Return without raising; present for symmetry with :class:`Failed`."""


@dataclass(frozen=True, slots=True)
class Failed:
    """Outcome of an invocation stopped by its first failure.

    Attributes:
        failure: The terminal failure.
        executed: Units that completed before the failure, in order.
    """

    failure: PostCompileFailure
    executed: tuple[str, ...] = ()
    status: Literal["failed"] = field(default="failed", init=False)

    @property
    def ok(self) -> bool:
        return False

    def raise_for_failure(self) -> None:
        """Raise :class:`PostCompileError` wrapping the failure and its cause."""

        raise PostCompileError(self.failure) from self.failure.cause


InvocationOutcome: TypeAlias = Completed | Failed


__all__ = [
    "EXIT_BUILD_ERROR",
    "EXIT_UNIT_FAILURE",
    "Completed",
    "ErrorKind",
    "Failed",
    "InvocationOutcome",
    "PostCompileError",
    "PostCompileFailure",
]
