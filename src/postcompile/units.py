# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Capability checks turning loaded classes into unit factories."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, cast

from .errors import ErrorKind, PostCompileFailure
from .interfaces import Runnable
from .models import ClasspathEntry

ENTRY_POINT: Final[str] = "run"

_SELF_KINDS: Final = frozenset(
    {
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.VAR_POSITIONAL,
    }
)


@dataclass(frozen=True, slots=True)
class UnitFactory:
    """Constructor for a unit class verified to satisfy :class:`Runnable`."""

    class_name: str
    unit_type: type

    def create(self) -> Runnable:
        """Return a fresh unit instance built with its zero-argument constructor."""

        return cast(Runnable, self.unit_type())


def _required_parameters(func: Callable[..., object]) -> list[inspect.Parameter] | None:
    """Return parameters of ``func`` that have no default.

    ``None`` is returned when the signature cannot be introspected.
    """

    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    return [
        parameter
        for parameter in signature.parameters.values()
        if parameter.default is inspect.Parameter.empty
        and parameter.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def is_runnable_type(candidate: object) -> bool:
    """Return ``True`` when ``candidate`` is a class with a zero-argument ``run``.

    Args:
        candidate: Object resolved from a fully qualified class name.

    Returns:
        bool: ``True`` when instances of ``candidate`` can call ``run()``.
    """

    if not inspect.isclass(candidate):
        return False
    try:
        entry = inspect.getattr_static(candidate, ENTRY_POINT)
    except AttributeError:
        return False
    if isinstance(entry, staticmethod):
        required = _required_parameters(entry.__func__)
        return required is None or not required
    if isinstance(entry, classmethod):
        required = _required_parameters(getattr(candidate, ENTRY_POINT))
        return required is None or not required
    if inspect.isfunction(entry):
        try:
            parameters = list(inspect.signature(entry).parameters.values())
        except (TypeError, ValueError):
            return True
        if not parameters:
            return False
        if parameters[0].kind not in _SELF_KINDS:
            return False
        required = _required_parameters(entry)
        return required is not None and len(required) <= 1
    return callable(entry)


def constructor_problem(unit_type: type) -> str | None:
    """Return why ``unit_type`` cannot be built without arguments, if it cannot."""

    if inspect.isabstract(unit_type):
        return "class is abstract"
    if getattr(unit_type, "_is_protocol", False):
        return "class is a protocol"
    required = _required_parameters(unit_type)
    if required:
        names = ", ".join(parameter.name for parameter in required)
        return f"constructor requires arguments: {names}"
    return None


def resolve_unit_factory(
    class_name: str,
    loaded: object,
    *,
    classpath: tuple[ClasspathEntry, ...] = (),
) -> UnitFactory | PostCompileFailure:
    """Return a factory for ``loaded`` or the failure describing why it is unusable.

    The runnable capability is verified once, before any coercion.

    Args:
        class_name: Fully qualified name used to locate ``loaded``.
        loaded: Object resolved by the loader.
        classpath: Entries attached to failures for diagnostics.

    Returns:
        UnitFactory | PostCompileFailure: Factory for runnable, constructible
        classes; otherwise an ``EXECUTION_CLASS_NOT_RUNNABLE`` or
        ``EXECUTION_CLASS_NOT_CONSTRUCTIBLE`` failure.
    """

    if not is_runnable_type(loaded):
        return PostCompileFailure.for_class(ErrorKind.EXECUTION_CLASS_NOT_RUNNABLE, class_name, classpath=classpath)
    unit_type = cast(type, loaded)
    if (problem := constructor_problem(unit_type)) is not None:
        return PostCompileFailure.for_class(
            ErrorKind.EXECUTION_CLASS_NOT_CONSTRUCTIBLE,
            class_name,
            cause=TypeError(problem),
            classpath=classpath,
        )
    return UnitFactory(class_name=class_name, unit_type=unit_type)


__all__ = [
    "ENTRY_POINT",
    "UnitFactory",
    "constructor_problem",
    "is_runnable_type",
    "resolve_unit_factory",
]
