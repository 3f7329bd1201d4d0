# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Sequential execution of configured units with first-failure abort."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from .classpath import log_debug
from .errors import Completed, ErrorKind, Failed, InvocationOutcome, PostCompileFailure
from .interfaces import BuildLog, LoaderScope
from .loader import ClassNotFound
from .models import ClasspathEntries
from .units import resolve_unit_factory

# A unit calling sys.exit() fails the invocation; KeyboardInterrupt still propagates.
UNIT_ERRORS: Final = (Exception, SystemExit)


def normalise_execution_classes(raw: Iterable[str] | None) -> tuple[str, ...]:
    """Return class names with whitespace trimmed and blank entries removed.

    Args:
        raw: Configured class names, possibly ``None``.

    Returns:
        tuple[str, ...]: Usable class names in configured order.
    """

    if raw is None:
        return ()
    return tuple(name for name in (item.strip() for item in raw) if name)


def execute_unit(
    loader: LoaderScope,
    class_name: str,
    *,
    logger: BuildLog,
    classpath: ClasspathEntries = (),
) -> PostCompileFailure | None:
    """Load, verify, instantiate, and run a single unit.

    Args:
        loader: Scope used to resolve ``class_name``.
        class_name: Fully qualified name of the unit class.
        logger: Build log receiving debug traces.
        classpath: Entries attached to failures for diagnostics.

    Returns:
        PostCompileFailure | None: ``None`` when ``run()`` returned normally,
        otherwise the failure that stopped the unit.
    """

    try:
        loaded = loader.load_class(class_name)
    except ClassNotFound as exc:
        return PostCompileFailure.for_class(
            ErrorKind.EXECUTION_CLASS_NOT_FOUND, class_name, cause=exc, classpath=classpath
        )
    except UNIT_ERRORS as exc:  # pylint: disable=broad-exception-caught
        return PostCompileFailure.for_class(
            ErrorKind.EXECUTION_UNIT_FAILED, class_name, cause=exc, classpath=classpath
        )
    log_debug(logger, "Loaded execution class:", loaded)

    factory = resolve_unit_factory(class_name, loaded, classpath=classpath)
    if isinstance(factory, PostCompileFailure):
        return factory

    try:
        with loader.activate():
            unit = factory.create()
    except UNIT_ERRORS as exc:  # pylint: disable=broad-exception-caught
        return PostCompileFailure.for_class(
            ErrorKind.EXECUTION_CLASS_INIT_FAILED, class_name, cause=exc, classpath=classpath
        )

    try:
        with loader.activate():
            unit.run()
    except UNIT_ERRORS as exc:  # pylint: disable=broad-exception-caught
        return PostCompileFailure.for_class(
            ErrorKind.EXECUTION_UNIT_FAILED, class_name, cause=exc, classpath=classpath
        )
    log_debug(logger, "Completed run() method of ", class_name)
    return None


def execute_units(
    loader: LoaderScope,
    class_names: Iterable[str],
    *,
    logger: BuildLog,
    classpath: ClasspathEntries = (),
) -> InvocationOutcome:
    """Run every unit in order, stopping at the first failure.

    Args:
        loader: Scope used to resolve each unit class.
        class_names: Fully qualified names, already normalised.
        logger: Build log receiving debug traces.
        classpath: Entries reported with the outcome.

    Returns:
        InvocationOutcome: ``Completed`` when every unit ran, otherwise
        ``Failed`` wrapping the first failure. Later units are never attempted.
    """

    executed: list[str] = []
    for class_name in class_names:
        failure = execute_unit(loader, class_name, logger=logger, classpath=classpath)
        if failure is not None:
            return Failed(failure=failure, executed=tuple(executed))
        executed.append(class_name)
    return Completed(executed=tuple(executed), classpath=classpath)


__all__ = ["UNIT_ERRORS", "execute_unit", "execute_units", "normalise_execution_classes"]
