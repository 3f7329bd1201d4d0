# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Composition root for a single post-compile invocation.

An invocation moves through ``AssemblingClasspath -> LoaderReady ->
ExecutingUnit(i)`` and ends either ``Completed`` or ``Failed``.  The loader
scope is acquired first and released exactly once on every exit path; a
failure to release it is logged and never replaces the invocation outcome.
"""

from __future__ import annotations

from collections.abc import Callable

from .classpath import assemble_classpath, log_debug
from .config.models import PostCompileConfig
from .errors import Failed, InvocationOutcome, PostCompileFailure
from .executor import execute_units, normalise_execution_classes
from .interfaces import BuildLog, LoaderScope
from .loader import IsolatedLoader
from .models import ProjectContext

LoaderFactory = Callable[[BuildLog], LoaderScope]


def default_loader_factory(logger: BuildLog) -> LoaderScope:
    """Return an empty :class:`IsolatedLoader` owned by one invocation."""

    return IsolatedLoader(logger=logger)


def run_post_compile(
    project: ProjectContext,
    config: PostCompileConfig,
    *,
    logger: BuildLog,
    loader_factory: LoaderFactory = default_loader_factory,
) -> InvocationOutcome:
    """Assemble the classpath of ``project`` and run the configured units.

    Args:
        project: Built project supplying the output directory and artifacts.
        config: Execution classes and additional resources for the invocation.
        logger: Build log receiving debug traces and release errors.
        loader_factory: Callable returning a fresh loader scope.

    Returns:
        InvocationOutcome: ``Completed`` when every unit ran; ``Failed`` with
        exactly one terminal failure otherwise.
    """

    loader = loader_factory(logger)
    try:
        return _invoke(loader, project, config, logger=logger)
    finally:
        release_loader(loader, logger=logger)


def release_loader(loader: LoaderScope, *, logger: BuildLog) -> None:
    """Close ``loader``, logging instead of raising when closing fails."""

    try:
        loader.close()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.error(exc)


def _invoke(
    loader: LoaderScope,
    project: ProjectContext,
    config: PostCompileConfig,
    *,
    logger: BuildLog,
) -> InvocationOutcome:
    class_names = normalise_execution_classes(config.execution_classes)
    if not class_names:
        return Failed(failure=PostCompileFailure.no_execution_classes(list(config.execution_classes)))

    classpath = assemble_classpath(project, config.additional_resources, logger=logger)
    if isinstance(classpath, PostCompileFailure):
        return Failed(failure=classpath)

    loader.mount(classpath)
    log_debug(logger, "Execution classes:", ", ".join(class_names))
    return execute_units(loader, class_names, logger=logger, classpath=classpath)


__all__ = ["LoaderFactory", "default_loader_factory", "release_loader", "run_post_compile"]
