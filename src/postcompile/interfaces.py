# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Service interfaces shared across the post-compile runner."""

# pylint: disable=too-few-public-methods -- Protocol definitions intentionally expose minimal method surfaces.

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import ClasspathEntry


@runtime_checkable
class BuildLog(Protocol):
    """Log sink supplied by the host build for one invocation."""

    @property
    def debug_enabled(self) -> bool:
        """Return ``True`` when debug diagnostics should be produced."""

        raise NotImplementedError

    def debug(self, message: str) -> None:
        """Record a debug ``message``."""

        raise NotImplementedError

    def error(self, cause: BaseException | str) -> None:
        """Record an error ``cause`` without interrupting the caller."""

        raise NotImplementedError


@runtime_checkable
class Runnable(Protocol):
    """Capability exposed by execution units: a single ``run()`` entry point."""

    def run(self) -> None:
        """Execute the unit to completion, raising to signal failure."""

        raise NotImplementedError


@runtime_checkable
class LoaderScope(Protocol):
    """Module-resolution scope owned by a single invocation."""

    def mount(self, entries: Iterable[ClasspathEntry]) -> None:
        """Restrict the scope to the classpath ``entries``."""

        raise NotImplementedError

    def load_class(self, qualified_name: str) -> object:
        """Return the object named by ``qualified_name``."""

        raise NotImplementedError

    def activate(self) -> AbstractContextManager[None]:
        """Return a context in which the scope's modules can be imported and run."""

        raise NotImplementedError

    def close(self) -> None:
        """Release every resource held by the scope."""

        raise NotImplementedError


__all__ = ["BuildLog", "LoaderScope", "Runnable"]
