# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Isolated module-resolution scope built from an assembled classpath.

An :class:`IsolatedLoader` owns a private module table.  Units are loaded and
run inside :meth:`IsolatedLoader.activate` windows, during which the
interpreter's import state is swapped for the scope's own view:

* ``sys.modules`` holds the platform modules plus the scope's modules only,
* ``sys.path`` holds the classpath entries followed by the standard library,
* ``sys.meta_path`` keeps only the interpreter's standard finders.

Host packages, including ``postcompile`` and its dependencies, are therefore
invisible to ``import``, ``importlib.import_module`` and ``sys.modules``
lookups alike, while ``pickle``, ``typing.get_type_hints`` and
``inspect.getmodule`` find unit modules as usual.  When a window closes the
scope's modules are moved back into the private table and the host state is
restored.  Windows are serialised process-wide by a lock.
"""

from __future__ import annotations

import importlib
import importlib.machinery
import sys
import sysconfig
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType, TracebackType
from typing import Final

from .classpath import log_debug
from .interfaces import BuildLog
from .models import ClasspathEntries, ClasspathEntry

PLATFORM_MODULES: Final[frozenset[str]] = frozenset(sys.stdlib_module_names) | frozenset(sys.builtin_module_names)

_STANDARD_FINDERS: Final[tuple[object, ...]] = (
    importlib.machinery.BuiltinImporter,
    importlib.machinery.FrozenImporter,
    importlib.machinery.PathFinder,
)
_SHARED_ORIGINS: Final[frozenset[str]] = frozenset({"built-in", "frozen"})
_SHARED_NAMES: Final[frozenset[str]] = frozenset({"__main__", "__mp_main__"})
_SITE_DIRECTORIES: Final[frozenset[str]] = frozenset({"site-packages", "dist-packages"})

# The import state is interpreter-wide; one scope may be active at a time.
_IMPORT_STATE_LOCK: Final = threading.RLock()


class ClassNotFound(LookupError):
    """Raised when a fully qualified class name cannot be resolved."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


def is_platform_module(name: str) -> bool:
    """Return ``True`` when ``name`` belongs to the interpreter platform."""

    return name.partition(".")[0] in PLATFORM_MODULES


def _is_shared(name: str, module: object) -> bool:
    """Return ``True`` when ``module`` stays visible inside every scope."""

    if name in _SHARED_NAMES or is_platform_module(name):
        return True
    spec = getattr(module, "__spec__", None)
    return getattr(spec, "origin", None) in _SHARED_ORIGINS


def platform_search_path(entries: Iterable[str]) -> list[str]:
    """Return the entries of ``entries`` that hold the standard library.

    Args:
        entries: Host ``sys.path`` entries.

    Returns:
        list[str]: Standard library locations, without site directories.
    """

    roots = {Path(location).resolve() for key in ("stdlib", "platstdlib") if (location := sysconfig.get_path(key))}
    kept: list[str] = []
    for entry in entries:
        if not entry:
            continue
        path = Path(entry).resolve()
        if _SITE_DIRECTORIES.intersection(path.parts):
            continue
        if any(path == root or root in path.parents for root in roots):
            kept.append(entry)
    return kept


@dataclass(frozen=True, slots=True)
class _ImportState:
    """Snapshot of the interpreter's import state."""

    modules: dict[str, ModuleType]
    path: list[str]
    meta_path: list[object]

    @classmethod
    def capture(cls) -> _ImportState:
        return cls(modules=dict(sys.modules), path=list(sys.path), meta_path=list(sys.meta_path))


class IsolatedLoader:
    """Resolve modules and classes from a fixed classpath plus the platform.

    Lookup order is the classpath entries first, then the platform modules.
    Modules of the host process that are absent from the classpath are not
    visible.  The loader must be closed once the invocation ends.
    """

    def __init__(self, entries: Iterable[ClasspathEntry] = (), *, logger: BuildLog) -> None:
        self._logger = logger
        self._entries: ClasspathEntries = ()
        self._search_path: list[str] = []
        self._modules: dict[str, ModuleType] = {}
        self._active = False
        self._closed = False
        self.mount(entries)

    @property
    def entries(self) -> ClasspathEntries:
        """Return the classpath entries this scope searches."""

        return self._entries

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def loaded_modules(self) -> tuple[str, ...]:
        """Return the names of modules loaded from the classpath so far."""

        return tuple(self._modules)

    def mount(self, entries: Iterable[ClasspathEntry]) -> None:
        """Replace the searched classpath with ``entries``.

        Entries without a local path remain part of :attr:`entries` but are
        not searched.
        """

        self._ensure_open()
        self._entries = tuple(entries)
        self._search_path = []
        for entry in self._entries:
            if entry.path is None:
                log_debug(self._logger, "Skipping non-local class path entry:", entry)
                continue
            self._search_path.append(str(entry.path))

    @contextmanager
    def activate(self) -> Iterator[None]:
        """Install this scope as the interpreter's import state for the block.

        Re-entering an active scope is a no-op.  The host import state is
        restored on exit, whether or not the block raised.
        """

        self._ensure_open()
        if self._active:
            yield
            return
        with _IMPORT_STATE_LOCK:
            host = _ImportState.capture()
            self._active = True
            try:
                self._install(host)
                yield
            finally:
                self._active = False
                self._restore(host)

    def load_class(self, qualified_name: str) -> object:
        """Return the object named by ``qualified_name``.

        The longest importable module prefix is imported, then the remaining
        dotted components are resolved as attributes, so nested classes are
        accepted.

        Args:
            qualified_name: Dotted name such as ``package.module.ClassName``.

        Returns:
            object: The resolved attribute. Callers verify it is a class.

        Raises:
            ClassNotFound: When no module prefix or attribute matches.
            Exception: Errors raised while executing a located module propagate
                unchanged.
        """

        self._ensure_open()
        parts = qualified_name.split(".")
        if len(parts) < 2 or not all(parts):
            raise ClassNotFound(qualified_name)
        with self.activate():
            for split in range(len(parts) - 1, 0, -1):
                module_name = ".".join(parts[:split])
                try:
                    target: object = importlib.import_module(module_name)
                except ModuleNotFoundError as exc:
                    if _names_prefix(exc.name, module_name):
                        continue
                    raise
                for attribute in parts[split:]:
                    try:
                        target = getattr(target, attribute)
                    except AttributeError:
                        raise ClassNotFound(qualified_name) from None
                return target
        raise ClassNotFound(qualified_name)

    def import_module(self, name: str) -> ModuleType:
        """Import ``name`` within this scope and return the module.

        Raises:
            ModuleNotFoundError: When neither the classpath nor the platform
                provides ``name``.
        """

        with self.activate():
            return importlib.import_module(name)

    def close(self) -> None:
        """Release the module table held by the scope."""

        if self._closed:
            return
        self._closed = True
        self._modules.clear()
        log_debug(self._logger, f"Closed isolated loader over {len(self._entries)} class path entries")

    def __enter__(self) -> IsolatedLoader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _install(self, host: _ImportState) -> None:
        for name, module in host.modules.items():
            if not _is_shared(name, module):
                del sys.modules[name]
        sys.modules.update(self._modules)
        sys.path[:] = [*self._search_path, *platform_search_path(host.path)]
        sys.meta_path[:] = [finder for finder in host.meta_path if finder in _STANDARD_FINDERS]
        importlib.invalidate_caches()

    def _restore(self, host: _ImportState) -> None:
        scoped = {name: module for name, module in sys.modules.items() if not _is_shared(name, module)}
        self._modules = scoped
        for name in scoped:
            del sys.modules[name]
        sys.modules.update(host.modules)
        sys.path[:] = host.path
        sys.meta_path[:] = host.meta_path

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Isolated loader is closed")


def _names_prefix(missing: str | None, module_name: str) -> bool:
    """Return ``True`` when ``missing`` is ``module_name`` or one of its parents."""

    if not missing:
        return False
    return module_name == missing or module_name.startswith(missing + ".")


__all__ = [
    "PLATFORM_MODULES",
    "ClassNotFound",
    "IsolatedLoader",
    "is_platform_module",
    "platform_search_path",
]
