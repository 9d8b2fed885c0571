"""Plugin discovery and loading.

Two sources feed the hook relay: packages advertising the
``pressctl.plugins`` entry point, and single-file plugins dropped into the
site's ``.pressctl/plugins/`` directory. Built-in delivery plugins are
registered separately by the store.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

import pluggy

from pressctl.plugins.hookspecs import PressctlHookSpec

PROJECT_NAME = "pressctl"
ENTRY_POINT_GROUP = "pressctl.plugins"
LOCAL_MODULE_PREFIX = "_pressctl_local_"

logger = logging.getLogger(__name__)


def implements_hooks(cls: type) -> bool:
    """True when any public attribute of *cls* carries a ``pressctl_impl`` marker."""
    return any(
        callable(attr) and getattr(attr, f"{PROJECT_NAME}_impl", None)
        for attr in (getattr(cls, name, None) for name in dir(cls) if not name.startswith("_"))
    )


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` with pressctl's hookspecs."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PressctlHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then any plugins under *local_dir*.

        Returns the names of everything registered afterwards.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_registered_classes()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local(path)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin: %s", name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def _load_local(self, path: Path) -> None:
        """Import one plugin file and register each hook-bearing class in it.

        Import errors and constructor errors are logged; the file is skipped.
        """
        module = _import_file(path)
        if module is None:
            return
        for cls in _hook_classes(module):
            try:
                self.register_plugin(cls(), name=f"local:{path.stem}.{cls.__name__}")
            except Exception:
                logger.warning(
                    "Could not instantiate %s from %s", cls.__name__, path, exc_info=True
                )

    def _instantiate_registered_classes(self) -> None:
        # Entry points may hand pluggy a class; hooks on a class run with self unbound.
        for plugin in self.get_plugins():
            if not (inspect.isclass(plugin) and implements_hooks(plugin)):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                self._pm.register(plugin(), name=name)
            except Exception:
                logger.warning("Could not instantiate entry-point plugin %s", name, exc_info=True)


def _import_file(path: Path) -> ModuleType | None:
    module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Not an importable plugin file: %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Failed to load local plugin %s", path, exc_info=True)
        return None
    return module


def _hook_classes(module: ModuleType) -> Iterator[type]:
    for _, cls in inspect.getmembers(module, inspect.isclass):
        if cls.__module__ == module.__name__ and implements_hooks(cls):
            yield cls
