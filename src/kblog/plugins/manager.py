"""Plugin registry over pluggy.

Plugins come from two places: installed distributions advertising the
``kblog.plugins`` entry point group, and the built-ins shipped in
:mod:`kblog.plugins.builtins`. An entry point may name a plugin class or
an instance; classes are instantiated with no arguments.

A plugin that fails to load, or whose ``register_service_hooks`` raises,
is logged and skipped. The application always starts.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterator
from importlib.metadata import entry_points
from typing import TYPE_CHECKING

import pluggy

from kblog.plugins.hookspecs import KblogHookSpec

if TYPE_CHECKING:
    from kblog.services.hooks import HookFragment

PROJECT_NAME = "kblog"
ENTRY_POINT_GROUP = "kblog.plugins"

logger = logging.getLogger(__name__)


def _builtin_plugins() -> Iterator[tuple[str, object]]:
    from kblog.plugins.builtins.excerpt import ExcerptPlugin

    yield "excerpt-builtin", ExcerptPlugin()


class PluginManager:
    """The set of plugins one application dispatches to."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(KblogHookSpec)

    @property
    def hook(self) -> pluggy.HookRelay:
        """pluggy hook relay; the event bus calls ``hook.post_<method>``."""
        return self._pm.hook

    @property
    def names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def load(self, *, builtins: bool = True) -> list[str]:
        """Register entry-point plugins, then (optionally) the built-ins.

        Returns the names registered by this call.
        """
        loaded = list(self._load_entry_points())
        if builtins:
            loaded += [self.register(plugin, name) for name, plugin in _builtin_plugins()]
        return loaded

    def register(self, plugin: object, name: str | None = None) -> str:
        """Register *plugin* under *name* (default: its class name)."""
        resolved = name or type(plugin).__name__
        self._pm.register(plugin, name=resolved)
        logger.debug("Registered plugin: %s", resolved)
        return resolved

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def collect_service_hooks(self, service_name: str) -> list[HookFragment]:
        """Hook fragments that plugins contribute to *service_name*.

        Implementations are asked one at a time so a raising plugin, or one
        returning something other than a dict, drops only its own fragment.
        """
        fragments: list[HookFragment] = []
        for impl in self._pm.hook.register_service_hooks.get_hookimpls():
            owner = impl.plugin_name
            try:
                fragment = impl.function(service_name=service_name)
            except Exception:
                logger.warning(
                    "Plugin %s failed to build %s hooks", owner, service_name, exc_info=True
                )
                continue
            if fragment is None:
                continue
            if not isinstance(fragment, dict):
                logger.warning(
                    "Plugin %s returned %s instead of a dict of %s hooks",
                    owner,
                    type(fragment).__name__,
                    service_name,
                )
                continue
            fragments.append(fragment)
        return fragments

    def _load_entry_points(self) -> Iterator[str]:
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if self._pm.has_plugin(ep.name) or self._pm.is_blocked(ep.name):
                continue
            try:
                target = ep.load()
                plugin = target() if inspect.isclass(target) else target
            except Exception:
                logger.warning("Could not load plugin %s (%s)", ep.name, ep.value, exc_info=True)
                continue
            yield self.register(plugin, ep.name)
