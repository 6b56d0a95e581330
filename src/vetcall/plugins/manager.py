"""Plugin discovery and loading.

Discovery: entry points (pip-installed) in the ``vetcall.plugins`` group via
pluggy's setuptools loader. Built-in plugins are registered directly.
Capabilities: pre-invocation hooks and validation rules.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

import pluggy

from vetcall.plugins.hookspecs import VetcallHookSpec

PROJECT_NAME = "vetcall"
ENTRY_POINT_GROUP = "vetcall.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(VetcallHookSpec)
        self._loaded: bool = False

    @classmethod
    def with_builtins(cls, *, echo: Callable[[str], Any] | None = None) -> PluginManager:
        """A manager with the built-in plugins already registered.

        *echo* is handed to the announce plugin to mirror its lines.
        """
        from vetcall.plugins.builtins.announce import AnnouncePlugin

        pm = cls()
        pm.register_plugin(AnnouncePlugin(echo=echo), name="announce")
        return pm

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins, then collect their rules.

        Returns a list of registered plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._register_rules()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        if self._loaded:
            self._register_plugin_rules(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching events."""
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    def _register_rules(self) -> None:
        for plugin in self._pm.get_plugins():
            plugin_name = self._pm.get_name(plugin) or plugin.__class__.__name__
            self._register_plugin_rules(plugin, plugin_name)

    @staticmethod
    def _register_plugin_rules(plugin: object, plugin_name: str) -> None:
        """Register rules exposed by a single plugin instance."""
        from vetcall.domain.rules import register_rule

        hook = getattr(plugin, "register_rules", None)
        if hook is None:
            return

        try:
            rule_map = hook()
        except Exception:
            logger.warning("Failed to collect rules from plugin %s", plugin_name, exc_info=True)
            return

        if rule_map is None:
            return
        if not isinstance(rule_map, dict):
            logger.warning("Plugin %s returned non-dict rule registrations", plugin_name)
            return

        for kind, rule in rule_map.items():
            try:
                register_rule(kind, rule)
            except (TypeError, ValueError):
                logger.warning(
                    "Skipping rule registration %r from plugin %s",
                    kind,
                    plugin_name,
                    exc_info=True,
                )

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("vetcall")`` sets a ``vetcall_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "vetcall_impl", None):
                return True
        return False
