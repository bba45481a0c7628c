"""Plugin registry for discovering, loading, and exposing tool plugins."""

import importlib
import importlib.metadata
import inspect
import logging
import pkgutil
from pathlib import Path
from typing import Dict, List, Set, Any, Mapping, Optional

from .base import Executor, ToolPlugin
from .types import ToolSchema

logger = logging.getLogger(__name__)

# Entry point group names by plugin kind
PLUGIN_ENTRY_POINT_GROUPS = {
    "tool": "kagi_search.plugins",
}

# Modules in the plugins package that are never plugins themselves
_INTERNAL_MODULES = ('base', 'registry', 'types', 'config_loader', 'tests')


def resolve_plugin_config(
    host_config: Optional[Mapping[str, Any]],
    plugin_id: str
) -> Dict[str, Any]:
    """Return the configuration namespace of one plugin.

    The host configuration is shaped like::

        {"plugins": {"entries": {"kagi-search": {"config": {"limit": 10}}}}}

    Any missing or non-mapping level yields an empty dict.

    Args:
        host_config: The full host configuration, or None.
        plugin_id: Plugin identifier used as the entries key.

    Returns:
        A new dict with the plugin's configuration.
    """
    node: Any = host_config
    for key in ("plugins", "entries", plugin_id, "config"):
        if not isinstance(node, Mapping):
            return {}
        node = node.get(key)
    if not isinstance(node, Mapping):
        return {}
    return dict(node)


class PluginRegistry:
    """Manages plugin discovery, lifecycle, and tool exposure state.

    Usage:
        registry = PluginRegistry(host_config=load_host_config())
        registry.discover()

        print(registry.list_available())  # ['kagi-search']

        registry.expose_tool('kagi-search')

        tool_schemas = registry.get_exposed_tool_schemas()
        executors = registry.get_exposed_executors()

        registry.unexpose_all()
    """

    def __init__(self, host_config: Optional[Mapping[str, Any]] = None):
        """Initialize the plugin registry.

        Args:
            host_config: Optional host configuration. Plugins exposed
                without an explicit config receive their namespace from it.
        """
        self._plugins: Dict[str, ToolPlugin] = {}
        self._exposed: Set[str] = set()
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._host_config: Dict[str, Any] = dict(host_config or {})

    @property
    def host_config(self) -> Dict[str, Any]:
        return self._host_config

    def get_plugin_config(self, name: str) -> Dict[str, Any]:
        """Resolve a plugin's configuration namespace from the host config."""
        return resolve_plugin_config(self._host_config, name)

    def discover(
        self,
        plugin_kind: str = "tool",
        include_directory: bool = True
    ) -> List[str]:
        """Discover plugins via entry points and optionally directory scanning.

        Discovery order:
        1. Entry points (group based on plugin_kind) - for installed packages
        2. Directory scanning (optional) - for development/local plugins

        Entry points allow external packages to register plugins:
            [project.entry-points."kagi_search.plugins"]
            my_plugin = "my_package.plugins:create_plugin"

        Args:
            plugin_kind: Kind of plugin to discover.
                        Only plugins with matching PLUGIN_KIND are loaded.
            include_directory: Also scan the plugins directory for local plugins.
                             Useful during development when package isn't installed.

        Returns:
            List of discovered plugin names.
        """
        discovered = []

        discovered.extend(self._discover_via_entry_points(plugin_kind))

        if include_directory:
            discovered.extend(self._discover_via_directory(plugin_kind))

        return discovered

    def _discover_via_entry_points(self, plugin_kind: str) -> List[str]:
        """Discover plugins registered via entry points.

        Args:
            plugin_kind: Kind of plugin to discover.

        Returns:
            List of discovered plugin names.
        """
        discovered = []

        entry_point_group = PLUGIN_ENTRY_POINT_GROUPS.get(plugin_kind)
        if not entry_point_group:
            return discovered

        for ep in importlib.metadata.entry_points(group=entry_point_group):
            try:
                create_plugin = ep.load()
                plugin = create_plugin()
            except Exception as exc:
                logger.warning("Error loading entry point '%s': %s", ep.name, exc)
                continue

            if self._add_discovered(plugin, source=f"entry point '{ep.name}'"):
                discovered.append(plugin.name)

        return discovered

    def _discover_via_directory(
        self,
        plugin_kind: str,
        plugin_dir: Optional[Path] = None
    ) -> List[str]:
        """Discover plugins by scanning the plugins directory.

        Scans for Python modules with a create_plugin() factory function
        and matching PLUGIN_KIND.

        Args:
            plugin_kind: Kind of plugin to discover.
            plugin_dir: Directory to scan. Defaults to this package's directory.

        Returns:
            List of discovered plugin names.
        """
        if plugin_dir is None:
            plugin_dir = Path(__file__).parent

        discovered = []

        for finder, name, ispkg in pkgutil.iter_modules([str(plugin_dir)]):
            if name.startswith('_') or name in _INTERNAL_MODULES:
                continue

            try:
                module = importlib.import_module(f".{name}", package=__package__)

                # Only load plugins matching the requested kind
                if getattr(module, 'PLUGIN_KIND', None) != plugin_kind:
                    continue
                if not hasattr(module, 'create_plugin'):
                    continue

                plugin = module.create_plugin()
            except Exception as exc:
                logger.warning("Error loading plugin '%s': %s", name, exc)
                continue

            if self._add_discovered(plugin, source=f"module '{name}'"):
                discovered.append(plugin.name)

        return discovered

    def _add_discovered(self, plugin: Any, source: str) -> bool:
        if not isinstance(plugin, ToolPlugin):
            logger.warning("%s: plugin does not implement ToolPlugin protocol", source)
            return False
        if plugin.name in self._plugins:
            return False
        self._plugins[plugin.name] = plugin
        logger.debug("Discovered plugin '%s' via %s", plugin.name, source)
        return True

    def list_available(self) -> List[str]:
        """List all discovered plugin names."""
        return list(self._plugins.keys())

    def list_exposed(self) -> List[str]:
        """List currently exposed plugin names."""
        return list(self._exposed)

    def is_exposed(self, name: str) -> bool:
        """Check if a plugin's tools are currently exposed."""
        return name in self._exposed

    def get_plugin(self, name: str) -> Optional[ToolPlugin]:
        """Get a plugin by name, or None if not found."""
        return self._plugins.get(name)

    def register_plugin(
        self,
        plugin: ToolPlugin,
        expose: bool = False,
        config: Optional[Dict[str, Any]] = None
    ) -> None:
        """Manually register a plugin with the registry.

        Args:
            plugin: The plugin instance to register.
            expose: If True, also expose the plugin's tools (calls initialize).
            config: Optional configuration dict if exposing.
        """
        self._plugins[plugin.name] = plugin

        if expose:
            self.expose_tool(plugin.name, config)

    def expose_tool(self, name: str, config: Optional[Dict[str, Any]] = None) -> None:
        """Expose a plugin's tools.

        Calls the plugin's initialize() method if this is the first time
        exposing it, or if a new config is provided. Without an explicit
        config the plugin's namespace in the host configuration is used.

        Args:
            name: Plugin name to expose.
            config: Optional configuration dict for the plugin.

        Raises:
            ValueError: If the plugin is not found.
        """
        if name not in self._plugins:
            raise ValueError(f"Plugin '{name}' not found. Available: {self.list_available()}")

        plugin = self._plugins[name]
        if config is None:
            config = self.get_plugin_config(name)

        if name not in self._exposed:
            plugin.initialize(config)
            self._configs[name] = config
            self._exposed.add(name)
        elif config != self._configs.get(name):
            # Re-initialize with new config
            plugin.shutdown()
            plugin.initialize(config)
            self._configs[name] = config

    def unexpose_tool(self, name: str) -> None:
        """Stop exposing a plugin's tools.

        Calls the plugin's shutdown() method to clean up resources.

        Args:
            name: Plugin name to unexpose.
        """
        if name in self._exposed:
            self._plugins[name].shutdown()
            self._exposed.discard(name)
            self._configs.pop(name, None)

    def expose_all(self, config: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        """Expose all discovered plugins' tools.

        Args:
            config: Optional dict mapping plugin names to their configs.
        """
        config = config or {}
        for name in self._plugins:
            self.expose_tool(name, config.get(name))

    def unexpose_all(self) -> None:
        """Stop exposing all plugins' tools."""
        for name in list(self._exposed):
            self.unexpose_tool(name)

    def get_exposed_tool_schemas(self) -> List[ToolSchema]:
        """Get ToolSchemas from all exposed plugins."""
        schemas = []
        for name in self._exposed:
            try:
                schemas.extend(self._plugins[name].get_tool_schemas())
            except Exception as exc:
                logger.warning("Error getting tool schemas from '%s': %s", name, exc)
        return schemas

    def get_exposed_executors(self) -> Dict[str, Executor]:
        """Get executor callables from all exposed plugins."""
        executors = {}
        for name in self._exposed:
            try:
                executors.update(self._plugins[name].get_executors())
            except Exception as exc:
                logger.warning("Error getting executors from '%s': %s", name, exc)
        return executors

    async def execute(self, tool_name: str, args: Dict[str, Any]) -> Any:
        """Run an exposed tool, awaiting it if the executor is a coroutine.

        Raises:
            ValueError: If no exposed plugin provides the tool.
        """
        executor = self.get_exposed_executors().get(tool_name)
        if executor is None:
            raise ValueError(f"Tool '{tool_name}' is not exposed")
        result = executor(args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def get_system_instructions(self) -> Optional[str]:
        """Combine system instructions from all exposed plugins.

        Returns:
            Combined system instructions string, or None if no plugins
            have instructions.
        """
        instructions = []
        for name in self._exposed:
            try:
                plugin_instructions = self._plugins[name].get_system_instructions()
                if plugin_instructions:
                    instructions.append(plugin_instructions)
            except Exception as exc:
                logger.warning("Error getting system instructions from '%s': %s", name, exc)

        if not instructions:
            return None

        return "\n\n".join(instructions)

    def get_auto_approved_tools(self) -> List[str]:
        """Collect auto-approved tool names from all exposed plugins."""
        tools = []
        for name in self._exposed:
            try:
                auto_approved = self._plugins[name].get_auto_approved_tools()
                if auto_approved:
                    tools.extend(auto_approved)
            except Exception as exc:
                logger.warning("Error getting auto-approved tools from '%s': %s", name, exc)
        return tools

    def get_plugin_for_tool(self, tool_name: str) -> Optional[ToolPlugin]:
        """Get the exposed plugin that provides a specific tool.

        Args:
            tool_name: Name of the tool to look up.

        Returns:
            The ToolPlugin instance that provides this tool, or None if not found.
        """
        for name in self._exposed:
            plugin = self._plugins[name]
            try:
                if tool_name in plugin.get_executors():
                    return plugin
            except Exception as exc:
                logger.warning("Error getting executors from '%s': %s", name, exc)
        return None
