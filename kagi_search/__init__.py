"""
kagi_search - Kagi web search as a tool plugin

Public API for hosts loading the plugin.
"""

# Registry and host configuration
from .plugins.registry import PluginRegistry, resolve_plugin_config
from .plugins.config_loader import load_host_config

# Plugin contract
from .plugins.base import ToolPlugin
from .plugins.types import ToolSchema, text_result

# The Kagi plugin
from .plugins.kagi import KagiSearchPlugin, create_plugin

# Public API
__all__ = [
    # Registry
    "PluginRegistry",
    "resolve_plugin_config",
    "load_host_config",

    # Plugin contract
    "ToolPlugin",
    "ToolSchema",
    "text_result",

    # Kagi plugin
    "KagiSearchPlugin",
    "create_plugin",
]

__version__ = "0.1.0"
