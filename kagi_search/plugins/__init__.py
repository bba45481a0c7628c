"""Tool plugin system: host contract, registry, and bundled plugins."""

from .base import ToolPlugin
from .config_loader import load_host_config
from .registry import PluginRegistry, resolve_plugin_config
from .types import ToolSchema, text_result

__all__ = [
    'ToolPlugin',
    'PluginRegistry',
    'ToolSchema',
    'load_host_config',
    'resolve_plugin_config',
    'text_result',
]
