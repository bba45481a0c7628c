"""Kagi search plugin for structured web searches.

This plugin provides the `kagi_search` tool that queries the Kagi Search
API and returns organic results as numbered text entries.
"""

from .plugin import KagiSearchPlugin, create_plugin, resolve_limit

# Plugin kind identifier for registry discovery
PLUGIN_KIND = "tool"

__all__ = [
    'KagiSearchPlugin',
    'create_plugin',
    'resolve_limit',
]
