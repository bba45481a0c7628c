"""Base protocol for tool plugins."""

from typing import Protocol, List, Dict, Any, Callable, Optional, runtime_checkable

from .types import ToolSchema


# Executors receive the tool arguments as a dict. They may be plain
# callables or coroutine functions; the host awaits the latter.
Executor = Callable[[Dict[str, Any]], Any]


@runtime_checkable
class ToolPlugin(Protocol):
    """Interface that all tool plugins must implement.

    A plugin declares its tools via get_tool_schemas() and provides their
    implementations via get_executors(). The host calls initialize() when
    the plugin is exposed and shutdown() when it is withdrawn.
    """

    @property
    def name(self) -> str:
        """Unique identifier for this plugin."""
        ...

    def get_tool_schemas(self) -> List[ToolSchema]:
        """Return ToolSchema objects for this plugin's tools."""
        ...

    def get_executors(self) -> Dict[str, Executor]:
        """Return a mapping of tool names to their executor callables.

        Each executor should accept a dict of arguments and return a
        result payload (see types.text_result).
        """
        ...

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Called once when the plugin is exposed.

        Args:
            config: Optional plugin-scoped configuration dict.
        """
        ...

    def shutdown(self) -> None:
        """Called when the plugin is withdrawn. Clean up resources here."""
        ...

    def get_system_instructions(self) -> Optional[str]:
        """Return instructions describing this plugin's tools to the model.

        Returns:
            A string with instructions, or None if no instructions are needed.
        """
        ...

    def get_auto_approved_tools(self) -> List[str]:
        """Return tool names that can run without a permission prompt.

        Use this for read-only tools with no security implications.

        Returns:
            List of tool names, or empty list if all require permission.
        """
        ...
