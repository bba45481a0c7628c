"""Host-facing types shared by tool plugins.

These types describe what a plugin hands to the host runtime: tool
declarations going in, and text content coming back out of an executor.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ToolSchema:
    """Tool declaration registered with the host.

    Attributes:
        name: Unique tool name (e.g., 'kagi_search').
        description: Human-readable description of what the tool does.
        parameters: JSON Schema object describing the tool's parameters.
    """
    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TextContent:
    """A single text item of a tool result."""
    text: str
    type: str = "text"

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "text": self.text}


def text_result(text: str) -> Dict[str, List[Dict[str, str]]]:
    """Build the result payload for a tool call that produced text.

    Every executor outcome, success or failure, uses this shape so the
    host only ever has to handle one kind of response.
    """
    return {"content": [TextContent(text=text).to_dict()]}
