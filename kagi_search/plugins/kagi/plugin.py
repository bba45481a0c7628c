"""Kagi search plugin: structured web search results without AI synthesis."""

import asyncio
import logging
import math
from typing import Any, Dict, List, Optional

import requests

from ..base import Executor
from ..types import ToolSchema, text_result
from .credentials import load_api_key
from .models import KagiResponse

logger = logging.getLogger(__name__)

PLUGIN_ID = "kagi-search"
TOOL_NAME = "kagi_search"

KAGI_SEARCH_URL = "https://kagi.com/api/v0/search"

DEFAULT_LIMIT = 5
MIN_LIMIT = 1
MAX_LIMIT = 20

NO_API_KEY_MESSAGE = (
    "Error: No Kagi API key found. Provide it via plugin config, "
    "KAGI_API_KEY env var, or ~/.config/kagi/api_key file."
)


def _as_number(value: Any) -> Optional[float]:
    """Coerce a number or numeric string, or return None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def resolve_limit(value: Any = None, default: Any = None) -> int:
    """Compute the effective result limit.

    The explicit value wins over the configured default, which wins over
    DEFAULT_LIMIT. Values that are not numbers are ignored. The result is
    clamped into [MIN_LIMIT, MAX_LIMIT].

    Args:
        value: The limit passed with the tool call.
        default: The limit from plugin configuration.

    Returns:
        An integer between MIN_LIMIT and MAX_LIMIT.
    """
    number = _as_number(value)
    if number is None:
        number = _as_number(default)
    if number is None:
        number = DEFAULT_LIMIT
    return int(min(max(number, MIN_LIMIT), MAX_LIMIT))


class KagiSearchPlugin:
    """Plugin that searches the web with the Kagi Search API.

    Configuration (all optional):
        apiKey: Kagi API key. Falls back to KAGI_API_KEY, then ~/.config/kagi/api_key.
        limit: Default number of results (1-20, default: 5).
        timeout: Request timeout in seconds (default: none).
    """

    display_name = "Kagi Search"
    description = "Search the web using Kagi - structured results, no AI synthesis"

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._initialized = False

    @property
    def name(self) -> str:
        return PLUGIN_ID

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the plugin with its configuration namespace.

        Args:
            config: Optional dict with apiKey, limit, and timeout.
        """
        self._config = dict(config or {})
        self._initialized = True

    def shutdown(self) -> None:
        """Shutdown the plugin."""
        self._config = {}
        self._initialized = False

    def get_tool_schemas(self) -> List[ToolSchema]:
        """Return the ToolSchema for the Kagi search tool."""
        return [ToolSchema(
            name=TOOL_NAME,
            description=(
                "Search the web using Kagi Search API. Returns structured results "
                "(title, URL, snippet, published date) without AI synthesis. Useful "
                "when you need raw search results with direct links rather than a "
                "synthesized answer."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query string"
                    },
                    "limit": {
                        "type": "number",
                        "description": "Maximum results to return (1-20, default 5)"
                    }
                },
                "required": ["query"]
            }
        )]

    def get_executors(self) -> Dict[str, Executor]:
        """Return the executor mapping."""
        return {TOOL_NAME: self._execute}

    def get_system_instructions(self) -> Optional[str]:
        """Return system instructions for the Kagi search tool."""
        return f"""You have access to `{TOOL_NAME}` which searches the web with Kagi.

It returns a numbered list of results, each with a title, URL, snippet and
publication date when available. Results are raw links, not a synthesized
answer, so cite the URLs you rely on.

Example usage:
- kagi_search(query="rust ownership")
- kagi_search(query="python 3.13 release notes", limit=10)

`limit` accepts 1-20 results (default 5)."""

    def get_auto_approved_tools(self) -> List[str]:
        """Searching is read-only - auto-approve it."""
        return [TOOL_NAME]

    async def _execute(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a Kagi search.

        Every outcome, including failures, is returned as a text result;
        nothing raises past this method.

        Args:
            args: Dict containing:
                - query: The search query (required)
                - limit: Optional maximum number of results

        Returns:
            Text result payload.
        """
        query = args.get('query')
        try:
            config = self._config
            api_key = load_api_key(config)
            if not api_key:
                return text_result(NO_API_KEY_MESSAGE)

            limit = resolve_limit(args.get('limit'), config.get('limit'))
            timeout = _as_number(config.get('timeout'))
            if timeout is not None and timeout <= 0:
                timeout = None

            text = await asyncio.to_thread(self._search, query, limit, api_key, timeout)
            return text_result(text)

        except Exception as exc:
            logger.exception("Kagi search failed for %r", query)
            return text_result(f"Kagi search failed: {exc}")

    def _search(
        self,
        query: str,
        limit: int,
        api_key: str,
        timeout: Optional[float] = None
    ) -> str:
        """Perform the HTTP request and format the response as text."""
        logger.debug("Kagi search: query=%r limit=%d", query, limit)

        response = requests.get(
            KAGI_SEARCH_URL,
            params={"q": query, "limit": str(limit)},
            headers={
                "Authorization": f"Bot {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
        )

        if not response.ok:
            try:
                body = response.text
            except Exception:
                body = ""
            logger.warning("Kagi API returned HTTP %s", response.status_code)
            return f"Kagi API error {response.status_code}: {body or response.reason}"

        result = KagiResponse.from_dict(response.json())

        if result.error:
            logger.warning("Kagi API reported errors: %s", result.error_message)
            return f"Kagi API error: {result.error_message}"

        organic = result.organic_results()
        if not organic:
            return f'No results found for "{query}"'

        formatted = "\n\n".join(r.to_markdown(i) for i, r in enumerate(organic, start=1))
        footer = (
            f"\n\n---\n_Kagi Search · {len(organic)} results · "
            f"{result.meta.ms}ms · balance: ${result.meta.api_balance:.2f}_"
        )
        return formatted + footer


def create_plugin() -> KagiSearchPlugin:
    """Factory function to create the Kagi search plugin instance."""
    return KagiSearchPlugin()
