"""Command-line entry point: run one Kagi search and print the result.

Usage:
    kagi-search "rust ownership" --limit 3
    python -m kagi_search "rust ownership" --env-file .env -v
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .plugins.config_loader import load_host_config
from .plugins.kagi import create_plugin
from .plugins.kagi.plugin import TOOL_NAME
from .plugins.registry import PluginRegistry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kagi-search",
        description="Search the web with the Kagi Search API",
    )
    parser.add_argument("query", help="Search query string")
    parser.add_argument("--limit", type=float, default=None,
                        help="Maximum results to return (1-20, default 5)")
    parser.add_argument("--config", default=None,
                        help="Path to host config JSON (default: .kagi-search/config.json)")
    parser.add_argument("--env-file", default=".env",
                        help="Path to .env file with KAGI_API_KEY (optional)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def result_text(result: dict) -> str:
    """Join the text items of a tool result payload."""
    return "\n".join(
        item.get("text", "") for item in result.get("content", [])
        if item.get("type") == "text"
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    load_dotenv(args.env_file)

    registry = PluginRegistry(host_config=load_host_config(args.config))
    registry.register_plugin(create_plugin(), expose=True)

    tool_args = {"query": args.query}
    if args.limit is not None:
        tool_args["limit"] = args.limit

    result = asyncio.run(registry.execute(TOOL_NAME, tool_args))
    print(result_text(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
