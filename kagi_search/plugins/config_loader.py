"""Configuration loader for the host side of the plugin system.

Loads the host configuration from .kagi-search/config.json if it exists,
otherwise returns an empty configuration. Plugin settings live under
``plugins.entries.<plugin id>.config``.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Default location for the host config file
DEFAULT_CONFIG_PATH = ".kagi-search/config.json"

ENV_CONFIG_PATH = "KAGI_SEARCH_CONFIG"


def resolve_config_path(
    config_path: Optional[str] = None,
    base_path: Optional[str] = None
) -> Path:
    """Pick the config file location.

    Searches in this order:
    1. Explicit config_path if provided
    2. KAGI_SEARCH_CONFIG environment variable
    3. .kagi-search/config.json in base_path (or cwd)

    Relative paths are anchored at base_path.
    """
    base_path = base_path or os.getcwd()

    if config_path:
        file_path = Path(config_path)
    elif os.environ.get(ENV_CONFIG_PATH):
        file_path = Path(os.environ[ENV_CONFIG_PATH])
    else:
        file_path = Path(DEFAULT_CONFIG_PATH)

    if not file_path.is_absolute():
        file_path = Path(base_path) / file_path
    return file_path


def load_host_config(
    config_path: Optional[str] = None,
    base_path: Optional[str] = None
) -> Dict[str, Any]:
    """Load the host configuration from a JSON file.

    If no config file is found, returns an empty dict. A file that cannot
    be read or parsed is reported as a warning and also yields an empty dict.

    Args:
        config_path: Optional explicit path to config file.
        base_path: Base directory for relative paths (default: cwd).

    Returns:
        The host configuration mapping.

    Example config file (.kagi-search/config.json):
    ```json
    {
        "plugins": {
            "entries": {
                "kagi-search": {
                    "config": {"apiKey": "...", "limit": 10, "timeout": 15}
                }
            }
        }
    }
    ```
    """
    file_path = resolve_config_path(config_path, base_path)

    if not file_path.exists():
        logger.debug("No host config at %s, using defaults", file_path)
        return {}

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load %s: %s", file_path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top-level value must be an object", file_path)
        return {}

    return data
