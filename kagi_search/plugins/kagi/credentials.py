"""API key resolution for the Kagi search plugin.

Resolution priority (first non-empty wins):
1. ``apiKey`` string in the plugin configuration
2. KAGI_API_KEY environment variable
3. ~/.config/kagi/api_key file (trimmed)

Nothing is cached; every call reads the sources again.
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

ENV_KAGI_API_KEY = "KAGI_API_KEY"

CONFIG_API_KEY = "apiKey"


def default_key_file() -> Path:
    """Return the per-user API key file location."""
    return Path.home() / ".config" / "kagi" / "api_key"


def _from_config(config: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not config:
        return None
    value = config.get(CONFIG_API_KEY)
    if isinstance(value, str) and value:
        return value
    return None


def _from_env() -> Optional[str]:
    return os.environ.get(ENV_KAGI_API_KEY) or None


def _from_file(key_file: Path) -> Optional[str]:
    try:
        value = key_file.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        # Missing or unreadable file means no key from this source
        return None
    return value or None


def load_api_key(
    config: Optional[Mapping[str, Any]],
    key_file: Optional[Path] = None
) -> Optional[str]:
    """Resolve the Kagi API key.

    Args:
        config: Plugin-scoped configuration mapping.
        key_file: Override for the key file path (default: default_key_file()).

    Returns:
        The API key, or None if no source provides one.
    """
    return (
        _from_config(config)
        or _from_env()
        or _from_file(key_file if key_file is not None else default_key_file())
    )
