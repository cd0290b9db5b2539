"""Static configuration for bridgestore.

User-editable settings (enabled teams, team names, cache ttl, logging) live
in a single JSON file; database location and driver come from the
environment so they can differ per deployment.
"""

import json
import os

from dotenv import load_dotenv

from core.config import AVATAR_CACHE_TTL, StoreConfig, parse_enabled_teams

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Where to store the SQLite database, and which driver dialect to speak.
DB_PATH = os.getenv("DB_PATH", os.path.join(PROJECT_ROOT, "bridgestore.db"))
DB_DRIVER = os.getenv("DB_DRIVER", "sqlite")

CONFIG_PATH = os.getenv("BRIDGESTORE_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        try:
            return json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid config file {CONFIG_PATH}: {exc}") from exc


def enabled_teams() -> list[str]:
    """Return the enabled team names from the current config file.

    The file is read on every call so edits apply to the next link
    lookup without a restart.
    """

    return parse_enabled_teams(_load_json_config().get("enabled_teams", ""))


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Team id -> display name, used when no host directory is available.
TEAMS = dict(_CONFIG.get("teams", {}))

STORE_CONFIG = StoreConfig(
    driver_name=DB_DRIVER,
    avatar_cache_ttl=int(_CONFIG.get("avatar_cache_ttl", AVATAR_CACHE_TTL)),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
