"""Core configuration dataclasses.

We keep config file parsing outside the core, but these helpers define the
shape the store expects so adapters and app layers can build it safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

AVATAR_CACHE_TTL = 300
AVATAR_KEY_PREFIX = "avatar_"


@dataclass(frozen=True)
class StoreConfig:
    """Settings consumed by the SQL store."""

    driver_name: str = "sqlite"
    avatar_cache_ttl: int = AVATAR_CACHE_TTL


def parse_enabled_teams(raw: Any) -> list[str]:
    """Normalize the enabled_teams setting into a list of team names.

    A string is split on commas without trimming, so a blank setting
    becomes [""] (open mode). Lists are taken as-is; anything else is a
    configuration error.
    """

    if raw is None:
        return [""]
    if isinstance(raw, str):
        return raw.split(",")
    if isinstance(raw, list) and all(isinstance(item, str) for item in raw):
        return list(raw)
    raise ValueError(f"enabled_teams must be a string or a list of strings, got {raw!r}")
