"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any driver-specific row types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ChannelLink:
    """One bridged channel: a local channel paired with a remote channel."""

    local_team_id: str
    local_channel_id: str
    remote_team_id: str
    remote_channel_id: str


@dataclass(frozen=True)
class Token:
    """Authorization token stored per user.

    Only the fields that survive serialization are kept here; the store
    never refreshes or validates tokens.
    """

    access_token: str
    token_type: str = ""
    refresh_token: str = ""
    expiry: Optional[datetime] = None


@dataclass(frozen=True)
class Team:
    """Team as reported by the host directory."""

    id: str
    name: str
