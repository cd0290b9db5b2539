"""Ports (interfaces) used by the store.

Ports define the minimal contracts for the host collaborators so that the
store can be reused with different platforms, and the public contract the
store itself offers to relays and command handlers.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from core.models import ChannelLink, Team, Token

# Returns the current enabled-team names; called on every policy check.
EnabledTeamsProvider = Callable[[], list[str]]


class KVStorePort(Protocol):
    """Expiring key-value cache offered by the host."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set_with_expiry(self, key: str, value: bytes, ttl_seconds: int) -> None:
        ...


class TeamDirectoryPort(Protocol):
    """Host team lookup. Raises TeamLookupError for unresolvable ids."""

    def get_team(self, team_id: str) -> Team:
        ...


class StorePort(Protocol):
    """Store operations used by message relays and command handlers."""

    def init_schema(self) -> None:
        ...

    def get_avatar_cache(self, user_id: str) -> bytes:
        ...

    def set_avatar_cache(self, user_id: str, data: bytes, ttl: Optional[int] = None) -> None:
        ...

    def get_link_by_channel_id(self, channel_id: str) -> ChannelLink:
        ...

    def get_link_by_remote_channel_id(self, remote_team_id: str, remote_channel_id: str) -> ChannelLink:
        ...

    def list_links(self) -> list[ChannelLink]:
        ...

    def delete_link_by_channel_id(self, channel_id: str) -> None:
        ...

    def store_channel_link(self, link: ChannelLink) -> None:
        ...

    def remote_to_local_post_id(self, remote_container_id: str, remote_post_id: str) -> str:
        ...

    def local_to_remote_post_id(self, local_post_id: str) -> str:
        ...

    def link_posts(self, local_post_id: str, remote_container_id: str, remote_post_id: str) -> None:
        ...

    def get_token_for_local_user(self, user_id: str) -> Token:
        ...

    def get_token_for_remote_user(self, remote_user_id: str) -> Token:
        ...

    def set_user_info(self, user_id: str, remote_user_id: str, token: Optional[Token]) -> None:
        ...

    def remote_to_local_user_id(self, remote_user_id: str) -> str:
        ...

    def local_to_remote_user_id(self, user_id: str) -> str:
        ...

    def check_enabled_team_by_id(self, team_id: str) -> bool:
        ...
