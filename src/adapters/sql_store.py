"""SQL storage adapter.

Implements the core StorePort over a single DB-API connection. Every
operation is one statement committed on its own; uniqueness and upserts
are left to the backend's primary keys and ON CONFLICT clause.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Any, Optional, Sequence

from adapters.sql_dialect import resolve_dialect
from core.authorization import check_enabled_team
from core.config import AVATAR_KEY_PREFIX, StoreConfig
from core.errors import BackendError, NotAuthorizedError, NotFoundError
from core.models import ChannelLink, Token
from core.ports import EnabledTeamsProvider, KVStorePort, TeamDirectoryPort
from core.tokens import decode_token, encode_token

LOGGER = logging.getLogger(__name__)

_LINK_COLUMNS = "local_channel_id, local_team_id, remote_channel_id, remote_team_id"


class SQLStore:
    """Bridge store over a shared DB-API connection.

    The connection is owned by the store from construction until close();
    it must allow use from several threads when the host calls the store
    concurrently (sqlite3 needs check_same_thread=False).

    Callers on a shared connection also share its transaction, so each
    statement and its commit or rollback run under one lock.
    """

    def __init__(
        self,
        connection: Any,
        kv_store: KVStorePort,
        team_directory: TeamDirectoryPort,
        enabled_teams: EnabledTeamsProvider,
        config: StoreConfig = StoreConfig(),
        db_error: Optional[type[Exception]] = None,
    ) -> None:
        self._conn = connection
        self._kv = kv_store
        self._teams = team_directory
        self._enabled_teams = enabled_teams
        self._config = config
        self._dialect = resolve_dialect(config.driver_name)
        # DB-API drivers expose their base exception on the connection.
        self._db_error = db_error or connection.Error
        self.lock = threading.RLock()

    # --- Connection helpers ---

    def _query(self, sql: str, params: Sequence[Any] = ()) -> list[tuple]:
        with self.lock:
            cursor = self._conn.cursor()
            try:
                cursor.execute(sql, tuple(params))
                rows = [tuple(row) for row in cursor.fetchall()]
                # End the read transaction drivers like psycopg open implicitly.
                self._conn.commit()
                return rows
            except self._db_error as exc:
                self._conn.rollback()
                raise BackendError(str(exc)) from exc
            finally:
                cursor.close()

    def _query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[tuple]:
        rows = self._query(sql, params)
        return rows[0] if rows else None

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        with self.lock:
            cursor = self._conn.cursor()
            try:
                cursor.execute(sql, tuple(params))
                self._conn.commit()
                return cursor.rowcount
            except self._db_error as exc:
                # A failed statement leaves the driver mid-transaction.
                self._conn.rollback()
                raise BackendError(str(exc)) from exc
            finally:
                cursor.close()

    def close(self) -> None:
        """Release the connection; the store is unusable afterwards."""

        with self.lock:
            self._conn.close()

    # --- Schema ---

    def init_schema(self) -> None:
        """Create the links, users and posts tables if they do not exist.

        Tables:
        - links: one row per bridged channel, keyed by the local channel
        - users: user id mapping plus the serialized token ("" if none)
        - posts: message id mapping, scoped by remote chat/channel id
        """

        self._execute(
            """
            CREATE TABLE IF NOT EXISTS links (
                local_channel_id VARCHAR(255) PRIMARY KEY,
                local_team_id VARCHAR(255),
                remote_channel_id VARCHAR(255),
                remote_team_id VARCHAR(255)
            )
            """
        )
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                local_user_id VARCHAR(255) PRIMARY KEY,
                remote_user_id VARCHAR(255),
                token TEXT
            )
            """
        )
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS posts (
                local_post_id VARCHAR(255) PRIMARY KEY,
                remote_post_id VARCHAR(255),
                remote_container_id VARCHAR(255)
            )
            """
        )
        LOGGER.info("Schema ready (%s)", self._dialect.name)

    # --- Avatar cache ---

    def get_avatar_cache(self, user_id: str) -> bytes:
        data = self._kv.get(AVATAR_KEY_PREFIX + user_id)
        if data is None:
            raise NotFoundError(f"no cached avatar for user {user_id}")
        return data

    def set_avatar_cache(self, user_id: str, data: bytes, ttl: Optional[int] = None) -> None:
        expiry = ttl if ttl is not None else self._config.avatar_cache_ttl
        self._kv.set_with_expiry(AVATAR_KEY_PREFIX + user_id, data, expiry)

    # --- Channel links ---

    @staticmethod
    def _link_from_row(row: tuple) -> ChannelLink:
        return ChannelLink(
            local_channel_id=row[0],
            local_team_id=row[1],
            remote_channel_id=row[2],
            remote_team_id=row[3],
        )

    def _authorized_link(self, row: tuple) -> ChannelLink:
        link = self._link_from_row(row)
        if not self.check_enabled_team_by_id(link.local_team_id):
            LOGGER.warning(
                "Link for channel %s hidden: team %s is not enabled",
                link.local_channel_id,
                link.local_team_id,
            )
            raise NotAuthorizedError(link.local_team_id)
        return link

    def get_link_by_channel_id(self, channel_id: str) -> ChannelLink:
        """Return the link for a local channel.

        Raises NotFoundError when there is no row and NotAuthorizedError
        (a NotFoundError) when the link's team is not enabled.
        """

        p = self._dialect.placeholder
        row = self._query_one(
            f"SELECT {_LINK_COLUMNS} FROM links WHERE local_channel_id = {p}",
            (channel_id,),
        )
        if row is None:
            LOGGER.debug("No link for channel %s", channel_id)
            raise NotFoundError(f"no link for channel {channel_id}")
        return self._authorized_link(row)

    def get_link_by_remote_channel_id(self, remote_team_id: str, remote_channel_id: str) -> ChannelLink:
        """Return the link for a remote channel, same errors as the local lookup.

        Remote channel ids are unique on their own; the remote team id is
        accepted for callers that have it but does not narrow the match.
        """

        p = self._dialect.placeholder
        row = self._query_one(
            f"SELECT {_LINK_COLUMNS} FROM links WHERE remote_channel_id = {p}",
            (remote_channel_id,),
        )
        if row is None:
            LOGGER.debug("No link for remote channel %s/%s", remote_team_id, remote_channel_id)
            raise NotFoundError(f"no link for remote channel {remote_channel_id}")
        return self._authorized_link(row)

    def list_links(self) -> list[ChannelLink]:
        """Return every link whose team is currently enabled."""

        rows = self._query(f"SELECT {_LINK_COLUMNS} FROM links ORDER BY local_channel_id")
        links = [self._link_from_row(row) for row in rows]
        return [link for link in links if self.check_enabled_team_by_id(link.local_team_id)]

    def delete_link_by_channel_id(self, channel_id: str) -> None:
        """Remove the link for a local channel; missing links are not an error."""

        p = self._dialect.placeholder
        removed = self._execute(f"DELETE FROM links WHERE local_channel_id = {p}", (channel_id,))
        if removed:
            LOGGER.info("Unlinked channel %s", channel_id)

    def store_channel_link(self, link: ChannelLink) -> None:
        """Insert a new link, then apply the enabled-team policy.

        The policy is checked after the insert has committed: a link for a
        disabled team stays in the table and the call raises
        NotAuthorizedError. A second link for the same local channel fails
        with BackendError and leaves the first one untouched.
        """

        self._execute(
            f"INSERT INTO links ({_LINK_COLUMNS}) VALUES ({self._dialect.placeholders(4)})",
            (
                link.local_channel_id,
                link.local_team_id,
                link.remote_channel_id,
                link.remote_team_id,
            ),
        )
        LOGGER.info(
            "Linked channel %s to remote channel %s",
            link.local_channel_id,
            link.remote_channel_id,
        )
        if not self.check_enabled_team_by_id(link.local_team_id):
            LOGGER.warning(
                "Stored link for channel %s but team %s is not enabled",
                link.local_channel_id,
                link.local_team_id,
            )
            raise NotAuthorizedError(link.local_team_id)

    # --- Users ---

    def _single_value(self, sql: str, params: Sequence[Any], missing: str) -> Any:
        row = self._query_one(sql, params)
        if row is None:
            LOGGER.debug(missing)
            raise NotFoundError(missing)
        return row[0]

    def remote_to_local_user_id(self, remote_user_id: str) -> str:
        p = self._dialect.placeholder
        return self._single_value(
            f"SELECT local_user_id FROM users WHERE remote_user_id = {p}",
            (remote_user_id,),
            f"no local user for remote user {remote_user_id}",
        )

    def local_to_remote_user_id(self, user_id: str) -> str:
        p = self._dialect.placeholder
        return self._single_value(
            f"SELECT remote_user_id FROM users WHERE local_user_id = {p}",
            (user_id,),
            f"no remote user for local user {user_id}",
        )

    @staticmethod
    def _token_from_blob(data: Optional[str], user: str) -> Token:
        if not data:
            raise NotFoundError(f"no token stored for user {user}")
        return decode_token(data)

    def get_token_for_local_user(self, user_id: str) -> Token:
        """Return the stored token for a local user.

        Raises NotFoundError for an unknown user or an empty token, and
        TokenDecodeError when the stored blob cannot be parsed.
        """

        p = self._dialect.placeholder
        data = self._single_value(
            f"SELECT token FROM users WHERE local_user_id = {p}",
            (user_id,),
            f"no user {user_id}",
        )
        return self._token_from_blob(data, user_id)

    def get_token_for_remote_user(self, remote_user_id: str) -> Token:
        p = self._dialect.placeholder
        data = self._single_value(
            f"SELECT token FROM users WHERE remote_user_id = {p}",
            (remote_user_id,),
            f"no user for remote user {remote_user_id}",
        )
        return self._token_from_blob(data, remote_user_id)

    def set_user_info(self, user_id: str, remote_user_id: str, token: Optional[Token] = None) -> None:
        """Upsert the user mapping; remote id and token are replaced together."""

        self._execute(
            f"INSERT INTO users (local_user_id, remote_user_id, token) "
            f"VALUES ({self._dialect.placeholders(3)}) "
            "ON CONFLICT (local_user_id) DO UPDATE SET "
            "remote_user_id = EXCLUDED.remote_user_id, token = EXCLUDED.token",
            (user_id, remote_user_id, encode_token(token)),
        )

    # --- Posts ---

    def remote_to_local_post_id(self, remote_container_id: str, remote_post_id: str) -> str:
        p = self._dialect.placeholder
        return self._single_value(
            f"SELECT local_post_id FROM posts "
            f"WHERE remote_post_id = {p} AND remote_container_id = {p}",
            (remote_post_id, remote_container_id),
            f"no local post for remote post {remote_post_id} in {remote_container_id}",
        )

    def local_to_remote_post_id(self, local_post_id: str) -> str:
        p = self._dialect.placeholder
        return self._single_value(
            f"SELECT remote_post_id FROM posts WHERE local_post_id = {p}",
            (local_post_id,),
            f"no remote post for local post {local_post_id}",
        )

    def link_posts(self, local_post_id: str, remote_container_id: str, remote_post_id: str) -> None:
        """Record a post mapping. Duplicate local ids raise BackendError."""

        self._execute(
            f"INSERT INTO posts (local_post_id, remote_post_id, remote_container_id) "
            f"VALUES ({self._dialect.placeholders(3)})",
            (local_post_id, remote_post_id, remote_container_id),
        )

    # --- Policy ---

    def check_enabled_team_by_id(self, team_id: str) -> bool:
        """Evaluate the enabled-team policy against the current config."""

        return check_enabled_team(team_id, self._enabled_teams(), self._teams)


def connect_sqlite(db_path: str) -> Any:
    """Open a sqlite3 connection suitable for sharing across threads."""

    return sqlite3.connect(db_path, check_same_thread=False)

