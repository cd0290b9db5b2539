from __future__ import annotations

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from adapters.memory_kv import MemoryKVStore
from adapters.sql_store import SQLStore
from core.errors import BackendError, TeamLookupError
from core.models import Team


class FakeTeamDirectory:
    def get_team(self, team_id: str) -> Team:
        raise TeamLookupError(team_id)


class RecordingConnection:
    """Wraps a sqlite3 connection, counting transaction ends.

    When `hold_commit_for` names a thread, that thread's commit waits
    (briefly) for `release`, leaving its statement uncommitted meanwhile.
    """

    Error = sqlite3.Error

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self.commits = 0
        self.rollbacks = 0
        self.hold_commit_for: "str | None" = None
        self.commit_held = threading.Event()
        self.release = threading.Event()

    def cursor(self) -> sqlite3.Cursor:
        return self._conn.cursor()

    def commit(self) -> None:
        if threading.current_thread().name == self.hold_commit_for:
            self.commit_held.set()
            self.release.wait(timeout=0.5)
        self.commits += 1
        self._conn.commit()

    def rollback(self) -> None:
        self.rollbacks += 1
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


def _make_store(conn) -> SQLStore:
    return SQLStore(
        conn,
        kv_store=MemoryKVStore(),
        team_directory=FakeTeamDirectory(),
        enabled_teams=lambda: [""],
    )


def test_failed_write_does_not_undo_pending_write_of_other_thread() -> None:
    conn = RecordingConnection(sqlite3.connect(":memory:", check_same_thread=False))
    store = _make_store(conn)
    store.init_schema()
    store.link_posts("p1", "chat-1", "rp1")

    results: dict[str, str] = {}

    def write_new() -> None:
        store.link_posts("p2", "chat-1", "rp2")
        results["new"] = "ok"

    def write_duplicate() -> None:
        try:
            store.link_posts("p1", "chat-1", "rp-dup")
        except BackendError:
            results["duplicate"] = "rejected"

    conn.hold_commit_for = "writer-new"
    writer_new = threading.Thread(target=write_new, name="writer-new")
    writer_new.start()
    assert conn.commit_held.wait(timeout=5)

    writer_dup = threading.Thread(target=write_duplicate, name="writer-dup")
    writer_dup.start()
    writer_dup.join(timeout=5)
    conn.release.set()
    writer_new.join(timeout=5)

    assert results == {"new": "ok", "duplicate": "rejected"}
    assert store.local_to_remote_post_id("p2") == "rp2"
    assert store.local_to_remote_post_id("p1") == "rp1"


def test_concurrent_writes_keep_every_reported_success(tmp_path: Path) -> None:
    conn = sqlite3.connect(str(tmp_path / "bridge.db"), check_same_thread=False)
    store = _make_store(conn)
    store.init_schema()

    # Every third write reuses one post id, so those inserts must collide.
    post_ids = ["p-shared" if index % 3 == 0 else f"p{index}" for index in range(60)]

    def write(index_and_post: tuple[int, str]) -> "tuple[str, str] | None":
        index, post_id = index_and_post
        remote_id = f"rp{index}"
        try:
            store.link_posts(post_id, "chat-1", remote_id)
        except BackendError:
            return None
        return post_id, remote_id

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(write, enumerate(post_ids)))

    accepted = [outcome for outcome in outcomes if outcome is not None]
    assert len(accepted) == len(set(post_ids))
    for post_id, remote_id in accepted:
        assert store.local_to_remote_post_id(post_id) == remote_id
        assert store.remote_to_local_post_id("chat-1", remote_id) == post_id


def test_failed_read_rolls_back_and_connection_stays_usable() -> None:
    conn = RecordingConnection(sqlite3.connect(":memory:", check_same_thread=False))
    store = _make_store(conn)

    # Tables are missing until the schema is created.
    with pytest.raises(BackendError):
        store.local_to_remote_post_id("p1")
    assert conn.rollbacks == 1

    store.init_schema()
    store.link_posts("p1", "chat-1", "rp1")
    assert store.local_to_remote_post_id("p1") == "rp1"


def test_successful_read_ends_its_transaction() -> None:
    conn = RecordingConnection(sqlite3.connect(":memory:", check_same_thread=False))
    store = _make_store(conn)
    store.init_schema()
    commits_before = conn.commits

    store.link_posts("p1", "chat-1", "rp1")
    store.local_to_remote_post_id("p1")

    assert conn.commits == commits_before + 2
    assert conn.rollbacks == 0
