"""Command line entry point for the bridgestore admin tool."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from art import tprint
from rich.console import Console
from rich.table import Table

import settings
from adapters.memory_kv import MemoryKVStore
from adapters.sql_store import SQLStore, connect_sqlite
from adapters.static_team_directory import StaticTeamDirectory
from core.errors import NotAuthorizedError, NotFoundError, StoreError
from core.models import ChannelLink
from core.ports import StorePort
from log import configure_logging

NAME = "BRIDGESTORE"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _build_store() -> SQLStore:
    # The CLI only opens local SQLite files; hosts inject their own
    # connection (and driver name) when embedding the store.
    if settings.STORE_CONFIG.driver_name not in {"sqlite", "sqlite3"}:
        raise RuntimeError("The admin CLI only supports DB_DRIVER=sqlite")

    return SQLStore(
        connect_sqlite(settings.DB_PATH),
        kv_store=MemoryKVStore(),
        team_directory=StaticTeamDirectory(settings.TEAMS),
        enabled_teams=settings.enabled_teams,
        config=settings.STORE_CONFIG,
    )


def _links_table(links: list[ChannelLink]) -> Table:
    table = Table(title="Channel links")
    table.add_column("Team")
    table.add_column("Channel")
    table.add_column("Remote team")
    table.add_column("Remote channel")
    for link in links:
        table.add_row(
            link.local_team_id,
            link.local_channel_id,
            link.remote_team_id,
            link.remote_channel_id,
        )
    return table


def _run_command(store: StorePort, args: argparse.Namespace, console: Console) -> None:
    if args.command == "init":
        # Schema creation already ran while opening the store.
        console.print(f"Database ready at {settings.DB_PATH}")
        return

    if args.command == "link":
        link = ChannelLink(
            local_team_id=args.team,
            local_channel_id=args.channel,
            remote_team_id=args.remote_team,
            remote_channel_id=args.remote_channel,
        )
        try:
            store.store_channel_link(link)
        except NotAuthorizedError:
            console.print(
                f"Link for {args.channel} was saved, but team {args.team} is not enabled "
                "so it will stay hidden until the team is enabled."
            )
            raise
        console.print(f"Linked {args.channel} -> {args.remote_team}/{args.remote_channel}")
        return

    if args.command == "unlink":
        store.delete_link_by_channel_id(args.channel)
        console.print(f"Unlinked {args.channel}")
        return

    if args.command == "show":
        console.print(_links_table([store.get_link_by_channel_id(args.channel)]))
        return

    if args.command == "links":
        links = store.list_links()
        if not links:
            console.print("No channel links for enabled teams.")
            return
        console.print(_links_table(links))
        return

    if args.command == "user":
        remote_id = store.local_to_remote_user_id(args.user)
        try:
            store.get_token_for_local_user(args.user)
            has_token = True
        except NotFoundError:
            has_token = False
        console.print(f"{args.user} -> {remote_id} (token stored: {'yes' if has_token else 'no'})")
        return


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="bridgestore")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Create the database tables")

    link_parser = subparsers.add_parser("link", help="Link a local channel to a remote channel")
    link_parser.add_argument("channel")
    link_parser.add_argument("team")
    link_parser.add_argument("remote_team")
    link_parser.add_argument("remote_channel")

    unlink_parser = subparsers.add_parser("unlink", help="Remove the link of a local channel")
    unlink_parser.add_argument("channel")

    show_parser = subparsers.add_parser("show", help="Show the link of a local channel")
    show_parser.add_argument("channel")

    subparsers.add_parser("links", help="List links for enabled teams")

    user_parser = subparsers.add_parser("user", help="Show the remote mapping of a local user")
    user_parser.add_argument("user")

    args = parser.parse_args(argv)
    if args.command == "init":
        _print_banner()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    logger = logging.getLogger(__name__)

    store = _build_store()
    try:
        # Bootstrap failures abort before any command runs.
        store.init_schema()
        _run_command(store, args, Console())
    except (StoreError, ValueError) as exc:
        # ValueError covers a config.json that became invalid while running.
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
