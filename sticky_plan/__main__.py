"""
Entry point for sticky_plan.

Usage:
    python -m sticky_plan serve                 # store owner + window manager
    python -m sticky_plan home                  # group list window
    python -m sticky_plan note GROUP_ID         # one sticky-note window
    python -m sticky_plan groups list|create TITLE|delete ID
    python -m sticky_plan day show GROUP_ID [DATE|forever]
"""

import argparse
import asyncio
import json
import sys
from functools import partial
from pathlib import Path
from typing import Any, List, Optional

from loguru import logger

from . import config
from .DB.groups_store import GroupsStore
from .DB.store_errors import StoreError
from .IPC.client import StoreClient
from .IPC.server import run_store_server
from .logging_config import configure_logging
from .Models.planner_models import FOREVER, Group, is_bucket_key
from .Utils.date_keys import relative_date_key, today_key
from .Windows.window_manager import StickyNoteWindowManager, SubprocessWindowHandle, bounds_for


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sticky Plan - floating day planner notes in your terminal",
        prog="sticky-plan"
    )
    parser.add_argument("--store-url", type=str, help="URL of the running store (default: from config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Own the note store and manage note windows")
    serve.add_argument("--host", type=str, help="Address to listen on (default: from config)")
    serve.add_argument("--port", type=int, help="Port to listen on (default: from config)")
    serve.add_argument("--store-path", type=Path, help="JSON store file (default: from config)")

    subparsers.add_parser("home", help="Open the group list window")

    note = subparsers.add_parser("note", help="Open the sticky-note window of one group")
    note.add_argument("group_id")
    note.add_argument("--store-url", type=str, dest="note_store_url", help=argparse.SUPPRESS)

    groups = subparsers.add_parser("groups", help="List, create or delete groups")
    groups_sub = groups.add_subparsers(dest="groups_command", required=True)
    groups_sub.add_parser("list", help="Print every group")
    create = groups_sub.add_parser("create", help="Create a group")
    create.add_argument("title")
    delete = groups_sub.add_parser("delete", help="Delete a group and close its window")
    delete.add_argument("group_id")

    day = subparsers.add_parser("day", help="Inspect day content")
    day_sub = day.add_subparsers(dest="day_command", required=True)
    show = day_sub.add_parser("show", help="Print one bucket of a group")
    show.add_argument("group_id")
    show.add_argument("date", nargs="?", default=None,
                      help="YYYY-MM-DD, today, yesterday, tomorrow or forever (default: today)")

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _resolve_date(value: Optional[str]) -> str:
    if not value:
        return today_key()
    if value in ("yesterday", "today", "tomorrow"):
        return relative_date_key(value)
    if not is_bucket_key(value):
        raise ValueError(f"'{value}' is neither a YYYY-MM-DD date nor '{FOREVER}'")
    return value


def _make_client(store_url: Optional[str]) -> StoreClient:
    return StoreClient(store_url or config.get_store_url(), timeout=config.get_request_timeout())


async def _serve(args: argparse.Namespace) -> None:
    host = args.host or config.get_typed_setting("ipc", "host", "127.0.0.1", str)
    port = args.port or config.get_typed_setting("ipc", "port", 47615, int)
    store_path = args.store_path or config.get_store_path()
    store = GroupsStore(store_path)

    store_url = config.get_store_url(host, port)
    width = config.get_typed_setting("windows", "default_width", 320, int)
    height = config.get_typed_setting("windows", "default_height", 400, int)

    async def launch(group: Group) -> SubprocessWindowHandle:
        return await SubprocessWindowHandle.launch(
            group,
            store_url,
            launcher=config.get_window_launcher(),
            focus_command=config.get_focus_command(),
            bounds=bounds_for(group, width, height),
        )

    window_manager = StickyNoteWindowManager(launch)
    await run_store_server(store, window_manager, host, port)


async def _run_app(app_factory, store_url: Optional[str]) -> None:
    client = _make_client(store_url)
    try:
        await app_factory(client).run_async()
    finally:
        await client.close()


def _note_app(group_id: str, client: StoreClient):
    from .UI.sticky_note_app import StickyNoteApp
    return StickyNoteApp(
        client,
        group_id,
        poll_interval=config.get_poll_interval(),
        close_delay=config.get_close_delay(),
        toast_timeout=config.get_toast_timeout(),
        celebration_timeout=config.get_celebration_timeout(),
        tick_interval=config.get_tick_interval(),
        move_separator=config.get_move_separator(),
        timer_minutes=config.get_default_timer_minutes(),
    )


def _home_app(client: StoreClient):
    from .UI.home_app import HomeApp
    return HomeApp(client, poll_interval=config.get_poll_interval())


async def _groups(args: argparse.Namespace) -> int:
    async with _make_client(args.store_url) as client:
        if args.groups_command == "list":
            _print_json([group.to_wire() for group in await client.list_groups()])
        elif args.groups_command == "create":
            group = await client.create_group(args.title)
            if group is None:
                print("A group needs a non-blank title.", file=sys.stderr)
                return 1
            _print_json(group.to_wire())
        elif args.groups_command == "delete":
            await client.delete_group(args.group_id)
            print(f"Deleted group {args.group_id}")
    return 0


async def _day(args: argparse.Namespace) -> int:
    date_key = _resolve_date(args.date)
    async with _make_client(args.store_url) as client:
        content = await client.get_day_content(args.group_id, date_key)
    _print_json(content.to_wire() if content is not None else None)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log_settings = config.get_logging_settings()
    is_tui = args.command in ("home", "note")
    configure_logging(
        level=log_settings["log_level"],
        log_file=log_settings["log_file"] or None,
        # A stderr sink would draw over the terminal UI
        console=not is_tui,
        rotation=log_settings["rotation"],
        retention=log_settings["retention"],
    )

    try:
        if args.command == "serve":
            asyncio.run(_serve(args))
        elif args.command == "home":
            asyncio.run(_run_app(_home_app, args.store_url))
        elif args.command == "note":
            store_url = args.note_store_url or args.store_url
            asyncio.run(_run_app(partial(_note_app, args.group_id), store_url))
        elif args.command == "groups":
            return asyncio.run(_groups(args))
        elif args.command == "day":
            return asyncio.run(_day(args))
    except KeyboardInterrupt:
        print("\nsticky_plan stopped.")
        return 0
    except (StoreError, ValueError) as e:
        logger.debug(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
