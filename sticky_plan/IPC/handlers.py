# handlers.py
# Description: Channel handlers of the store-owning process, applied one request at a time
#
"""
handlers.py
-----------

``ChannelRouter`` maps channel names to handlers and runs every request under
one FIFO ``asyncio.Lock``. Requests are therefore applied in arrival order and
never interleave: the last applied write to a group is the stored value.

Store handlers are plain functions doing blocking file I/O; the router runs
them in a worker thread (still inside the lock) so the event loop stays free.
Window handlers are coroutines and are awaited directly.
"""
#
# Imports
import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Union
#
# Third-Party Imports
from loguru import logger
from pydantic import ValidationError
#
# Local Imports
from . import channels
from ..DB.groups_store import GroupsStore
from ..DB.store_errors import BadRequestError, UnknownChannelError
from ..Models.planner_models import DayContent, FOREVER, is_bucket_key
from ..Windows.window_manager import StickyNoteWindowManager
#
#######################################################################################################################
#
# Classes:

Payload = Dict[str, Any]
Handler = Union[Callable[[Payload], Any], Callable[[Payload], Awaitable[Any]]]

log = logger.bind(module="IPC")


class ChannelRouter:
    """Serialised dispatch of named requests to registered handlers."""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}
        self._lock = asyncio.Lock()

    def register(self, channel: str, handler: Handler) -> None:
        if channel in self._handlers:
            log.warning(f"Replacing handler for channel '{channel}'")
        self._handlers[channel] = handler

    @property
    def channels(self):
        return sorted(self._handlers)

    async def dispatch(self, channel: str, payload: Optional[Payload] = None) -> Any:
        """
        Run the handler for ``channel`` and return its JSON-ready result.

        Raises:
            UnknownChannelError: If nothing is registered for ``channel``.
            BadRequestError: If the payload is malformed.
            StoreError subclasses raised by the handler.
        """
        handler = self._handlers.get(channel)
        if handler is None:
            raise UnknownChannelError(channel)
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise BadRequestError(f"Payload for '{channel}' must be a JSON object")

        async with self._lock:
            log.debug(f"Dispatching {channel}")
            try:
                if inspect.iscoroutinefunction(handler):
                    return await handler(payload)
                return await asyncio.to_thread(handler, payload)
            except ValidationError as e:
                raise BadRequestError(f"Invalid payload for '{channel}': {e}") from e


def _require(payload: Payload, key: str, expected: type = str) -> Any:
    value = payload.get(key)
    if value is None or (expected is str and not isinstance(value, str)):
        raise BadRequestError(f"Missing or invalid '{key}'")
    return value


def _optional_int(payload: Payload, key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise BadRequestError(f"'{key}' must be an integer") from e


def register_ipc_handlers(router: ChannelRouter, store: GroupsStore,
                          window_manager: StickyNoteWindowManager) -> ChannelRouter:
    """Wire every channel to the store and the window manager."""

    # ---- groups ----

    def list_groups(payload: Payload):
        return [group.to_wire() for group in store.list_groups()]

    def create_group(payload: Payload):
        title = payload.get("title")
        group = store.create_group(title if isinstance(title, str) else "")
        return group.to_wire() if group is not None else None

    def update_group(payload: Payload):
        # The payload is the (full or partial) group itself
        if not payload.get("id"):
            raise BadRequestError("Group update payload has no id")
        return store.update_group(payload).to_wire()

    async def delete_group(payload: Payload):
        group_id = _require(payload, "id")
        await asyncio.to_thread(store.delete_group, group_id)
        await window_manager.close_note(group_id)
        return {"success": True}

    # ---- windows ----

    async def open_note(payload: Payload):
        group_id = _require(payload, "groupId")
        group = await asyncio.to_thread(store.get_group, group_id)
        await window_manager.open_note(group)
        return None

    async def set_always_on_top(payload: Payload):
        group_id = _require(payload, "groupId")
        return window_manager.set_always_on_top(group_id, bool(payload.get("alwaysOnTop")))

    async def update_position(payload: Payload):
        group_id = _require(payload, "groupId")
        return window_manager.update_position(
            group_id,
            _optional_int(payload, "x"),
            _optional_int(payload, "y"),
            _optional_int(payload, "width"),
            _optional_int(payload, "height"),
        )

    async def get_position(payload: Payload):
        return window_manager.get_position(_require(payload, "groupId"))

    # ---- day content ----

    def get_day_content(payload: Payload):
        group_id = _require(payload, "groupId")
        date_key = _require(payload, "dateKey")
        if not is_bucket_key(date_key):
            raise BadRequestError(f"'{date_key}' is neither a YYYY-MM-DD date nor '{FOREVER}'")
        content = store.get_day_content(group_id, date_key)
        return content.to_wire() if content is not None else None

    def set_day_content(payload: Payload):
        group_id = _require(payload, "groupId")
        raw = payload.get("dayContent")
        if not isinstance(raw, dict):
            raise BadRequestError("Missing or invalid 'dayContent'")
        content = DayContent.from_wire(raw)
        if not is_bucket_key(content.date):
            raise BadRequestError(f"'{content.date}' is neither a YYYY-MM-DD date nor '{FOREVER}'")
        return store.set_day_content(group_id, content).to_wire()

    router.register(channels.GROUPS_LIST, list_groups)
    router.register(channels.GROUPS_CREATE, create_group)
    router.register(channels.GROUPS_UPDATE, update_group)
    router.register(channels.GROUPS_DELETE, delete_group)
    router.register(channels.STICKY_NOTE_OPEN, open_note)
    router.register(channels.STICKY_NOTE_SET_ALWAYS_ON_TOP, set_always_on_top)
    router.register(channels.STICKY_NOTE_UPDATE_POSITION, update_position)
    router.register(channels.STICKY_NOTE_GET_POSITION, get_position)
    router.register(channels.DAY_CONTENT_GET, get_day_content)
    router.register(channels.DAY_CONTENT_SET, set_day_content)
    log.info(f"Registered {len(router.channels)} IPC channels")
    return router


#
# End of handlers.py
#######################################################################################################################
