# sticky_plan/IPC/client.py
# Description: Window-side client for the store owner's request/response channels
#
# Every call awaits the store's canonical answer; typed failures sent by the
# server are re-raised as the matching StoreError subclass.

from __future__ import annotations
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from . import channels
from ..DB.store_errors import (
    BadRequestError,
    NotFoundError,
    StorageUnavailableError,
    StoreConnectionError,
    StoreError,
    UnknownChannelError,
)
from ..Models.planner_models import DayContent, Group

logger = logger.bind(module="store_client")


def _raise_for_error(channel: str, payload: Optional[Dict[str, Any]], error: Dict[str, Any]) -> None:
    kind = error.get("kind")
    message = error.get("message") or f"{channel} failed"
    if kind == NotFoundError.kind:
        group_id = (payload or {}).get("groupId") or (payload or {}).get("id") or ""
        raise NotFoundError(group_id, message)
    if kind == StorageUnavailableError.kind:
        raise StorageUnavailableError(message)
    if kind == UnknownChannelError.kind:
        raise UnknownChannelError(channel)
    if kind == BadRequestError.kind:
        raise BadRequestError(message)
    raise StoreError(message)


class StoreClient:
    """Client for the store-owning process."""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            base_url: e.g. ``http://127.0.0.1:47615``
            timeout: Seconds to wait for one request
            transport: Replaces the network transport (in-process tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "StoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def request(self, channel: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send one request and return its ``result``.

        Raises:
            StoreConnectionError: If the store owner cannot be reached or answers garbage.
            StoreError subclasses for errors reported by the store owner.
        """
        try:
            response = await self.client.post(channels.channel_path(channel), json=payload or {})
        except httpx.HTTPError as e:
            logger.warning(f"{channel}: store owner unreachable at {self.base_url}: {e}")
            raise StoreConnectionError(f"Could not reach the store at {self.base_url}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise StoreConnectionError(
                f"Unexpected {response.status_code} response to {channel} from {self.base_url}"
            ) from e

        if not isinstance(body, dict) or "ok" not in body:
            raise StoreConnectionError(f"Malformed response to {channel}")
        if not body["ok"]:
            _raise_for_error(channel, payload, body.get("error") or {})
        return body.get("result")

    # ---- groups ----

    async def list_groups(self) -> List[Group]:
        return [Group.from_wire(item) for item in await self.request(channels.GROUPS_LIST)]

    async def create_group(self, title: str) -> Optional[Group]:
        result = await self.request(channels.GROUPS_CREATE, {"title": title})
        return Group.from_wire(result) if result is not None else None

    async def update_group(self, group: Group | Dict[str, Any]) -> Group:
        payload = group.to_wire() if isinstance(group, Group) else group
        return Group.from_wire(await self.request(channels.GROUPS_UPDATE, payload))

    async def delete_group(self, group_id: str) -> bool:
        result = await self.request(channels.GROUPS_DELETE, {"id": group_id})
        return bool(result and result.get("success"))

    # ---- windows ----

    async def open_note(self, group_id: str) -> None:
        await self.request(channels.STICKY_NOTE_OPEN, {"groupId": group_id})

    async def set_always_on_top(self, group_id: str, always_on_top: bool) -> bool:
        return bool(await self.request(
            channels.STICKY_NOTE_SET_ALWAYS_ON_TOP,
            {"groupId": group_id, "alwaysOnTop": always_on_top},
        ))

    async def update_position(self, group_id: str, x: Optional[int], y: Optional[int],
                              width: Optional[int], height: Optional[int]) -> bool:
        return bool(await self.request(
            channels.STICKY_NOTE_UPDATE_POSITION,
            {"groupId": group_id, "x": x, "y": y, "width": width, "height": height},
        ))

    async def get_position(self, group_id: str) -> Optional[Dict[str, Optional[int]]]:
        return await self.request(channels.STICKY_NOTE_GET_POSITION, {"groupId": group_id})

    # ---- day content ----

    async def get_day_content(self, group_id: str, date_key: str) -> Optional[DayContent]:
        result = await self.request(channels.DAY_CONTENT_GET, {"groupId": group_id, "dateKey": date_key})
        return DayContent.from_wire(result) if result is not None else None

    async def set_day_content(self, group_id: str, day_content: DayContent) -> DayContent:
        result = await self.request(
            channels.DAY_CONTENT_SET,
            {"groupId": group_id, "dayContent": day_content.to_wire()},
        )
        return DayContent.from_wire(result)
