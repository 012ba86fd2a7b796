"""
Sticky-note window state and its side of the store protocol.

The session holds the last canonical Group returned by the store and turns
every user action into one ``groups:update`` built from it. The returned group
is adopted as truth. Polling detects edits from elsewhere and deletion of the
group; a deleted group shows a notice and closes the window after a delay.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from ..DB.store_errors import NotFoundError, StorageUnavailableError
from ..IPC.client import StoreClient
from ..Models.planner_models import (
    DEFAULT_TIMER_MINUTES,
    FOREVER,
    THEMES,
    DayContent,
    Group,
    TodoItem,
    ViewMode,
    VisibilityMode,
    is_bucket_key,
)
from ..Notes import content_ops, focus_timer, migration
from ..Notes.celebrations import (
    NOTES_MOVED_MESSAGE,
    TASK_MOVED_MESSAGE,
    TIMER_FINISHED_MESSAGE,
    get_random_quote,
)
from ..Utils.date_keys import parse_date_key, relative_date_key, shift_date_key, today_key

GROUP_DELETED_MESSAGE = "Group was deleted"
SAVE_FAILED_MESSAGE = "Could not save changes"
LOAD_FAILED_MESSAGE = "Could not reach the note store"

RELATIVE_TARGETS = ("yesterday", "today", "tomorrow")


class SessionHost(ABC):
    """What the session needs from the window displaying it."""

    @abstractmethod
    def show_toast(self, message: str, severity: str = "information", timeout: Optional[float] = None) -> None:
        """Show a short-lived, non-blocking notice."""

    @abstractmethod
    def close_window(self, delay: float) -> None:
        """Close the window after ``delay`` seconds."""

    @abstractmethod
    def refresh_view(self) -> None:
        """Re-render from the session's current state."""


@dataclass
class NoteWindowState:
    """Mutable view state of one sticky-note window."""

    group_id: str
    group: Optional[Group] = None
    current_date: str = ""
    closing: bool = False

    @property
    def current_bucket(self) -> str:
        if self.group is not None and self.group.is_forever_view:
            return FOREVER
        return self.current_date


class NoteWindowSession:
    """Window side of the protocol for one group."""

    def __init__(self, client: StoreClient, group_id: str, host: SessionHost,
                 close_delay: float = 1.0, toast_timeout: float = 2.0,
                 celebration_timeout: float = 3.0, tick_interval: float = 1.0,
                 move_separator: str = migration.DEFAULT_NOTES_SEPARATOR,
                 timer_minutes: int = DEFAULT_TIMER_MINUTES,
                 today: Callable[[], str] = today_key):
        self.client = client
        self.host = host
        self.close_delay = close_delay
        self.toast_timeout = toast_timeout
        self.celebration_timeout = celebration_timeout
        self.move_separator = move_separator
        self.timer_minutes = timer_minutes
        self._today = today
        self.state = NoteWindowState(group_id=group_id, current_date=today())
        self.ticker = focus_timer.FocusTicker(self._on_tick, tick_interval)
        self._write_lock = asyncio.Lock()

    # ---- read access for the view ----

    @property
    def group(self) -> Optional[Group]:
        return self.state.group

    @property
    def current_bucket(self) -> str:
        return self.state.current_bucket

    @property
    def current_content(self) -> DayContent:
        if self.group is None:
            return DayContent.empty(self.current_bucket)
        return self.group.content_for(self.current_bucket)

    @property
    def now_playing(self) -> Optional[TodoItem]:
        return focus_timer.running_todo(self.current_content)

    @property
    def progress(self) -> int:
        return content_ops.completion_progress(self.current_content)

    # ---- lifecycle ----

    async def load(self) -> bool:
        """Fetch the group, restore the last displayed date and apply window state."""
        try:
            groups = await self.client.list_groups()
        except StorageUnavailableError as e:
            logger.error(f"Loading group {self.state.group_id} failed: {e}")
            self.host.show_toast(LOAD_FAILED_MESSAGE, "error", self.toast_timeout)
            return False

        group = next((g for g in groups if g.id == self.state.group_id), None)
        if group is None:
            self._group_gone()
            return False

        self.state.current_date = group.last_selected_date or self._today()
        self._adopt(group)

        try:
            await self.client.set_always_on_top(group.id, group.is_always_on_top)
            if group.x is not None and group.y is not None:
                await self.client.update_position(group.id, group.x, group.y, group.width, group.height)
        except StorageUnavailableError as e:
            logger.warning(f"Could not apply window state for group {group.id}: {e}")
        return True

    async def poll(self) -> None:
        """Compare against the store's group list; adopt newer state or close if the group is gone."""
        if self.state.closing:
            return
        async with self._write_lock:
            try:
                groups = await self.client.list_groups()
            except StorageUnavailableError as e:
                logger.debug(f"Poll for group {self.state.group_id} failed: {e}")
                return
            if self.state.closing:
                return
            fresh = next((g for g in groups if g.id == self.state.group_id), None)
            if fresh is None:
                logger.info(f"Group {self.state.group_id} no longer exists; closing its window")
                self._group_gone()
                return
            if self.group is None or fresh.updated_at != self.group.updated_at:
                logger.debug(f"Adopting newer state of group {fresh.id} ({fresh.updated_at})")
                self._adopt(fresh)

    def close(self) -> None:
        """Stop ticking; in-flight writes finish but their result is dropped."""
        self.state.closing = True
        self.ticker.cancel_all()

    # ---- internals ----

    def _adopt(self, group: Group) -> None:
        self.state.group = group
        if not self.state.closing:
            self.ticker.sync(focus_timer.running_timers(group))
        self.host.refresh_view()

    def _group_gone(self) -> None:
        if self.state.closing:
            return
        self.close()
        self.host.show_toast(GROUP_DELETED_MESSAGE, "warning", self.toast_timeout)
        self.host.close_window(self.close_delay)

    async def _commit(self, transform: Callable[[Group], Group]) -> Optional[Group]:
        """
        Apply ``transform`` to the latest canonical group and send the result.

        Returns the adopted group, or None when nothing was written. A transform
        that returns its input unchanged is a no-op.
        """
        async with self._write_lock:
            if self.state.closing or self.group is None:
                return None
            candidate = transform(self.group)
            if candidate is self.group:
                return None
            try:
                canonical = await self.client.update_group(candidate)
            except NotFoundError:
                self._group_gone()
                return None
            except StorageUnavailableError as e:
                logger.error(f"Saving group {candidate.id} failed: {e}")
                self.host.show_toast(SAVE_FAILED_MESSAGE, "error", self.toast_timeout)
                return None
            if self.state.closing:
                return None
            self._adopt(canonical)
            return canonical

    def _relative(self, when: str) -> str:
        return relative_date_key(when, parse_date_key(self._today()))

    def _resolve_target(self, target: str) -> Optional[str]:
        if target in RELATIVE_TARGETS:
            return self._relative(target)
        if is_bucket_key(target):
            return target
        logger.warning(f"Ignoring move to unknown bucket {target!r}")
        return None

    async def _on_tick(self, bucket: str, todo_id: str) -> None:
        outcome = {"result": focus_timer.TickResult.IGNORED}

        def _tick(group: Group) -> Group:
            updated, outcome["result"] = focus_timer.tick_timer(group, bucket, todo_id)
            return updated

        await self._commit(_tick)
        if outcome["result"] is focus_timer.TickResult.IGNORED and self.group is not None and not self.state.closing:
            # The timer was stopped elsewhere; drop this ticker
            self.ticker.sync(focus_timer.running_timers(self.group))
        elif outcome["result"] is focus_timer.TickResult.EXPIRED:
            self.host.show_toast(TIMER_FINISHED_MESSAGE, "information", self.celebration_timeout)

    # ---- todos ----

    async def add_todo(self, text: str) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: content_ops.add_todo(g, bucket, text, self.timer_minutes))

    async def delete_todo(self, todo_id: str) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: content_ops.delete_todo(g, bucket, todo_id))

    async def toggle_todo(self, todo_id: str) -> Optional[Group]:
        bucket = self.current_bucket
        completed = {"now": False}

        def _toggle(group: Group) -> Group:
            updated, completed["now"] = content_ops.toggle_todo(group, bucket, todo_id)
            return updated

        result = await self._commit(_toggle)
        if result is not None and completed["now"]:
            self.host.show_toast(get_random_quote(), "information", self.celebration_timeout)
        return result

    async def reorder_todo(self, from_index: int, to_index: int) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: content_ops.reorder_todo(g, bucket, from_index, to_index))

    async def update_todo_text(self, todo_id: str, text: str) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: content_ops.update_todo_text(g, bucket, todo_id, text))

    async def update_description(self, todo_id: str, description: str) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: content_ops.update_description(g, bucket, todo_id, description))

    async def toggle_expansion(self, todo_id: str) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: content_ops.toggle_expansion(g, bucket, todo_id))

    async def set_notes(self, notes: str, bucket: Optional[str] = None) -> Optional[Group]:
        """Save notes into ``bucket``, defaulting to the displayed one."""
        bucket = bucket or self.current_bucket
        return await self._commit(lambda g: content_ops.set_notes(g, bucket, notes))

    # ---- focus timer ----

    async def toggle_timer(self, todo_id: str) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: focus_timer.toggle_timer(g, bucket, todo_id))

    async def stop_timer(self, todo_id: str) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: focus_timer.stop_timer(g, bucket, todo_id))

    async def set_timer_duration(self, todo_id: str, minutes: int) -> Optional[Group]:
        bucket = self.current_bucket
        return await self._commit(lambda g: focus_timer.set_timer_duration(g, bucket, todo_id, minutes))

    # ---- migration ----

    async def move_todo(self, todo_id: str, target: str) -> bool:
        source = self.current_bucket
        target_bucket = self._resolve_target(target)
        if target_bucket is None:
            return False
        moved = {"ok": False}

        def _move(group: Group) -> Group:
            updated, moved["ok"] = migration.move_todo(group, source, todo_id, target_bucket)
            return updated

        if await self._commit(_move) is None or not moved["ok"]:
            return False
        self.host.show_toast(TASK_MOVED_MESSAGE, "information", self.toast_timeout)
        return True

    async def move_notes(self, target: str) -> bool:
        source = self.current_bucket
        target_bucket = self._resolve_target(target)
        if target_bucket is None:
            return False
        moved = {"ok": False}

        def _move(group: Group) -> Group:
            updated, moved["ok"] = migration.move_notes(group, source, target_bucket, self.move_separator)
            return updated

        if await self._commit(_move) is None or not moved["ok"]:
            return False
        self.host.show_toast(NOTES_MOVED_MESSAGE, "information", self.toast_timeout)
        return True

    # ---- date navigation ----

    async def select_date(self, date_key: str) -> Optional[Group]:
        """Display ``date_key`` and remember it as the group's last selected date."""
        if date_key in RELATIVE_TARGETS:
            date_key = self._relative(date_key)
        if date_key == FOREVER or not is_bucket_key(date_key):
            logger.warning(f"Ignoring selection of {date_key!r}: not a date")
            return None
        self.state.current_date = date_key
        self.host.refresh_view()
        return await self._commit(lambda g: _with_fields(g, last_selected_date=date_key))

    async def previous_day(self) -> Optional[Group]:
        return await self.select_date(shift_date_key(self.state.current_date, -1))

    async def next_day(self) -> Optional[Group]:
        return await self.select_date(shift_date_key(self.state.current_date, 1))

    async def go_to_today(self) -> Optional[Group]:
        return await self.select_date(self._today())

    # ---- group-level window state ----

    async def rename(self, title: str) -> Optional[Group]:
        if not title or not title.strip():
            return None
        return await self._commit(lambda g: _with_fields(g, title=title.strip()))

    async def toggle_view_mode(self) -> Optional[Group]:
        def _toggle(group: Group) -> Group:
            mode = ViewMode.DATE if group.is_forever_view else ViewMode.FOREVER
            return _with_fields(group, view_mode=mode)

        return await self._commit(_toggle)

    async def toggle_always_on_top(self) -> Optional[Group]:
        def _toggle(group: Group) -> Group:
            mode = VisibilityMode.STANDARD if group.is_always_on_top else VisibilityMode.ALWAYS_ON_TOP
            return _with_fields(group, visibility_mode=mode)

        result = await self._commit(_toggle)
        if result is not None:
            try:
                await self.client.set_always_on_top(result.id, result.is_always_on_top)
            except StorageUnavailableError as e:
                logger.warning(f"Could not apply always-on-top to group {result.id}: {e}")
        return result

    async def set_theme(self, theme: str) -> Optional[Group]:
        if theme not in THEMES:
            logger.warning(f"Ignoring unknown theme {theme!r}")
            return None
        return await self._commit(lambda g: g if g.theme == theme else _with_fields(g, theme=theme))

    async def toggle_tasks_section(self) -> Optional[Group]:
        return await self._commit(lambda g: _with_fields(g, is_tasks_expanded=not g.is_tasks_expanded))

    async def toggle_notes_section(self) -> Optional[Group]:
        return await self._commit(lambda g: _with_fields(g, is_notes_expanded=not g.is_notes_expanded))

    async def update_geometry(self, x: int, y: int, width: int, height: int) -> Optional[Group]:
        result = await self._commit(lambda g: _with_fields(g, x=x, y=y, width=width, height=height))
        if result is not None:
            try:
                await self.client.update_position(result.id, x, y, width, height)
            except StorageUnavailableError as e:
                logger.warning(f"Could not move window of group {result.id}: {e}")
        return result

    async def delete_group(self) -> bool:
        """Delete the displayed group; the store owner closes this window in response."""
        if self.group is None or self.state.closing:
            return False
        try:
            await self.client.delete_group(self.group.id)
        except NotFoundError:
            self._group_gone()
            return False
        except StorageUnavailableError as e:
            logger.error(f"Deleting group {self.group.id} failed: {e}")
            self.host.show_toast(SAVE_FAILED_MESSAGE, "error", self.toast_timeout)
            return False
        self.close()
        self.host.close_window(0)
        return True


def _with_fields(group: Group, **fields) -> Group:
    """Copy of ``group`` with top-level fields replaced, re-validated."""
    data = group.model_dump()
    data.update(fields)
    return Group.model_validate(data)

