# focus_timer.py
# Description: Per-todo focus countdown state machine and its one-second ticker
#
# Imports
import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set, Tuple
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from ..Models.planner_models import DayContent, Group, TodoItem
#
#######################################################################################################################
#
# State machine:
#
#   Idle   --start-->  Running  --toggle--> Paused --start--> Running
#   any    --stop--->  Idle (remaining reset to the full duration)
#   Running --tick at 0--> Expired (remaining 0)
#
# At most one todo per bucket is Running; starting one pauses the others.

class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"


class TickResult(Enum):
    IGNORED = "ignored"  # timer was not running, or the todo is gone
    TICKED = "ticked"
    EXPIRED = "expired"


def timer_state(todo: TodoItem) -> TimerState:
    if todo.is_timer_running:
        return TimerState.RUNNING
    if todo.remaining_time is None or todo.remaining_time == todo.full_duration_seconds:
        return TimerState.IDLE
    if todo.remaining_time <= 0:
        return TimerState.EXPIRED
    return TimerState.PAUSED


def running_todo(content: DayContent) -> Optional[TodoItem]:
    """The bucket's single Running todo, if any (the "now playing" item)."""
    for todo in content.todos:
        if todo.is_timer_running:
            return todo
    return None


def running_timers(group: Group) -> Set[Tuple[str, str]]:
    """(bucket, todo id) for every Running todo across all buckets."""
    return {
        (bucket.date, todo.id)
        for bucket in group.iter_buckets()
        for todo in bucket.todos
        if todo.is_timer_running
    }


def reset_to_idle(todo: TodoItem) -> None:
    """Stop the countdown and rewind it to the full duration (mutates `todo`)."""
    todo.is_timer_running = False
    todo.remaining_time = todo.full_duration_seconds


def _edit(group: Group, bucket: str, todo_id: str,
          edit: Callable[[DayContent, TodoItem], None]) -> Group:
    content = group.content_for(bucket)
    todo = content.find_todo(todo_id)
    if todo is None:
        logger.debug(f"Timer operation on unknown todo {todo_id} in bucket {bucket}; ignoring")
        return group
    edit(content, todo)
    return group.with_contents(content)


def start_timer(group: Group, bucket: str, todo_id: str) -> Group:
    """
    Idle/Paused/Expired -> Running.

    An unset or zero remaining time is re-initialised to the full duration.
    Any other Running todo in the same bucket is paused, keeping its progress.
    Completed todos cannot start a countdown.
    """
    todo = group.content_for(bucket).find_todo(todo_id)
    if todo is not None and (todo.completed or todo.is_timer_running):
        return group

    def _start(content: DayContent, todo: TodoItem) -> None:
        for other in content.todos:
            if other.id != todo.id and other.is_timer_running:
                other.is_timer_running = False
                logger.debug(f"Paused timer of {other.id} at {other.remaining_time}s")
        if not todo.remaining_time:
            todo.remaining_time = todo.full_duration_seconds
        todo.is_timer_running = True

    return _edit(group, bucket, todo_id, _start)


def pause_timer(group: Group, bucket: str, todo_id: str) -> Group:
    """Running -> Paused; the remaining time is frozen."""
    def _pause(content: DayContent, todo: TodoItem) -> None:
        todo.is_timer_running = False

    return _edit(group, bucket, todo_id, _pause)


def toggle_timer(group: Group, bucket: str, todo_id: str) -> Group:
    todo = group.content_for(bucket).find_todo(todo_id)
    if todo is not None and todo.is_timer_running:
        return pause_timer(group, bucket, todo_id)
    return start_timer(group, bucket, todo_id)


def stop_timer(group: Group, bucket: str, todo_id: str) -> Group:
    """Any state -> Idle."""
    return _edit(group, bucket, todo_id, lambda content, todo: reset_to_idle(todo))


def set_timer_duration(group: Group, bucket: str, todo_id: str, minutes: int) -> Group:
    """Change the duration (minutes) and rewind the countdown to it. Values below 1 are ignored."""
    if minutes < 1:
        return group

    def _set(content: DayContent, todo: TodoItem) -> None:
        todo.timer_duration = minutes
        todo.remaining_time = minutes * 60

    return _edit(group, bucket, todo_id, _set)


def tick_timer(group: Group, bucket: str, todo_id: str) -> Tuple[Group, TickResult]:
    """
    Advance a Running countdown by one second.

    Reaching zero expires the timer instead of going negative.
    """
    todo = group.content_for(bucket).find_todo(todo_id)
    if todo is None or not todo.is_timer_running:
        return group, TickResult.IGNORED

    outcome = {"result": TickResult.TICKED}

    def _tick(content: DayContent, item: TodoItem) -> None:
        current = item.remaining_time if item.remaining_time is not None else item.full_duration_seconds
        remaining = current - 1
        if remaining <= 0:
            item.remaining_time = 0
            item.is_timer_running = False
            outcome["result"] = TickResult.EXPIRED
        else:
            item.remaining_time = remaining

    return _edit(group, bucket, todo_id, _tick), outcome["result"]


TimerKey = Tuple[str, str]
TickCallback = Callable[[str, str], Awaitable[None]]


class FocusTicker:
    """
    One self-resuming asyncio interval per Running (bucket, todo id).

    Each loop sleeps to an absolute deadline on the event loop clock, so the
    time spent writing a tick does not push later ticks back.
    """

    def __init__(self, on_tick: TickCallback, interval: float = 1.0):
        self.on_tick = on_tick
        self.interval = interval
        self._tasks: Dict[TimerKey, asyncio.Task] = {}

    @property
    def armed(self) -> Set[TimerKey]:
        return set(self._tasks)

    def arm(self, bucket: str, todo_id: str) -> None:
        key = (bucket, todo_id)
        if key in self._tasks:
            return
        self._tasks[key] = asyncio.create_task(self._run(key), name=f"focus-tick-{bucket}-{todo_id}")
        logger.debug(f"Armed focus ticker for {key}")

    def cancel(self, bucket: str, todo_id: str) -> None:
        key = (bucket, todo_id)
        task = self._tasks.pop(key, None)
        if task is None:
            return
        # A loop that disarms itself from inside its own tick just falls out of the loop
        if task is not asyncio.current_task():
            task.cancel()
        logger.debug(f"Cancelled focus ticker for {key}")

    def sync(self, running: Iterable[TimerKey]) -> None:
        """Arm tickers for `running` and cancel every other one."""
        wanted = set(running)
        for key in self.armed - wanted:
            self.cancel(*key)
        for key in wanted - self.armed:
            self.arm(*key)

    def cancel_all(self) -> None:
        for key in list(self._tasks):
            self.cancel(*key)

    async def _run(self, key: TimerKey) -> None:
        loop = asyncio.get_running_loop()
        me = asyncio.current_task()
        deadline = loop.time() + self.interval
        while self._tasks.get(key) is me:
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            deadline += self.interval
            if self._tasks.get(key) is not me:
                break
            try:
                await self.on_tick(*key)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Focus tick for {key} failed: {e}")

#
# End of focus_timer.py
#######################################################################################################################
