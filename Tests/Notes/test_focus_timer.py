"""
Tests for the focus timer state machine and the asyncio ticker.
"""

import asyncio

import pytest

from sticky_plan.Models.planner_models import FOREVER, DayContent, Group, TodoItem
from sticky_plan.Notes.focus_timer import (
    FocusTicker,
    TickResult,
    TimerState,
    pause_timer,
    running_timers,
    running_todo,
    set_timer_duration,
    start_timer,
    stop_timer,
    tick_timer,
    timer_state,
    toggle_timer,
)

DAY = "2026-10-19"


@pytest.fixture
def group():
    return Group(title="Focus").with_contents(
        DayContent(date=DAY, todos=[
            TodoItem(id="x", text="Write"),
            TodoItem(id="y", text="Read", remaining_time=1500),
            TodoItem(id="done", text="Old", completed=True),
        ]),
        DayContent(date=FOREVER, todos=[TodoItem(id="f", text="Someday")]),
    )


def todo(group: Group, todo_id: str, bucket: str = DAY) -> TodoItem:
    return group.content_for(bucket).find_todo(todo_id)


class TestTransitions:

    def test_start_from_idle_initialises_remaining_time(self, group):
        started = start_timer(group, DAY, "x")
        item = todo(started, "x")
        assert item.is_timer_running is True
        assert item.remaining_time == 25 * 60
        assert timer_state(item) is TimerState.RUNNING

    def test_start_after_expiry_reinitialises(self, group):
        content = group.content_for(DAY)
        content.find_todo("x").remaining_time = 0
        started = start_timer(group.with_contents(content), DAY, "x")
        assert todo(started, "x").remaining_time == 1500

    def test_toggle_pauses_and_keeps_remaining(self, group):
        running = start_timer(group, DAY, "y")
        content = running.content_for(DAY)
        content.find_todo("y").remaining_time = 700
        paused = toggle_timer(running.with_contents(content), DAY, "y")

        item = todo(paused, "y")
        assert item.is_timer_running is False
        assert item.remaining_time == 700
        assert timer_state(item) is TimerState.PAUSED

    def test_resume_keeps_remaining(self, group):
        content = group.content_for(DAY)
        content.find_todo("y").remaining_time = 42
        resumed = toggle_timer(group.with_contents(content), DAY, "y")
        assert todo(resumed, "y").remaining_time == 42
        assert todo(resumed, "y").is_timer_running is True

    def test_stop_resets_to_full_duration(self, group):
        running = start_timer(group, DAY, "y")
        content = running.content_for(DAY)
        content.find_todo("y").remaining_time = 10
        stopped = stop_timer(running.with_contents(content), DAY, "y")

        item = todo(stopped, "y")
        assert item.is_timer_running is False
        assert item.remaining_time == 1500
        assert timer_state(item) is TimerState.IDLE

    def test_pause_is_idempotent(self, group):
        paused = pause_timer(group, DAY, "x")
        assert todo(paused, "x").is_timer_running is False

    def test_completed_todo_cannot_start(self, group):
        result = start_timer(group, DAY, "done")
        assert result is group
        assert todo(result, "done").is_timer_running is False

    def test_unknown_todo_is_ignored(self, group):
        assert start_timer(group, DAY, "nope") is group


class TestSingleRunningTimerPerBucket:

    def test_starting_one_pauses_the_other_without_losing_progress(self, group):
        running = start_timer(group, DAY, "y")
        content = running.content_for(DAY)
        content.find_todo("y").remaining_time = 1234
        running = running.with_contents(content)

        switched = start_timer(running, DAY, "x")

        assert todo(switched, "x").is_timer_running is True
        assert todo(switched, "y").is_timer_running is False
        assert todo(switched, "y").remaining_time == 1234
        assert running_todo(switched.content_for(DAY)).id == "x"

    def test_other_buckets_are_independent(self, group):
        both = start_timer(start_timer(group, DAY, "x"), FOREVER, "f")
        assert running_timers(both) == {(DAY, "x"), (FOREVER, "f")}


class TestTick:

    def test_tick_decrements(self, group):
        running = start_timer(group, DAY, "x")
        ticked, result = tick_timer(running, DAY, "x")
        assert result is TickResult.TICKED
        assert todo(ticked, "x").remaining_time == 1499

    def test_tick_from_one_expires_at_zero(self, group):
        running = start_timer(group, DAY, "x")
        content = running.content_for(DAY)
        content.find_todo("x").remaining_time = 1
        ticked, result = tick_timer(running.with_contents(content), DAY, "x")

        item = todo(ticked, "x")
        assert result is TickResult.EXPIRED
        assert item.remaining_time == 0
        assert item.is_timer_running is False
        assert timer_state(item) is TimerState.EXPIRED

    def test_tick_ignored_when_not_running(self, group):
        result_group, result = tick_timer(group, DAY, "y")
        assert result is TickResult.IGNORED
        assert result_group is group


class TestDuration:

    def test_set_duration_resets_remaining(self, group):
        updated = set_timer_duration(group, DAY, "y", 50)
        assert todo(updated, "y").timer_duration == 50
        assert todo(updated, "y").remaining_time == 3000

    @pytest.mark.parametrize("minutes", [0, -5])
    def test_duration_below_one_minute_is_ignored(self, group, minutes):
        assert set_timer_duration(group, DAY, "y", minutes) is group


class TestFocusTicker:

    @pytest.mark.asyncio
    async def test_ticks_each_armed_key_until_cancelled(self):
        ticks = []

        async def on_tick(bucket, todo_id):
            ticks.append((bucket, todo_id))

        ticker = FocusTicker(on_tick, interval=0.01)
        ticker.sync({(DAY, "x")})
        await asyncio.sleep(0.055)
        ticker.cancel_all()
        count = len(ticks)
        await asyncio.sleep(0.03)

        assert count >= 3
        assert len(ticks) == count
        assert set(ticks) == {(DAY, "x")}

    @pytest.mark.asyncio
    async def test_sync_arms_and_disarms(self):
        async def on_tick(bucket, todo_id):
            return None

        ticker = FocusTicker(on_tick, interval=0.01)
        ticker.sync({(DAY, "x"), (FOREVER, "f")})
        assert ticker.armed == {(DAY, "x"), (FOREVER, "f")}
        ticker.sync({(FOREVER, "f")})
        assert ticker.armed == {(FOREVER, "f")}
        ticker.cancel_all()
        assert ticker.armed == set()

    @pytest.mark.asyncio
    async def test_a_tick_may_cancel_its_own_ticker(self):
        ticks = []
        ticker = None

        async def on_tick(bucket, todo_id):
            ticks.append(todo_id)
            ticker.cancel(bucket, todo_id)

        ticker = FocusTicker(on_tick, interval=0.01)
        ticker.arm(DAY, "x")
        await asyncio.sleep(0.05)
        assert ticks == ["x"]

    @pytest.mark.asyncio
    async def test_failing_tick_keeps_ticking(self):
        calls = []

        async def on_tick(bucket, todo_id):
            calls.append(todo_id)
            raise RuntimeError("boom")

        ticker = FocusTicker(on_tick, interval=0.01)
        ticker.arm(DAY, "x")
        await asyncio.sleep(0.045)
        ticker.cancel_all()
        assert len(calls) >= 2
