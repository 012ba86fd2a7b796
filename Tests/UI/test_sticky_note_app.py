"""Tests for the sticky-note Textual app, driven through the Textual pilot.

References:
- https://textual.textualize.io/guide/testing/
"""

import pytest
from textual.widgets import Input, OptionList, TextArea

from sticky_plan.Models.planner_models import FOREVER, DayContent, TodoItem
from sticky_plan.UI.sticky_note_app import StickyNoteApp, render_todo
from sticky_plan.Utils.date_keys import shift_date_key, today_key


@pytest.fixture
def note_app(store_client, work_group):
    return StickyNoteApp(store_client, work_group.id, poll_interval=60, close_delay=0.05)


def stored_today(memory_store, group_id):
    return memory_store.get_group(group_id).content_for(today_key())


class TestStickyNoteApp:

    @pytest.mark.asyncio
    async def test_startup_shows_the_group(self, note_app, work_group):
        async with note_app.run_test() as pilot:
            await pilot.pause()
            assert note_app.session.group.id == work_group.id
            assert note_app.title == "Work"
            assert note_app.session.current_bucket == today_key()

    @pytest.mark.asyncio
    async def test_add_a_task_from_the_input(self, note_app, memory_store, work_group):
        async with note_app.run_test() as pilot:
            await pilot.pause()
            note_app.query_one("#new-todo", Input).focus()
            await pilot.press("S", "h", "i", "p", "enter")
            await pilot.pause()

            assert [t.text for t in stored_today(memory_store, work_group.id).todos] == ["Ship"]
            assert note_app.query_one("#todos", OptionList).option_count == 1
            assert note_app.query_one("#new-todo", Input).value == ""

    @pytest.mark.asyncio
    async def test_toggle_and_delete_highlighted_task(self, note_app, memory_store, work_group):
        memory_store.set_day_content(work_group.id, DayContent(date=today_key(), todos=[
            TodoItem(id="a", text="Write tests"),
        ]))
        async with note_app.run_test() as pilot:
            await pilot.pause()
            note_app.query_one("#todos", OptionList).focus()

            await pilot.press("space")
            await pilot.pause()
            assert stored_today(memory_store, work_group.id).find_todo("a").completed is True

            await pilot.press("d")
            await pilot.pause()
            assert stored_today(memory_store, work_group.id).todos == []

    @pytest.mark.asyncio
    async def test_toggle_forever_view(self, note_app, memory_store, work_group):
        async with note_app.run_test() as pilot:
            await pilot.pause()
            note_app.query_one("#todos", OptionList).focus()
            await pilot.press("v")
            await pilot.pause()

            assert note_app.session.current_bucket == FOREVER
            assert memory_store.get_group(work_group.id).is_forever_view

    @pytest.mark.asyncio
    async def test_notes_save_action(self, note_app, memory_store, work_group):
        async with note_app.run_test() as pilot:
            await pilot.pause()
            note_app.query_one("#notes", TextArea).load_text("standup at 10")
            await note_app.action_save_notes()
            assert stored_today(memory_store, work_group.id).notes == "standup at 10"

    @pytest.mark.asyncio
    async def test_typed_notes_stay_with_their_day_after_a_date_change(self, note_app, memory_store, work_group):
        tomorrow = shift_date_key(today_key(), 1)
        async with note_app.run_test() as pilot:
            await pilot.pause()
            note_app.query_one("#notes", TextArea).focus()
            await pilot.press("h", "i")
            await pilot.pause()

            await note_app.session.next_day()
            assert note_app.query_one("#notes", TextArea).text == ""
            await pilot.pause(1.5)

            group = memory_store.get_group(work_group.id)
            assert group.content_for(today_key()).notes == "hi"
            assert group.content_for(tomorrow).notes == ""

    @pytest.mark.asyncio
    async def test_day_navigation_saves_unsaved_notes_first(self, note_app, memory_store, work_group):
        tomorrow = shift_date_key(today_key(), 1)
        async with note_app.run_test() as pilot:
            await pilot.pause()
            notes = note_app.query_one("#notes", TextArea)
            notes.focus()
            await pilot.press("h", "i")
            await pilot.pause()

            await note_app.action_next_day()
            assert stored_today(memory_store, work_group.id).notes == "hi"
            assert note_app.session.current_bucket == tomorrow
            assert notes.text == ""

            await note_app.action_previous_day()
            assert notes.text == "hi"
            assert memory_store.get_group(work_group.id).content_for(tomorrow).notes == ""

    @pytest.mark.asyncio
    async def test_closes_after_the_group_is_deleted(self, note_app, memory_store, work_group, monkeypatch):
        exits = []
        monkeypatch.setattr(note_app, "exit", lambda *args, **kwargs: exits.append(args))
        async with note_app.run_test() as pilot:
            await pilot.pause()
            memory_store.delete_group(work_group.id)

            await note_app.session.poll()
            assert note_app.session.state.closing is True
            assert note_app._poll_timer is None
            await pilot.pause(0.2)
            assert exits == [()]


def test_render_todo_shows_state():
    todo = TodoItem(text="Focus", completed=True)
    assert render_todo(todo) == "[x] Focus"

    running = TodoItem(text="Focus", remaining_time=90, is_timer_running=True, description="deep", is_expanded=True)
    assert render_todo(running) == "[ ] Focus  > 01:30\n      deep"
