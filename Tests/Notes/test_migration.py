"""
Tests for moving todos and notes between date buckets and the forever backlog.
"""

import random

import pytest

from sticky_plan.Models.planner_models import FOREVER, DayContent, Group, TodoItem
from sticky_plan.Notes.migration import merge_notes, move_notes, move_todo

TODAY = "2026-10-19"
TOMORROW = "2026-10-20"


@pytest.fixture
def group():
    return Group(title="Work").with_contents(
        DayContent(date=TODAY, notes="A", todos=[
            TodoItem(id="t1", text="Ship release"),
            TodoItem(id="t2", text="Review"),
        ]),
        DayContent(date=TOMORROW, notes="B", todos=[TodoItem(id="t3", text="Plan")]),
        DayContent(date=FOREVER, todos=[TodoItem(id="t4", text="Water plants")]),
    )


def todo_ids(group: Group, bucket: str):
    return [todo.id for todo in group.content_for(bucket).todos]


class TestMoveTodo:

    def test_removes_from_source_and_appends_to_target(self, group):
        moved_group, moved = move_todo(group, TODAY, "t1", TOMORROW)

        assert moved is True
        assert todo_ids(moved_group, TODAY) == ["t2"]
        assert todo_ids(moved_group, TOMORROW) == ["t3", "t1"]

    def test_move_into_forever_and_into_an_absent_date(self, group):
        to_forever, _ = move_todo(group, TODAY, "t2", FOREVER)
        assert todo_ids(to_forever, FOREVER) == ["t4", "t2"]

        to_new_day, _ = move_todo(to_forever, FOREVER, "t4", "2026-12-01")
        assert todo_ids(to_new_day, "2026-12-01") == ["t4"]
        assert todo_ids(to_new_day, FOREVER) == ["t2"]

    def test_same_bucket_is_a_no_op(self, group):
        result, moved = move_todo(group, TODAY, "t1", TODAY)
        assert moved is False
        assert result is group

    def test_unknown_todo_is_a_no_op(self, group):
        result, moved = move_todo(group, TODAY, "t3", FOREVER)
        assert moved is False
        assert result is group

    def test_input_group_is_not_mutated(self, group):
        move_todo(group, TODAY, "t1", TOMORROW)
        assert todo_ids(group, TODAY) == ["t1", "t2"]

    def test_move_back_lands_at_the_end_not_the_original_index(self, group):
        there, _ = move_todo(group, TODAY, "t1", TOMORROW)
        back, _ = move_todo(there, TOMORROW, "t1", TODAY)

        # Same items per bucket, but t1 is now last: moves append, they do not restore positions
        assert sorted(todo_ids(back, TODAY)) == sorted(todo_ids(group, TODAY))
        assert todo_ids(back, TODAY) == ["t2", "t1"]
        assert todo_ids(back, TOMORROW) == todo_ids(group, TOMORROW)

    def test_no_duplicates_after_random_moves(self, group):
        rng = random.Random(1234)
        buckets = [TODAY, TOMORROW, FOREVER, "2026-10-18"]
        original_ids = sorted(group.all_todo_ids())

        for _ in range(200):
            ids = group.all_todo_ids()
            todo_id = rng.choice(ids)
            source = group.find_todo_bucket(todo_id)
            group, _ = move_todo(group, source, todo_id, rng.choice(buckets))

            all_ids = group.all_todo_ids()
            assert len(all_ids) == len(set(all_ids))
        assert sorted(group.all_todo_ids()) == original_ids

    def test_running_timer_arrives_paused_when_target_already_runs_one(self):
        group = Group(title="Work").with_contents(
            DayContent(date=TODAY, todos=[TodoItem(id="a", text="Write", remaining_time=900, is_timer_running=True)]),
            DayContent(date=TOMORROW, todos=[TodoItem(id="b", text="Read", remaining_time=1200, is_timer_running=True)]),
        )
        moved_group, moved = move_todo(group, TODAY, "a", TOMORROW)

        assert moved is True
        target = moved_group.content_for(TOMORROW)
        assert [t.id for t in target.todos if t.is_timer_running] == ["b"]
        assert target.find_todo("a").remaining_time == 900
        assert target.find_todo("b").remaining_time == 1200

    def test_running_timer_keeps_running_in_an_idle_target(self):
        group = Group(title="Work").with_contents(
            DayContent(date=TODAY, todos=[TodoItem(id="a", text="Write", remaining_time=900, is_timer_running=True)]),
        )
        moved_group, _ = move_todo(group, TODAY, "a", TOMORROW)
        assert moved_group.content_for(TOMORROW).find_todo("a").is_timer_running is True


class TestMoveNotes:

    def test_appends_after_existing_target_notes_and_clears_source(self, group):
        moved_group, moved = move_notes(group, TODAY, TOMORROW)

        assert moved is True
        assert moved_group.content_for(TOMORROW).notes == "B\n\nA"
        assert moved_group.content_for(TODAY).notes == ""

    def test_into_empty_target_keeps_notes_verbatim(self, group):
        moved_group, _ = move_notes(group, TODAY, FOREVER)
        assert moved_group.content_for(FOREVER).notes == "A"

    @pytest.mark.parametrize("notes", ["", "   \n\t"])
    def test_blank_source_is_a_no_op(self, group, notes):
        source = group.content_for(TODAY)
        source.notes = notes
        blank = group.with_contents(source)

        result, moved = move_notes(blank, TODAY, TOMORROW)
        assert moved is False
        assert result is blank

    def test_same_bucket_is_a_no_op(self, group):
        result, moved = move_notes(group, TODAY, TODAY)
        assert moved is False
        assert result is group

    def test_custom_separator(self, group):
        moved_group, _ = move_notes(group, TODAY, TOMORROW, separator="\n---\n")
        assert moved_group.content_for(TOMORROW).notes == "B\n---\nA"

    def test_notes_exist_in_exactly_one_place(self, group):
        moved_group, _ = move_notes(group, TOMORROW, TODAY)
        texts = [bucket.notes for bucket in moved_group.iter_buckets()]
        assert sum(text.count("B") for text in texts) == 1


@pytest.mark.parametrize("existing,incoming,expected", [
    ("B", "A", "B\n\nA"),
    ("", "A", "A"),
    ("  ", "A", "A"),
])
def test_merge_notes(existing, incoming, expected):
    assert merge_notes(existing, incoming) == expected
