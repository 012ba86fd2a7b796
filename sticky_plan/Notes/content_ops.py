# content_ops.py
# Description: Pure edits of a group's displayed bucket (add, delete, toggle, reorder, describe, notes)
#
# Imports
from typing import List, Optional, Tuple
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from .focus_timer import reset_to_idle
from ..Models.planner_models import DEFAULT_TIMER_MINUTES, FOREVER, DayContent, Group, TodoItem
from ..Utils.date_keys import today_key, utc_now_iso
#
#######################################################################################################################
#
# Functions:
#
# Every operation takes the latest canonical Group and returns a new Group to
# send to the store; inputs are never mutated. No-ops return the input group.

def current_bucket(group: Group, date_key: Optional[str] = None) -> str:
    """The bucket new edits target: forever in forever view, else the selected date."""
    if group.is_forever_view:
        return FOREVER
    return date_key or group.last_selected_date or today_key()


def add_todo(group: Group, bucket: str, text: str, minutes: int = DEFAULT_TIMER_MINUTES) -> Group:
    if not text or not text.strip():
        return group
    content = group.content_for(bucket)
    content.todos.append(TodoItem(
        text=text.strip(),
        timer_duration=minutes,
        remaining_time=minutes * 60,
    ))
    return group.with_contents(content)


def delete_todo(group: Group, bucket: str, todo_id: str) -> Group:
    content = group.content_for(bucket)
    index = content.index_of(todo_id)
    if index == -1:
        return group
    del content.todos[index]
    return group.with_contents(content)


def toggle_todo(group: Group, bucket: str, todo_id: str) -> Tuple[Group, bool]:
    """
    Flip a todo's completion.

    Returns the new group and whether the todo is now completed. ``completedAt``
    is set on false -> true and cleared on true -> false; completing a todo
    whose focus timer is running stops that timer.
    """
    content = group.content_for(bucket)
    todo = content.find_todo(todo_id)
    if todo is None:
        return group, False

    todo.completed = not todo.completed
    if todo.completed:
        todo.completed_at = utc_now_iso()
        if todo.is_timer_running:
            reset_to_idle(todo)
            logger.debug(f"Stopped the focus timer of completed todo {todo_id}")
    else:
        todo.completed_at = None
    return group.with_contents(content), todo.completed


def reorder_todo(group: Group, bucket: str, from_index: int, to_index: int) -> Group:
    """Move the todo at ``from_index`` so that it ends up at ``to_index``."""
    content = group.content_for(bucket)
    count = len(content.todos)
    if not (0 <= from_index < count and 0 <= to_index < count) or from_index == to_index:
        return group
    todo = content.todos.pop(from_index)
    content.todos.insert(to_index, todo)
    return group.with_contents(content)


def update_todo_text(group: Group, bucket: str, todo_id: str, text: str) -> Group:
    if not text or not text.strip():
        return group
    content = group.content_for(bucket)
    todo = content.find_todo(todo_id)
    if todo is None:
        return group
    todo.text = text.strip()
    return group.with_contents(content)


def update_description(group: Group, bucket: str, todo_id: str, description: str) -> Group:
    """Set the detail text and expand it so the edit stays visible."""
    content = group.content_for(bucket)
    todo = content.find_todo(todo_id)
    if todo is None:
        return group
    todo.description = description or None
    todo.is_expanded = True
    return group.with_contents(content)


def toggle_expansion(group: Group, bucket: str, todo_id: str) -> Group:
    content = group.content_for(bucket)
    todo = content.find_todo(todo_id)
    if todo is None:
        return group
    todo.is_expanded = not todo.is_expanded
    return group.with_contents(content)


def set_notes(group: Group, bucket: str, notes: str) -> Group:
    content = group.content_for(bucket)
    content.notes = notes or ""
    return group.with_contents(content)


def completion_progress(content: DayContent) -> int:
    """Percentage of completed todos, rounded; 0 for an empty bucket."""
    if not content.todos:
        return 0
    done = sum(1 for todo in content.todos if todo.completed)
    return round(done * 100 / len(content.todos))


def filter_groups(groups: List[Group], query: str) -> List[Group]:
    """Case-insensitive title search used by the home window."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(groups)
    return [group for group in groups if needle in group.title.lower()]

#
# End of content_ops.py
#######################################################################################################################
