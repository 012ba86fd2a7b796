# migration.py
# Description: Relocating todos and notes between date buckets and the forever backlog
#
"""
migration.py
------------

Both operations build one Group carrying the changed source and target
buckets together, so a single ``groups.update`` applies the removal and the
addition at once. No intermediate state is ever sent where an item exists in
neither bucket or in both.
"""
#
# Imports
from typing import Tuple
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from ..Models.planner_models import Group
#
#######################################################################################################################
#
# Functions:

DEFAULT_NOTES_SEPARATOR = "\n\n"


def move_todo(group: Group, source: str, todo_id: str, target: str) -> Tuple[Group, bool]:
    """
    Remove a todo from ``source`` and append it to the end of ``target``.

    Returns:
        (group, moved). ``moved`` is False, and the input group is returned,
        when the buckets are equal or the todo is not in ``source``.
    """
    if source == target:
        return group, False

    source_content = group.content_for(source)
    index = source_content.index_of(todo_id)
    if index == -1:
        logger.debug(f"move_todo: todo {todo_id} is not in bucket {source}")
        return group, False

    todo = source_content.todos.pop(index)
    target_content = group.content_for(target)
    if todo.is_timer_running and any(other.is_timer_running for other in target_content.todos):
        # The target keeps its own running timer; this one arrives paused
        todo.is_timer_running = False
        logger.debug(f"Paused timer of {todo_id} at {todo.remaining_time}s on its way to {target}")
    target_content.todos.append(todo)

    logger.debug(f"Moving todo {todo_id} from {source} to {target} in group {group.id}")
    return group.with_contents(source_content, target_content), True


def merge_notes(existing: str, incoming: str, separator: str = DEFAULT_NOTES_SEPARATOR) -> str:
    """Existing target notes first, then the incoming notes."""
    if existing and existing.strip():
        return f"{existing}{separator}{incoming}"
    return incoming


def move_notes(group: Group, source: str, target: str,
               separator: str = DEFAULT_NOTES_SEPARATOR) -> Tuple[Group, bool]:
    """
    Append the source notes to the target bucket's notes and clear the source.

    Blank (whitespace-only) source notes and identical buckets are no-ops.
    """
    if source == target:
        return group, False

    source_content = group.content_for(source)
    if not source_content.notes.strip():
        return group, False

    target_content = group.content_for(target)
    target_content.notes = merge_notes(target_content.notes, source_content.notes, separator)
    source_content.notes = ""

    logger.debug(f"Moving notes from {source} to {target} in group {group.id}")
    return group.with_contents(source_content, target_content), True

#
# End of migration.py
#######################################################################################################################
