"""Entity models shared by the store, the IPC channels and the windows."""

from .planner_models import (
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

__all__ = [
    'DEFAULT_TIMER_MINUTES',
    'FOREVER',
    'THEMES',
    'DayContent',
    'Group',
    'TodoItem',
    'ViewMode',
    'VisibilityMode',
    'is_bucket_key',
]
