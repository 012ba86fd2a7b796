"""Data models for note groups, their day buckets and checklist items using Pydantic.

A Group's content is partitioned into buckets: one DayContent per calendar
date key (``YYYY-MM-DD``) plus a single date-less "forever" backlog. Models
serialize to the camelCase JSON shape used by the store file and the IPC
channels via ``to_wire()``.
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..Utils.date_keys import is_date_key, utc_now_iso

# Bucket identifier (and DayContent.date sentinel) for the date-less backlog
FOREVER = "forever"

DEFAULT_TIMER_MINUTES = 25

Theme = Literal["yellow", "blue", "green", "pink", "purple", "dark"]
THEMES: List[str] = ["yellow", "blue", "green", "pink", "purple", "dark"]


def new_group_id() -> str:
    return str(uuid.uuid4())


def new_todo_id() -> str:
    return uuid.uuid4().hex[:12]


def is_bucket_key(key: str) -> bool:
    """True for FOREVER or a valid YYYY-MM-DD date key."""
    return key == FOREVER or is_date_key(key)


class VisibilityMode(str, Enum):
    """Advisory window stacking mode, persisted across restarts."""
    STANDARD = "standard"
    ALWAYS_ON_TOP = "alwaysOnTop"


class ViewMode(str, Enum):
    """Which partition a window displays and edits."""
    DATE = "date"
    FOREVER = "forever"


class PlannerModel(BaseModel):
    """Shared configuration: snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]):
        return cls.model_validate(data)


class TodoItem(PlannerModel):
    """A single checklist entry with its focus-timer fields."""
    id: str = Field(default_factory=new_todo_id)
    text: str
    completed: bool = False
    created_at: str = Field(default_factory=utc_now_iso)
    completed_at: Optional[str] = None
    description: Optional[str] = None
    is_expanded: bool = False

    # Focus timer
    timer_duration: int = DEFAULT_TIMER_MINUTES  # minutes
    remaining_time: Optional[int] = None  # seconds
    is_timer_running: bool = False

    @field_validator("timer_duration", mode="before")
    @classmethod
    def _default_duration(cls, value: Any) -> Any:
        # Older records stored 0/null for "use the default"
        return value or DEFAULT_TIMER_MINUTES

    @property
    def full_duration_seconds(self) -> int:
        return self.timer_duration * 60


class DayContent(PlannerModel):
    """Notes blob plus ordered todos for one bucket (a date key or FOREVER)."""
    date: str
    notes: str = ""
    todos: List[TodoItem] = Field(default_factory=list)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes_not_null(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("todos", mode="before")
    @classmethod
    def _todos_not_null(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def empty(cls, bucket: str) -> "DayContent":
        return cls(date=bucket)

    @property
    def is_forever(self) -> bool:
        return self.date == FOREVER

    def find_todo(self, todo_id: str) -> Optional[TodoItem]:
        for todo in self.todos:
            if todo.id == todo_id:
                return todo
        return None

    def index_of(self, todo_id: str) -> int:
        for index, todo in enumerate(self.todos):
            if todo.id == todo_id:
                return index
        return -1


class Group(PlannerModel):
    """One floating note collection, rendered as its own window."""
    id: str = Field(default_factory=new_group_id)
    title: str
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    visibility_mode: VisibilityMode = VisibilityMode.STANDARD
    view_mode: ViewMode = ViewMode.DATE
    theme: Theme = "yellow"
    last_selected_date: Optional[str] = None

    day_contents: Dict[str, DayContent] = Field(default_factory=dict)
    forever_content: DayContent = Field(default_factory=lambda: DayContent.empty(FOREVER))

    # Persisted window state, only changed by explicit user interaction
    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    is_tasks_expanded: bool = True
    is_notes_expanded: bool = True

    @field_validator("day_contents", mode="before")
    @classmethod
    def _day_contents_not_null(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("forever_content", mode="before")
    @classmethod
    def _forever_not_null(cls, value: Any) -> Any:
        if value is None:
            return {"date": FOREVER}
        if isinstance(value, dict) and not value.get("date"):
            return {**value, "date": FOREVER}
        return value

    @model_validator(mode="after")
    def _normalize_bucket_dates(self) -> "Group":
        # A bucket's date always matches the key it is stored under
        self.forever_content.date = FOREVER
        for key, content in self.day_contents.items():
            content.date = key
        return self

    @property
    def is_always_on_top(self) -> bool:
        return self.visibility_mode == VisibilityMode.ALWAYS_ON_TOP

    @property
    def is_forever_view(self) -> bool:
        return self.view_mode == ViewMode.FOREVER

    def content_for(self, bucket: str) -> DayContent:
        """
        Return a copy of the bucket's content.

        Absent date keys yield an empty DayContent; nothing is inserted.
        """
        if bucket == FOREVER:
            return self.forever_content.model_copy(deep=True)
        stored = self.day_contents.get(bucket)
        if stored is None:
            return DayContent.empty(bucket)
        return stored.model_copy(deep=True)

    def with_contents(self, *contents: DayContent) -> "Group":
        """Return a copy of this group with each given bucket replaced, in one step."""
        updated = self.model_copy(deep=True)
        for content in contents:
            content = content.model_copy(deep=True)
            if content.is_forever:
                updated.forever_content = content
            else:
                updated.day_contents[content.date] = content
        return updated

    def iter_buckets(self) -> List[DayContent]:
        """Every stored bucket, date buckets in date order followed by forever."""
        buckets = [self.day_contents[key] for key in sorted(self.day_contents)]
        buckets.append(self.forever_content)
        return buckets

    def all_todo_ids(self) -> List[str]:
        return [todo.id for bucket in self.iter_buckets() for todo in bucket.todos]

    def find_todo_bucket(self, todo_id: str) -> Optional[str]:
        for bucket in self.iter_buckets():
            if bucket.find_todo(todo_id) is not None:
                return bucket.date
        return None
