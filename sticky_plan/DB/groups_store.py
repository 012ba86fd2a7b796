# groups_store.py
# Description: Durable collection of note groups, with per-bucket day content access
#
# Imports
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
#
# Third-Party Imports
from loguru import logger
from pydantic import ValidationError
#
# Local Imports
from .base_store import JsonDocumentStore
from .store_errors import NotFoundError
from ..Models.planner_models import DayContent, FOREVER, Group, VisibilityMode
from ..Utils.date_keys import utc_now_iso
#
#######################################################################################################################
#
# Classes:

GROUPS_KEY = "groups"


class GroupsStore(JsonDocumentStore):
    """
    Owns the single top-level ``groups`` collection.

    Records are kept in their camelCase wire shape so that a record this
    version cannot parse is still written back untouched. Every accepted
    mutation stamps a fresh ``updatedAt``; callers never supply it.
    """

    def __init__(self, store_path: Union[str, Path], clock: Callable[[], str] = utc_now_iso):
        self._clock = clock
        super().__init__(store_path)

    def _initialize_document(self) -> Dict[str, Any]:
        return {GROUPS_KEY: []}

    # ---- internal helpers ----

    def _records(self) -> List[Dict[str, Any]]:
        return self.get(GROUPS_KEY) or []

    @staticmethod
    def _index_of(records: List[Dict[str, Any]], group_id: str) -> int:
        for index, record in enumerate(records):
            if record.get("id") == group_id:
                return index
        return -1

    def _stamp(self, previous: Optional[str]) -> str:
        """A fresh updatedAt that sorts strictly after ``previous``, so pollers always see a change."""
        now = self._clock()
        if not previous or now > previous:
            return now
        try:
            bumped = datetime.fromisoformat(previous.replace("Z", "+00:00")) + timedelta(milliseconds=1)
        except ValueError:
            return now
        return bumped.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def _parse(self, record: Dict[str, Any]) -> Optional[Group]:
        try:
            return Group.from_wire(record)
        except ValidationError as e:
            logger.warning(f"Skipping unreadable group record {record.get('id')!r}: {e}")
            return None

    # ---- group collection ----

    def list_groups(self) -> List[Group]:
        groups = []
        for record in self._records():
            group = self._parse(record)
            if group is not None:
                groups.append(group)
        return groups

    def get_group(self, group_id: str) -> Group:
        """
        Raises:
            NotFoundError: If no group has this id.
        """
        with self._lock:
            records = self._records()
            index = self._index_of(records, group_id)
            if index == -1:
                raise NotFoundError(group_id)
            group = self._parse(records[index])
        if group is None:
            raise NotFoundError(group_id, f"Group with id {group_id} is unreadable")
        return group

    def find_group(self, group_id: str) -> Optional[Group]:
        try:
            return self.get_group(group_id)
        except NotFoundError:
            return None

    def create_group(self, title: str) -> Optional[Group]:
        """
        Create an empty group. A blank title is ignored and returns None.

        Raises:
            StorageUnavailableError: If the collection could not be persisted.
        """
        if not title or not title.strip():
            logger.debug("Ignoring create_group with a blank title")
            return None

        now = self._clock()
        group = Group(
            title=title,
            created_at=now,
            updated_at=now,
            visibility_mode=VisibilityMode.STANDARD,
        )
        with self._lock:
            records = self._records()
            records.append(group.to_wire())
            self.set(GROUPS_KEY, records)
        logger.info(f"Created group {group.id} ({title!r})")
        return group

    def update_group(self, group: Union[Group, Dict[str, Any]]) -> Group:
        """
        Replace a group with a full or partial representation.

        Top-level fields present in the payload replace the stored ones; the
        stored ``id`` and ``createdAt`` are kept and ``updatedAt`` is stamped.

        Raises:
            NotFoundError: If the id is unknown.
            ValueError: If the payload has no id or does not validate.
            StorageUnavailableError: If the collection could not be persisted.
        """
        payload = group.to_wire() if isinstance(group, Group) else dict(group)
        group_id = payload.get("id")
        if not group_id:
            raise ValueError("Group update payload has no id")

        with self._lock:
            records = self._records()
            index = self._index_of(records, group_id)
            if index == -1:
                raise NotFoundError(group_id)

            existing = records[index]
            merged = {**existing, **payload}
            merged["id"] = existing["id"]
            merged["createdAt"] = existing.get("createdAt", merged.get("createdAt"))
            merged["updatedAt"] = self._stamp(existing.get("updatedAt"))

            canonical = Group.from_wire(merged)
            records[index] = canonical.to_wire()
            self.set(GROUPS_KEY, records)

        logger.info(f"Updated group {group_id}")
        return canonical

    def delete_group(self, group_id: str) -> None:
        """
        Raises:
            NotFoundError: If the id is unknown.
            StorageUnavailableError: If the collection could not be persisted.
        """
        with self._lock:
            records = self._records()
            remaining = [record for record in records if record.get("id") != group_id]
            if len(remaining) == len(records):
                raise NotFoundError(group_id)
            self.set(GROUPS_KEY, remaining)
        logger.info(f"Deleted group {group_id}")

    # ---- single bucket access ----

    def get_day_content(self, group_id: str, date_key: str) -> Optional[DayContent]:
        """
        Return the stored bucket, or None when the date has no content yet.

        Raises:
            NotFoundError: If the group id is unknown.
        """
        group = self.get_group(group_id)
        if date_key == FOREVER:
            return group.forever_content
        return group.day_contents.get(date_key)

    def set_day_content(self, group_id: str, day_content: Union[DayContent, Dict[str, Any]]) -> DayContent:
        """
        Write one bucket, keyed by its own ``date``.

        Implemented as a read-modify-write of the owning group, so it stamps
        ``updatedAt`` exactly like a full group update, even when the content
        is unchanged.

        Raises:
            NotFoundError: If the group id is unknown.
            StorageUnavailableError: If the collection could not be persisted.
        """
        if not isinstance(day_content, DayContent):
            day_content = DayContent.from_wire(day_content)
        with self._lock:
            group = self.get_group(group_id)
            canonical = self.update_group(group.with_contents(day_content))
        return canonical.content_for(day_content.date)

#
# End of groups_store.py
#######################################################################################################################
