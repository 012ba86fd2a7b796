# store_errors.py
# Description: Typed failures raised by the content store and re-raised by the IPC client
#
# Imports
from typing import Optional
#
#######################################################################################################################
#
# Classes:

class StoreError(Exception):
    """Base class for content store failures."""

    # Stable identifier used on the wire
    kind = "store_error"


class NotFoundError(StoreError):
    """An operation referenced a group id that does not exist (any more)."""

    kind = "not_found"

    def __init__(self, group_id: str, message: Optional[str] = None):
        self.group_id = group_id
        super().__init__(message or f"Group with id {group_id} not found")


class StorageUnavailableError(StoreError):
    """The persistence medium could not be read or written."""

    kind = "storage_unavailable"


class StoreConnectionError(StorageUnavailableError):
    """The store-owning process could not be reached."""

    kind = "storage_unavailable"


class BadRequestError(StoreError):
    """A request payload was missing fields or did not validate."""

    kind = "bad_request"


class UnknownChannelError(StoreError):
    """A request named a channel with no registered handler."""

    kind = "unknown_channel"

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"No handler registered for channel '{channel}'")

#
# End of store_errors.py
#######################################################################################################################
