"""Persistence for note groups."""

from .groups_store import GroupsStore
from .store_errors import (
    BadRequestError,
    NotFoundError,
    StorageUnavailableError,
    StoreConnectionError,
    StoreError,
    UnknownChannelError,
)

__all__ = [
    'BadRequestError',
    'GroupsStore',
    'NotFoundError',
    'StorageUnavailableError',
    'StoreConnectionError',
    'StoreError',
    'UnknownChannelError',
]
