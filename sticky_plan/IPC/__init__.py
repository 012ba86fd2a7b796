"""Request/response channels between note windows and the store-owning process."""

from .client import StoreClient
from .handlers import ChannelRouter, register_ipc_handlers

__all__ = ['ChannelRouter', 'StoreClient', 'register_ipc_handlers']
