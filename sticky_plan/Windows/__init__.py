"""Window ownership for the store-owning process."""

from .window_manager import StickyNoteWindowManager, SubprocessWindowHandle
from .window_registry import WindowAlreadyOpenError, WindowBounds, WindowHandle, WindowRegistry

__all__ = [
    'StickyNoteWindowManager',
    'SubprocessWindowHandle',
    'WindowAlreadyOpenError',
    'WindowBounds',
    'WindowHandle',
    'WindowRegistry',
]
