# window_registry.py
# Description: Keyed ownership table of open sticky-note windows (group id -> window handle)
#
# Imports
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Dict, Iterator, Optional, Tuple
#
# Third-Party Imports
from loguru import logger
#
#######################################################################################################################
#
# Classes:

@dataclass
class WindowBounds:
    """Geometry of a note window, mirrored into the group's x/y/width/height."""
    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Optional[int]]:
        return asdict(self)


class WindowHandle(ABC):
    """A live window displaying exactly one group."""

    def __init__(self, group_id: str, bounds: Optional[WindowBounds] = None, always_on_top: bool = False):
        self.group_id = group_id
        self.bounds = bounds or WindowBounds()
        self.always_on_top = always_on_top

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        """False once the window has been closed or its process has exited."""

    @abstractmethod
    async def focus(self) -> None:
        """Bring the window to the foreground."""

    @abstractmethod
    async def close(self) -> None:
        """Close the window; closing an already closed window does nothing."""

    def set_always_on_top(self, flag: bool) -> None:
        self.always_on_top = flag

    def set_bounds(self, bounds: WindowBounds) -> None:
        self.bounds = bounds


class WindowAlreadyOpenError(RuntimeError):
    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"A window for group {group_id} is already open")


class WindowRegistry:
    """
    At most one live handle per group id.

    Dead handles are pruned on lookup, so a window whose process exited on its
    own can be reopened without an explicit unregister.
    """

    def __init__(self):
        self._handles: Dict[str, WindowHandle] = {}

    def get(self, group_id: str) -> Optional[WindowHandle]:
        handle = self._handles.get(group_id)
        if handle is not None and not handle.is_alive:
            logger.debug(f"Pruning dead window handle for group {group_id}")
            del self._handles[group_id]
            return None
        return handle

    def register(self, handle: WindowHandle) -> None:
        if self.get(handle.group_id) is not None:
            raise WindowAlreadyOpenError(handle.group_id)
        self._handles[handle.group_id] = handle

    def pop(self, group_id: str) -> Optional[WindowHandle]:
        return self._handles.pop(group_id, None)

    def __contains__(self, group_id: str) -> bool:
        return self.get(group_id) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.items())

    def items(self) -> Iterator[Tuple[str, WindowHandle]]:
        for group_id in list(self._handles):
            handle = self.get(group_id)
            if handle is not None:
                yield group_id, handle

#
# End of window_registry.py
#######################################################################################################################
