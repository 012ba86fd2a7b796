# window_manager.py
# Description: Opens, focuses and closes sticky-note windows, one per group
#
# Imports
import asyncio
import sys
from typing import Awaitable, Callable, Dict, List, Optional, Sequence
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from .window_registry import WindowBounds, WindowHandle, WindowRegistry
from ..Models.planner_models import Group
#
#######################################################################################################################
#
# Classes:

HandleFactory = Callable[[Group], Awaitable[WindowHandle]]

log = logger.bind(module="WindowManager")


def bounds_for(group: Group, default_width: int = 320, default_height: int = 400) -> WindowBounds:
    """Saved geometry of a group, with the default size where none was saved yet."""
    return WindowBounds(
        x=group.x,
        y=group.y,
        width=group.width or default_width,
        height=group.height or default_height,
    )


class SubprocessWindowHandle(WindowHandle):
    """
    A note window running as its own process (a Textual app in a terminal).

    Stacking and focus are up to the desktop; ``focus_command`` lets the user
    plug in a tool such as ``wmctrl -a`` to raise the window.
    """

    def __init__(self, group_id: str, process: asyncio.subprocess.Process,
                 bounds: Optional[WindowBounds] = None, always_on_top: bool = False,
                 focus_command: Sequence[str] = ()):
        super().__init__(group_id, bounds, always_on_top)
        self.process = process
        self.focus_command = list(focus_command)

    @classmethod
    async def launch(cls, group: Group, store_url: str, launcher: Sequence[str] = (),
                     focus_command: Sequence[str] = (), bounds: Optional[WindowBounds] = None
                     ) -> "SubprocessWindowHandle":
        command = build_note_command(group.id, store_url, launcher)
        log.info(f"Launching note window for group {group.id}: {' '.join(command)}")
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
        )
        return cls(group.id, process, bounds or bounds_for(group), group.is_always_on_top, focus_command)

    @property
    def is_alive(self) -> bool:
        return self.process.returncode is None

    async def focus(self) -> None:
        if not self.focus_command:
            log.debug(f"No focus command configured; window for {self.group_id} left as is")
            return
        try:
            proc = await asyncio.create_subprocess_exec(*self.focus_command, self.group_id)
        except OSError as e:
            log.warning(f"Focus command {self.focus_command[0]!r} failed for group {self.group_id}: {e}")
            return
        await proc.wait()

    async def close(self) -> None:
        if not self.is_alive:
            return
        self.process.terminate()
        try:
            await asyncio.wait_for(self.process.wait(), timeout=5.0)
        except asyncio.TimeoutError:
            log.warning(f"Window process for group {self.group_id} did not exit; killing it")
            self.process.kill()
            await self.process.wait()


def build_note_command(group_id: str, store_url: str, launcher: Sequence[str] = ()) -> List[str]:
    return [*launcher, sys.executable, "-m", "sticky_plan", "note", group_id, "--store-url", store_url]


class StickyNoteWindowManager:
    """
    Owns the window registry on the store-owning side.

    ``open_note`` looks up before it creates, so a group never gets a second
    window; an existing one is refreshed and focused instead.
    """

    def __init__(self, handle_factory: HandleFactory, registry: Optional[WindowRegistry] = None):
        self.handle_factory = handle_factory
        self.registry = registry or WindowRegistry()
        self._lock = asyncio.Lock()

    async def open_note(self, group: Group) -> WindowHandle:
        async with self._lock:
            handle = self.registry.get(group.id)
            if handle is not None:
                # The mode may have been changed from another window since this one opened
                handle.set_always_on_top(group.is_always_on_top)
                await handle.focus()
                log.debug(f"Focused existing window for group {group.id}")
                return handle

            handle = await self.handle_factory(group)
            handle.set_always_on_top(group.is_always_on_top)
            self.registry.register(handle)
            log.info(f"Opened window for group {group.id}")
            return handle

    async def close_note(self, group_id: str) -> bool:
        async with self._lock:
            handle = self.registry.pop(group_id)
        if handle is None or not handle.is_alive:
            return False
        await handle.close()
        log.info(f"Closed window for group {group_id}")
        return True

    def set_always_on_top(self, group_id: str, always_on_top: bool) -> bool:
        handle = self.registry.get(group_id)
        if handle is None:
            return False
        handle.set_always_on_top(always_on_top)
        return True

    def update_position(self, group_id: str, x: Optional[int], y: Optional[int],
                        width: Optional[int], height: Optional[int]) -> bool:
        handle = self.registry.get(group_id)
        if handle is None:
            return False
        handle.set_bounds(WindowBounds(x=x, y=y, width=width, height=height))
        return True

    def get_position(self, group_id: str) -> Optional[Dict[str, Optional[int]]]:
        handle = self.registry.get(group_id)
        if handle is None:
            return None
        return handle.bounds.to_dict()

    async def close_all(self) -> None:
        for group_id, _ in list(self.registry.items()):
            await self.close_note(group_id)

#
# End of window_manager.py
#######################################################################################################################
