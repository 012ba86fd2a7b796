"""
Root conftest.py for shared test fixtures and configuration.
This file provides common fixtures used across the test suite.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import List

import pytest
import pytest_asyncio

# Add project root to Python path for consistent imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sticky_plan.DB.groups_store import GroupsStore
from sticky_plan.IPC.client import StoreClient
from sticky_plan.IPC.handlers import ChannelRouter, register_ipc_handlers
from sticky_plan.Models.planner_models import Group
from sticky_plan.state.note_window_state import NoteWindowSession
from sticky_plan.Windows.window_manager import StickyNoteWindowManager

from Tests.sticky_test_utilities import TODAY, FakeClock, FakeHost, FakeWindowHandle, router_transport


# ========== Path and File System Fixtures ==========

@pytest.fixture
def isolated_temp_dir():
    """Create an isolated temporary directory that's always cleaned up."""
    temp_dir = tempfile.mkdtemp(prefix="sticky_plan_test_")
    temp_path = Path(temp_dir)
    yield temp_path
    if temp_path.exists():
        shutil.rmtree(temp_dir, ignore_errors=True)

@pytest.fixture
def store_path(isolated_temp_dir):
    return isolated_temp_dir / "store.json"

# ========== Store Fixtures ==========

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def memory_store(clock):
    store = GroupsStore(":memory:", clock=clock)
    yield store
    store.close()

@pytest.fixture
def file_store(store_path, clock):
    store = GroupsStore(store_path, clock=clock)
    yield store
    store.close()

@pytest.fixture
def work_group(memory_store) -> Group:
    return memory_store.create_group("Work")

# ========== Window Fixtures ==========

@pytest.fixture
def opened_handles() -> List[FakeWindowHandle]:
    return []

@pytest.fixture
def window_manager(opened_handles):
    async def factory(group: Group) -> FakeWindowHandle:
        handle = FakeWindowHandle(group.id)
        opened_handles.append(handle)
        return handle

    return StickyNoteWindowManager(factory)

# ========== IPC Fixtures ==========

@pytest.fixture
def router(memory_store, window_manager):
    return register_ipc_handlers(ChannelRouter(), memory_store, window_manager)

@pytest_asyncio.fixture
async def store_client(router):
    client = StoreClient("http://sticky.test", transport=router_transport(router))
    yield client
    await client.close()

# ========== Window Session Fixtures ==========

@pytest.fixture
def host():
    return FakeHost()

@pytest_asyncio.fixture
async def session(store_client, work_group, host):
    window = NoteWindowSession(
        store_client,
        work_group.id,
        host,
        tick_interval=0.01,
        today=lambda: TODAY,
    )
    yield window
    window.close()
