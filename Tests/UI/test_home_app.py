"""Tests for the home window listing all groups."""

import pytest
from textual.widgets import Input, OptionList

from sticky_plan.UI.home_app import HomeApp


@pytest.fixture
def home_app(store_client):
    return HomeApp(store_client, poll_interval=60)


class TestHomeApp:

    @pytest.mark.asyncio
    async def test_lists_existing_groups(self, home_app, memory_store):
        memory_store.create_group("Work")
        memory_store.create_group("Home")
        async with home_app.run_test() as pilot:
            await pilot.pause()
            assert home_app.query_one("#groups", OptionList).option_count == 2

    @pytest.mark.asyncio
    async def test_search_filters_case_insensitively(self, home_app, memory_store):
        memory_store.create_group("Work")
        memory_store.create_group("Home")
        async with home_app.run_test() as pilot:
            await pilot.pause()
            home_app.query_one("#search", Input).value = "WO"
            await pilot.pause()
            assert [g.title for g in home_app.visible_groups] == ["Work"]
            assert home_app.query_one("#groups", OptionList).option_count == 1

    @pytest.mark.asyncio
    async def test_create_opens_the_new_group(self, home_app, memory_store, opened_handles):
        async with home_app.run_test() as pilot:
            await pilot.pause()
            home_app.query_one("#new-group", Input).focus()
            await pilot.press("P", "l", "a", "n", "enter")
            await pilot.pause()

            groups = memory_store.list_groups()
            assert [g.title for g in groups] == ["Plan"]
            assert [h.group_id for h in opened_handles] == [groups[0].id]

    @pytest.mark.asyncio
    async def test_blank_title_creates_nothing(self, home_app, memory_store):
        async with home_app.run_test() as pilot:
            await pilot.pause()
            home_app.query_one("#new-group", Input).focus()
            await pilot.press("space", "enter")
            await pilot.pause()
            assert memory_store.list_groups() == []

    @pytest.mark.asyncio
    async def test_delete_highlighted_group(self, home_app, memory_store):
        memory_store.create_group("Work")
        async with home_app.run_test() as pilot:
            await pilot.pause()
            await home_app.action_delete_group()
            assert memory_store.list_groups() == []
            assert home_app.query_one("#groups", OptionList).option_count == 0
