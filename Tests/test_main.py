"""Tests for the sticky-plan command line."""

import json
from datetime import date, timedelta

import pytest

from sticky_plan import __main__ as cli
from sticky_plan import config
from sticky_plan.IPC.client import StoreClient
from sticky_plan.Models.planner_models import DayContent, TodoItem
from sticky_plan.Utils.date_keys import today_key

from Tests.sticky_test_utilities import router_transport


@pytest.fixture
def cli_env(isolated_temp_dir, monkeypatch, router):
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(isolated_temp_dir / "config.toml"))
    monkeypatch.setattr(config, "_CONFIG_CACHE", None)
    monkeypatch.setattr(cli, "configure_logging", lambda **settings: None)
    monkeypatch.setattr(
        cli, "_make_client",
        lambda store_url: StoreClient("http://sticky.test", transport=router_transport(router)),
    )


class TestParser:

    def test_note_accepts_store_url_after_the_group(self):
        args = cli.build_parser().parse_args(["note", "g1", "--store-url", "http://127.0.0.1:5000"])
        assert args.command == "note"
        assert args.group_id == "g1"
        assert args.note_store_url == "http://127.0.0.1:5000"

    def test_serve_options(self):
        args = cli.build_parser().parse_args(["serve", "--port", "5000"])
        assert args.port == 5000
        assert args.host is None

    def test_a_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestResolveDate:

    def test_defaults_to_today(self):
        assert cli._resolve_date(None) == today_key()

    def test_relative_and_explicit(self):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        assert cli._resolve_date("tomorrow") == tomorrow
        assert cli._resolve_date("forever") == "forever"
        assert cli._resolve_date("2026-10-19") == "2026-10-19"

    def test_rejects_anything_else(self):
        with pytest.raises(ValueError):
            cli._resolve_date("next week")


class TestCommands:

    def test_groups_create_and_list(self, cli_env, memory_store, capsys):
        assert cli.main(["groups", "create", "Work"]) == 0
        created = json.loads(capsys.readouterr().out)
        assert created["title"] == "Work"

        assert cli.main(["groups", "list"]) == 0
        listed = json.loads(capsys.readouterr().out)
        assert [g["id"] for g in listed] == [created["id"]]

    def test_blank_title_fails(self, cli_env, memory_store):
        assert cli.main(["groups", "create", "  "]) == 1
        assert memory_store.list_groups() == []

    def test_deleting_an_unknown_group_is_an_error(self, cli_env, capsys):
        assert cli.main(["groups", "delete", "missing"]) == 1
        assert "Group with id missing not found" in capsys.readouterr().err

    def test_day_show(self, cli_env, memory_store, work_group, capsys):
        memory_store.set_day_content(work_group.id, DayContent(date="2026-10-19", todos=[TodoItem(text="Ship")]))

        assert cli.main(["day", "show", work_group.id, "2026-10-19"]) == 0
        shown = json.loads(capsys.readouterr().out)
        assert [t["text"] for t in shown["todos"]] == ["Ship"]

        assert cli.main(["day", "show", work_group.id, "2026-10-20"]) == 0
        assert json.loads(capsys.readouterr().out) is None

    def test_bad_date_argument(self, cli_env, work_group):
        assert cli.main(["day", "show", work_group.id, "someday"]) == 1
