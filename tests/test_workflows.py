"""Tests for the shared workflow layer."""

import json

import pytest

from dayplan.adapters import FileKeyValueStore, LogNotifier, MemoryKeyValueStore, TelegramNotifier
from dayplan.config import Config
from dayplan.persistence import ACTIVITIES_KEY, THEME_KEY
from dayplan.workflows import get_notifier, get_store, open_planner


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=str(tmp_path))


class TestGetStore:
    def test_uses_configured_dir(self, config, tmp_path):
        store = get_store(config)
        assert isinstance(store, FileKeyValueStore)
        assert store.data_dir == tmp_path


class TestGetNotifier:
    def test_default_is_log(self, config):
        assert isinstance(get_notifier(config), LogNotifier)

    def test_telegram(self):
        config = Config(notifier="telegram", telegram_bot_token="t", telegram_chat_ids=[1])
        assert isinstance(get_notifier(config), TelegramNotifier)

    def test_telegram_without_token_falls_back(self, caplog):
        assert isinstance(get_notifier(Config(notifier="telegram")), LogNotifier)
        assert "falling back" in caplog.text


class TestOpenPlanner:
    def test_first_open_saves_seeded_activities(self, config):
        store = MemoryKeyValueStore()
        planner = open_planner(config, store=store)
        saved = json.loads(store.get(ACTIVITIES_KEY))
        assert [a["id"] for a in saved] == [a.id for a in planner.state.activities]

    def test_ids_stable_across_opens(self, config):
        first = open_planner(config)
        second = open_planner(config)
        assert first.state.activities == second.state.activities

    def test_changes_are_persisted(self, config):
        planner = open_planner(config)
        planner.toggle_theme()
        assert open_planner(config).state.dark_theme is False
        assert get_store(config).get(THEME_KEY) == "false"

    def test_applies_config(self):
        config = Config(pixels_per_hour=60, drag_threshold_px=8, click_suppress_ms=200)
        planner = open_planner(config, store=MemoryKeyValueStore(), notifier=LogNotifier())
        assert planner.layout.height_px == pytest.approx(900)
        assert planner.resolver.threshold_px == 8
        assert planner.resolver.suppress_ms == 200
