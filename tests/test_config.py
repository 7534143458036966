"""Tests for configuration loading."""

from pathlib import Path

import pytest

from dayplan.config import DATA_DIR, Config, load_config


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str) -> Path:
        path = tmp_path / "dayplan.conf"
        path.write_text(text)
        return path
    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.conf") == Config()

    def test_reads_values(self, write_config):
        config = load_config(
            write_config(
                "# dayplan settings\n"
                "DATA_DIR=~/planner\n"
                "PIXELS_PER_HOUR=60\n"
                "DRAG_THRESHOLD_PX=5\n"
                "CLICK_SUPPRESS_MS=100\n"
                "LOG_LEVEL=debug\n"
                "NOTIFIER=telegram\n"
                'TELEGRAM_BOT_TOKEN="123:abc"\n'
                "TELEGRAM_CHAT_IDS=111, 222\n"
            )
        )
        assert config.data_dir == "~/planner"
        assert config.pixels_per_hour == 60
        assert config.drag_threshold_px == 5
        assert config.click_suppress_ms == 100
        assert config.log_level == "DEBUG"
        assert config.notifier == "telegram"
        assert config.telegram_bot_token == "123:abc"
        assert config.telegram_chat_ids == [111, 222]

    def test_inline_comments_and_quotes(self, write_config):
        config = load_config(write_config("DATA_DIR=/tmp/plan # scratch\nTELEGRAM_BOT_TOKEN='a#b'\n"))
        assert config.data_dir == "/tmp/plan"
        assert config.telegram_bot_token == "a#b"

    def test_invalid_numbers_keep_defaults(self, write_config, caplog):
        config = load_config(write_config("PIXELS_PER_HOUR=wide\nDRAG_THRESHOLD_PX=-2\n"))
        assert config.pixels_per_hour == 40
        assert config.drag_threshold_px == 3
        assert "PIXELS_PER_HOUR" in caplog.text

    def test_unknown_notifier_keeps_log(self, write_config):
        assert load_config(write_config("NOTIFIER=pager\n")).notifier == "log"

    def test_bad_chat_ids(self, write_config):
        assert load_config(write_config("TELEGRAM_CHAT_IDS=abc\n")).telegram_chat_ids == []

    def test_ignores_junk_lines(self, write_config):
        assert load_config(write_config("just words\nCOLOR=blue\n\n")) == Config()


class TestResolvedDataDir:
    def test_default(self):
        assert Config().resolved_data_dir() == DATA_DIR

    def test_expands_user(self):
        assert Config(data_dir="~/plans").resolved_data_dir() == Path.home() / "plans"
