"""Configuration management for dayplan."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DAYPLAN_HOME = Path(os.environ.get("DAYPLAN_HOME", Path.home() / "dayplan"))
CONFIG_FILE = DAYPLAN_HOME / "config" / "dayplan.conf"
DATA_DIR = DAYPLAN_HOME / "data"


@dataclass
class Config:
    """dayplan configuration."""

    data_dir: str = ""
    pixels_per_hour: float = 40
    drag_threshold_px: float = 3
    click_suppress_ms: float = 50
    log_level: str = "INFO"
    # Timer completion notifications: "log" or "telegram"
    notifier: str = "log"
    telegram_bot_token: str = ""
    telegram_chat_ids: list[int] = field(default_factory=list)

    def resolved_data_dir(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from unquoted values."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _positive_float(key: str, value: str, default: float) -> float:
    try:
        number = float(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default
    if number <= 0:
        logger.warning(f"{key.upper()} must be positive, using {default}")
        return default
    return number


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from dayplan.conf file."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "pixels_per_hour":
                config.pixels_per_hour = _positive_float(key, value, config.pixels_per_hour)
            case "drag_threshold_px":
                config.drag_threshold_px = _positive_float(key, value, config.drag_threshold_px)
            case "click_suppress_ms":
                config.click_suppress_ms = _positive_float(key, value, config.click_suppress_ms)
            case "log_level":
                config.log_level = value.upper()
            case "notifier":
                if value.lower() in ("log", "telegram"):
                    config.notifier = value.lower()
                else:
                    logger.warning(f"Unknown NOTIFIER {value!r}, using 'log'")
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_chat_ids":
                try:
                    config.telegram_chat_ids = [int(c.strip()) for c in value.split(",") if c.strip()]
                except ValueError:
                    logger.warning(f"Failed to parse TELEGRAM_CHAT_IDS: {value!r}")
            case _:
                logger.debug(f"Ignoring unknown config key {key!r}")

    return config
