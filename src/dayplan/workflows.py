"""Wiring between configuration, adapters and the planner session."""

import logging

from .adapters.file_store import FileKeyValueStore
from .adapters.log_notifier import LogNotifier
from .adapters.telegram_notifier import TelegramNotifier
from .config import Config
from .persistence import ACTIVITIES_KEY, StatePersister, load_state
from .ports.notifier import Notifier
from .session import Planner

logger = logging.getLogger(__name__)


def get_store(config: Config) -> FileKeyValueStore:
    """Resolve the state directory from config."""
    return FileKeyValueStore(config.resolved_data_dir())


def get_notifier(config: Config) -> Notifier:
    """Completion notifier selected by config; falls back to the log."""
    if config.notifier == "telegram":
        try:
            return TelegramNotifier(config.telegram_bot_token, config.telegram_chat_ids)
        except ValueError as e:
            logger.warning(f"{e} - falling back to log notifications")
    return LogNotifier()


def open_planner(config: Config, store=None, notifier: Notifier | None = None) -> Planner:
    """Load persisted state into a Planner that saves every change back."""
    store = store if store is not None else get_store(config)
    planner = Planner(
        load_state(store),
        notifier=notifier if notifier is not None else get_notifier(config),
        pixels_per_hour=config.pixels_per_hour,
        drag_threshold_px=config.drag_threshold_px,
        click_suppress_ms=config.click_suppress_ms,
    )
    persister = StatePersister(store)
    if store.get(ACTIVITIES_KEY) is None:
        # Seeded activities get fresh ids; keep them stable from the first run
        persister.save_all(planner.state)
    planner.subscribe(persister)
    return planner
