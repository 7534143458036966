"""Adapters - I/O implementations of ports."""

from .file_store import FileKeyValueStore
from .memory_store import MemoryKeyValueStore
from .log_notifier import LogNotifier
from .telegram_notifier import TelegramNotifier
from .system_clock import SystemClock

__all__ = [
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "LogNotifier",
    "TelegramNotifier",
    "SystemClock",
]
