"""Ports - interfaces/protocols for external dependencies."""

from .state_store import KeyValueStore
from .notifier import Notifier
from .clock import Clock

__all__ = [
    "KeyValueStore",
    "Notifier",
    "Clock",
]
