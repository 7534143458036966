"""Notification side channel interface."""

from typing import Protocol


class Notifier(Protocol):
    """Fire-and-forget delivery of a short message."""

    def notify(self, title: str, body: str) -> None:
        ...
