"""Wall-clock interface."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current naive local time."""
        ...
