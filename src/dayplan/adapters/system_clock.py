"""System wall-clock adapter."""

from datetime import datetime


class SystemClock:
    """Implements Clock protocol with the local system time."""

    def now(self) -> datetime:
        return datetime.now()
