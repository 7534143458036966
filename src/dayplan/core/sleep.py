"""Sleep configuration - the one excluded interval of the day."""

from dataclasses import dataclass

from .timemath import (
    DAY_MINUTES,
    format_duration,
    is_valid_hhmm,
    minutes_to_12_hour,
    to_12_hour,
    to_minutes,
)

DEFAULT_SLEEP_START = "23:00"
DEFAULT_SLEEP_MINUTES = 9 * 60


@dataclass(frozen=True)
class SleepConfig:
    """Sleep interval: starts at `start`, lasts `duration_minutes` (may wrap midnight)."""

    start: str = DEFAULT_SLEEP_START
    duration_minutes: int = DEFAULT_SLEEP_MINUTES

    def __post_init__(self):
        if not is_valid_hhmm(self.start):
            raise ValueError(f"Invalid sleep start: {self.start!r} (expected HH:MM)")
        if not 0 < self.duration_minutes < DAY_MINUTES:
            raise ValueError(
                f"Sleep duration must be between 1 and {DAY_MINUTES - 1} minutes, "
                f"got {self.duration_minutes}"
            )

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        """Wake time, minutes since midnight."""
        return (self.start_minutes + self.duration_minutes) % DAY_MINUTES

    @property
    def awake_minutes(self) -> int:
        return DAY_MINUTES - self.duration_minutes

    @property
    def wraps_midnight(self) -> bool:
        return self.start_minutes > self.end_minutes

    def contains(self, minutes: int) -> bool:
        """True if a clock time falls inside the sleep interval."""
        minutes = minutes % DAY_MINUTES
        start, end = self.start_minutes, self.end_minutes
        if start < end:
            return start <= minutes < end
        return minutes >= start or minutes < end

    def describe(self) -> str:
        return (
            f"{to_12_hour(self.start)} - {minutes_to_12_hour(self.end_minutes)} "
            f"({format_duration(self.duration_minutes)})"
        )

    def to_dict(self) -> dict:
        return {"start": self.start, "duration": self.duration_minutes}

    @classmethod
    def from_dict(cls, data: dict | None) -> "SleepConfig":
        """Build from persisted data, repairing missing or invalid fields."""
        data = data if isinstance(data, dict) else {}
        start = data.get("start", DEFAULT_SLEEP_START)
        if not is_valid_hhmm(start):
            start = DEFAULT_SLEEP_START
        try:
            duration = int(data.get("duration", DEFAULT_SLEEP_MINUTES))
        except (TypeError, ValueError):
            duration = DEFAULT_SLEEP_MINUTES
        if not 0 < duration < DAY_MINUTES:
            duration = DEFAULT_SLEEP_MINUTES
        return cls(start=start, duration_minutes=duration)
