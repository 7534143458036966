"""Sleep-aware calendar coordinates.

The calendar starts at wake time and ends when sleep begins, so the sleep
block never takes vertical space. Positions are measured in pixels from the
top of the calendar along the awake span; clock times inside the sleep
interval have no position.
"""

from dataclasses import dataclass
from typing import Iterable

from .activities import Activity, sort_by_start
from .sleep import SleepConfig
from .timemath import DAY_MINUTES, clamp, format_hour_marker, round_half_up

PIXELS_PER_HOUR = 40
MIN_BLOCK_HEIGHT_PX = 18


@dataclass(frozen=True)
class HourMark:
    """A gridline on the calendar."""

    minutes: int
    position: float
    hour: int

    @property
    def label(self) -> str:
        return format_hour_marker(self.hour)


@dataclass(frozen=True)
class ActivityBlock:
    """An activity placed on the calendar."""

    activity: Activity
    top: float
    height: float


class CalendarLayout:
    """Maps clock minutes to vertical pixel offsets and back."""

    def __init__(
        self,
        sleep: SleepConfig,
        height_px: float | None = None,
        pixels_per_hour: float = PIXELS_PER_HOUR,
    ):
        self.sleep = sleep
        self.awake_minutes = sleep.awake_minutes
        if height_px is None:
            height_px = self.awake_minutes * pixels_per_hour / 60
        self.height_px = height_px

    @property
    def sleep_start(self) -> int:
        return self.sleep.start_minutes

    @property
    def sleep_end(self) -> int:
        return self.sleep.end_minutes

    def minutes_since_wake(self, minutes: int) -> int | None:
        """Minutes walked forward from wake time, or None during sleep."""
        minutes = minutes % DAY_MINUTES
        if self.sleep.contains(minutes):
            return None
        since_wake = (minutes - self.sleep_end) % DAY_MINUTES
        return clamp(since_wake, 0, self.awake_minutes)

    def time_to_position(self, minutes: int) -> float | None:
        """Pixel offset for a clock time; None when it falls inside sleep."""
        since_wake = self.minutes_since_wake(minutes)
        if since_wake is None:
            return None
        return since_wake / self.awake_minutes * self.height_px

    def position_to_time(self, position: float) -> int:
        """Clock minutes for a pixel offset (inverse of time_to_position)."""
        ratio = clamp(position / self.height_px, 0.0, 1.0)
        since_wake = round_half_up(ratio * self.awake_minutes)
        return (self.sleep_end + since_wake) % DAY_MINUTES

    def hour_marks(self) -> list[HourMark]:
        """One mark per full hour from wake, closed by a mark at sleep onset."""
        marks = []
        for i in range(self.awake_minutes // 60 + 1):
            since_wake = i * 60
            minutes = (self.sleep_end + since_wake) % DAY_MINUTES
            marks.append(
                HourMark(
                    minutes=minutes,
                    position=since_wake / self.awake_minutes * self.height_px,
                    hour=minutes // 60,
                )
            )

        sleep_hour = self.sleep_start // 60
        if not marks or marks[-1].hour != sleep_hour:
            # Keep the closing line one pixel above the bottom edge
            marks.append(HourMark(minutes=self.sleep_start, position=self.height_px - 1, hour=sleep_hour))
        return marks

    def block_height(self, duration: int) -> float:
        return max(MIN_BLOCK_HEIGHT_PX, duration / self.awake_minutes * self.height_px)

    def visible_blocks(self, activities: Iterable[Activity]) -> list[ActivityBlock]:
        """Non-sleep activities whose start is on the calendar, in start order."""
        blocks = []
        for activity in sort_by_start(activities):
            if activity.is_sleep:
                continue
            top = self.time_to_position(activity.start_minutes)
            if top is None:
                continue
            blocks.append(ActivityBlock(activity=activity, top=top, height=self.block_height(activity.duration)))
        return blocks
