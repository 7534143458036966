"""Pure free/busy accounting over the horizon [now, next sleep onset).

All values are minutes on one absolute timeline where 0 is midnight of the
current day; the next sleep onset may lie past 1440 (tomorrow).
"""

from dataclasses import dataclass, field
from typing import Iterable

from .activities import Activity, sort_by_start
from .sleep import SleepConfig
from .timemath import DAY_MINUTES, clamp, overlap_minutes

# Each activity is a daily block; yesterday's and tomorrow's copies can reach the horizon
_DAY_OFFSETS = (-DAY_MINUTES, 0, DAY_MINUTES)


def next_sleep_occurrence(now_min: int, sleep: SleepConfig) -> int:
    """Next sleep onset, later today or (past 1440) tomorrow."""
    sleep_start = sleep.start_minutes
    if now_min <= sleep_start:
        return sleep_start
    return sleep_start + DAY_MINUTES


def minutes_until_sleep(now_min: int, sleep: SleepConfig) -> int:
    return clamp(next_sleep_occurrence(now_min, sleep) - now_min, 0, DAY_MINUTES)


def _occurrences(activity: Activity) -> list[tuple[int, int]]:
    start = activity.start_minutes
    return [(start + offset, start + offset + activity.duration) for offset in _DAY_OFFSETS]


def busy_minutes(activities: Iterable[Activity], now_min: int, sleep: SleepConfig) -> int:
    """Minutes of the horizon taken by non-sleep activities."""
    horizon_end = next_sleep_occurrence(now_min, sleep)
    busy = 0
    for activity in activities:
        if activity.is_sleep:
            continue
        for start, end in _occurrences(activity):
            busy += overlap_minutes(now_min, horizon_end, start, end)
    return busy


def free_minutes_until_sleep(
    activities: Iterable[Activity], now_min: int, sleep: SleepConfig
) -> int:
    """Horizon span minus busy minutes, clamped to [0, span]."""
    span = max(0, next_sleep_occurrence(now_min, sleep) - now_min)
    return clamp(span - busy_minutes(activities, now_min, sleep), 0, span)


def next_upcoming_activity(activities: Iterable[Activity], now_min: int) -> Activity | None:
    """First non-sleep activity starting at or after now, or None if none remain today."""
    for activity in sort_by_start(activities):
        if not activity.is_sleep and activity.start_minutes >= now_min:
            return activity
    return None


@dataclass(frozen=True)
class Availability:
    """Free/busy summary for the current horizon."""

    now_min: int
    next_sleep: int
    busy_minutes: int
    free_minutes: int
    next_activity: Activity | None
    minutes_until_next: int | None
    minutes_until_sleep: int

    @property
    def span(self) -> int:
        return max(0, self.next_sleep - self.now_min)


def compute_availability(
    now_min: int, sleep: SleepConfig, activities: Iterable[Activity]
) -> Availability:
    activities = list(activities)
    next_sleep = next_sleep_occurrence(now_min, sleep)
    span = max(0, next_sleep - now_min)
    busy = busy_minutes(activities, now_min, sleep)
    upcoming = next_upcoming_activity(activities, now_min)
    until_next = None
    if upcoming:
        until_next = clamp(upcoming.start_minutes - now_min, 0, DAY_MINUTES)
    return Availability(
        now_min=now_min,
        next_sleep=next_sleep,
        busy_minutes=busy,
        free_minutes=clamp(span - busy, 0, span),
        next_activity=upcoming,
        minutes_until_next=until_next,
        minutes_until_sleep=clamp(next_sleep - now_min, 0, DAY_MINUTES),
    )


# ============== Day progress ==============


def awake_window(now_min: int, sleep: SleepConfig) -> tuple[int, int]:
    """(wake, sleep onset) of the awake day that contains or follows now."""
    onset = next_sleep_occurrence(now_min, sleep)
    return onset - sleep.awake_minutes, onset


@dataclass(frozen=True)
class DayProgress:
    """How far through the awake day we are."""

    elapsed_minutes: int
    awake_minutes: int

    @property
    def remaining_minutes(self) -> int:
        return self.awake_minutes - self.elapsed_minutes

    @property
    def ratio(self) -> float:
        return self.elapsed_minutes / self.awake_minutes


def day_progress(now_min: int, sleep: SleepConfig) -> DayProgress:
    """Progress through the awake span; zero while asleep."""
    wake, _ = awake_window(now_min, sleep)
    elapsed = clamp(now_min - wake, 0, sleep.awake_minutes)
    return DayProgress(elapsed_minutes=elapsed, awake_minutes=sleep.awake_minutes)


@dataclass(frozen=True)
class Segment:
    """A free or scheduled stretch of the awake day."""

    kind: str  # "free" or "scheduled"
    start: int
    end: int
    activity: Activity | None = None

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass
class Timeline:
    past: list[Segment] = field(default_factory=list)
    future: list[Segment] = field(default_factory=list)

    def add(self, segment: Segment, now_min: int) -> None:
        """Add a segment, splitting it at now."""
        if segment.duration <= 0:
            return
        if segment.end <= now_min:
            self.past.append(segment)
        elif segment.start >= now_min:
            self.future.append(segment)
        else:
            self.past.append(Segment(segment.kind, segment.start, now_min, segment.activity))
            self.future.append(Segment(segment.kind, now_min, segment.end, segment.activity))


def timeline_segments(
    now_min: int, sleep: SleepConfig, activities: Iterable[Activity]
) -> Timeline:
    """
    Split the awake day into free and scheduled segments.

    Overlapping activities are laid end to end so segments never overlap.
    Segments that straddle now are split into a past and a future part.
    """
    wake, onset = awake_window(now_min, sleep)

    placed = []
    for activity in activities:
        if activity.is_sleep:
            continue
        for start, end in _occurrences(activity):
            if start < onset and end > wake:
                placed.append((max(start, wake), min(end, onset), activity))
    placed.sort(key=lambda item: item[0])

    timeline = Timeline()
    cursor = wake
    for start, end, activity in placed:
        if start > cursor:
            timeline.add(Segment("free", cursor, start), now_min)
        start = max(start, cursor)
        if end > start:
            timeline.add(Segment("scheduled", start, end, activity), now_min)
        cursor = max(cursor, end)

    if cursor < onset:
        timeline.add(Segment("free", cursor, onset), now_min)
    return timeline
