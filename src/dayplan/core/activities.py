"""Pure activity domain logic - records, list mutations, validation."""

import uuid
from dataclasses import dataclass, replace
from typing import Iterable

from .timemath import DAY_MINUTES, is_valid_hhmm, overlap_minutes, to_minutes

SLEEP = "Sleep"
OTHER = "Other"

CATEGORY_COLORS = {
    "Sleep": "#94a3b8",
    "Work": "#60a5fa",
    "Gym": "#34d399",
    "Study": "#f472b6",
    "Commute": "#f59e0b",
    "Leisure": "#22d3ee",
    "Meal": "#fb7185",
    "Other": "#a78bfa",
}

QUICK_TASK_TITLE = "Quick Task"
QUICK_TASK_MINUTES = 15
FALLBACK_LABEL = "Activity"


def new_activity_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Activity:
    """A timed block on the day planner."""

    id: str
    title: str
    category: str
    start: str
    duration: int

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration

    @property
    def is_sleep(self) -> bool:
        return self.category == SLEEP

    @property
    def color(self) -> str:
        return CATEGORY_COLORS.get(self.category, CATEGORY_COLORS[OTHER])

    @property
    def label(self) -> str:
        return self.title or self.category

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "start": self.start,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Activity":
        """Create Activity from persisted data, filling missing fields."""
        start = data.get("start", "09:00")
        if not is_valid_hhmm(start):
            start = "09:00"
        try:
            duration = int(data.get("duration", 60))
        except (TypeError, ValueError):
            duration = 60
        return cls(
            id=str(data.get("id") or new_activity_id()),
            title=data.get("title", "") or "",
            category=data.get("category", OTHER) or OTHER,
            start=start,
            duration=max(1, duration),
        )


DEFAULT_ACTIVITIES = (
    {"title": "Sleep", "category": "Sleep", "start": "23:00", "duration": 540},
    {"title": "Work", "category": "Work", "start": "09:30", "duration": 480},
    {"title": "Gym", "category": "Gym", "start": "18:00", "duration": 60},
)


def seed_activities() -> tuple[Activity, ...]:
    """Starter activities with fresh ids."""
    return tuple(Activity(id=new_activity_id(), **data) for data in DEFAULT_ACTIVITIES)


def quick_task(start: str) -> Activity:
    """A 15-minute placeholder created by clicking empty calendar space."""
    return Activity(
        id=new_activity_id(),
        title=QUICK_TASK_TITLE,
        category=OTHER,
        start=start,
        duration=QUICK_TASK_MINUTES,
    )


def sort_by_start(activities: Iterable[Activity]) -> list[Activity]:
    """Sort activities by start time."""
    return sorted(activities, key=lambda a: a.start_minutes)


def find_activity(activities: Iterable[Activity], activity_id: str | None) -> Activity | None:
    """Resolve an activity id; None if it no longer exists."""
    if activity_id is None:
        return None
    for activity in activities:
        if activity.id == activity_id:
            return activity
    return None


def activity_label(activities: Iterable[Activity], activity_id: str | None) -> str:
    """Display label for a possibly deleted activity."""
    activity = find_activity(activities, activity_id)
    return activity.label if activity else FALLBACK_LABEL


def upsert_activity(activities: Iterable[Activity], activity: Activity) -> tuple[Activity, ...]:
    """Replace the activity with the same id, or append it."""
    result = []
    replaced = False
    for existing in activities:
        if existing.id == activity.id:
            result.append(activity)
            replaced = True
        else:
            result.append(existing)
    if not replaced:
        result.append(activity)
    return tuple(result)


def remove_activity(activities: Iterable[Activity], activity_id: str) -> tuple[Activity, ...]:
    return tuple(a for a in activities if a.id != activity_id)


def reschedule_activity(
    activities: Iterable[Activity], activity_id: str, start: str
) -> tuple[Activity, ...]:
    """Move an activity to a new start; identity, category and duration are unchanged."""
    return tuple(replace(a, start=start) if a.id == activity_id else a for a in activities)


def find_overlaps(activities: Iterable[Activity], candidate: Activity) -> list[Activity]:
    """Existing activities (other than the candidate itself) that overlap it."""
    b1 = candidate.start_minutes
    b2 = b1 + candidate.duration
    return [
        a
        for a in activities
        if a.id != candidate.id
        and overlap_minutes(a.start_minutes, a.end_minutes, b1, b2) > 0
    ]


@dataclass(frozen=True)
class ValidationIssue:
    """A form validation message; warnings do not block saving."""

    message: str
    blocking: bool = True


def has_blocking(issues: Iterable[ValidationIssue]) -> bool:
    return any(issue.blocking for issue in issues)


def validate_activity(
    start: str,
    duration,
    existing: Iterable[Activity] = (),
    activity_id: str | None = None,
) -> list[ValidationIssue]:
    """
    Validate raw form input for an activity.

    Returns a list of issues; the caller decides whether to block the save.
    Overlaps with other activities are reported as a non-blocking warning.
    """
    issues = []
    start_ok = is_valid_hhmm(start)
    if not start_ok:
        issues.append(ValidationIssue("Start time is required (HH:MM)"))

    try:
        minutes = int(duration)
    except (TypeError, ValueError):
        minutes = 0
    if minutes <= 0:
        issues.append(ValidationIssue("Duration must be a positive number"))

    if not start_ok or minutes <= 0:
        return issues

    if to_minutes(start) + minutes > DAY_MINUTES:
        issues.append(
            ValidationIssue("Activity ends after midnight (not supported in a single-day view)")
        )

    candidate = Activity(id=activity_id or "", title="", category=OTHER, start=start, duration=minutes)
    others = [a for a in existing if activity_id is None or a.id != activity_id]
    overlaps = find_overlaps(others, candidate)
    if overlaps:
        noun = "activity" if len(overlaps) == 1 else "activities"
        issues.append(
            ValidationIssue(f"Warning: overlaps with {len(overlaps)} existing {noun}", blocking=False)
        )

    return issues
