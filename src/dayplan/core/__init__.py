"""Functional core - pure scheduling logic with no I/O."""

from .activities import Activity, ValidationIssue, validate_activity, sort_by_start
from .sleep import SleepConfig
from .coordinates import CalendarLayout, HourMark, ActivityBlock
from .availability import Availability, compute_availability, free_minutes_until_sleep
from .drag import DragResolver, DragState, GesturePhase
from .timer import FocusMode, FocusSession, TimerState, TimerStatus

__all__ = [
    # Activities
    "Activity",
    "ValidationIssue",
    "validate_activity",
    "sort_by_start",
    # Sleep
    "SleepConfig",
    # Coordinates
    "CalendarLayout",
    "HourMark",
    "ActivityBlock",
    # Availability
    "Availability",
    "compute_availability",
    "free_minutes_until_sleep",
    # Drag
    "DragResolver",
    "DragState",
    "GesturePhase",
    # Timer
    "FocusMode",
    "FocusSession",
    "TimerState",
    "TimerStatus",
]
