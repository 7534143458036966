"""Drag-to-reschedule gesture recognition.

A press on an activity block becomes either a click (edit the activity) or a
drag (move it along the snap grid), decided by whether the pointer travels
past a small threshold before release. Nothing here mutates the activity list;
the resolver only emits outcomes for the caller to apply.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable

from .activities import Activity, quick_task, reschedule_activity
from .coordinates import CalendarLayout
from .timemath import snap_to_grid, to_hhmm

DRAG_THRESHOLD_PX = 3
CLICK_SUPPRESS_MS = 50


class GesturePhase(Enum):
    IDLE = "idle"
    PRESS_STARTED = "press_started"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class ShadowPosition:
    """Preview of where the dragged activity would land."""

    top: float | None
    start: str


@dataclass(frozen=True)
class DragState:
    """One pointer-down to pointer-up cycle. Not persisted."""

    phase: GesturePhase = GesturePhase.IDLE
    activity_id: str | None = None
    pointer_offset: float = 0.0
    origin_y: float = 0.0
    shadow: ShadowPosition | None = None
    suppress_until: float | None = None

    @property
    def is_active(self) -> bool:
        return self.phase is not GesturePhase.IDLE

    @property
    def has_crossed_threshold(self) -> bool:
        return self.phase is GesturePhase.DRAGGING

    def suppresses_click(self, at: float) -> bool:
        return self.suppress_until is not None and at < self.suppress_until


# ============== Events ==============


@dataclass(frozen=True)
class PointerDown:
    """Press on an activity block. offset_y is the press point within the block."""

    activity: Activity
    pointer_y: float
    offset_y: float
    at: float = 0.0


@dataclass(frozen=True)
class PointerMove:
    pointer_y: float
    at: float = 0.0


@dataclass(frozen=True)
class PointerUp:
    """Release, or the pointer leaving the calendar surface."""

    pointer_y: float
    at: float = 0.0


@dataclass(frozen=True)
class CalendarClick:
    """Click on the calendar surface; on_activity when it landed on a block."""

    pointer_y: float
    at: float = 0.0
    on_activity: bool = False


# ============== Outcomes ==============


@dataclass(frozen=True)
class EditIntent:
    activity_id: str


@dataclass(frozen=True)
class Reschedule:
    activity_id: str
    start: str


@dataclass(frozen=True)
class QuickAdd:
    start: str


Event = PointerDown | PointerMove | PointerUp | CalendarClick
Outcome = EditIntent | Reschedule | QuickAdd


class DragResolver:
    """Transition function for the drag gesture state machine."""

    def __init__(
        self,
        layout: CalendarLayout,
        threshold_px: float = DRAG_THRESHOLD_PX,
        suppress_ms: float = CLICK_SUPPRESS_MS,
    ):
        self.layout = layout
        self.threshold_px = threshold_px
        self.suppress_ms = suppress_ms

    def snapped_time(self, position: float) -> int:
        """Clock minutes for a pixel offset, snapped to the 15-minute grid."""
        return snap_to_grid(self.layout.position_to_time(position))

    def shadow_at(self, minutes: int) -> ShadowPosition:
        return ShadowPosition(top=self.layout.time_to_position(minutes), start=to_hhmm(minutes))

    def handle(self, state: DragState, event: Event) -> tuple[DragState, Outcome | None]:
        """Apply one pointer event. Returns the next state and an outcome, if any."""
        match event:
            case PointerDown():
                return self._press(state, event), None
            case PointerMove():
                return self._move(state, event), None
            case PointerUp():
                return self._release(state, event)
            case CalendarClick():
                return self._click(state, event)
        raise TypeError(f"Unknown pointer event: {event!r}")

    def _press(self, state: DragState, event: PointerDown) -> DragState:
        activity = event.activity
        return DragState(
            phase=GesturePhase.PRESS_STARTED,
            activity_id=activity.id,
            pointer_offset=event.offset_y,
            origin_y=event.pointer_y,
            shadow=self.shadow_at(activity.start_minutes),
            suppress_until=state.suppress_until,
        )

    def _move(self, state: DragState, event: PointerMove) -> DragState:
        if state.phase is GesturePhase.IDLE:
            return state
        moved = abs(event.pointer_y - state.origin_y)
        if state.phase is GesturePhase.PRESS_STARTED and moved <= self.threshold_px:
            return state
        minutes = self.snapped_time(event.pointer_y - state.pointer_offset)
        return replace(state, phase=GesturePhase.DRAGGING, shadow=self.shadow_at(minutes))

    def _release(self, state: DragState, event: PointerUp) -> tuple[DragState, Outcome | None]:
        if state.phase is GesturePhase.IDLE:
            return state, None

        if state.phase is GesturePhase.DRAGGING and state.shadow is not None:
            outcome = Reschedule(activity_id=state.activity_id, start=state.shadow.start)
        else:
            outcome = EditIntent(activity_id=state.activity_id)

        return DragState(suppress_until=event.at + self.suppress_ms), outcome

    def _click(self, state: DragState, event: CalendarClick) -> tuple[DragState, Outcome | None]:
        if event.on_activity or state.phase is not GesturePhase.IDLE:
            return state, None
        if state.suppresses_click(event.at):
            return state, None
        minutes = self.snapped_time(event.pointer_y)
        return replace(state, suppress_until=None), QuickAdd(start=to_hhmm(minutes))


def apply_outcome(activities: Iterable[Activity], outcome: Outcome | None) -> tuple[Activity, ...]:
    """The activity list after a gesture outcome. Edit intents leave it unchanged."""
    activities = tuple(activities)
    match outcome:
        case Reschedule(activity_id=activity_id, start=start):
            return reschedule_activity(activities, activity_id, start)
        case QuickAdd(start=start):
            return activities + (quick_task(start),)
    return activities
