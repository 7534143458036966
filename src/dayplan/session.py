"""Planner session - immutable state snapshots and the mutations on them.

Every mutation builds a new PlannerState and hands (old, new) to subscribers;
persistence and rendering hang off those subscriptions.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable

from .core import activities as acts
from .core import timer as tmr
from .core.activities import Activity, ValidationIssue
from .core.availability import Availability, DayProgress, compute_availability, day_progress
from .core.coordinates import PIXELS_PER_HOUR, ActivityBlock, CalendarLayout, HourMark
from .core.drag import (
    CLICK_SUPPRESS_MS,
    DRAG_THRESHOLD_PX,
    DragResolver,
    DragState,
    Event,
    Outcome,
    ShadowPosition,
    apply_outcome,
)
from .core.sleep import SleepConfig
from .core.timer import FocusMode, TimerState, TimerStatus
from .ports.notifier import Notifier

logger = logging.getLogger(__name__)

Subscriber = Callable[["PlannerState", "PlannerState"], None]


def minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


@dataclass(frozen=True)
class PlannerState:
    """Everything the planner knows at one instant."""

    activities: tuple[Activity, ...] = ()
    sleep: SleepConfig = SleepConfig()
    timer: TimerState = TimerState()
    focus: FocusMode = FocusMode()
    dark_theme: bool = True
    drag: DragState = DragState()


@dataclass(frozen=True)
class TimerView:
    label: str
    status: TimerStatus
    elapsed_seconds: int
    remaining_seconds: int
    progress_ratio: float
    focus_enabled: bool


@dataclass(frozen=True)
class PlannerView:
    """Derived values for rendering."""

    now: datetime
    availability: Availability
    progress: DayProgress
    blocks: list[ActivityBlock]
    hour_marks: list[HourMark]
    now_position: float | None
    timer: TimerView
    shadow: ShadowPosition | None


class Planner:
    """Owns the current snapshot and dispatches mutations."""

    def __init__(
        self,
        state: PlannerState | None = None,
        notifier: Notifier | None = None,
        pixels_per_hour: float = PIXELS_PER_HOUR,
        drag_threshold_px: float = DRAG_THRESHOLD_PX,
        click_suppress_ms: float = CLICK_SUPPRESS_MS,
    ):
        if state is None:
            state = PlannerState(activities=acts.seed_activities())
        self._state = state
        self._subscribers: list[Subscriber] = []
        self.notifier = notifier
        self.pixels_per_hour = pixels_per_hour
        self.drag_threshold_px = drag_threshold_px
        self.click_suppress_ms = click_suppress_ms

    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def layout(self) -> CalendarLayout:
        return CalendarLayout(self._state.sleep, pixels_per_hour=self.pixels_per_hour)

    @property
    def resolver(self) -> DragResolver:
        return DragResolver(self.layout, self.drag_threshold_px, self.click_suppress_ms)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback(old, new)` after each change. Returns an unsubscribe function."""
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def _commit(self, new: PlannerState) -> None:
        old = self._state
        if new == old:
            return
        self._state = new
        for callback in list(self._subscribers):
            callback(old, new)

    def _update(self, **changes) -> None:
        self._commit(replace(self._state, **changes))

    # ============== Activities ==============

    def save_activity(
        self,
        title: str,
        category: str,
        start: str,
        duration,
        activity_id: str | None = None,
    ) -> tuple[Activity | None, list[ValidationIssue]]:
        """
        Add or edit an activity after validation.

        Returns (activity, issues). The activity is None when a blocking
        issue refused the save; warnings are returned alongside a saved one.
        """
        issues = acts.validate_activity(start, duration, self._state.activities, activity_id)
        if acts.has_blocking(issues):
            return None, issues

        activity = Activity(
            id=activity_id or acts.new_activity_id(),
            title=title,
            category=category,
            start=start,
            duration=int(duration),
        )
        self._update(activities=acts.upsert_activity(self._state.activities, activity))
        return activity, issues

    def delete_activity(self, activity_id: str) -> bool:
        if acts.find_activity(self._state.activities, activity_id) is None:
            return False
        self._update(activities=acts.remove_activity(self._state.activities, activity_id))
        return True

    def clear_activities(self) -> None:
        self._update(activities=())

    def reschedule(self, activity_id: str, start: str) -> bool:
        if acts.find_activity(self._state.activities, activity_id) is None:
            return False
        self._update(activities=acts.reschedule_activity(self._state.activities, activity_id, start))
        return True

    # ============== Settings ==============

    def set_sleep(self, start: str, duration_minutes: int) -> SleepConfig:
        """Replace the sleep configuration. Raises ValueError if invalid."""
        sleep = SleepConfig(start=start, duration_minutes=duration_minutes)
        self._update(sleep=sleep)
        return sleep

    def toggle_theme(self) -> bool:
        self._update(dark_theme=not self._state.dark_theme)
        return self._state.dark_theme

    # ============== Pointer gestures ==============

    def pointer(self, event: Event) -> Outcome | None:
        """Feed one pointer event to the drag resolver and apply its outcome."""
        drag, outcome = self.resolver.handle(self._state.drag, event)
        activities = apply_outcome(self._state.activities, outcome)
        self._update(drag=drag, activities=activities)
        if outcome is not None:
            logger.debug(f"Gesture resolved: {outcome}")
        return outcome

    # ============== Timer ==============

    def start_timer(
        self,
        now: datetime,
        activity_id: str | None = None,
        custom_target_minutes: float | None = None,
    ) -> TimerState:
        self.tick(now)
        state = self._state
        timer = tmr.start_timer(
            state.timer,
            now,
            activity_id=activity_id,
            activities=state.activities,
            custom_target_minutes=custom_target_minutes,
            focus=state.focus,
        )
        self._update(timer=timer)
        return timer

    def pause_timer(self, now: datetime) -> TimerState:
        self.tick(now)
        self._update(timer=tmr.pause_timer(self._state.timer, now, self._state.focus))
        return self._state.timer

    def resume_timer(self, now: datetime) -> TimerState:
        self._update(timer=tmr.resume_timer(self._state.timer, now))
        return self._state.timer

    def stop_timer(self, now: datetime) -> TimerState:
        self.tick(now)
        self._update(timer=tmr.stop_timer(self._state.timer, now, self._state.focus))
        return self._state.timer

    def toggle_focus(self, now: datetime, activity_id: str | None = None) -> FocusMode:
        self.tick(now)
        focus, timer = tmr.toggle_focus(self._state.focus, self._state.timer, now, activity_id)
        self._update(focus=focus, timer=timer)
        return focus

    def tick(self, now: datetime) -> bool:
        """
        Recompute elapsed time. Returns True when the timer just completed.

        Every timer mutation ticks first, so a target passed between ticks is
        reported here before the mutation applies.
        """
        timer, completed = tmr.tick(self._state.timer, now, self._state.focus)
        self._update(timer=timer)
        if completed:
            notice = tmr.completion_notice(timer, self._state.activities)
            logger.info(f"Timer completed: {notice.body}")
            if self.notifier is not None:
                self.notifier.notify(notice.title, notice.body)
        return completed

    # ============== Derived view ==============

    def view(self, now: datetime) -> PlannerView:
        state = self._state
        layout = self.layout
        now_min = minutes_of_day(now)
        timer = state.timer
        return PlannerView(
            now=now,
            availability=compute_availability(now_min, state.sleep, state.activities),
            progress=day_progress(now_min, state.sleep),
            blocks=layout.visible_blocks(state.activities),
            hour_marks=layout.hour_marks(),
            now_position=layout.time_to_position(now_min),
            timer=TimerView(
                label=timer.label(state.activities),
                status=timer.status,
                elapsed_seconds=timer.elapsed_seconds,
                remaining_seconds=timer.remaining_seconds,
                progress_ratio=timer.progress_ratio,
                focus_enabled=state.focus.enabled,
            ),
            shadow=state.drag.shadow if state.drag.is_active else None,
        )
