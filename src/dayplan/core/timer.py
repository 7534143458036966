"""Focus timer state machine - pure transitions, `now` passed in explicitly.

Idle -> Running -> Paused -> Running ... -> Stopped (Idle)
Running -> Completed when a target duration is reached.

While focus mode is on and the timer runs, the overlapping wall-clock span is
logged as a FocusSession whenever that overlap ends: pause, stop, leaving focus
mode, completion, or restarting the timer.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable

from .activities import Activity, activity_label, find_activity


class TimerStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


def _parse_instant(value) -> datetime | None:
    """ISO string, or epoch milliseconds from older saves."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def _format_instant(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _non_negative_int(value, default: int = 0) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class FocusSession:
    """A wall-clock span during which the timer ran in focus mode."""

    start: datetime
    end: datetime
    activity_id: str | None = None

    @property
    def duration_seconds(self) -> int:
        return int((self.end - self.start).total_seconds())

    def to_dict(self) -> dict:
        return {
            "startTimestamp": _format_instant(self.start),
            "endTimestamp": _format_instant(self.end),
            "activityId": self.activity_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FocusSession | None":
        start = _parse_instant(data.get("startTimestamp"))
        end = _parse_instant(data.get("endTimestamp"))
        if start is None or end is None:
            return None
        return cls(start=start, end=end, activity_id=data.get("activityId"))


@dataclass(frozen=True)
class FocusMode:
    """Full-screen focus overlay, toggled independently of the timer."""

    enabled: bool = False
    focused_activity_id: str | None = None
    entered_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "isEnabled": self.enabled,
            "focusedActivityId": self.focused_activity_id,
            "enteredAt": _format_instant(self.entered_at),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "FocusMode":
        data = data if isinstance(data, dict) else {}
        enabled = bool(data.get("isEnabled", False))
        return cls(
            enabled=enabled,
            focused_activity_id=data.get("focusedActivityId") if enabled else None,
            entered_at=_parse_instant(data.get("enteredAt")) if enabled else None,
        )


NO_FOCUS = FocusMode()


@dataclass(frozen=True)
class TimerState:
    """Timer snapshot. elapsed = base + (now - start) while running."""

    is_running: bool = False
    is_paused: bool = False
    elapsed_seconds: int = 0
    base_elapsed_seconds: int = 0
    start_timestamp: datetime | None = None
    activity_id: str | None = None
    target_seconds: int = 0
    focus_sessions: tuple[FocusSession, ...] = ()

    @property
    def status(self) -> TimerStatus:
        if self.is_running:
            return TimerStatus.RUNNING
        if self.is_paused:
            return TimerStatus.PAUSED
        if self.target_seconds > 0 and self.elapsed_seconds >= self.target_seconds:
            return TimerStatus.COMPLETED
        return TimerStatus.IDLE

    @property
    def remaining_seconds(self) -> int:
        return max(0, self.target_seconds - self.elapsed_seconds)

    @property
    def progress_ratio(self) -> float:
        if self.target_seconds <= 0:
            return 0.0
        return min(1.0, self.elapsed_seconds / self.target_seconds)

    def label(self, activities: Iterable[Activity]) -> str:
        """Tracked activity's label; generic once the activity is gone."""
        return activity_label(activities, self.activity_id)

    def to_dict(self) -> dict:
        return {
            "isRunning": self.is_running,
            "isPaused": self.is_paused,
            "elapsedSeconds": self.elapsed_seconds,
            "baseElapsedSeconds": self.base_elapsed_seconds,
            "startTimestamp": _format_instant(self.start_timestamp),
            "activityId": self.activity_id,
            "targetSeconds": self.target_seconds,
            "focusSessions": [s.to_dict() for s in self.focus_sessions],
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "TimerState":
        """Load persisted state, filling fields missing from older saves."""
        data = data if isinstance(data, dict) else {}
        elapsed = _non_negative_int(data.get("elapsedSeconds", data.get("elapsedTime", 0)))
        base = data.get("baseElapsedSeconds", data.get("baseElapsedTime"))
        base = elapsed if base is None else _non_negative_int(base, elapsed)
        target = _non_negative_int(data.get("targetSeconds", data.get("targetDuration", 0)))
        start = _parse_instant(data.get("startTimestamp", data.get("startTime")))
        is_running = bool(data.get("isRunning", False))
        is_paused = bool(data.get("isPaused", False)) and not is_running
        if is_running and start is None:
            # Cannot resume counting without a start instant
            is_running, is_paused = False, True

        sessions = []
        for raw in data.get("focusSessions") or []:
            if isinstance(raw, dict):
                session = FocusSession.from_dict(raw)
                if session:
                    sessions.append(session)

        return cls(
            is_running=is_running,
            is_paused=is_paused,
            elapsed_seconds=elapsed,
            base_elapsed_seconds=base,
            start_timestamp=start,
            activity_id=data.get("activityId"),
            target_seconds=target,
            focus_sessions=tuple(sessions),
        )


@dataclass(frozen=True)
class Notice:
    """Message for the completion side channel."""

    title: str
    body: str


def completion_notice(state: TimerState, activities: Iterable[Activity]) -> Notice:
    return Notice(title="Timer Completed!", body=f"Finished: {state.label(activities)}")


# ============== Transitions ==============


def _completion_instant(state: TimerState) -> datetime | None:
    if state.target_seconds <= 0 or state.start_timestamp is None:
        return None
    return state.start_timestamp + timedelta(seconds=state.target_seconds - state.base_elapsed_seconds)


def _close_session(state: TimerState, focus: FocusMode, now: datetime) -> TimerState:
    """Append the running-in-focus span ending now, if there is one."""
    if not (focus.enabled and state.is_running and state.start_timestamp):
        return state
    start = state.start_timestamp
    if focus.entered_at and focus.entered_at > start:
        start = focus.entered_at
    end = now
    completes_at = _completion_instant(state)
    if completes_at and completes_at < end:
        end = completes_at
    if end < start:
        return state
    session = FocusSession(start=start, end=end, activity_id=state.activity_id)
    return replace(state, focus_sessions=state.focus_sessions + (session,))


def start_timer(
    state: TimerState,
    now: datetime,
    activity_id: str | None = None,
    activities: Iterable[Activity] = (),
    custom_target_minutes: float | None = None,
    focus: FocusMode = NO_FOCUS,
) -> TimerState:
    """
    Start (or restart) the timer.

    Switching to a different activity resets elapsed time. The target is the
    custom duration if given (0 means untimed), else the activity's duration,
    else 0 (untimed).
    """
    activity = find_activity(activities, activity_id)
    if custom_target_minutes is not None:
        target = max(0, int(custom_target_minutes * 60))
    elif activity:
        target = activity.duration * 60
    else:
        target = 0

    state, _ = tick(state, now, focus)
    state = _close_session(state, focus, now)

    fresh = state.activity_id != activity_id or state.status is TimerStatus.COMPLETED
    base = 0 if fresh else state.elapsed_seconds
    return replace(
        state,
        is_running=True,
        is_paused=False,
        start_timestamp=now,
        activity_id=activity_id,
        target_seconds=target,
        elapsed_seconds=base,
        base_elapsed_seconds=base,
    )


def pause_timer(state: TimerState, now: datetime, focus: FocusMode = NO_FOCUS) -> TimerState:
    """Freeze elapsed time; logs a focus session when in focus mode."""
    if not state.is_running:
        return state
    state, completed = tick(state, now, focus)
    if completed:
        return state
    state = _close_session(state, focus, now)
    return replace(
        state,
        is_running=False,
        is_paused=True,
        base_elapsed_seconds=state.elapsed_seconds,
    )


def resume_timer(state: TimerState, now: datetime) -> TimerState:
    if not state.is_paused:
        return state
    return replace(
        state,
        is_running=True,
        is_paused=False,
        start_timestamp=now,
        base_elapsed_seconds=state.elapsed_seconds,
    )


def stop_timer(state: TimerState, now: datetime, focus: FocusMode = NO_FOCUS) -> TimerState:
    """Back to the zero state. Only the focus session history survives."""
    state = _close_session(state, focus, now)
    return TimerState(focus_sessions=state.focus_sessions)


def tick(
    state: TimerState, now: datetime, focus: FocusMode = NO_FOCUS
) -> tuple[TimerState, bool]:
    """
    Recompute elapsed time. Returns (state, completed).

    completed is True only on the tick that reaches the target; the returned
    state is then stopped with elapsed clamped to the target.
    """
    if not state.is_running or state.start_timestamp is None:
        return state, False

    session_seconds = max(0, int((now - state.start_timestamp).total_seconds()))
    elapsed = state.base_elapsed_seconds + session_seconds

    if state.target_seconds > 0 and elapsed >= state.target_seconds:
        state = _close_session(state, focus, now)
        return (
            replace(
                state,
                is_running=False,
                is_paused=False,
                elapsed_seconds=state.target_seconds,
                base_elapsed_seconds=state.target_seconds,
            ),
            True,
        )

    if elapsed == state.elapsed_seconds:
        return state, False
    return replace(state, elapsed_seconds=elapsed), False


def toggle_focus(
    focus: FocusMode,
    timer: TimerState,
    now: datetime,
    activity_id: str | None = None,
) -> tuple[FocusMode, TimerState]:
    """Enter or leave focus mode. Leaving while the timer runs logs a session."""
    if focus.enabled:
        return NO_FOCUS, _close_session(timer, focus, now)
    return FocusMode(enabled=True, focused_activity_id=activity_id, entered_at=now), timer
