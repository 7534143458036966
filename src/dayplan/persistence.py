"""Persisted planner state - one JSON value per fixed key.

Each key is read independently at startup and rewritten whenever its own
value changes. Missing or malformed entries fall back to defaults.
"""

import json
import logging

from .core.activities import Activity, seed_activities
from .core.sleep import SleepConfig
from .core.timer import FocusMode, TimerState
from .ports.state_store import KeyValueStore
from .session import PlannerState

logger = logging.getLogger(__name__)

ACTIVITIES_KEY = "planner.activities"
SLEEP_KEY = "planner.sleepConfig"
TIMER_KEY = "planner.timerState"
FOCUS_KEY = "planner.focusMode"
THEME_KEY = "planner.theme"


def _read_json(store: KeyValueStore, key: str):
    raw = store.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring malformed {key}: {e}")
        return None


def load_activities(store: KeyValueStore) -> tuple[Activity, ...]:
    """Stored activities, or the starter set when nothing is stored."""
    data = _read_json(store, ACTIVITIES_KEY)
    if data is None:
        return seed_activities()
    if not isinstance(data, list):
        logger.warning(f"Expected a list under {ACTIVITIES_KEY}, got {type(data).__name__}")
        return seed_activities()

    activities = []
    for item in data:
        if not isinstance(item, dict):
            logger.warning(f"Skipping malformed activity entry: {item!r}")
            continue
        activities.append(Activity.from_dict(item))
    return tuple(activities)


def load_state(store: KeyValueStore) -> PlannerState:
    """Read every persisted value, repairing what is missing."""
    theme = _read_json(store, THEME_KEY)
    return PlannerState(
        activities=load_activities(store),
        sleep=SleepConfig.from_dict(_read_json(store, SLEEP_KEY)),
        timer=TimerState.from_dict(_read_json(store, TIMER_KEY)),
        focus=FocusMode.from_dict(_read_json(store, FOCUS_KEY)),
        dark_theme=theme if isinstance(theme, bool) else True,
    )


_ENCODERS = {
    ACTIVITIES_KEY: ("activities", lambda activities: [a.to_dict() for a in activities]),
    SLEEP_KEY: ("sleep", SleepConfig.to_dict),
    TIMER_KEY: ("timer", TimerState.to_dict),
    FOCUS_KEY: ("focus", FocusMode.to_dict),
    THEME_KEY: ("dark_theme", bool),
}


class StatePersister:
    """
    Planner subscriber that writes changed values to a KeyValueStore.

    Only top-level values that differ between snapshots are written; drag
    state is never persisted.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def __call__(self, old: PlannerState, new: PlannerState) -> None:
        for key, (attr, _) in _ENCODERS.items():
            if getattr(old, attr) != getattr(new, attr):
                self._write(key, new)

    def save_all(self, state: PlannerState) -> None:
        for key in _ENCODERS:
            self._write(key, state)

    def _write(self, key: str, state: PlannerState) -> None:
        attr, encode = _ENCODERS[key]
        self.store.set(key, json.dumps(encode(getattr(state, attr))))
