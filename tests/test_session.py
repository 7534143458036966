"""Tests for the planner session: mutations, subscribers and derived views."""

from datetime import datetime, timedelta

import pytest

from dayplan.core.activities import QUICK_TASK_TITLE, Activity
from dayplan.core.drag import CalendarClick, EditIntent, PointerDown, PointerMove, PointerUp, QuickAdd
from dayplan.core.timer import TimerStatus
from dayplan.session import Planner, PlannerState, minutes_of_day


class FakeNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))


@pytest.fixture
def day():
    return (
        Activity(id="sleep", title="Sleep", category="Sleep", start="23:00", duration=540),
        Activity(id="work", title="Work", category="Work", start="09:30", duration=480),
        Activity(id="gym", title="Gym", category="Gym", start="18:00", duration=60),
    )


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def planner(day, notifier):
    return Planner(PlannerState(activities=day), notifier=notifier)


@pytest.fixture
def changes(planner):
    recorded = []
    planner.subscribe(lambda old, new: recorded.append((old, new)))
    return recorded


@pytest.fixture
def t0():
    return datetime(2025, 1, 15, 9, 0, 0)


def test_minutes_of_day():
    assert minutes_of_day(datetime(2025, 1, 15, 14, 7, 59)) == 847


class TestConstruction:
    def test_seeds_starter_activities(self):
        planner = Planner()
        assert [a.title for a in planner.state.activities] == ["Sleep", "Work", "Gym"]

    def test_layout_follows_sleep(self, planner):
        assert planner.layout.height_px == pytest.approx(600)
        planner.set_sleep("22:00", 480)
        assert planner.layout.height_px == pytest.approx(640)


class TestSubscribers:
    def test_notified_with_old_and_new(self, planner, changes):
        before = planner.state
        planner.toggle_theme()
        assert changes == [(before, planner.state)]
        assert planner.state.dark_theme is False

    def test_unchanged_state_is_not_published(self, planner, changes):
        planner.delete_activity("missing")
        planner.pause_timer(datetime.now())
        assert changes == []

    def test_unsubscribe(self, planner):
        calls = []
        unsubscribe = planner.subscribe(lambda old, new: calls.append(new))
        planner.toggle_theme()
        unsubscribe()
        planner.toggle_theme()
        assert len(calls) == 1


class TestActivities:
    def test_add(self, planner, changes):
        activity, issues = planner.save_activity("Read", "Study", "20:00", 30)
        assert issues == []
        assert activity in planner.state.activities
        assert len(planner.state.activities) == 4
        assert len(changes) == 1

    def test_blocking_issue_refuses_save(self, planner, changes):
        activity, issues = planner.save_activity("Late", "Work", "23:30", 60)
        assert activity is None
        assert issues[0].blocking
        assert len(planner.state.activities) == 3
        assert changes == []

    def test_overlap_saves_with_warning(self, planner):
        activity, issues = planner.save_activity("Call", "Work", "10:00", 30)
        assert activity is not None
        assert [i.blocking for i in issues] == [False]
        assert "overlaps with 1 existing activity" in issues[0].message

    def test_edit_keeps_id(self, planner):
        activity, _ = planner.save_activity("Lifting", "Gym", "18:30", 45, activity_id="gym")
        assert activity.id == "gym"
        gyms = [a for a in planner.state.activities if a.id == "gym"]
        assert gyms == [activity]

    def test_delete(self, planner):
        assert planner.delete_activity("gym") is True
        assert planner.delete_activity("gym") is False
        assert [a.id for a in planner.state.activities] == ["sleep", "work"]

    def test_clear(self, planner):
        planner.clear_activities()
        assert planner.state.activities == ()

    def test_reschedule(self, planner):
        assert planner.reschedule("gym", "19:00") is True
        assert [a.start for a in planner.state.activities if a.id == "gym"] == ["19:00"]
        assert planner.reschedule("missing", "19:00") is False


class TestSettings:
    def test_set_sleep(self, planner):
        sleep = planner.set_sleep("22:30", 480)
        assert planner.state.sleep == sleep
        assert sleep.end_minutes == 390

    def test_invalid_sleep_raises(self, planner):
        with pytest.raises(ValueError):
            planner.set_sleep("25:00", 480)

    def test_toggle_theme(self, planner):
        assert planner.toggle_theme() is False
        assert planner.toggle_theme() is True


class TestPointer:
    def test_click_on_empty_space_adds_quick_task(self, planner):
        y = planner.layout.time_to_position(14 * 60 + 7)
        outcome = planner.pointer(CalendarClick(pointer_y=y, at=1000))
        assert isinstance(outcome, QuickAdd)
        assert outcome.start == "14:00"
        quick = [a for a in planner.state.activities if a.title == QUICK_TASK_TITLE]
        assert len(quick) == 1
        assert quick[0].duration == 15
        assert quick[0].start == "14:00"

    def test_drag_reschedules(self, planner, day):
        gym = day[2]
        top = planner.layout.time_to_position(gym.start_minutes)
        planner.pointer(PointerDown(activity=gym, pointer_y=top, offset_y=0, at=0))
        planner.pointer(PointerMove(pointer_y=top + 40, at=10))
        assert planner.view(datetime(2025, 1, 15, 12, 0)).shadow is not None
        planner.pointer(PointerUp(pointer_y=top + 40, at=20))
        assert [a.start for a in planner.state.activities if a.id == "gym"] == ["19:00"]

    def test_click_after_release_is_suppressed(self, planner, day):
        gym = day[2]
        top = planner.layout.time_to_position(gym.start_minutes)
        planner.pointer(PointerDown(activity=gym, pointer_y=top, offset_y=0, at=0))
        outcome = planner.pointer(PointerUp(pointer_y=top, at=5))
        assert outcome == EditIntent(activity_id="gym")
        assert planner.pointer(CalendarClick(pointer_y=top + 100, at=20)) is None
        assert len(planner.state.activities) == 3


class TestTimer:
    def test_completion_notifies_once(self, planner, notifier, t0):
        planner.start_timer(t0, "gym", custom_target_minutes=1)
        results = [planner.tick(t0 + timedelta(seconds=s)) for s in range(1, 90)]
        assert results.count(True) == 1
        assert notifier.sent == [("Timer Completed!", "Finished: Gym")]
        assert planner.state.timer.status is TimerStatus.COMPLETED

    def test_pause_after_missed_target_notifies(self, planner, notifier, t0):
        planner.start_timer(t0, "gym", custom_target_minutes=1)
        planner.pause_timer(t0 + timedelta(seconds=90))
        assert notifier.sent == [("Timer Completed!", "Finished: Gym")]
        assert planner.state.timer.status is TimerStatus.COMPLETED
        assert planner.state.timer.elapsed_seconds == 60

    def test_restart_after_missed_target_notifies(self, planner, notifier, t0):
        planner.start_timer(t0, "gym", custom_target_minutes=1)
        planner.start_timer(t0 + timedelta(seconds=90), "work")
        assert notifier.sent == [("Timer Completed!", "Finished: Gym")]
        assert planner.state.timer.is_running
        assert planner.state.timer.activity_id == "work"
        assert planner.state.timer.elapsed_seconds == 0

    def test_stop_after_missed_target_notifies(self, planner, notifier, t0):
        planner.start_timer(t0, "gym", custom_target_minutes=1)
        planner.stop_timer(t0 + timedelta(minutes=5))
        assert len(notifier.sent) == 1
        assert planner.state.timer.status is TimerStatus.IDLE

    def test_leaving_focus_after_missed_target_notifies(self, planner, notifier, t0):
        planner.toggle_focus(t0)
        planner.start_timer(t0, "gym", custom_target_minutes=1)
        planner.toggle_focus(t0 + timedelta(seconds=90))
        assert len(notifier.sent) == 1
        assert [s.duration_seconds for s in planner.state.timer.focus_sessions] == [60]


    def test_no_notifier_is_fine(self, day, t0):
        planner = Planner(PlannerState(activities=day))
        planner.start_timer(t0, custom_target_minutes=1)
        assert planner.tick(t0 + timedelta(minutes=2)) is True

    def test_focus_sessions_flow_through(self, planner, t0):
        planner.toggle_focus(t0, "work")
        planner.start_timer(t0, "work")
        planner.pause_timer(t0 + timedelta(seconds=60))
        planner.resume_timer(t0 + timedelta(seconds=90))
        planner.toggle_focus(t0 + timedelta(seconds=120))
        planner.stop_timer(t0 + timedelta(seconds=150))

        sessions = planner.state.timer.focus_sessions
        assert [s.duration_seconds for s in sessions] == [60, 30]
        assert planner.state.focus.enabled is False
        assert planner.state.timer.is_running is False

    def test_label_survives_deletion(self, planner, t0):
        planner.start_timer(t0, "gym")
        planner.delete_activity("gym")
        assert planner.view(t0).timer.label == "Activity"


class TestView:
    def test_morning(self, planner, t0):
        view = planner.view(t0)
        assert view.availability.next_activity.id == "work"
        assert view.availability.minutes_until_next == 30
        assert view.availability.minutes_until_sleep == 840
        assert view.availability.busy_minutes == 540
        assert view.availability.free_minutes == 300
        assert view.progress.elapsed_minutes == 60
        assert view.now_position == pytest.approx(40)
        assert [b.activity.id for b in view.blocks] == ["work", "gym"]
        assert view.timer.status is TimerStatus.IDLE
        assert view.shadow is None

    def test_during_sleep(self, planner):
        view = planner.view(datetime(2025, 1, 15, 3, 0))
        assert view.now_position is None
        assert view.availability.next_activity.id == "work"
