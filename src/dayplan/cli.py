"""dayplan CLI - daily planner with a sleep-aware calendar and focus timer."""

import json
import logging
import sys
from datetime import datetime

import click
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.system_clock import SystemClock
from .config import load_config
from .core.activities import CATEGORY_COLORS, activity_label, find_activity, sort_by_start
from .core.availability import timeline_segments
from .core.drag import CalendarClick, EditIntent, PointerDown, PointerMove, PointerUp, QuickAdd, Reschedule
from .core.timemath import (
    format_clock,
    format_duration,
    format_elapsed,
    is_valid_hhmm,
    minutes_to_12_hour,
    snap_to_grid,
    to_12_hour,
    to_hhmm,
    to_minutes,
)
from .core.timer import TimerStatus
from .session import Planner, minutes_of_day
from .workflows import open_planner

logger = logging.getLogger(__name__)

clock = SystemClock()


def _open() -> Planner:
    """Load the planner and catch the timer up to the real clock."""
    planner = open_planner(load_config())
    planner.tick(clock.now())
    return planner


def _now(at: str | None) -> datetime:
    now = clock.now()
    if at is None:
        return now
    if not is_valid_hhmm(at):
        click.echo(f"Error: invalid time {at!r} (expected HH:MM)", err=True)
        sys.exit(1)
    minutes = to_minutes(at)
    return now.replace(hour=minutes // 60, minute=minutes % 60, second=0, microsecond=0)


def _require_activity(planner: Planner, activity_id: str):
    activity = find_activity(planner.state.activities, activity_id)
    if activity is None:
        click.echo(f"Error: no activity with id {activity_id}", err=True)
        sys.exit(1)
    return activity


def _echo_issues(issues) -> None:
    for issue in issues:
        click.echo(issue.message, err=issue.blocking)


def _timer_line(planner: Planner, now: datetime) -> str:
    timer = planner.view(now).timer
    if timer.status is TimerStatus.IDLE:
        return "Timer: idle"
    line = f"Timer: {timer.label} {format_elapsed(timer.elapsed_seconds)}"
    if planner.state.timer.target_seconds:
        line += f" / {format_elapsed(planner.state.timer.target_seconds)}"
        line += f" ({timer.progress_ratio:.0%}, {format_elapsed(timer.remaining_seconds)} left)"
    line += f" [{timer.status.value}]"
    if timer.focus_enabled:
        line += " [focus]"
    return line


@click.group()
@click.version_option(package_name="dayplan")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """dayplan - Daily Activity Planner."""
    level = logging.DEBUG if verbose else getattr(logging, load_config().log_level, logging.INFO)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level,
    )


@main.command()
@click.option("--at", "at", default=None, help="Pretend the time is HH:MM")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status(at: str | None, as_json: bool):
    """Countdowns, free time until sleep, and the timer."""
    now = _now(at)
    planner = _open()
    view = planner.view(now)
    avail = view.availability

    if as_json:
        click.echo(
            json.dumps(
                {
                    "now": now.isoformat(timespec="seconds"),
                    "next_activity": avail.next_activity.to_dict() if avail.next_activity else None,
                    "minutes_until_next": avail.minutes_until_next,
                    "next_sleep": avail.next_sleep,
                    "minutes_until_sleep": avail.minutes_until_sleep,
                    "free_minutes": avail.free_minutes,
                    "busy_minutes": avail.busy_minutes,
                    "day_progress": round(view.progress.ratio, 4),
                    "timer": {
                        "status": view.timer.status.value,
                        "label": view.timer.label,
                        "elapsed_seconds": view.timer.elapsed_seconds,
                        "remaining_seconds": view.timer.remaining_seconds,
                        "progress_ratio": view.timer.progress_ratio,
                        "focus": view.timer.focus_enabled,
                    },
                },
                indent=2,
            )
        )
        return

    click.echo(f"Now: {format_clock(now)}")
    if avail.next_activity:
        nxt = avail.next_activity
        click.echo(
            f"Next: {nxt.label} at {to_12_hour(nxt.start)} "
            f"(in {format_duration(avail.minutes_until_next)})"
        )
    else:
        click.echo("Next: nothing else scheduled today")
    click.echo(
        f"Sleep at {minutes_to_12_hour(planner.state.sleep.start_minutes)} "
        f"(in {format_duration(avail.minutes_until_sleep)})"
    )
    click.echo(f"Free until sleep: {format_duration(avail.free_minutes)} of {format_duration(avail.span)}")
    click.echo(f"Day progress: {view.progress.ratio:.0%}")
    click.echo(_timer_line(planner, now))


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_activities(as_json: bool):
    """List activities in start order."""
    planner = _open()
    activities = sort_by_start(planner.state.activities)

    if as_json:
        click.echo(json.dumps([a.to_dict() for a in activities], indent=2))
        return

    if not activities:
        click.echo("No activities.")
        return

    for a in activities:
        click.echo(f"{to_12_hour(a.start):>8}  {format_duration(a.duration):>6}  {a.label} [{a.category}]  {a.id}")


@main.command()
@click.argument("title")
@click.option("--start", required=True, help="Start time HH:MM")
@click.option("--duration", required=True, type=int, help="Duration in minutes")
@click.option(
    "--category",
    default="Work",
    show_default=True,
    type=click.Choice(list(CATEGORY_COLORS)),
)
def add(title: str, start: str, duration: int, category: str):
    """Add an activity."""
    planner = _open()
    activity, issues = planner.save_activity(title, category, start, duration)
    _echo_issues(issues)
    if activity is None:
        sys.exit(1)
    click.echo(f"Added {activity.label} at {to_12_hour(activity.start)} ({activity.id})")


@main.command()
@click.argument("activity_id")
@click.option("--title", default=None)
@click.option("--start", default=None, help="Start time HH:MM")
@click.option("--duration", default=None, type=int, help="Duration in minutes")
@click.option("--category", default=None, type=click.Choice(list(CATEGORY_COLORS)))
def edit(activity_id: str, title, start, duration, category):
    """Edit an activity."""
    planner = _open()
    current = _require_activity(planner, activity_id)
    activity, issues = planner.save_activity(
        title if title is not None else current.title,
        category or current.category,
        start or current.start,
        duration if duration is not None else current.duration,
        activity_id=current.id,
    )
    _echo_issues(issues)
    if activity is None:
        sys.exit(1)
    click.echo(f"Updated {activity.label}")


@main.command()
@click.argument("activity_id")
def remove(activity_id: str):
    """Remove an activity."""
    planner = _open()
    if not planner.delete_activity(activity_id):
        click.echo(f"Error: no activity with id {activity_id}", err=True)
        sys.exit(1)
    click.echo("Removed.")


@main.command()
@click.confirmation_option(prompt="Clear all activities?")
def clear():
    """Remove every activity."""
    planner = _open()
    planner.clear_activities()
    click.echo("Cleared.")


@main.command()
@click.argument("activity_id")
@click.argument("start")
def move(activity_id: str, start: str):
    """Move an activity to START (snapped to 15 minutes)."""
    if not is_valid_hhmm(start):
        click.echo(f"Error: invalid time {start!r} (expected HH:MM)", err=True)
        sys.exit(1)
    planner = _open()
    _require_activity(planner, activity_id)
    snapped = to_hhmm(snap_to_grid(to_minutes(start)))
    planner.reschedule(activity_id, snapped)
    click.echo(f"Moved to {to_12_hour(snapped)}")


@main.command()
@click.argument("activity_id")
@click.argument("dy", type=float)
def drag(activity_id: str, dy: float):
    """Drag an activity block DY pixels on the calendar."""
    planner = _open()
    activity = _require_activity(planner, activity_id)
    top = planner.layout.time_to_position(activity.start_minutes)
    if top is None:
        click.echo("Error: activity is hidden during sleep", err=True)
        sys.exit(1)

    planner.pointer(PointerDown(activity=activity, pointer_y=top, offset_y=0.0))
    planner.pointer(PointerMove(pointer_y=top + dy))
    outcome = planner.pointer(PointerUp(pointer_y=top + dy))

    match outcome:
        case Reschedule(start=new_start):
            click.echo(f"Rescheduled {activity.label} to {to_12_hour(new_start)}")
        case EditIntent():
            click.echo(f"Click on {activity.label}: {activity.category}, {format_duration(activity.duration)}")


@main.command("quick-add")
@click.argument("at")
def quick_add(at: str):
    """Click the calendar at time AT to add a 15-minute Quick Task."""
    if not is_valid_hhmm(at):
        click.echo(f"Error: invalid time {at!r} (expected HH:MM)", err=True)
        sys.exit(1)
    planner = _open()
    position = planner.layout.time_to_position(to_minutes(at))
    if position is None:
        click.echo("Error: that time is inside the sleep period", err=True)
        sys.exit(1)
    outcome = planner.pointer(CalendarClick(pointer_y=position))
    if isinstance(outcome, QuickAdd):
        click.echo(f"Added Quick Task at {to_12_hour(outcome.start)}")


@main.command()
def calendar():
    """Print the awake-day calendar with pixel offsets."""
    now = clock.now()
    planner = _open()
    view = planner.view(now)

    rows = [(m.position, f"{m.position:7.1f}px  {m.label:>5} ---") for m in view.hour_marks]
    rows += [
        (b.top, f"{b.top:7.1f}px        {b.activity.start} {b.activity.label} ({format_duration(b.activity.duration)})")
        for b in view.blocks
    ]
    if view.now_position is not None:
        rows.append((view.now_position, f"{view.now_position:7.1f}px        >> now {format_clock(now)}"))
    for _, line in sorted(rows, key=lambda r: r[0]):
        click.echo(line)


@main.command()
@click.option("--at", "at", default=None, help="Pretend the time is HH:MM")
def timeline(at: str | None):
    """Free and scheduled stretches of the awake day, split at now."""
    now = _now(at)
    planner = _open()
    segments = timeline_segments(minutes_of_day(now), planner.state.sleep, planner.state.activities)

    for heading, group in (("Done", segments.past), ("Ahead", segments.future)):
        if not group:
            continue
        click.echo(f"{heading}:")
        for s in group:
            label = s.activity.label if s.activity else "free"
            click.echo(f"  {to_hhmm(s.start)}-{to_hhmm(s.end)}  {format_duration(s.duration):>6}  {label}")


@main.command()
@click.option("--start", default=None, help="Bedtime HH:MM")
@click.option("--hours", default=None, type=click.FloatRange(min=0, min_open=True, max=24, max_open=True))
def sleep(start: str | None, hours: float | None):
    """Show or change the sleep period."""
    planner = _open()
    current = planner.state.sleep
    if start is not None or hours is not None:
        try:
            planner.set_sleep(
                start or current.start,
                round(hours * 60) if hours is not None else current.duration_minutes,
            )
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    click.echo(f"Sleep period: {planner.state.sleep.describe()}")


@main.command()
def theme():
    """Toggle dark/light theme preference."""
    planner = _open()
    dark = planner.toggle_theme()
    click.echo(f"Theme: {'dark' if dark else 'light'}")


@main.group()
def timer():
    """Focus timer controls."""
    pass


@timer.command("start")
@click.argument("activity_id", required=False)
@click.option("--minutes", type=click.FloatRange(min=0, min_open=True), default=None, help="Custom target")
def timer_start(activity_id: str | None, minutes: float | None):
    """Start timing ACTIVITY_ID (or an untimed session)."""
    now = clock.now()
    planner = _open()
    if activity_id:
        _require_activity(planner, activity_id)
    planner.start_timer(now, activity_id, minutes)
    click.echo(_timer_line(planner, now))


@timer.command("pause")
def timer_pause():
    now = clock.now()
    planner = _open()
    planner.pause_timer(now)
    click.echo(_timer_line(planner, now))


@timer.command("resume")
def timer_resume():
    now = clock.now()
    planner = _open()
    planner.resume_timer(now)
    click.echo(_timer_line(planner, now))


@timer.command("stop")
def timer_stop():
    now = clock.now()
    planner = _open()
    planner.stop_timer(now)
    click.echo(_timer_line(planner, now))


@timer.command("show")
def timer_show():
    now = clock.now()
    click.echo(_timer_line(_open(), now))


@main.command()
@click.argument("activity_id", required=False)
def focus(activity_id: str | None):
    """Toggle focus mode."""
    now = clock.now()
    planner = _open()
    mode = planner.toggle_focus(now, activity_id)
    click.echo(f"Focus mode {'on' if mode.enabled else 'off'}")


@main.command()
def sessions():
    """List recorded focus sessions."""
    planner = _open()
    history = planner.state.timer.focus_sessions
    if not history:
        click.echo("No focus sessions yet.")
        return
    activities = planner.state.activities
    for s in history:
        label = activity_label(activities, s.activity_id)
        click.echo(
            f"{s.start:%Y-%m-%d %H:%M:%S} - {s.end:%H:%M:%S}  "
            f"{format_elapsed(s.duration_seconds):>8}  {label}"
        )


@main.command()
def watch():
    """Run the once-per-second tick, printing the timer until interrupted."""
    now = clock.now()
    planner = _open()
    scheduler = BlockingScheduler()

    def on_tick():
        moment = clock.now()
        planner.tick(moment)
        click.echo(f"\r{format_clock(moment)}  {_timer_line(planner, moment)}\033[K", nl=False)

    scheduler.add_job(on_tick, IntervalTrigger(seconds=1), id="tick", max_instances=1, coalesce=True)
    logger.info("Starting tick scheduler (Ctrl-C to stop)")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        click.echo()
        logger.info("Stopped")
