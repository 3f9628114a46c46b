"""Next-run computation for site schedules.

Two call sites need slightly different answers, selected with ``allow_today``:

* Saving schedule settings (``allow_today=True``): the next occurrence
  relative to ``now``, which may be later today if the time of day has
  not passed yet.
* Recording a completed run (``allow_today=False``): always advance by a
  full period. Daily moves to tomorrow, weekly to the nearest scheduled
  weekday strictly after today (the same weekday next week if that is
  the only one), custom to ``now`` plus the interval.

Daily and weekly slots are wall-clock arithmetic on ``now``'s own tzinfo;
callers pick the zone (``Settings.schedule_timezone``). Custom intervals
are elapsed hours, so they are added in UTC and survive DST changes.
"""

from datetime import datetime, timedelta, time, timezone
from typing import Protocol, Sequence
from zoneinfo import ZoneInfo

DEFAULT_INTERVAL_HOURS = 24


class Recurrence(Protocol):
    """The schedule fields the calculator reads (ScheduleConfig, SiteSchedule rows)."""

    is_enabled: bool
    frequency_type: str
    time_of_day: str
    days_of_week: Sequence[int]
    custom_interval_hours: int | None


def parse_time_of_day(value: str) -> time:
    """Parse ``"HH:MM"`` (seconds, if present, are ignored)."""
    parts = value.split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    return time(hour=hour, minute=minute)


def sunday_based_weekday(moment: datetime) -> int:
    """Weekday with 0=Sunday .. 6=Saturday (Python's ``weekday()`` starts at Monday)."""
    return (moment.weekday() + 1) % 7


def _at_time(day: datetime, slot: time) -> datetime:
    return day.replace(hour=slot.hour, minute=slot.minute, second=0, microsecond=0)


def _next_daily(now: datetime, slot: time, allow_today: bool) -> datetime:
    if allow_today:
        candidate = _at_time(now, slot)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate
    return _at_time(now + timedelta(days=1), slot)


def _next_weekly(now: datetime, slot: time, days: Sequence[int], allow_today: bool) -> datetime | None:
    scheduled = set(days)
    if not scheduled:
        return None

    today = sunday_based_weekday(now)
    if allow_today and today in scheduled:
        today_slot = _at_time(now, slot)
        if today_slot > now:
            return today_slot

    for offset in range(1, 8):
        if (today + offset) % 7 in scheduled:
            return _at_time(now + timedelta(days=offset), slot)
    return None  # unreachable: a non-empty set of 0..6 always matches within 7 days


def _next_custom(now: datetime, interval_hours: int | None) -> datetime:
    elapsed = timedelta(hours=interval_hours or DEFAULT_INTERVAL_HOURS)
    return (now.astimezone(timezone.utc) + elapsed).astimezone(now.tzinfo)


def compute_next_run(config: Recurrence, now: datetime, *, allow_today: bool = True) -> datetime | None:
    """Return when the schedule should fire next, or None if it never will.

    None is returned exactly when the schedule is disabled, or weekly with no
    days selected. Unknown frequency types fall back to a 24 hour interval.
    """
    if not config.is_enabled:
        return None

    frequency = config.frequency_type
    if frequency == "daily":
        return _next_daily(now, parse_time_of_day(config.time_of_day), allow_today)
    if frequency == "weekly":
        return _next_weekly(now, parse_time_of_day(config.time_of_day), config.days_of_week or [], allow_today)
    if frequency == "custom":
        return _next_custom(now, config.custom_interval_hours)
    return _next_custom(now, DEFAULT_INTERVAL_HOURS)


def schedule_now(timezone_name: str) -> datetime:
    """Current time in the configured scheduling zone."""
    return datetime.now(ZoneInfo(timezone_name))
