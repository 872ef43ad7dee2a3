"""Period keys and ISO week math.

A period key is a ``YYYY-MM-DD`` string: the calendar date for daily lists,
the Monday of the ISO week for weekly goals. All arithmetic here works on
``date`` values so daylight-saving shifts never move a key.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from core.models import WeekMeta


DAILY = "daily"
WEEKLY = "weekly"

STEP_DAYS = {DAILY: 1, WEEKLY: 7}

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _step(granularity: str) -> timedelta:
    try:
        return timedelta(days=STEP_DAYS[granularity])
    except KeyError:
        raise ValueError(f"Unknown granularity: {granularity!r}") from None


def parse_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` period key; raises ValueError if malformed."""
    if not isinstance(key, str) or len(key) != 10:
        raise ValueError(f"Invalid period key: {key!r}")
    return datetime.strptime(key, "%Y-%m-%d").date()


def week_start(d: date) -> date:
    """Monday of the ISO week containing *d*."""
    return d - timedelta(days=d.weekday())


def iso_week(d: date) -> tuple[int, int]:
    """Return (week_number, year) for *d* using the nearest-Thursday rule.

    The Thursday of a date's week decides which year the week belongs to;
    week 1 is the week holding that year's first Thursday.
    """
    thursday = d + timedelta(days=3 - d.weekday())
    week_number = 1 + (thursday - date(thursday.year, 1, 1)).days // 7
    return week_number, thursday.year


def current_period_key(granularity: str, now: datetime | date) -> str:
    """Key of the period containing *now* (its own calendar date)."""
    step = _step(granularity)
    d = now.date() if isinstance(now, datetime) else now
    if step.days == 7:
        d = week_start(d)
    return d.isoformat()


def period_metadata(week_start_key: str) -> WeekMeta:
    """Boundary metadata for the week containing *week_start_key*."""
    monday = week_start(parse_key(week_start_key))
    week_number, year = iso_week(monday)
    return WeekMeta(
        week_start=monday.isoformat(),
        week_end=(monday + timedelta(days=6)).isoformat(),
        week_number=week_number,
        year=year,
    )


def previous_period_key(key: str, granularity: str) -> str:
    return (parse_key(key) - _step(granularity)).isoformat()


def next_period_key(key: str, granularity: str) -> str:
    return (parse_key(key) + _step(granularity)).isoformat()


def format_week_display(meta: WeekMeta) -> str:
    """``Week 4 - 16 Feb - 22 Feb``."""
    start = parse_key(meta.week_start)
    end = parse_key(meta.week_end)
    return (
        f"Week {meta.week_number} - {start.day} {MONTH_ABBR[start.month - 1]}"
        f" - {end.day} {MONTH_ABBR[end.month - 1]}"
    )


def format_day_display(key: str) -> str:
    """``Monday, February 16``."""
    d = parse_key(key)
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}"
