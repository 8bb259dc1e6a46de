"""Journal date handling: natural-language ranges and Logseq page names."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from .models import DateRange

END_OF_DAY = time(23, 59, 59, 999000)

# Formats accepted for an explicit journal date ("2025-03-14")
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%Y%m%d")


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min)


def _day_end(d: date) -> datetime:
    return datetime.combine(d, END_OF_DAY)


def _week_start(today: date) -> date:
    """Most recent Sunday (today when today is a Sunday)."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def _today(today: date) -> tuple[date, date, str]:
    return today, today, "Today's Journal"


def _yesterday(today: date) -> tuple[date, date, str]:
    d = today - timedelta(days=1)
    return d, d, "Yesterday's Journal"


def _this_week(today: date) -> tuple[date, date, str]:
    return _week_start(today), today, "This Week's Journal"


def _last_week(today: date) -> tuple[date, date, str]:
    sunday = _week_start(today)
    return sunday - timedelta(days=7), sunday - timedelta(days=1), "Last Week's Journal"


def _this_month(today: date) -> tuple[date, date, str]:
    title = f"Journal for {calendar.month_name[today.month]} {today.year}"
    return today.replace(day=1), today, title


def _last_month(today: date) -> tuple[date, date, str]:
    last_day = today.replace(day=1) - timedelta(days=1)
    title = f"Journal for {calendar.month_name[last_day.month]} {last_day.year}"
    return last_day.replace(day=1), last_day, title


def _last_days(n: int) -> Callable[[date], tuple[date, date, str]]:
    def resolve(today: date) -> tuple[date, date, str]:
        return today - timedelta(days=n), today, f"Last {n} Days Journal"
    return resolve


RANGES: dict[str, Callable[[date], tuple[date, date, str]]] = {
    "today": _today,
    "yesterday": _yesterday,
    "this week": _this_week,
    "last week": _last_week,
    "this month": _this_month,
    "last month": _last_month,
    "last 7 days": _last_days(7),
    "last 30 days": _last_days(30),
}

FALLBACK_TITLE = "Weekly Journal"


def resolve_date_range(phrase: str, now: Optional[datetime] = None) -> DateRange:
    """Map a phrase like "last week" to a full-day DateRange.

    Unrecognized phrases fall back to this week with the title
    "Weekly Journal" rather than failing.
    """
    today = (now or datetime.now()).date()
    resolver = RANGES.get((phrase or "").strip().lower())
    if resolver is None:
        start, end, _ = _this_week(today)
        title = FALLBACK_TITLE
    else:
        start, end, title = resolver(today)
    return DateRange(start=_day_start(start), end=_day_end(end), title=title)


def _ordinal_suffix(day: int) -> str:
    if 11 <= day <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_journal_date(d: date) -> str:
    """Logseq's default journal page name, e.g. "mar 14th, 2025"."""
    month = calendar.month_abbr[d.month].lower()
    return f"{month} {d.day}{_ordinal_suffix(d.day)}, {d.year}"


def journal_day_to_date(journal_day) -> Optional[date]:
    """Convert Logseq's integer journal day (20250314) to a date."""
    if not journal_day:
        return None
    try:
        value = int(journal_day)
        return date(value // 10000, (value % 10000) // 100, value % 100)
    except (TypeError, ValueError):
        return None


def in_range(journal_day, date_range: DateRange) -> bool:
    """True when the journal day's midnight falls inside the range."""
    d = journal_day_to_date(journal_day)
    if d is None:
        return False
    return date_range.start <= _day_start(d) <= date_range.end


def journal_page_name(target: str, today: Optional[date] = None) -> str:
    """Resolve an append_to_journal target to a journal page name.

    "today" and "yesterday" are relative to ``today``; explicit dates are
    reformatted; anything else is taken as a page name already.
    """
    today = today or date.today()
    key = target.strip().lower()
    if key == "today":
        return format_journal_date(today)
    if key == "yesterday":
        return format_journal_date(today - timedelta(days=1))
    for fmt in _DATE_FORMATS:
        try:
            return format_journal_date(datetime.strptime(target.strip(), fmt).date())
        except ValueError:
            continue
    return target
