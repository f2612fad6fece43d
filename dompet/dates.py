from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple


def parse_date(value: Any) -> Optional[date]:
    """Accept date, datetime, unix timestamp or ISO string; None when unreadable"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def to_iso(value: Any) -> Optional[str]:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def week_bounds(today: date) -> Tuple[date, date]:
    """Sunday..Saturday calendar week containing today"""
    days_since_sunday = (today.weekday() + 1) % 7
    start = today - timedelta(days=days_since_sunday)
    return start, start + timedelta(days=6)


def in_same_week(day: date, today: date) -> bool:
    start, end = week_bounds(today)
    return start <= day <= end


def in_same_month(day: date, today: date) -> bool:
    return day.year == today.year and day.month == today.month


def in_same_year(day: date, today: date) -> bool:
    return day.year == today.year
