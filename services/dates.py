"""
Date Service

Week boundary helpers. A week runs Monday to Sunday and is identified
by its Monday.
"""

from datetime import date, datetime, time, timedelta


class InvalidWeekStart(ValueError):
    """Raised when a week start date is not a Monday or cannot be parsed."""
    pass


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def get_week_bounds(value):
    """
    Calculate the start and end of the week beginning on the given day.

    Returns (start, end) datetimes: start at 00:00:00.000 and end six days
    later at 23:59:59.999, both inclusive.
    """
    start = datetime.combine(_as_date(value), time.min)
    end = datetime.combine(start.date() + timedelta(days=6), time(23, 59, 59, 999000))
    return start, end


def is_monday(value):
    return _as_date(value).weekday() == 0


def validate_monday(value):
    """Raise InvalidWeekStart unless the date falls on a Monday."""
    if not is_monday(value):
        raise InvalidWeekStart('Start date must be a Monday')


def get_monday(value):
    """Get the Monday on or before the given date."""
    day = _as_date(value)
    return day - timedelta(days=day.weekday())


def parse_date(value):
    """Parse an ISO date or datetime string (a trailing "Z" is accepted) into a date."""
    if isinstance(value, (date, datetime)):
        return _as_date(value)

    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidWeekStart(f'Invalid date: {value}')


def parse_start_date(param, today=None):
    """
    Parse a start date query parameter, or default to the current week's Monday.

    A supplied date is taken as-is; callers validate it with validate_monday.
    """
    if param:
        return parse_date(param)

    if today is None:
        today = date.today()
    today = _as_date(today)

    # Sunday=0 convention: Sunday steps back 6 days, other days (weekday - 1)
    day_of_week = (today.weekday() + 1) % 7
    diff = 6 if day_of_week == 0 else day_of_week - 1
    return today - timedelta(days=diff)
