import re
from datetime import date, datetime, timedelta

MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_iso_date(value):
    """Parse a YYYY-MM-DD string (or pass a date through). Raises ValueError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()


def is_valid_month(value):
    return bool(value) and MONTH_PATTERN.match(str(value)) is not None


def month_bounds(month):
    """Return (first_day, first_day_of_next_month) for a YYYY-MM string."""
    match = MONTH_PATTERN.match(str(month or ""))
    if not match:
        raise ValueError(f"Invalid month: {month!r}. Expected YYYY-MM.")

    start = date(int(match.group(1)), int(match.group(2)), 1)
    end = (start + timedelta(days=32)).replace(day=1)
    return start, end


def month_of(day):
    return day.strftime("%Y-%m")
