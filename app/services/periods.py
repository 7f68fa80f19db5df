from datetime import date, datetime
from typing import Union

CONSOLIDATED = "consolidated"

_MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

Period = Union[date, str]


def parse_period(value) -> Period:
    """
    Turn user input into a period key.

    Returns the CONSOLIDATED sentinel unchanged, otherwise the first day of the
    month. Accepts "YYYY-MM", "YYYY-MM-DD" or a date/datetime.
    """
    if isinstance(value, datetime):
        return date(value.year, value.month, 1)
    if isinstance(value, date):
        return value.replace(day=1)
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Period is required")

    text = value.strip()
    if text.lower() == CONSOLIDATED:
        return CONSOLIDATED

    parts = text.split("-")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid period format: {value!r} (expected YYYY-MM)")
    try:
        year, month = int(parts[0]), int(parts[1])
        if len(parts) == 3:
            # Validates the day as well
            date(year, month, int(parts[2]))
        return date(year, month, 1)
    except ValueError:
        raise ValueError(f"Invalid period format: {value!r} (expected YYYY-MM)")


def is_consolidated(period: Period) -> bool:
    return period == CONSOLIDATED


def previous_period(period: date) -> date:
    if period.month == 1:
        return date(period.year - 1, 12, 1)
    return date(period.year, period.month - 1, 1)


def period_label(period: Period) -> str:
    if is_consolidated(period):
        return "Consolidated"
    return f"{_MONTH_NAMES[period.month - 1]} {period.year}"


def next_period(period: date) -> date:
    if period.month == 12:
        return date(period.year + 1, 1, 1)
    return date(period.year, period.month + 1, 1)
