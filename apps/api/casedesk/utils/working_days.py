"""Working-day arithmetic for deadline urgency.

A working day is Monday through Friday. Holiday calendars are not applied.
"""

from datetime import date, timedelta


def is_working_day(day: date) -> bool:
    """Check if date is a working day (Mon-Fri)."""
    return day.weekday() < 5  # 5 = Saturday, 6 = Sunday


def working_days_until(deadline: date, today: date) -> int:
    """
    Count working days from tomorrow through the deadline (inclusive).

    Returns 0 when the deadline is today or already past.
    """
    count = 0
    day = today + timedelta(days=1)
    while day <= deadline:
        if is_working_day(day):
            count += 1
        day += timedelta(days=1)
    return count
