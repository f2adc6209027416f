"""Deadline urgency classification.

Maps a case deadline to an UrgencyTier for board markers. Pure functions,
recomputed on every read; nothing here touches the database.

Two policies are available:
- working_days (default): overdue means strictly before today, due today is
  its own tier, then 1/2/3 working days out.
- calendar_days (legacy): overdue includes today, then 1/2/3 calendar days.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from casedesk.core.config import settings
from casedesk.core.exceptions import ValidationError
from casedesk.db.enums import UrgencyTier
from casedesk.utils.working_days import working_days_until


_WORKING_DAY_TIERS = {
    1: UrgencyTier.NEXT_WORKING_DAY,
    2: UrgencyTier.TWO_WORKING_DAYS,
    3: UrgencyTier.THREE_WORKING_DAYS,
}


def to_calendar_date(value: date | datetime | str | None) -> date | None:
    """
    Normalize a stored deadline to its calendar day.

    Datetimes are read in UTC (naive values are taken as UTC) so the stored
    date portion is authoritative regardless of the viewer's timezone.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid deadline: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()
    return value


class UrgencyPolicy:
    """Strategy interface: classify a deadline relative to today."""

    name = ""

    def classify(self, deadline: date, today: date) -> UrgencyTier:
        raise NotImplementedError


class WorkingDayPolicy(UrgencyPolicy):
    name = "working_days"

    def classify(self, deadline: date, today: date) -> UrgencyTier:
        if deadline < today:
            return UrgencyTier.OVERDUE
        if deadline == today:
            return UrgencyTier.DUE_TODAY
        return _WORKING_DAY_TIERS.get(
            working_days_until(deadline, today), UrgencyTier.NONE
        )


class CalendarDayPolicy(UrgencyPolicy):
    """
    Legacy calendar-day rule.

    Days are counted on the calendar, weekends included, and today counts as
    overdue. The 1/2/3 day tiers reuse the working-day tier values so board
    markers keep the same three colours: under this policy
    NEXT_WORKING_DAY means "tomorrow", even when tomorrow is a Saturday.
    """

    name = "calendar_days"

    def classify(self, deadline: date, today: date) -> UrgencyTier:
        days = (deadline - today).days
        if days <= 0:
            return UrgencyTier.OVERDUE
        return _WORKING_DAY_TIERS.get(days, UrgencyTier.NONE)


POLICIES: dict[str, UrgencyPolicy] = {
    WorkingDayPolicy.name: WorkingDayPolicy(),
    CalendarDayPolicy.name: CalendarDayPolicy(),
}


def get_policy(name: str | None = None) -> UrgencyPolicy:
    """Look up a policy by name; None selects the configured default."""
    key = name or settings.URGENCY_POLICY
    policy = POLICIES.get(key)
    if policy is None:
        raise ValidationError(
            f"Unknown urgency policy '{key}'. Expected one of: {', '.join(sorted(POLICIES))}"
        )
    return policy


def classify_deadline(
    deadline: date | datetime | str | None,
    today: date | None = None,
    policy: UrgencyPolicy | None = None,
) -> UrgencyTier:
    """Urgency tier for a deadline; no deadline means no marker."""
    deadline_day = to_calendar_date(deadline)
    if deadline_day is None:
        return UrgencyTier.NONE
    policy = policy or get_policy()
    return policy.classify(deadline_day, today or date.today())


def day_offset(
    deadline: date | datetime | str | None,
    today: date | None = None,
) -> int | None:
    """Signed calendar days from today to the deadline (None without a deadline)."""
    deadline_day = to_calendar_date(deadline)
    if deadline_day is None:
        return None
    return (deadline_day - (today or date.today())).days
