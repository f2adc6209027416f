"""Enum definitions for application constants."""

from enum import Enum


class ActivityType(str, Enum):
    """
    Kinds of case activity log entries.

    - COMMENT: posted by a user
    - SYSTEM: generated when a tracked case field changes
    """
    COMMENT = "COMMENT"
    SYSTEM = "SYSTEM"


class Role(str, Enum):
    """
    User roles.

    - ADVISOR: works cases (default)
    - ADMIN: also manages other users' roles and access
    """
    ADVISOR = "advisor"
    ADMIN = "admin"


class UrgencyTier(str, Enum):
    """Deadline proximity marker shown on board cards (presentation only)."""
    NONE = "none"
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    NEXT_WORKING_DAY = "next_working_day"
    TWO_WORKING_DAYS = "two_working_days"
    THREE_WORKING_DAYS = "three_working_days"


# Case fields whose changes produce SYSTEM activities, with display labels
TRACKED_CASE_FIELDS = {
    "status": "Status",
    "broker_name": "Broker",
    "task_owner_name": "Task Owner",
}
