"""Tests for the case activity log (comments and system entries)."""

import uuid

import pytest

from casedesk.core.exceptions import NotFoundError, ValidationError
from casedesk.db.enums import ActivityType
from casedesk.db.models import CaseActivity
from casedesk.services import activity_service


def test_describe_change_with_previous_value():
    assert activity_service.describe_change("status", "Contact", "DIP") == "Status changed from Contact to DIP"


def test_describe_change_without_previous_value():
    assert activity_service.describe_change("broker_name", None, "Acme") == "Broker updated to Acme"
    assert activity_service.describe_change("task_owner_name", "", "Sam") == "Task Owner updated to Sam"


def test_diff_ignores_unchanged_and_cleared_fields():
    before = {"status": "Contact", "broker_name": "Acme", "task_owner_name": None}
    after = {"status": "Contact", "broker_name": None, "task_owner_name": "Sam"}

    assert activity_service.diff_tracked_fields(before, after) == [("task_owner_name", None, "Sam")]


def test_diff_does_not_trim():
    before = {"status": "Offer"}
    after = {"status": "Offer "}

    assert activity_service.diff_tracked_fields(before, after) == [("status", "Offer", "Offer ")]


def test_add_comment(db, test_user, make_case):
    case = make_case()

    activity = activity_service.add_comment(db, case.id, "Chased valuation", author_id=test_user.id)

    assert activity.activity_type == ActivityType.COMMENT.value
    assert activity.content == "Chased valuation"
    assert activity.author.display_name == "Test Advisor"


@pytest.mark.parametrize("content", [None, "", "   ", "\n\t"])
def test_add_comment_rejects_blank_content(db, test_user, make_case, content):
    case = make_case()

    with pytest.raises(ValidationError) as exc_info:
        activity_service.add_comment(db, case.id, content, author_id=test_user.id)

    assert exc_info.value.message == "Content is required"
    assert db.query(CaseActivity).count() == 0


def test_add_comment_missing_case(db, test_user):
    with pytest.raises(NotFoundError):
        activity_service.add_comment(db, uuid.uuid4(), "Hello", author_id=test_user.id)


def test_add_comment_without_author(db, make_case):
    case = make_case()

    activity = activity_service.add_comment(db, case.id, "Left voicemail")

    assert activity.author_id is None
    assert activity.author is None


def test_list_activities_newest_first(db, test_user, make_case):
    case = make_case()
    for text in ("first", "second", "third"):
        activity_service.add_comment(db, case.id, text, author_id=test_user.id)

    activities = activity_service.list_activities(db, case.id)

    assert [a.content for a in activities] == ["third", "second", "first"]


def test_log_system_changes_writes_one_entry_per_field(db, test_user, make_case):
    case = make_case()

    created = activity_service.log_system_changes(
        db,
        case.id,
        before={"status": "Contact", "broker_name": None, "task_owner_name": "Priya"},
        after={"status": "DIP", "broker_name": "Acme", "task_owner_name": "Priya"},
        author_id=test_user.id,
    )

    assert [a.content for a in created] == [
        "Status changed from Contact to DIP",
        "Broker updated to Acme",
    ]
    assert all(a.activity_type == ActivityType.SYSTEM.value for a in created)
