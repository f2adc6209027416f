"""Tests for case creation, transitions and deletion."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from casedesk.core.config import settings
from casedesk.core.exceptions import NotFoundError, UpdateFailedError, ValidationError
from casedesk.db.enums import ActivityType
from casedesk.db.models import Case, CaseActivity, Client
from casedesk.schemas.case import CaseCreate, CaseUpdate
from casedesk.schemas.client import ClientCreate
from casedesk.services import activity_service, case_service


def _activities(db, case_id):
    return activity_service.list_activities(db, case_id)


# =============================================================================
# Transitions
# =============================================================================

def test_status_change_logs_system_activity(db, test_user, make_case):
    case = make_case(status="Contact")

    updated = case_service.update_case(db, case.id, {"status": "Analysis"}, actor_id=test_user.id)

    assert updated.status == "Analysis"
    activities = _activities(db, case.id)
    assert len(activities) == 1
    assert activities[0].activity_type == ActivityType.SYSTEM.value
    assert activities[0].content == "Status changed from Contact to Analysis"
    assert activities[0].author_id == test_user.id


def test_same_status_logs_nothing(db, test_user, make_case):
    case = make_case(status="DIP")

    case_service.update_case(db, case.id, {"status": "DIP"}, actor_id=test_user.id)

    assert _activities(db, case.id) == []


def test_status_comparison_is_case_sensitive(db, test_user, make_case):
    case = make_case(status="Contact")

    case_service.update_case(db, case.id, {"status": "contact"}, actor_id=test_user.id)

    assert [a.content for a in _activities(db, case.id)] == ["Status changed from Contact to contact"]


def test_broker_set_for_first_time(db, test_user, make_case):
    case = make_case()

    case_service.update_case(db, case.id, {"broker_name": "Smith & Co"}, actor_id=test_user.id)

    assert [a.content for a in _activities(db, case.id)] == ["Broker updated to Smith & Co"]


def test_task_owner_change(db, test_user, make_case):
    case = make_case(task_owner_name="Priya")

    case_service.update_case(db, case.id, {"task_owner_name": "Sam"}, actor_id=test_user.id)

    assert [a.content for a in _activities(db, case.id)] == ["Task Owner changed from Priya to Sam"]


def test_clearing_tracked_field_logs_nothing(db, test_user, make_case):
    case = make_case(broker_name="Smith & Co")

    updated = case_service.update_case(db, case.id, {"broker_name": None}, actor_id=test_user.id)

    assert updated.broker_name is None
    assert _activities(db, case.id) == []


def test_one_entry_per_changed_field(db, test_user, make_case):
    case = make_case(status="Contact", broker_name="Old Broker")

    case_service.update_case(
        db,
        case.id,
        CaseUpdate(status="Offer", broker_name="New Broker", task_owner_name="Sam", title="Renamed"),
        actor_id=test_user.id,
    )

    contents = sorted(a.content for a in _activities(db, case.id))
    assert contents == [
        "Broker changed from Old Broker to New Broker",
        "Status changed from Contact to Offer",
        "Task Owner updated to Sam",
    ]


def test_untracked_fields_do_not_log(db, test_user, make_case):
    case = make_case()

    updated = case_service.update_case(
        db, case.id, {"title": "Buy to let", "value": Decimal("120000")}, actor_id=test_user.id
    )

    assert updated.title == "Buy to let"
    assert _activities(db, case.id) == []


def test_status_change_clears_deadline(db, test_user, make_case):
    case = make_case(status="Contact", deadline=date(2026, 10, 30))

    updated = case_service.update_case(db, case.id, {"status": "DIP"}, actor_id=test_user.id)

    assert updated.deadline is None


def test_status_change_keeps_explicit_deadline(db, test_user, make_case):
    case = make_case(status="Contact", deadline=date(2026, 10, 30))

    updated = case_service.update_case(
        db, case.id, {"status": "DIP", "deadline": date(2026, 11, 2)}, actor_id=test_user.id
    )

    assert updated.deadline == date(2026, 11, 2)


def test_deadline_only_update_keeps_status(db, test_user, make_case):
    case = make_case(status="Offer")

    updated = case_service.update_case(db, case.id, {"deadline": date(2026, 11, 2)}, actor_id=test_user.id)

    assert updated.status == "Offer"
    assert updated.deadline == date(2026, 11, 2)


def test_move_clears_deadline(db, test_user, make_case):
    case = make_case(status="Contact", deadline=date(2026, 10, 30))

    moved = case_service.move_case(db, case.id, "Valuation", actor_id=test_user.id)

    assert moved.status == "Valuation"
    assert moved.deadline is None
    assert [a.content for a in _activities(db, case.id)] == ["Status changed from Contact to Valuation"]


def test_move_to_same_column_still_clears_deadline(db, test_user, make_case):
    case = make_case(status="Offer", deadline=date(2026, 10, 30))

    moved = case_service.move_case(db, case.id, "Offer", actor_id=test_user.id)

    assert moved.deadline is None
    assert _activities(db, case.id) == []


def test_update_missing_case(db, test_user):
    import uuid

    with pytest.raises(NotFoundError):
        case_service.update_case(db, uuid.uuid4(), {"status": "DIP"}, actor_id=test_user.id)


def test_update_rejects_empty_status(db, test_user, make_case):
    case = make_case()

    with pytest.raises(ValidationError):
        case_service.update_case(db, case.id, {"status": None}, actor_id=test_user.id)
    with pytest.raises(ValidationError):
        case_service.update_case(db, case.id, {"status": "   "}, actor_id=test_user.id)


def test_update_rejects_unknown_field(db, test_user, make_case):
    case = make_case()

    with pytest.raises(ValidationError):
        case_service.update_case(db, case.id, {"client_id": None}, actor_id=test_user.id)


def test_unknown_status_allowed_by_default(db, test_user, make_case):
    case = make_case()

    updated = case_service.update_case(db, case.id, {"status": "Waiting on lender"}, actor_id=test_user.id)

    assert updated.status == "Waiting on lender"


def test_strict_stage_validation(db, test_user, make_case, monkeypatch):
    monkeypatch.setattr(settings, "STRICT_STAGE_VALIDATION", True)
    case = make_case()

    with pytest.raises(ValidationError):
        case_service.update_case(db, case.id, {"status": "Waiting on lender"}, actor_id=test_user.id)

    updated = case_service.update_case(db, case.id, {"status": "REMO"}, actor_id=test_user.id)
    assert updated.status == "REMO"


def test_failed_activity_write_does_not_fail_update(db, test_user, make_case, monkeypatch):
    case = make_case(status="Contact")

    def broken_log_activity(**kwargs):
        raise SQLAlchemyError("activity table unavailable")

    monkeypatch.setattr(activity_service, "log_activity", broken_log_activity)

    updated = case_service.update_case(db, case.id, {"status": "Offer"}, actor_id=test_user.id)

    assert updated.status == "Offer"
    assert db.get(Case, case.id).status == "Offer"
    assert db.query(CaseActivity).count() == 0


def test_failed_case_write_raises_update_failed(db, test_user, make_case, monkeypatch):
    case = make_case(status="Contact")

    def broken_commit():
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(UpdateFailedError):
        case_service.update_case(db, case.id, {"status": "Offer"}, actor_id=test_user.id)


def test_anonymous_update_attributes_fallback_user(db, test_user, make_case):
    case = make_case()

    case_service.update_case(db, case.id, {"status": "DIP"})

    assert _activities(db, case.id)[0].author_id == test_user.id


def test_anonymous_update_without_fallback_has_no_author(db, make_case, monkeypatch):
    monkeypatch.setattr(settings, "ALLOW_ANONYMOUS_FALLBACK", False)
    case = make_case()

    case_service.update_case(db, case.id, {"status": "DIP"})

    assert _activities(db, case.id)[0].author_id is None


# =============================================================================
# Case numbers
# =============================================================================

@pytest.mark.parametrize(
    "last, expected",
    [
        (None, "HF-0001"),
        ("HF-0007", "HF-0008"),
        ("HF-0999", "HF-1000"),
        ("CASE-0041", "HF-0042"),
        ("garbage", "HF-0001"),
    ],
)
def test_next_case_number(last, expected):
    assert case_service.next_case_number_from(last) == expected


def test_generate_case_number_uses_latest(db, make_case):
    make_case(case_number="HF-0007")

    assert case_service.generate_case_number(db) == "HF-0008"


def test_generate_case_number_empty_store(db):
    assert case_service.generate_case_number(db) == "HF-0001"


def test_custom_prefix_continues_its_own_sequence(db, test_user, test_client_record, monkeypatch):
    monkeypatch.setattr(settings, "CASE_NUMBER_PREFIX", "CD-")
    data = CaseCreate(title="Remortgage", client_id=test_client_record.id)

    first = case_service.create_case(db, data, actor_id=test_user.id)
    second = case_service.create_case(db, data, actor_id=test_user.id)

    assert first.case_number == "CD-0001"
    assert second.case_number == "CD-0002"


def test_custom_prefix_continues_legacy_numbers(db, make_case, monkeypatch):
    monkeypatch.setattr(settings, "CASE_NUMBER_PREFIX", "CD-")
    make_case(case_number="HF-0041")

    assert case_service.generate_case_number(db) == "CD-0042"


# =============================================================================
# Create
# =============================================================================

def test_create_case_with_new_client(db, test_user):
    data = CaseCreate(new_client=ClientCreate(name="Jordan  Lee", email="JORDAN@example.com"))

    case = case_service.create_case(db, data, actor_id=test_user.id)

    assert db.query(Client).count() == 1
    assert db.query(Case).count() == 1
    assert case.client.name == "Jordan Lee"
    assert case.client.email == "jordan@example.com"
    assert case.title == "Jordan Lee"
    assert case.status == "Contact"
    assert case.advisor_id == test_user.id
    assert case.case_number == "HF-0001"


def test_create_case_for_existing_client(db, test_user, test_client_record):
    data = CaseCreate(title="Remortgage", client_id=test_client_record.id, status="DIP")

    case = case_service.create_case(db, data, actor_id=test_user.id)

    assert case.client_id == test_client_record.id
    assert case.status == "DIP"
    assert db.query(Client).count() == 1


def test_create_case_blank_status_uses_first_stage(db, test_user, test_client_record):
    case = case_service.create_case(
        db, CaseCreate(title="Blank status", client_id=test_client_record.id, status=""), actor_id=test_user.id
    )

    assert case.status == "Contact"


def test_create_case_requires_client(db, test_user):
    with pytest.raises(ValidationError):
        case_service.create_case(db, CaseCreate(title="Orphan"), actor_id=test_user.id)
    assert db.query(Case).count() == 0


def test_create_case_unknown_client(db, test_user):
    import uuid

    with pytest.raises(NotFoundError):
        case_service.create_case(db, CaseCreate(title="Lost", client_id=uuid.uuid4()), actor_id=test_user.id)


def test_create_case_defaults_advisor_to_fallback_user(db, test_user, test_client_record):
    case = case_service.create_case(db, CaseCreate(title="Anon", client_id=test_client_record.id))

    assert case.advisor_id == test_user.id


def test_create_case_without_advisor_when_fallback_disabled(db, test_client_record, monkeypatch):
    monkeypatch.setattr(settings, "ALLOW_ANONYMOUS_FALLBACK", False)

    with pytest.raises(ValidationError):
        case_service.create_case(db, CaseCreate(title="Anon", client_id=test_client_record.id))


def test_create_case_retries_taken_case_number(db, test_user, test_client_record, make_case, monkeypatch):
    make_case(case_number="HF-0001")
    numbers = iter(["HF-0001", "HF-0002"])
    monkeypatch.setattr(case_service, "generate_case_number", lambda db: next(numbers))

    case = case_service.create_case(
        db, CaseCreate(title="Second", client_id=test_client_record.id), actor_id=test_user.id
    )

    assert case.case_number == "HF-0002"
    assert db.query(Case).count() == 2


def test_create_case_without_number(db, test_user, test_client_record):
    case = case_service.create_case(
        db,
        CaseCreate(title="Unnumbered", client_id=test_client_record.id, assign_case_number=False),
        actor_id=test_user.id,
    )

    assert case.case_number is None


# =============================================================================
# Delete
# =============================================================================

def test_delete_removes_case_and_activities(db, test_user, make_case):
    case = make_case()
    case_id = case.id
    activity_service.add_comment(db, case_id, "Called the lender", author_id=test_user.id)
    case_service.update_case(db, case_id, {"status": "DIP"}, actor_id=test_user.id)

    deleted = case_service.delete_case(db, case_id, actor_id=test_user.id)

    assert deleted.id == case_id
    assert case_service.get_case(db, case_id) is None
    assert db.query(CaseActivity).filter(CaseActivity.case_id == case_id).count() == 0


def test_delete_missing_case(db):
    import uuid

    with pytest.raises(NotFoundError):
        case_service.delete_case(db, uuid.uuid4())
