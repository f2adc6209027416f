"""Case service - business logic for case operations."""

import logging
import re
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from casedesk.core.config import settings
from casedesk.core.exceptions import (
    CreateFailedError,
    DeleteFailedError,
    NotFoundError,
    UpdateFailedError,
    ValidationError,
)
from casedesk.core.stage_definitions import get_default_stage, get_stage_order, is_known_stage
from casedesk.core.structured_logging import build_log_context
from casedesk.db.enums import TRACKED_CASE_FIELDS
from casedesk.db.models import Case, CaseActivity, Client
from casedesk.schemas.case import CaseCreate, CaseUpdate
from casedesk.services import activity_service, client_service, user_service
from casedesk.utils.normalization import normalize_name

logger = logging.getLogger(__name__)

# Fields a partial update may touch
UPDATABLE_FIELDS = ("title", "status", "value", "broker_name", "task_owner_name", "deadline")

CASE_NUMBER_ATTEMPTS = 3


# =============================================================================
# Case numbers
# =============================================================================

def _case_number_pattern() -> re.Pattern:
    # Current prefix first, then legacy prefixes still present in stored numbers
    prefixes = list(dict.fromkeys([settings.CASE_NUMBER_PREFIX, *settings.legacy_case_number_prefixes]))
    alternatives = "|".join(re.escape(p) for p in prefixes)
    return re.compile(rf"^(?:{alternatives})(\d+)$")


def next_case_number_from(last_number: str | None) -> str:
    """
    Next case number after last_number (HF-0007 -> HF-0008).

    Numbers under any legacy prefix are continued under the current prefix;
    no prior number (or an unparseable one) starts at 1.
    """
    next_num = 1
    if last_number:
        match = _case_number_pattern().match(last_number.strip())
        if match:
            next_num = int(match.group(1)) + 1
    return f"{settings.CASE_NUMBER_PREFIX}{next_num:0{settings.CASE_NUMBER_WIDTH}d}"


def get_latest_case_number(db: Session) -> str | None:
    """Most recently created case number that matches a known prefix."""
    pattern = _case_number_pattern()
    recent = (
        db.query(Case.case_number)
        .filter(Case.case_number.isnot(None))
        .order_by(Case.created_at.desc(), Case.case_number.desc())
        .limit(50)
    )
    for (number,) in recent:
        if pattern.match(number):
            return number
    return None


def generate_case_number(db: Session) -> str:
    """
    Generate the next sequential case number.

    Best-effort: concurrent creations can compute the same number; the
    unique constraint plus retry in create_case resolves collisions.
    """
    return next_case_number_from(get_latest_case_number(db))


def _is_case_number_conflict(error: IntegrityError) -> bool:
    constraint_name = getattr(getattr(error.orig, "diag", None), "constraint_name", None)
    if constraint_name == "uq_case_number":
        return True
    message = str(error.orig) if error.orig else str(error)
    return "uq_case_number" in message or "cases.case_number" in message


# =============================================================================
# Reads
# =============================================================================

def get_case(db: Session, case_id: UUID) -> Case | None:
    return db.query(Case).filter(Case.id == case_id).first()


def get_case_detail(db: Session, case_id: UUID) -> Case:
    """Case with client, advisor and activities (newest first, authors loaded)."""
    case = (
        db.query(Case)
        .options(
            selectinload(Case.client),
            selectinload(Case.advisor),
            selectinload(Case.activities).selectinload(CaseActivity.author),
        )
        .filter(Case.id == case_id)
        .first()
    )
    if not case:
        raise NotFoundError("Case not found")
    return case


def list_cases(db: Session, status: str | None = None) -> list[Case]:
    """All cases, most recently updated first."""
    query = db.query(Case).options(
        selectinload(Case.client),
        selectinload(Case.advisor),
    )
    if status is not None:
        query = query.filter(Case.status == status)
    return query.order_by(Case.updated_at.desc()).all()


def _validate_status(status: str | None) -> None:
    if status is None or not str(status).strip():
        raise ValidationError("Status must be a non-empty string")
    if settings.STRICT_STAGE_VALIDATION and not is_known_stage(status):
        raise ValidationError(
            f"Unknown status '{status}'. Expected one of: {', '.join(get_stage_order())}"
        )


# =============================================================================
# Create
# =============================================================================

def create_case(
    db: Session,
    data: CaseCreate,
    actor_id: UUID | None = None,
) -> Case:
    """
    Create a new case, optionally creating its client inline.

    Args:
        db: Database session
        data: Case creation data (client_id OR new_client)
        actor_id: Acting user; default advisor for the case

    The inline client and the case are committed together.
    """
    status = data.status or get_default_stage()
    _validate_status(status)

    existing_client = None
    if data.new_client is None:
        if data.client_id is None:
            raise ValidationError("Client is required")
        existing_client = client_service.get_client(db, data.client_id)
        if not existing_client:
            raise NotFoundError("Client not found")

    title = data.title.strip() if data.title else None
    if not title and data.new_client is not None:
        title = normalize_name(data.new_client.name)
    if not title:
        raise ValidationError("Title is required")

    if data.advisor_id:
        advisor = user_service.get_user(db, data.advisor_id)
        if not advisor:
            raise NotFoundError("Advisor not found")
    else:
        advisor = user_service.resolve_actor(db, actor_id)
        if not advisor:
            raise ValidationError("Advisor is required")
    advisor_id = advisor.id
    client_id = existing_client.id if existing_client else None

    case = None
    for attempt in range(CASE_NUMBER_ATTEMPTS):
        if data.new_client is not None:
            client = client_service.build_client(data.new_client)
        else:
            client = db.get(Client, client_id)

        case = Case(
            case_number=generate_case_number(db) if data.assign_case_number else None,
            title=title,
            status=status,
            value=data.value,
            broker_name=data.broker_name,
            task_owner_name=data.task_owner_name,
            deadline=data.deadline,
            client=client,
            advisor_id=advisor_id,
        )
        db.add(case)
        try:
            db.commit()
            break
        except IntegrityError as exc:
            db.rollback()
            if data.assign_case_number and _is_case_number_conflict(exc) and attempt < CASE_NUMBER_ATTEMPTS - 1:
                logger.warning("Case number %s taken, retrying", case.case_number)
                continue
            logger.exception("Failed to create case")
            raise CreateFailedError("Failed to create case") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to create case")
            raise CreateFailedError("Failed to create case") from exc

    db.refresh(case)
    logger.info(
        "Case %s created",
        case.case_number or case.id,
        extra=build_log_context(user_id=advisor_id, case_id=case.id),
    )
    return case


# =============================================================================
# Update / transitions
# =============================================================================

def _snapshot(case: Case) -> dict:
    return {field: getattr(case, field) for field in TRACKED_CASE_FIELDS}


def update_case(
    db: Session,
    case_id: UUID,
    data: CaseUpdate | dict,
    actor_id: UUID | None = None,
    clear_deadline: bool = False,
) -> Case:
    """
    Apply a partial update and log tracked field changes.

    - Only fields present in data are applied; None clears optional fields
    - A status change without an explicit deadline clears the deadline
    - clear_deadline forces the deadline to None (board moves)
    - One SYSTEM activity per changed status/broker/task owner, written
      after the case commit; a failed log write never fails the update

    The old values are read at the start of this call, not atomically with
    the write, so concurrent updates can log a stale "from" value.
    """
    if isinstance(data, CaseUpdate):
        update_data = data.model_dump(exclude_unset=True)
    else:
        update_data = dict(data)

    unknown = set(update_data) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields not updatable: {', '.join(sorted(unknown))}")

    case = get_case(db, case_id)
    if not case:
        raise NotFoundError("Case not found")

    actor = user_service.resolve_actor(db, actor_id)
    author_id = actor.id if actor else None

    if "status" in update_data:
        _validate_status(update_data["status"])
        if update_data["status"] != case.status and "deadline" not in update_data:
            update_data["deadline"] = None
    if "title" in update_data and not update_data["title"]:
        raise ValidationError("Title is required")
    if update_data.get("value") is not None and update_data["value"] < 0:
        raise ValidationError("Value must be non-negative")
    if clear_deadline:
        update_data["deadline"] = None

    before = _snapshot(case)
    for field, value in update_data.items():
        setattr(case, field, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Failed to update case",
            extra=build_log_context(user_id=author_id, case_id=case_id),
        )
        raise UpdateFailedError("Failed to update case") from exc

    db.refresh(case)
    after = _snapshot(case)

    activity_service.log_system_changes(
        db=db,
        case_id=case.id,
        before=before,
        after=after,
        author_id=author_id,
    )
    logger.info(
        "Case updated (%s)",
        ", ".join(sorted(update_data)),
        extra=build_log_context(user_id=author_id, case_id=case.id),
    )
    return case


def move_case(
    db: Session,
    case_id: UUID,
    status: str,
    actor_id: UUID | None = None,
) -> Case:
    """
    Board drag-and-drop move.

    Status-only update that always resets the deadline (moving a card
    clears its urgency marker).
    """
    return update_case(
        db,
        case_id,
        {"status": status},
        actor_id=actor_id,
        clear_deadline=True,
    )


# =============================================================================
# Delete
# =============================================================================

def delete_case(db: Session, case_id: UUID, actor_id: UUID | None = None) -> Case:
    """Permanently delete a case and its activity log."""
    case = get_case(db, case_id)
    if not case:
        raise NotFoundError("Case not found")

    db.delete(case)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Failed to delete case",
            extra=build_log_context(user_id=actor_id, case_id=case_id),
        )
        raise DeleteFailedError("Failed to delete case") from exc

    logger.info("Case deleted", extra=build_log_context(user_id=actor_id, case_id=case_id))
    return case
