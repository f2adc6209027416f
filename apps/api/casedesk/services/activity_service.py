"""Activity logging service - append-only case activity log."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from casedesk.core.exceptions import CreateFailedError, NotFoundError, ValidationError
from casedesk.core.structured_logging import build_log_context
from casedesk.db.enums import ActivityType, TRACKED_CASE_FIELDS
from casedesk.db.models import Case, CaseActivity

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    case_id: UUID,
    activity_type: ActivityType,
    content: str,
    author_id: UUID | None = None,
) -> CaseActivity:
    """
    Append a case activity.

    Args:
        db: Database session
        case_id: The case this activity is for
        activity_type: COMMENT or SYSTEM
        content: Text shown in the case timeline
        author_id: User who performed the action (None when unknown)

    Returns:
        The created activity log entry
    """
    activity = CaseActivity(
        case_id=case_id,
        activity_type=activity_type.value,
        content=content,
        author_id=author_id,
    )
    db.add(activity)
    db.flush()  # Don't commit - let caller control transaction
    return activity


def describe_change(field: str, old, new) -> str:
    """Human-readable message for a tracked field change."""
    label = TRACKED_CASE_FIELDS.get(field, field.replace("_", " ").title())
    if old is None or old == "":
        return f"{label} updated to {new}"
    return f"{label} changed from {old} to {new}"


def diff_tracked_fields(before: dict, after: dict) -> list[tuple[str, object, object]]:
    """
    Tracked fields whose value changed to something truthy.

    Plain inequality: no trimming or case folding.
    """
    changes = []
    for field in TRACKED_CASE_FIELDS:
        old = before.get(field)
        new = after.get(field)
        if new and new != old:
            changes.append((field, old, new))
    return changes


def log_system_changes(
    db: Session,
    case_id: UUID,
    before: dict,
    after: dict,
    author_id: UUID | None = None,
) -> list[CaseActivity]:
    """
    Write one SYSTEM entry per tracked field change.

    Each entry is committed on its own and failures are logged and skipped:
    the case update that produced them has already been committed.
    """
    created = []
    for field, old, new in diff_tracked_fields(before, after):
        try:
            activity = log_activity(
                db=db,
                case_id=case_id,
                activity_type=ActivityType.SYSTEM,
                content=describe_change(field, old, new),
                author_id=author_id,
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Failed to log %s change",
                field,
                extra=build_log_context(user_id=author_id, case_id=case_id),
            )
            continue
        created.append(activity)
    return created


def add_comment(
    db: Session,
    case_id: UUID,
    content: str | None,
    author_id: UUID | None = None,
) -> CaseActivity:
    """
    Post a user comment on a case.

    Comments are append-only: there is no edit or delete.
    """
    if not content or not content.strip():
        raise ValidationError("Content is required")

    case = db.query(Case).filter(Case.id == case_id).first()
    if not case:
        raise NotFoundError("Case not found")

    try:
        activity = log_activity(
            db=db,
            case_id=case_id,
            activity_type=ActivityType.COMMENT,
            content=content,
            author_id=author_id,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Failed to create comment",
            extra=build_log_context(user_id=author_id, case_id=case_id),
        )
        raise CreateFailedError("Failed to create comment") from exc

    # Reload with author for immediate display
    return (
        db.query(CaseActivity)
        .options(selectinload(CaseActivity.author))
        .filter(CaseActivity.id == activity.id)
        .one()
    )


def list_activities(db: Session, case_id: UUID) -> list[CaseActivity]:
    """Activity log for a case, newest first."""
    return (
        db.query(CaseActivity)
        .options(selectinload(CaseActivity.author))
        .filter(CaseActivity.case_id == case_id)
        .order_by(CaseActivity.created_at.desc())
        .all()
    )
