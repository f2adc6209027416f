"""User service - user lookup, access management and acting-user resolution."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from casedesk.core.config import settings
from casedesk.core.exceptions import ConflictError, NotFoundError, UpdateFailedError, ValidationError
from casedesk.core.structured_logging import build_log_context
from casedesk.db.enums import Role
from casedesk.db.models import User
from casedesk.schemas.user import UserUpdate
from casedesk.utils.normalization import normalize_email, normalize_name

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def list_users(db: Session, include_inactive: bool = False) -> list[User]:
    """Advisors ordered by display name."""
    query = db.query(User)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.display_name).all()


def get_fallback_user(db: Session) -> User | None:
    """First user in the store, used when no identity is supplied."""
    return db.query(User).order_by(User.created_at, User.id).first()


def resolve_actor(db: Session, user_id: UUID | None) -> User | None:
    """
    Resolve the acting user for a request.

    - Explicit id: must exist (NotFoundError otherwise)
    - No id: first user in the store if ALLOW_ANONYMOUS_FALLBACK, else None
    """
    if user_id:
        user = get_user(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    if not settings.ALLOW_ANONYMOUS_FALLBACK:
        return None

    user = get_fallback_user(db)
    if user:
        logger.debug("No acting user supplied; falling back to first user %s", user.id)
    return user


def create_user(
    db: Session,
    email: str,
    display_name: str,
    phone: str | None = None,
    role: Role = Role.ADVISOR,
) -> User:
    """Create a user account (advisor unless role says otherwise)."""
    email = normalize_email(email)
    display_name = normalize_name(display_name)
    if not email or not display_name:
        raise ValidationError("Email and display name are required")

    user = User(email=email, display_name=display_name, phone=phone, role=Role(role).value)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"User {email} already exists") from exc
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user_id: UUID,
    data: UserUpdate,
    actor_id: UUID | None = None,
) -> User:
    """
    Update a user's role and/or active status.

    Only fields present in the request are applied. Deactivated users keep
    their cases and activity history.
    """
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    update_data = data.model_dump(exclude_unset=True)
    if "role" in update_data:
        if update_data["role"] is None:
            raise ValidationError("Role is required")
        update_data["role"] = Role(update_data["role"]).value
    if "is_active" in update_data and update_data["is_active"] is None:
        raise ValidationError("Active status is required")

    for field, value in update_data.items():
        setattr(user, field, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Failed to update user %s",
            user_id,
            extra=build_log_context(user_id=actor_id),
        )
        raise UpdateFailedError("Failed to update user") from exc

    db.refresh(user)
    logger.info(
        "User %s updated (%s)",
        user_id,
        ", ".join(sorted(update_data)),
        extra=build_log_context(user_id=actor_id),
    )
    return user
