"""Users router - advisor listing and access management."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from casedesk.core.deps import get_actor_id, get_db, require_csrf_header, to_http_error
from casedesk.core.exceptions import CaseDeskError
from casedesk.schemas.user import UserRead, UserUpdate
from casedesk.services import user_service

router = APIRouter()


@router.get("", response_model=list[UserRead])
def list_users(
    include_inactive: bool = Query(False, description="Include deactivated users"),
    db: Session = Depends(get_db),
):
    """Users by display name; active advisors only unless include_inactive."""
    users = user_service.list_users(db, include_inactive=include_inactive)
    return [UserRead.model_validate(u) for u in users]


@router.patch("/{user_id}", response_model=UserRead, dependencies=[Depends(require_csrf_header)])
def update_user(
    user_id: UUID,
    data: UserUpdate,
    actor_id: UUID | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """Change a user's role or active status."""
    try:
        user = user_service.update_user(db, user_id, data, actor_id=actor_id)
    except CaseDeskError as e:
        raise to_http_error(e)
    return UserRead.model_validate(user)
