"""Comments router - user comments on a case's activity log.

Comments are append-only; there is no edit or delete endpoint.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from casedesk.core.deps import get_actor_id, get_db, require_csrf_header, to_http_error
from casedesk.core.exceptions import CaseDeskError
from casedesk.schemas.activity import ActivityRead, CommentCreate
from casedesk.services import activity_service, user_service

router = APIRouter()


@router.post(
    "/cases/{case_id}/comments",
    response_model=ActivityRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_comment(
    case_id: UUID,
    data: CommentCreate,
    actor_id: UUID | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """Add a comment to a case. Returns the activity with its author."""
    try:
        author = user_service.resolve_actor(db, actor_id)
        activity = activity_service.add_comment(
            db=db,
            case_id=case_id,
            content=data.content,
            author_id=author.id if author else None,
        )
    except CaseDeskError as e:
        raise to_http_error(e)
    return ActivityRead.model_validate(activity)
