"""Cases router - API endpoints for case management."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from casedesk.core.deps import (
    get_actor_id,
    get_db,
    get_viewer_today,
    require_csrf_header,
    to_http_error,
)
from casedesk.core.exceptions import CaseDeskError
from casedesk.schemas.activity import ActivityRead
from casedesk.schemas.case import (
    CaseCreate,
    CaseDetail,
    CaseListItem,
    CaseMove,
    CaseRead,
    CaseUpdate,
    CaseUrgency,
)
from casedesk.services import activity_service, case_service
from casedesk.services.urgency_service import classify_deadline, day_offset, get_policy

router = APIRouter()


@router.get("", response_model=list[CaseListItem])
def list_cases(
    db: Session = Depends(get_db),
    status: str | None = Query(None, description="Exact stage name"),
):
    """List cases, most recently updated first."""
    cases = case_service.list_cases(db, status=status)
    return [CaseListItem.model_validate(c) for c in cases]


@router.post("", response_model=CaseRead, status_code=201, dependencies=[Depends(require_csrf_header)])
def create_case(
    data: CaseCreate,
    actor_id: UUID | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """
    Create a new case.

    Supply either client_id or new_client; new_client is created first.
    """
    try:
        case = case_service.create_case(db, data, actor_id=actor_id)
    except CaseDeskError as e:
        raise to_http_error(e)
    return CaseRead.model_validate(case)


@router.get("/{case_id}", response_model=CaseDetail)
def get_case(
    case_id: UUID,
    db: Session = Depends(get_db),
):
    """Get case with client, advisor and activity log (newest first)."""
    try:
        case = case_service.get_case_detail(db, case_id)
    except CaseDeskError as e:
        raise to_http_error(e)
    return CaseDetail.model_validate(case)


@router.patch("/{case_id}", response_model=CaseRead, dependencies=[Depends(require_csrf_header)])
def update_case(
    case_id: UUID,
    data: CaseUpdate,
    actor_id: UUID | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """
    Update case fields.

    Status, broker and task owner changes are logged as system activity.
    """
    try:
        case = case_service.update_case(db, case_id, data, actor_id=actor_id)
    except CaseDeskError as e:
        raise to_http_error(e)
    return CaseRead.model_validate(case)


@router.post("/{case_id}/move", response_model=CaseRead, dependencies=[Depends(require_csrf_header)])
def move_case(
    case_id: UUID,
    data: CaseMove,
    actor_id: UUID | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """Board drag-and-drop: change status and clear the deadline."""
    try:
        case = case_service.move_case(db, case_id, data.status, actor_id=actor_id)
    except CaseDeskError as e:
        raise to_http_error(e)
    return CaseRead.model_validate(case)


@router.delete("/{case_id}", response_model=CaseRead, dependencies=[Depends(require_csrf_header)])
def delete_case(
    case_id: UUID,
    actor_id: UUID | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """Permanently delete a case and its activity log. Returns the deleted record."""
    try:
        case = case_service.delete_case(db, case_id, actor_id=actor_id)
    except CaseDeskError as e:
        raise to_http_error(e)
    return CaseRead.model_validate(case)


@router.get("/{case_id}/activities", response_model=list[ActivityRead])
def list_activities(
    case_id: UUID,
    db: Session = Depends(get_db),
):
    """Activity log for a case, newest first."""
    if not case_service.get_case(db, case_id):
        raise HTTPException(status_code=404, detail="Case not found")
    return [ActivityRead.model_validate(a) for a in activity_service.list_activities(db, case_id)]


@router.get("/{case_id}/urgency", response_model=CaseUrgency)
def get_case_urgency(
    case_id: UUID,
    today: date = Depends(get_viewer_today),
    policy: str | None = Query(None, description="working_days or calendar_days"),
    db: Session = Depends(get_db),
):
    """Deadline urgency tier for one case, as of the viewer's day."""
    case = case_service.get_case(db, case_id)
    if not case:
        raise HTTPException(status_code=404, detail="Case not found")
    try:
        urgency_policy = get_policy(policy)
    except CaseDeskError as e:
        raise to_http_error(e)

    return CaseUrgency(
        case_id=case.id,
        deadline=case.deadline,
        today=today,
        policy=urgency_policy.name,
        urgency=classify_deadline(case.deadline, today, urgency_policy).value,
        days_until_deadline=day_offset(case.deadline, today),
    )
