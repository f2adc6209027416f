"""Board router - task-flow columns with urgency markers."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from casedesk.core.deps import get_db, get_viewer_today, to_http_error
from casedesk.core.exceptions import CaseDeskError
from casedesk.core.stage_definitions import get_stage_defs
from casedesk.schemas.board import BoardCardRead, BoardColumnRead, BoardRead, StageRead
from casedesk.services import board_service, case_service
from casedesk.services.urgency_service import get_policy

router = APIRouter()


def _resolve_policy(name: str | None):
    try:
        return get_policy(name)
    except CaseDeskError as e:
        raise to_http_error(e)


@router.get("/stages", response_model=list[StageRead])
def list_stages():
    """Configured pipeline stages in board order."""
    return [StageRead(**stage) for stage in get_stage_defs()]


@router.get("", response_model=BoardRead)
def get_board(
    today: date = Depends(get_viewer_today),
    policy: str | None = Query(None, description="working_days or calendar_days"),
    db: Session = Depends(get_db),
):
    """
    Whole board: one column per configured stage, most urgent cards first.

    Cases with a status outside the stage list appear in trailing columns
    flagged is_configured=false.
    """
    urgency_policy = _resolve_policy(policy)
    cases = case_service.list_cases(db)
    columns = board_service.build_board(cases, today=today, policy=urgency_policy)
    return BoardRead(
        today=today,
        policy=urgency_policy.name,
        columns=[BoardColumnRead.model_validate(c) for c in columns],
    )


@router.get("/column", response_model=list[BoardCardRead])
def get_column(
    stage: str = Query(..., min_length=1, description="Exact stage name"),
    today: date = Depends(get_viewer_today),
    policy: str | None = Query(None, description="working_days or calendar_days"),
    db: Session = Depends(get_db),
):
    """Cards in one column: overdue first, then nearest deadline, undated last."""
    urgency_policy = _resolve_policy(policy)
    cases = case_service.list_cases(db, status=stage)
    column = board_service.build_column(cases, stage, today=today, policy=urgency_policy)
    return [BoardCardRead.model_validate(card) for card in column.cards]
