"""Pydantic schemas for the task-flow board."""

from datetime import date

from pydantic import BaseModel

from casedesk.db.enums import UrgencyTier
from casedesk.schemas.case import CaseListItem


class StageRead(BaseModel):
    name: str
    order: int
    color: str


class BoardCardRead(BaseModel):
    case: CaseListItem
    urgency: UrgencyTier
    days_until_deadline: int | None

    model_config = {"from_attributes": True}


class BoardColumnRead(BaseModel):
    stage: str
    is_configured: bool
    cards: list[BoardCardRead]

    model_config = {"from_attributes": True}


class BoardRead(BaseModel):
    today: date
    policy: str
    columns: list[BoardColumnRead]
