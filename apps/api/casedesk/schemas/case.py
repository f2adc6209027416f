"""Pydantic schemas for cases."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from casedesk.schemas.activity import ActivityRead
from casedesk.schemas.client import ClientCreate, ClientRead
from casedesk.schemas.user import UserRead


class CaseCreate(BaseModel):
    """Request schema for creating a case."""

    title: str | None = Field(None, max_length=255)
    status: str | None = Field(None, max_length=100)  # Defaults to first stage
    value: Decimal | None = Field(None, ge=0)

    # Client: existing id OR inline new client
    client_id: UUID | None = None
    new_client: ClientCreate | None = None

    # Defaults to the acting user
    advisor_id: UUID | None = None

    broker_name: str | None = Field(None, max_length=255)
    task_owner_name: str | None = Field(None, max_length=255)
    deadline: date | None = None

    assign_case_number: bool = True


class CaseUpdate(BaseModel):
    """
    Request schema for updating a case (partial).

    Only fields present in the request are applied; explicit null clears.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    status: str | None = Field(None, min_length=1, max_length=100)
    value: Decimal | None = Field(None, ge=0)
    broker_name: str | None = Field(None, max_length=255)
    task_owner_name: str | None = Field(None, max_length=255)
    deadline: date | None = None


class CaseMove(BaseModel):
    """Board drag-and-drop: move a card to another column."""

    status: str = Field(..., min_length=1, max_length=100)


class CaseRead(BaseModel):
    """Case fields without relations."""

    id: UUID
    case_number: str | None
    title: str
    status: str
    value: Decimal | None
    broker_name: str | None
    task_owner_name: str | None
    deadline: date | None
    client_id: UUID
    advisor_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CaseListItem(CaseRead):
    """Case with client and advisor for list views."""

    client: ClientRead | None = None
    advisor: UserRead | None = None


class CaseDetail(CaseListItem):
    """Case with its activity log, newest first."""

    activities: list[ActivityRead] = []


class CaseUrgency(BaseModel):
    case_id: UUID
    deadline: date | None
    today: date
    policy: str
    urgency: str
    days_until_deadline: int | None
