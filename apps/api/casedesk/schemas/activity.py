"""Pydantic schemas for case activity (comments and system entries)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from casedesk.db.enums import ActivityType
from casedesk.schemas.user import UserRead


class CommentCreate(BaseModel):
    """Request schema for posting a comment."""

    content: str | None = Field(None, max_length=10000)


class ActivityRead(BaseModel):
    """Activity log entry with its author resolved for display."""

    id: UUID
    case_id: UUID
    activity_type: ActivityType
    content: str
    author_id: UUID | None
    author: UserRead | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
