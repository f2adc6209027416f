"""Pydantic schemas for clients."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    """Request schema for creating a client (also used inline on case create)."""

    name: str = Field(..., min_length=1, max_length=255)
    name2: str | None = Field(None, max_length=255)
    name3: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    notes: str | None = None


class ClientUpdate(BaseModel):
    """Request schema for updating a client (partial)."""

    name: str | None = Field(None, min_length=1, max_length=255)
    name2: str | None = Field(None, max_length=255)
    name3: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    notes: str | None = None


class ClientRead(BaseModel):
    id: UUID
    name: str
    name2: str | None
    name3: str | None
    email: str | None
    phone: str | None
    address: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
