"""Pydantic schemas for users (advisors and admins)."""

from uuid import UUID

from pydantic import BaseModel

from casedesk.db.enums import Role


class UserRead(BaseModel):
    """User as shown on cards, activity entries and the user management list."""

    id: UUID
    email: str
    display_name: str
    phone: str | None = None
    role: Role = Role.ADVISOR
    is_active: bool = True

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """
    Request schema for updating a user's access (partial).

    Only role and active status are managed here; profile details come
    from the identity provider.
    """

    role: Role | None = None
    is_active: bool | None = None
