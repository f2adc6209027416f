"""Client service - business logic for client records."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from casedesk.core.exceptions import (
    ConflictError,
    CreateFailedError,
    DeleteFailedError,
    NotFoundError,
    UpdateFailedError,
    ValidationError,
)
from casedesk.db.models import Case, Client
from casedesk.schemas.client import ClientCreate, ClientUpdate
from casedesk.utils.normalization import normalize_email, normalize_name, normalize_phone

logger = logging.getLogger(__name__)


def _normalize_fields(fields: dict) -> dict:
    normalized = dict(fields)
    for key in ("name", "name2", "name3"):
        if key in normalized:
            normalized[key] = normalize_name(normalized[key])
    if "email" in normalized:
        normalized["email"] = normalize_email(normalized["email"])
    if "phone" in normalized:
        normalized["phone"] = normalize_phone(normalized["phone"])
    return normalized


def get_client(db: Session, client_id: UUID, with_cases: bool = False) -> Client | None:
    query = db.query(Client)
    if with_cases:
        query = query.options(selectinload(Client.cases))
    return query.filter(Client.id == client_id).first()


def list_clients(db: Session) -> list[Client]:
    return db.query(Client).order_by(Client.name).all()


def build_client(data: ClientCreate) -> Client:
    """Construct an unsaved Client; name is required."""
    fields = _normalize_fields(data.model_dump())
    if not fields.get("name"):
        raise ValidationError("Name is required")
    return Client(**fields)


def create_client(db: Session, data: ClientCreate) -> Client:
    client = build_client(data)
    db.add(client)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create client")
        raise CreateFailedError("Failed to create client") from exc
    db.refresh(client)
    return client


def update_client(db: Session, client_id: UUID, data: ClientUpdate) -> Client:
    """
    Update client fields.

    Only explicitly provided fields are applied; name cannot be cleared.
    """
    client = get_client(db, client_id)
    if not client:
        raise NotFoundError("Client not found")

    update_data = _normalize_fields(data.model_dump(exclude_unset=True))
    if "name" in update_data and not update_data["name"]:
        raise ValidationError("Name is required")

    for field, value in update_data.items():
        setattr(client, field, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update client %s", client_id)
        raise UpdateFailedError("Failed to update client") from exc
    db.refresh(client)
    return client


def delete_client(db: Session, client_id: UUID) -> Client:
    """Delete a client that no longer has cases."""
    client = get_client(db, client_id)
    if not client:
        raise NotFoundError("Client not found")

    case_count = db.query(Case).filter(Case.client_id == client_id).count()
    if case_count:
        raise ConflictError(f"Client still has {case_count} case(s)")

    db.delete(client)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to delete client %s", client_id)
        raise DeleteFailedError("Failed to delete client") from exc
    return client
