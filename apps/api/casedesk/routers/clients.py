"""Clients router - API endpoints for client records."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from casedesk.core.deps import get_db, require_csrf_header, to_http_error
from casedesk.core.exceptions import CaseDeskError
from casedesk.schemas.case import CaseRead
from casedesk.schemas.client import ClientCreate, ClientRead, ClientUpdate
from casedesk.services import client_service

router = APIRouter()


class ClientDetail(ClientRead):
    """Client with its cases."""

    cases: list[CaseRead] = []


@router.get("", response_model=list[ClientRead])
def list_clients(db: Session = Depends(get_db)):
    """List clients by name."""
    return [ClientRead.model_validate(c) for c in client_service.list_clients(db)]


@router.post("", response_model=ClientRead, status_code=201, dependencies=[Depends(require_csrf_header)])
def create_client(
    data: ClientCreate,
    db: Session = Depends(get_db),
):
    """Create a client (name required)."""
    try:
        client = client_service.create_client(db, data)
    except CaseDeskError as e:
        raise to_http_error(e)
    return ClientRead.model_validate(client)


@router.get("/{client_id}", response_model=ClientDetail)
def get_client(
    client_id: UUID,
    db: Session = Depends(get_db),
):
    """Get client with cases."""
    client = client_service.get_client(db, client_id, with_cases=True)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return ClientDetail.model_validate(client)


@router.patch("/{client_id}", response_model=ClientRead, dependencies=[Depends(require_csrf_header)])
def update_client(
    client_id: UUID,
    data: ClientUpdate,
    db: Session = Depends(get_db),
):
    """Update client fields (partial)."""
    try:
        client = client_service.update_client(db, client_id, data)
    except CaseDeskError as e:
        raise to_http_error(e)
    return ClientRead.model_validate(client)


@router.delete("/{client_id}", response_model=ClientRead, dependencies=[Depends(require_csrf_header)])
def delete_client(
    client_id: UUID,
    db: Session = Depends(get_db),
):
    """
    Delete a client.

    Returns 409 while any case still references the client.
    """
    try:
        client = client_service.delete_client(db, client_id)
    except CaseDeskError as e:
        raise to_http_error(e)
    return ClientRead.model_validate(client)
