"""FastAPI dependencies for database access, acting user and CSRF."""

from datetime import date
from typing import Generator
from uuid import UUID

from fastapi import HTTPException, Query, Request
from sqlalchemy.orm import Session

from casedesk.core.exceptions import CaseDeskError
from casedesk.db.session import SessionLocal


# Header names
ACTING_USER_HEADER = "X-User-Id"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor_id(request: Request) -> UUID | None:
    """
    Acting user id supplied by the upstream identity provider.

    Missing header means anonymous; services decide whether to fall back.

    Raises:
        HTTPException 400: Header present but not a UUID
    """
    raw = request.headers.get(ACTING_USER_HEADER)
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {ACTING_USER_HEADER} header")


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PATCH, DELETE).

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )


def get_viewer_today(
    today: date | None = Query(None, description="Viewer's local date (YYYY-MM-DD)"),
) -> date:
    """Calendar day urgency is computed against; defaults to the server's date."""
    return today or date.today()


def to_http_error(error: CaseDeskError) -> HTTPException:
    """Translate a service error into an HTTP error with its status code."""
    return HTTPException(status_code=error.status_code, detail=error.message)
