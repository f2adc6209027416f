"""Service-layer error taxonomy.

Services raise these; routers translate them into HTTP responses using the
carried ``status_code``.
"""


class CaseDeskError(Exception):
    """Base exception for case workflow errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CaseDeskError):
    """Referenced case, client or user does not exist."""

    status_code = 404


class ValidationError(CaseDeskError):
    """Required field missing or empty, or value not acceptable."""

    status_code = 400


class ConflictError(CaseDeskError):
    """Operation conflicts with existing records."""

    status_code = 409


class UpdateFailedError(CaseDeskError):
    """Persistence layer failed during an update."""

    pass


class CreateFailedError(CaseDeskError):
    """Persistence layer failed during a create."""

    pass


class DeleteFailedError(CaseDeskError):
    """Persistence layer failed during a delete."""

    pass
