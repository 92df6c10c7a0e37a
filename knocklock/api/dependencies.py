# =======================================================================================
# knocklock/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from fastapi import HTTPException, Request, status
from ..controller import LockController
from ..utils.exceptions import (
    KnockLockError, ValidationError, PatternLimitError, UnlockInProgressError,
    RecordNotFoundError, ConfirmationError, PrincipalNotResolvedError, StoreError,
)

# Most specific first
_STATUS_CODES = (
    (PatternLimitError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnlockInProgressError, status.HTTP_409_CONFLICT),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (ConfirmationError, status.HTTP_404_NOT_FOUND),
    (PrincipalNotResolvedError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StoreError, status.HTTP_502_BAD_GATEWAY),
)

def get_controller(request: Request) -> LockController:
    """Dependency to get the lock controller built by create_app()."""
    return request.app.state.controller

def http_error(exc: KnockLockError) -> HTTPException:
    """Translate a core exception into the matching HTTP error."""
    for exc_type, code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
