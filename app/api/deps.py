"""
FastAPI dependencies for the engine and KYC service.
"""

from typing import NoReturn

from fastapi import HTTPException, Request, status

from app.core.exceptions import (
    BusinessLogicError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    PersonaMockException,
)
from app.services.kyc_service import KYCService
from app.services.persona_mock import PersonaMockService

# Exception type -> HTTP status, checked in order
ERROR_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (BusinessLogicError, status.HTTP_409_CONFLICT),
)


def get_persona_mock(request: Request) -> PersonaMockService:
    """
    Get the application's Persona mock engine.

    Args:
        request: Incoming request

    Returns:
        Engine stored on application state
    """
    return request.app.state.persona_mock


def get_kyc_service(request: Request) -> KYCService:
    """
    Get the application's KYC service.

    Args:
        request: Incoming request

    Returns:
        KYC service stored on application state
    """
    return request.app.state.kyc_service


def raise_http_error(exc: PersonaMockException) -> NoReturn:
    """
    Translate an engine exception into an HTTP error.

    Raises:
        HTTPException: Always
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_type):
            status_code = code
            break

    raise HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": exc.message, "details": exc.details},
    )
