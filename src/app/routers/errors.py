# src/app/routers/errors.py
from __future__ import annotations

from fastapi import HTTPException, status

from src.app.domain.errors import (
    CookbookError,
    CopyFailedError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    RepositoryError,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationFailureError,
)
from src.services.errors import (
    ExtractionError,
    FetchFailedError,
    InvalidImageError,
    InvalidURLError,
    NetworkTimeoutError,
    RateLimitedError,
    ServiceError,
)
from src.services.gemini_client import GeminiConfigurationError

_DOMAIN_STATUS: tuple[tuple[type[CookbookError], int], ...] = (
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidOrExpiredTokenError, status.HTTP_410_GONE),
    (ValidationFailureError, status.HTTP_400_BAD_REQUEST),
    (CopyFailedError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (RepositoryError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

_SERVICE_STATUS: tuple[tuple[type[ServiceError], int], ...] = (
    (InvalidURLError, status.HTTP_400_BAD_REQUEST),
    (InvalidImageError, status.HTTP_400_BAD_REQUEST),
    (RateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS),
    (NetworkTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (FetchFailedError, status.HTTP_502_BAD_GATEWAY),
    (ExtractionError, status.HTTP_502_BAD_GATEWAY),
    (GeminiConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def domain_http_error(exc: CookbookError) -> HTTPException:
    for error_type, code in _DOMAIN_STATUS:
        if isinstance(exc, error_type):
            return HTTPException(status_code=code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def service_http_error(exc: ServiceError) -> HTTPException:
    for error_type, code in _SERVICE_STATUS:
        if isinstance(exc, error_type):
            return HTTPException(status_code=code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
