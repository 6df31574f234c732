"""
Error taxonomy and FastAPI exception handlers.

Every failure a handler can produce is one of the classes below; anything
else is turned into an opaque ``InternalFailure`` response by the catch-all
handler so nothing reaches the transport layer unhandled.
"""

from typing import Iterable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class BookkeepError(Exception):
    """Base exception for Bookkeep errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: Optional[str] = None,
        headers: Optional[dict] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        self.headers = headers
        super().__init__(message)


class ValidationError(BookkeepError):
    """Malformed or missing input. ``fields`` names the offenders."""

    def __init__(self, fields: Iterable[str], detail: Optional[str] = None):
        self.fields = list(dict.fromkeys(fields))
        super().__init__(
            message=f"Invalid or missing field(s): {', '.join(self.fields)}",
            code="VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class Unauthenticated(BookkeepError):
    """Missing, invalid or expired credentials. Always the same message."""

    def __init__(self):
        super().__init__(
            message="Not authenticated",
            code="UNAUTHENTICATED",
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFoundOrForbidden(BookkeepError):
    """Resource absent or owned by someone else; the two are not distinguished."""

    def __init__(self, resource: str = "Book"):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class Conflict(BookkeepError):
    """A unique field is already taken."""

    def __init__(self, message: str = "User already exists"):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class InvalidCredentials(BookkeepError):
    """Login failed. Unknown email and wrong password look the same."""

    def __init__(self):
        super().__init__(
            message="Invalid credentials",
            code="INVALID_CREDENTIALS",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class InternalFailure(BookkeepError):
    """Store unavailable or unexpected error. Details stay in the server log."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(
            message=message,
            code="INTERNAL_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def create_error_response(exc: BookkeepError) -> JSONResponse:
    """Create standardized error response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "code": exc.code,
            "detail": exc.detail,
        },
        headers=exc.headers,
    )


def _field_name(loc: tuple) -> str:
    # ("body", "totalPages") -> "totalPages"; a missing body -> "body"
    if not loc:
        return "body"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or str(loc[0])


def validation_error_from(exc: RequestValidationError) -> ValidationError:
    """Convert FastAPI's request validation failure into a ``ValidationError``."""
    errors = exc.errors()
    fields = [_field_name(tuple(err.get("loc", ()))) for err in errors]
    detail = "; ".join(f"{_field_name(tuple(err.get('loc', ())))}: {err.get('msg')}" for err in errors)
    return ValidationError(fields or ["body"], detail=detail or None)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(BookkeepError)
    async def bookkeep_exception_handler(request: Request, exc: BookkeepError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        else:
            logger.info(f"{exc.code} on {request.method} {request.url.path}")
        return create_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = validation_error_from(exc)
        logger.info(f"Validation error on {request.url.path}: {error.fields}")
        return create_error_response(error)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {type(exc).__name__}")
        return create_error_response(InternalFailure())
