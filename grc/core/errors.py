"""
Error taxonomy and the HTTP handlers that render it.

Services raise these; routers never build error responses by hand.
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from grc.core.logging import get_logger

logger = get_logger(__name__)


class GRCError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(GRCError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class InvalidCredentials(GRCError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class Conflict(GRCError):
    # Answered as 400, not 409; API clients depend on it
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists"


class Unauthenticated(GRCError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class Forbidden(GRCError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(GRCError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ServerError(GRCError):
    pass


async def grc_error_handler(request: Request, exc: GRCError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": ServerError.default_message},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GRCError, grc_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
