# server/core/errors.py

import logging
from enum import Enum
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTH = "auth"
    STORAGE = "storage"
    MODERATION_UNAVAILABLE = "moderation_unavailable"
    REJECTED_CONTENT = "rejected_content"
    BAD_REQUEST = "bad_request"
    INTERNAL = "internal"


# -------------------------------
# Application Errors
# -------------------------------

class AppError(Exception):
    """
    Base class for every error that is reported to the client.
    Subclasses fix the kind and HTTP status; the message is free text.
    """
    kind = ErrorKind.INTERNAL
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION
    status_code = 422


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT
    status_code = status.HTTP_409_CONFLICT


class AuthError(AppError):
    kind = ErrorKind.AUTH
    status_code = status.HTTP_401_UNAUTHORIZED


class StorageError(AppError):
    kind = ErrorKind.STORAGE
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ModerationUnavailableError(AppError):
    kind = ErrorKind.MODERATION_UNAVAILABLE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class RejectedContentError(AppError):
    kind = ErrorKind.REJECTED_CONTENT
    status_code = status.HTTP_400_BAD_REQUEST


def error_response(kind: ErrorKind, message: str, status_code: int, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "kind": kind.value},
        headers=headers,
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query")]
        field_name = ".".join(loc) or "request"
        parts.append(f"{field_name}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "invalid request"


# -------------------------------
# Handlers
# -------------------------------

async def handle_app_error(request: Request, exc: AppError):
    return error_response(exc.kind, exc.message, exc.status_code)


async def handle_request_validation(request: Request, exc: RequestValidationError):
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        return error_response(ErrorKind.BAD_REQUEST, "invalid JSON", status.HTTP_400_BAD_REQUEST)
    return await handle_app_error(request, ValidationError(_describe_validation_errors(exc)))


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return error_response(
        ErrorKind.BAD_REQUEST,
        str(exc.detail),
        exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(ErrorKind.INTERNAL, "internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
