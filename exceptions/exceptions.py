from typing import List, Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from backend.messages import translate

logger = logging.getLogger(__name__)


class LibraryException(Exception):
    """Base exception for library-related errors."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ValidationFailedError(LibraryException):
    status_code = 400

    def __init__(self, errors: List[dict], message: Optional[str] = None):
        super().__init__(message or errors[0]["message"], errors)


class ConflictError(LibraryException):
    """Duplicate name or a record that still has dependents."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, detail: Optional[str] = None):
        self.field = field
        errors = [{"field": field, "message": detail or message}] if field else None
        super().__init__(message, errors)


class NotFoundError(LibraryException):
    status_code = 404


class InvalidCredentialError(LibraryException):
    status_code = 400


class PasswordReuseError(LibraryException):
    status_code = 400


class AuthenticationError(LibraryException):
    status_code = 401


class PermissionDeniedError(LibraryException):
    status_code = 403


class DatabaseError(LibraryException):
    def __init__(self, operation: str, details: str, message: Optional[str] = None):
        self.operation = operation
        self.details = details
        super().__init__(message or translate("server.error"))

    def __str__(self):
        return f"Database error during {self.operation}: {self.details}"


def envelope(success: bool, message: Optional[str] = None, data=None, errors=None) -> dict:
    body = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if errors:
        body["errors"] = errors
    return body


def field_errors(validation_errors) -> List[dict]:
    errors = []
    for error in validation_errors:
        # drop the "body"/"query"/"path" prefix FastAPI puts in front
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": error.get("msg")})
    return errors


# Exception handlers
async def library_exception_handler(request: Request, exc: LibraryException):
    if exc.status_code >= 500:
        logger.error(f"Library error: {exc}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(False, exc.message, errors=exc.errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.error(f"HTTP error {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(False, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Request validation error: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=envelope(False, translate("request.invalid"), errors=field_errors(exc.errors())),
    )


async def response_validation_exception_handler(
    request: Request, exc: ResponseValidationError
):
    logger.error(f"Response validation error: {exc.errors()}")
    return JSONResponse(
        status_code=500,
        content=envelope(False, translate("server.error")),
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content=envelope(False, translate("server.error")),
    )


def add_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(
        ResponseValidationError, response_validation_exception_handler
    )
    app.add_exception_handler(Exception, general_exception_handler)
    app.add_exception_handler(LibraryException, library_exception_handler)
