# storefront/errors.py
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base for errors that map onto an HTTP status at the handler boundary."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class MissingFieldsError(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Missing required fields"


class UnknownFieldError(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Unknown product field"

    def __init__(self, field: str):
        super().__init__(f"Unknown product field: {field}")
        self.field = field


class ImmutableFieldError(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Field cannot be changed"


class AuthError(CatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class ProductNotFoundError(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Product not found"


class SlugConflictError(CatalogError):
    status_code = status.HTTP_409_CONFLICT
    message = "Product with this slug already exists"


class UpstreamError(CatalogError):
    message = "Upstream service failed"


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _missing_fields(exc: RequestValidationError):
    missing = []
    for err in exc.errors():
        if err.get("type") != "missing":
            continue
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        if loc:
            missing.append(".".join(loc))
    return missing


async def catalog_error_handler(request: Request, exc: CatalogError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return error_response(exc.status_code, exc.message, headers)


async def http_error_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON body")
    missing = _missing_fields(exc)
    if missing:
        return error_response(status.HTTP_400_BAD_REQUEST, f"Missing required fields: {', '.join(missing)}")
    extra = [err for err in exc.errors() if err.get("type") == "extra_forbidden"]
    if extra:
        return error_response(status.HTTP_400_BAD_REQUEST, f"Unknown product field: {extra[0]['loc'][-1]}")
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    return error_response(status.HTTP_400_BAD_REQUEST, f"Invalid value for {field}: {first.get('msg', 'invalid')}")


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database operation failed")


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
