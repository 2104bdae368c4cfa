"""Domain exceptions and the error envelope rendered by every API error handler."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = structlog.get_logger()


class NotFoundError(LookupError):
    """A referenced entity does not exist, or is not visible to the caller."""


class BadRequestError(ValueError):
    """A business rule rejected the operation (duplicate, invalid transition, inactive link)."""


class IntegrationError(Exception):
    """An upstream provider failed. The message is safe to show to API callers."""

    def __init__(self, message: str, *, provider: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.detail = detail


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    status: str = "error"
    message: str
    detail: Any = None
    request_id: str = "unknown"


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "unknown")


def _envelope(status_code: int, message: str, request: Request, detail: Any = None) -> JSONResponse:
    body = ErrorResponse(message=message, detail=detail, request_id=_request_id(request))
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _envelope(404, str(exc) or "Not found", request)


async def bad_request_handler(request: Request, exc: BadRequestError) -> JSONResponse:
    return _envelope(400, str(exc) or "Bad request", request)


async def integration_error_handler(request: Request, exc: IntegrationError) -> JSONResponse:
    logger.warning(
        "integration_error",
        provider=exc.provider,
        error=str(exc),
        detail=exc.detail,
        path=request.url.path,
        request_id=_request_id(request),
    )
    return _envelope(502, str(exc), request)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _envelope(422, "Request validation failed", request, detail=errors)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a consistent JSON envelope."""
    request_id = _request_id(request)

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    sentry_sdk.capture_exception(exc)

    return _envelope(500, "An unexpected error occurred.", request)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Standardize HTTPException responses into the same JSON envelope."""
    if isinstance(exc.detail, dict):
        message = exc.detail.get("message", str(exc.detail))
        detail: Any = exc.detail.get("detail")
    else:
        message = str(exc.detail)
        detail = None

    response = _envelope(exc.status_code, message, request, detail=detail)
    for key, value in (exc.headers or {}).items():
        response.headers[key] = value
    return response


def register_exception_handlers(app) -> None:
    from starlette.exceptions import HTTPException as StarletteHTTPException

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(BadRequestError, bad_request_handler)
    app.add_exception_handler(IntegrationError, integration_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
