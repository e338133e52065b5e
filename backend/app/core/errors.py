"""Service exceptions and the JSON error envelope used by every route."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class QueryFailed(RuntimeError):
    """Raised when a store read or write cannot be completed."""


class AuthenticationFailed(RuntimeError):
    """Raised when credentials do not match a stored user."""


class HashingFailed(RuntimeError):
    """Raised when the password hasher cannot verify a stored hash."""


class SessionFailed(RuntimeError):
    """Raised when no active session exists for the presented cookie."""


class SessionDestroyFailed(RuntimeError):
    """Raised when an existing session cannot be removed from the store."""


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    # A malformed id on a read path cannot name an existing resource.
    if request.method == "GET" and any(error["loc"][0] == "path" for error in errors):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": jsonable_encoder(errors)})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": jsonable_encoder(errors)},
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render failures as ``{"error": ...}`` bodies."""

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
