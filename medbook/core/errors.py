"""
Exception handlers for the FastAPI application.

Every error leaves the API as ``{"message": ...}``; validation failures also
name the offending ``field``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle HTTPException with the API's error body."""
    if not isinstance(exc, StarletteHTTPException):
        exc = StarletteHTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report malformed input as 400 with the first error's message."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if not errors:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": "Invalid input"})

    first = errors[0]
    # Drop the "body"/"query"/"path" prefix from the location
    location = [str(part) for part in first.get("loc", ())][1:]
    field = ".".join(location) or None

    # Inputs are not logged; they may carry passwords
    summary = [(".".join(str(p) for p in e.get("loc", ())), e.get("msg")) for e in errors]
    logger.warning("Validation error on %s: %s", request.url.path, summary)

    content = {"message": first.get("msg", "Invalid input")}
    if field:
        content["field"] = field
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures; never leak their details to the caller."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
