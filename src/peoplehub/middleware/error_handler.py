"""Exception handlers mapping domain errors to HTTP responses.

Domain errors carry a stable code, a message written for end users and
structured details, so they are returned as-is with their status code.
Anything else is reduced to a generic message so internals never leak.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from peoplehub.config import get_settings
from peoplehub.exceptions import DomainError, ErrorKind

logger = logging.getLogger(__name__)

# Safe error messages that can be shown to users
SAFE_ERROR_MESSAGES = {
    500: "Internal server error",
    503: "Service temporarily unavailable",
}


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Return a domain error with its own status code.

    Args:
        request: FastAPI request
        exc: Domain error

    Returns:
        JSONResponse with ``{"error": {code, message, details}}``
    """
    if exc.kind in (ErrorKind.SYSTEM, ErrorKind.EXTERNAL_SERVICE):
        logger.error(f"{exc.code} for {request.url}: {exc.message}")
        content = {
            "error": {
                "code": exc.code,
                "message": SAFE_ERROR_MESSAGES.get(exc.http_status, exc.message),
                "details": {},
            }
        }
    else:
        logger.info(f"{exc.code} for {request.url}")
        content = {"error": exc.to_dict()}

    return JSONResponse(status_code=exc.http_status, content=content)


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy exceptions without leaking database details.

    Args:
        request: FastAPI request
        exc: SQLAlchemy exception

    Returns:
        JSONResponse with safe error
    """
    settings = get_settings()

    # Log the full error for debugging
    logger.error(f"Database error for {request.url}: {exc}", exc_info=True)

    details = {"type": type(exc).__name__} if settings.debug else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "SYS_DATABASE",
                "message": "Database error occurred",
                "details": details,
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain and database exception handlers on an app."""
    app.add_exception_handler(DomainError, domain_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
