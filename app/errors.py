"""
Error taxonomy shared by repositories, services and routers.

Services raise these; ``register_exception_handlers`` turns each into a
JSON ``{"detail": ...}`` response with the matching status code, the same
shape FastAPI uses for ``HTTPException``.
"""
import logging
from contextlib import contextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"


class BlogError(Exception):
    status_code: int = 500
    default_message: str = GENERIC_SERVER_ERROR

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BlogError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationRequired(BlogError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(BlogError):
    status_code = 403
    default_message = "Access denied"


class NotFound(BlogError):
    status_code = 404
    default_message = "Not found"


class Conflict(BlogError):
    status_code = 409
    default_message = "Already exists"


class PersistenceError(BlogError):
    """The store was unreachable or rejected a write; details stay in the log."""

    status_code = 500


async def _blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        logger.error(
            "Persistence failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc.__cause__ or exc,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": GENERIC_SERVER_ERROR})
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.message}, headers=headers
    )


async def _sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Raised outside a repository, typically by the commit in get_db.
    logger.error(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"detail": GENERIC_SERVER_ERROR})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, _blog_error_handler)
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)


@contextmanager
def persistence_errors(operation: str):
    """Re-raise any SQLAlchemy failure inside the block as ``PersistenceError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Database error during {operation}: {exc}") from exc
