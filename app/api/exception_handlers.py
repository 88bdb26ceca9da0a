# app/api/exception_handlers.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from exceptions.domain_exceptions import DomainException
import logging

logger = logging.getLogger(__name__)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """
    Render a DomainException as

        {"error": <class name>, "message": ..., "details": {...}, "path": ...}

    with the exception's status code.
    """
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.__class__.__name__,
            "message": exc.message,
            "details": exc.details,
            "path": request.url.path
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handler; subclasses resolve to it through the MRO"""
    app.add_exception_handler(DomainException, domain_exception_handler)
