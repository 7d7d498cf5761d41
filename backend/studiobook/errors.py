"""Typed failures returned by API operations.

Every caller-invoked operation either succeeds or raises exactly one of these.
They subclass HTTPException so routers and services can raise them directly.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(HTTPException):
    """Base class for typed failures."""

    code = "internal"
    status = 500

    def __init__(self, message: str):
        super().__init__(status_code=self.status, detail=message)
        self.message = message


class Unauthenticated(ServiceError):
    code = "unauthenticated"
    status = 401


class PermissionDenied(ServiceError):
    code = "permission-denied"
    status = 403


class InvalidArgument(ServiceError):
    code = "invalid-argument"
    status = 400


class NotFound(ServiceError):
    code = "not-found"
    status = 404


class AlreadyExists(ServiceError):
    code = "already-exists"
    status = 409


class FailedPrecondition(ServiceError):
    code = "failed-precondition"
    status = 412


class Internal(ServiceError):
    code = "internal"
    status = 500


def register_error_handlers(app: FastAPI):
    """Render typed failures as {"code", "detail"} bodies."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "detail": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "Invalid request"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            detail = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg", detail)
        return JSONResponse(
            status_code=InvalidArgument.status,
            content={"code": InvalidArgument.code, "detail": detail},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=Internal.status,
            content={"code": Internal.code, "detail": "Internal error"},
        )
