"""
Typed API failures and their translation to HTTP responses.

The repository and the authorization gate raise these; the exception
handlers registered by ``register_error_handlers`` turn them into
``{"code": ..., "message": ...}`` JSON bodies. No layer retries.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateEmail(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email already taken"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Patient not found"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please authenticate"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class StoreError(ApiError):
    default_message = "Internal server error"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.status_code, "message": exc.message},
            headers=headers,
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("%s %s store failure: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=StoreError.status_code,
            content={"code": StoreError.status_code, "message": StoreError.default_message},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": status.HTTP_400_BAD_REQUEST,
                "message": "Invalid request",
                "errors": jsonable_encoder(exc.errors()),
            },
        )
