"""
Access logging middleware.
Logs every request to the records endpoints with the caller's token subject.
"""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .config import settings
from .security import decode_access_token

logger = logging.getLogger(__name__)

# Endpoints that touch patient data
RECORD_PATH_PREFIXES = (
    f"{settings.API_PREFIX}/records",
)


def _token_subject(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        payload = decode_access_token(auth_header[7:])
        if payload:
            return str(payload.get("sub", "anonymous"))
    return "anonymous"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs access to patient record endpoints."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)

        path = request.url.path
        if not any(path.startswith(prefix) for prefix in RECORD_PATH_PREFIXES):
            return response

        logger.info(
            "%s %s -> %d (user=%s, %.1f ms)",
            request.method,
            path,
            response.status_code,
            _token_subject(request),
            (time.perf_counter() - started) * 1000,
        )
        return response
