import json
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("dlv_api.requests")

SENSITIVE_FIELDS = {"otp", "password", "token"}


def sanitize_body(raw: bytes) -> dict | None:
    try:
        body = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    return {key: ("***" if key in SENSITIVE_FIELDS else value) for key, value in body.items()}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request line, plus JSON bodies of writes with secrets masked."""

    async def dispatch(self, request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        logger.info("%s %s - %s", request.method, request.url.path, client)

        if request.method != "GET" and request.headers.get("content-type", "").startswith("application/json"):
            body = sanitize_body(await request.body())
            if body is not None:
                logger.debug("Request body: %s", body)

        return await call_next(request)
