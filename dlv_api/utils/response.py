import logging

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """HTTPException carrying a stable error code and optional extra fields."""

    def __init__(self, status_code: int, message: str, error: str, **extra):
        super().__init__(status_code=status_code, detail=message)
        self.error = error
        self.extra = extra


def create_response(
    message: str | None = None,
    data: dict | None = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Return the portal's flat `{success, message, ...}` payload."""
    content = {"success": status_code < 400}
    if message is not None:
        content["message"] = message
    if data:
        content.update(jsonable_encoder(data))
    return JSONResponse(status_code=status_code, content=content)


def error_response(status_code: int, message: str, error: str, **extra) -> JSONResponse:
    return create_response(message, {"error": error, **extra}, status_code)


def handle_exception(
    error: Exception,
    fallback_message: str = "Internal server error",
    fallback_code: str = "INTERNAL_SERVER_ERROR",
) -> JSONResponse:
    """Coerce raised errors into the shared response structure."""
    if isinstance(error, ApiError):
        return error_response(error.status_code, str(error.detail), error.error, **error.extra)

    if isinstance(error, HTTPException):
        detail = error.detail if isinstance(error.detail, str) else str(error.detail)
        return error_response(error.status_code, detail, fallback_code)

    logger.exception("%s: %s", fallback_code, error)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, fallback_message, fallback_code)
