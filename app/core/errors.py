"""Application error types and the FastAPI handler that renders them."""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.logging import request_id_var

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    """Error categories surfaced to API clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    CLASSIFICATION_ERROR = "CLASSIFICATION_ERROR"
    NOT_FOUND_ERROR = "NOT_FOUND_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_STATUS_CODES = {
    ErrorType.VALIDATION_ERROR: 400,
    ErrorType.GATEWAY_ERROR: 502,
    ErrorType.PERSISTENCE_ERROR: 500,
    ErrorType.CLASSIFICATION_ERROR: 500,
    ErrorType.NOT_FOUND_ERROR: 404,
    ErrorType.INTERNAL_ERROR: 500,
}


class AppError(Exception):
    """Base application error."""

    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.timestamp = datetime.now(timezone.utc).isoformat()

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES.get(self.error_type, 500)


class ValidationError(AppError):
    """Malformed input rejected before any external call."""

    error_type = ErrorType.VALIDATION_ERROR


class GatewayError(AppError):
    """Telephony or messaging provider request failed."""

    error_type = ErrorType.GATEWAY_ERROR


class PersistenceError(AppError):
    """Call record store unavailable or write failed."""

    error_type = ErrorType.PERSISTENCE_ERROR


class ClassificationError(AppError):
    """Unexpected failure while building the adherence reply."""

    error_type = ErrorType.CLASSIFICATION_ERROR


class NotFoundError(AppError):
    error_type = ErrorType.NOT_FOUND_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as a standard JSON error body."""
    request_id = request_id_var.get()
    logger.error(
        f"[ERROR] {exc.error_type.value} - {request.method} {request.url.path}, "
        f"Status: {exc.status_code}, Message: {exc.message}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "type": exc.error_type.value,
                "message": exc.message,
                "request_id": request_id,
            },
        },
    )
