from typing import Dict, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map to a structured ``{"error": ...}`` reply."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, str]:
        body = {"error": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(AppError):
    """Malformed, missing or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    """Authenticated, but not allowed to touch this record."""

    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(AppError):
    """Business-rule collision: double booking, unavailable item, no units left."""

    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"error": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)
