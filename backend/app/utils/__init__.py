from .errors import (
    AppError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
    error_response,
)
from .email import send_email
from .auth import normalize_email
