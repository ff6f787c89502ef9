"""
Domain errors. Routers and services raise these; main.py renders every one as {"error": message}
with the status code carried on the class. Anything that is not an AppError becomes a generic 500.
"""
from sqlalchemy.exc import IntegrityError


class AppError(Exception):
    status_code = 500
    default_message = "Something went wrong on the server"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class MissingField(ValidationError):
    default_message = "All fields are required"


class InvalidRole(ValidationError):
    default_message = "Invalid role"


class InvalidCredentials(AppError):
    status_code = 400
    default_message = "Invalid email or password"


class DuplicateResource(AppError):
    status_code = 400
    default_message = "Resource already exists"


class DuplicateEmail(DuplicateResource):
    default_message = "Email already exists"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Access token required"


class InvalidToken(AppError):
    status_code = 403
    default_message = "Invalid or expired token"


class Forbidden(AppError):
    status_code = 403
    default_message = "Access denied"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


UNIQUE = "unique"
FOREIGN_KEY = "foreign_key"
OTHER = "other"


def classify_integrity_error(exc: IntegrityError) -> str:
    """Return UNIQUE, FOREIGN_KEY or OTHER from the driver message (SQLite, MySQL and PostgreSQL wording)."""
    msg = str(getattr(exc, "orig", exc)).lower()
    if "unique" in msg or "duplicate" in msg:
        return UNIQUE
    if "foreign key" in msg:
        return FOREIGN_KEY
    return OTHER
