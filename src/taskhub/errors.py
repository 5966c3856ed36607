"""Application error taxonomy.

Services raise these; main.py maps every AppError onto the JSON error
envelope using its status_code. Nothing recovers from them locally.

Note that Forbidden (valid token, wrong owner) answers 401, not 403.
Clients already depend on that, so it stays.
"""


class AppError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = 500
    default_message = "Internal server error"
    headers: dict[str, str] = {}

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """A required field is missing or a value is out of range."""

    status_code = 400
    default_message = "Invalid request"


class DuplicateEmail(AppError):
    status_code = 400
    default_message = "User already exists"


class InvalidCredentials(AppError):
    """Login failed. Same message for unknown email and wrong password."""

    status_code = 401
    default_message = "Invalid email or password"


class Unauthorized(AppError):
    """Missing, malformed, or expired bearer token."""

    status_code = 401
    default_message = "Not authorized"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    """Valid token, but the record belongs to someone else."""

    status_code = 401
    default_message = "Not authorized to access this resource"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"
