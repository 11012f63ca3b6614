"""
Error taxonomy shared by every layer.

Services raise these; the HTTP layer maps them to status codes through
`status_code` and renders `message` to the caller.
"""


class AppError(Exception):
    status_code = 500
    error_type = "app_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing field, bad enum value, empty cart, missing table number."""
    status_code = 400
    error_type = "validation_error"


class AuthorizationError(AppError):
    status_code = 401
    error_type = "authorization_error"


class NotFoundError(AppError):
    status_code = 404
    error_type = "not_found"


class ConflictError(AppError):
    """The record exists but its current state forbids the change."""
    status_code = 409
    error_type = "conflict"


class TransientError(AppError):
    """Storage or network failure. Safe to retry for reads only."""
    status_code = 503
    error_type = "transient_error"
