# backend/errors.py
"""Error kinds raised by request handlers.

Every error carries the HTTP status it maps to; the app-level handler turns
them into ``{"message": ...}`` responses.
"""


class ApiError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"message": self.message}


class ValidationError(ApiError):
    """Missing or invalid request fields."""
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    """The entity exists but belongs to another user."""
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409
