"""Typed service errors.

Services raise these; ``punchclock.middleware.error_handler`` turns them into
JSON responses. ``message`` is what the client sees, so it must never carry
internal detail.
"""


class ServiceError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "An internal error occurred.", code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(ServiceError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ServiceError):
    status_code = 409
    code = "CONFLICT"


class AlreadyClockedInError(ConflictError):
    code = "ALREADY_CLOCKED_IN"


class NotClockedInError(ConflictError):
    code = "NOT_CLOCKED_IN"


class InvalidStateError(ConflictError):
    code = "INVALID_STATE"


class UnauthorizedError(ServiceError):
    status_code = 401
    code = "UNAUTHORIZED"


class InvalidCredentialsError(UnauthorizedError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(message)


class ForbiddenError(ServiceError):
    status_code = 403
    code = "FORBIDDEN"


class InternalError(ServiceError):
    pass
