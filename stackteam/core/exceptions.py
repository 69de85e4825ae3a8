"""
Domain error taxonomy.

Every error carries a machine-stable ``kind`` and the HTTP status it maps to.
Services raise these; ``stackteam.api.errors`` renders them into the JSON
error envelope.
"""


class AppError(Exception):
    """Base exception for all domain errors."""
    kind = "internal"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(AppError):
    """Missing or invalid credential."""
    kind = "unauthenticated"
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(AppError):
    """Authenticated but lacking role or ownership."""
    kind = "forbidden"
    status_code = 403
    default_message = "Not authorized"


class NotFound(AppError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    """Uniqueness violation."""
    kind = "conflict"
    status_code = 409
    default_message = "Resource already exists"


class InvalidOperation(AppError):
    """Operation not allowed for this caller/target combination."""
    kind = "invalid_operation"
    status_code = 400
    default_message = "Operation not allowed"


class InvariantViolation(AppError):
    """Operation would break a cross-row rule such as the last-admin rule."""
    kind = "invariant_violation"
    status_code = 400
    default_message = "Team must have at least one admin"


class Expired(AppError):
    kind = "expired"
    status_code = 400
    default_message = "This invite has expired"


class InvalidState(AppError):
    kind = "invalid_state"
    status_code = 400
    default_message = "Resource is not in a valid state for this operation"


class Internal(AppError):
    pass
