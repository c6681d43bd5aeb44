# salon_booking/errors.py

from typing import Optional


class AppError(Exception):
    """Base class for errors raised by the booking core.

    Each subclass carries the HTTP status the API layer maps it to and a
    stable machine-readable code.
    """

    status_code = 500
    code = "APP_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or out-of-range input, raised before any lookup."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        if entity_id:
            message = f"{entity} with id {entity_id} not found"
        else:
            message = f"{entity} not found"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class BusinessRuleError(AppError):
    """The request is well formed but breaks a booking rule."""

    status_code = 422
    code = "BUSINESS_RULE_ERROR"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"

    def __init__(self, message: str, count: Optional[int] = None):
        super().__init__(message)
        self.count = count
