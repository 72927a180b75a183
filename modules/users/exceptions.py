"""
User module exceptions.
"""

from shared.exceptions import ExternalServiceError, NotFoundError, ValidationError


class UserNotFoundError(NotFoundError):
    """Raised when no record exists for a user ID."""

    def __init__(self, user_id: str):
        super().__init__(
            "User not found",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class InvalidPreferenceError(ValidationError):
    """Raised when a preference value is outside its allowed set."""

    def __init__(self, field: str, value: object, allowed: list[str]):
        super().__init__(
            f"Invalid {field}. Must be one of: {', '.join(allowed)}",
            code="INVALID_ARGUMENT",
            details={"field": field, "value": value, "allowed": allowed},
        )


class StoreUnavailableError(ExternalServiceError):
    """Raised when the user store cannot complete an operation."""

    def __init__(self, message: str):
        super().__init__(
            f"User store unavailable: {message}",
            service="supabase",
            code="STORE_UNAVAILABLE",
        )
