"""
Application exceptions.

Services and repositories raise these; core.error_handlers maps them to
HTTP responses in a single place.
"""

from typing import Any


class HiigsiException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
        status_code: HTTP status used when the error reaches the API boundary
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details or None,
        }


class ValidationError(HiigsiException):
    """Raised when input fails a business validation rule."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        details = {"errors": [{"field": field, "message": message}]} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationError(HiigsiException):
    """Raised when no valid session is present."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(message, error_code)


class InvalidCredentialsError(AuthenticationError):
    """Same message whether the email or the password was wrong."""

    def __init__(self):
        super().__init__("Invalid email or password", "INVALID_CREDENTIALS")


class TokenExpiredError(HiigsiException):
    status_code = 400

    def __init__(self):
        super().__init__(
            "Reset token has expired. Please request a new one.", "TOKEN_EXPIRED"
        )


class TokenInvalidError(HiigsiException):
    status_code = 400

    def __init__(self):
        super().__init__("Invalid or expired reset token", "TOKEN_INVALID")


class AuthorizationError(HiigsiException):
    """Raised when an authenticated principal may not perform an operation."""

    status_code = 403

    def __init__(
        self,
        message: str = "Forbidden",
        error_code: str = "FORBIDDEN",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)


class PermissionDeniedError(AuthorizationError):
    """Permission denied - user lacks the required (action, subject) pair."""

    def __init__(self, action: str, subject: str):
        super().__init__(
            "Forbidden",
            "PERMISSION_DENIED",
            {"required": {"action": action, "subject": subject}},
        )


class SystemRoleError(AuthorizationError):
    """Raised on attempts to change a system role."""

    def __init__(self, message: str = "System roles cannot be modified."):
        super().__init__(message, "SYSTEM_ROLE_PROTECTED")


class InactiveAccountError(AuthorizationError):
    def __init__(self):
        super().__init__(
            "Your account is inactive. Please contact an administrator.",
            "ACCOUNT_INACTIVE",
        )


class ResourceNotFoundError(HiigsiException):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str | None = None):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} not found: {resource_id}"
        super().__init__(
            message,
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictError(HiigsiException):
    """Raised on uniqueness violations and conflicting state."""

    status_code = 409

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "CONFLICT", details)


class ServiceUnavailableError(HiigsiException):
    status_code = 503

    def __init__(self, message: str):
        super().__init__(message, "SERVICE_UNAVAILABLE")


class EmailDeliveryError(HiigsiException):
    """SMTP delivery failed."""

    def __init__(self, message: str):
        super().__init__(message, "EMAIL_DELIVERY_FAILED")
