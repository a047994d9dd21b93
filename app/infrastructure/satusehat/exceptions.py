"""Satu Sehat registry exceptions.

Every error is terminal for the current operation: nothing in the sync flow
retries internally.
"""

from typing import Any


class SatuSehatError(Exception):
    """Base exception for Satu Sehat operations."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SatuSehatConfigurationError(SatuSehatError):
    """Raised when client credentials are not set."""

    def __init__(self, message: str = "Satu Sehat credentials not set"):
        super().__init__(message)


class SatuSehatValidationError(SatuSehatError):
    """Raised when a patient record fails local checks before submission."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message, {"fields": fields or []})
        self.fields = fields or []


class SatuSehatAuthError(SatuSehatError):
    """Raised when the token endpoint rejects the credentials or is unreachable."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message, {"status_code": status_code, "body": body})
        self.status_code = status_code
        self.body = body


class SatuSehatAuthTimeoutError(SatuSehatAuthError):
    """Raised when the token request exceeds its deadline."""

    pass


class SatuSehatRegistryError(SatuSehatError):
    """Raised when the resource-create call is rejected or fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        diagnostics: str | None = None,
        error_body: Any = None,
    ):
        super().__init__(
            message,
            {"status_code": status_code, "diagnostics": diagnostics},
        )
        self.status_code = status_code
        self.diagnostics = diagnostics
        self.error_body = error_body


class SatuSehatRegistryTimeoutError(SatuSehatRegistryError):
    """Raised when the resource-create request exceeds its deadline."""

    pass
