"""
Application errors

Every error raised by a route or service derives from AssetaError so the
exception handlers in main.py can turn it into a JSON response:

    {"detail": "<message>", "code": "<CODE>"}
"""

from typing import Any, Dict, Optional


class AssetaError(Exception):
    """Base exception for all application errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AssetaError):
    """Missing or malformed input"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class NotFoundError(AssetaError):
    """Unknown identifier"""

    status_code = 404

    def __init__(self, entity: str, identifier: Optional[str] = None):
        message = f"{entity} not found"
        super().__init__(message, code="NOT_FOUND", details={"id": identifier} if identifier else None)


class ConflictError(AssetaError):
    """A unique field is already taken"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class AuthenticationError(AssetaError):
    """Login failed"""

    status_code = 400

    def __init__(self, message: str = "Authentication failed", code: str = "AUTH_FAILED"):
        super().__init__(message, code=code)


class UserNotFoundError(AuthenticationError):
    def __init__(self):
        super().__init__("User not found", code="USER_NOT_FOUND")


class InvalidCredentialsError(AuthenticationError):
    def __init__(self):
        super().__init__("Invalid password", code="INVALID_CREDENTIALS")


class StorageError(AssetaError):
    """Database unreachable or operation failed"""

    status_code = 500

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, code="STORAGE_ERROR")
