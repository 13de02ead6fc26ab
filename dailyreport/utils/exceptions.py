"""Custom exceptions for the sales daily report system"""

from typing import Any, Dict, List, Optional


class DailyReportError(Exception):
    """Base exception for the daily report application"""

    status_code = 500
    default_code = "SERVER_ERROR"
    default_message = "An unexpected server error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body

    def to_envelope(self) -> Dict[str, Any]:
        """Uniform error payload returned by every API route."""
        return {"status": "error", "error": self.to_dict()}


class ValidationError(DailyReportError):
    """Malformed or missing input"""

    status_code = 400
    default_code = "VALIDATION_ERROR"
    default_message = "The request contains invalid input"


class AuthenticationError(DailyReportError):
    """Missing session or bad credentials"""

    status_code = 401
    default_code = "AUTH_UNAUTHORIZED"
    default_message = "Authentication is required"


class InvalidCredentialsError(AuthenticationError):
    """Unknown sales code or wrong password (deliberately indistinguishable)"""

    default_code = "AUTH_INVALID_CREDENTIALS"
    default_message = "Sales code or password is incorrect"


class SessionExpiredError(AuthenticationError):
    """Session is absent, invalid or past its expiry"""

    default_code = "AUTH_SESSION_EXPIRED"
    default_message = "Session is invalid or has expired"


class AuthorizationError(DailyReportError):
    """Authenticated but not allowed"""

    status_code = 403
    default_code = "AUTH_FORBIDDEN"
    default_message = "You do not have permission to perform this action"


class NotFoundError(DailyReportError):
    """Requested record does not exist"""

    status_code = 404
    default_code = "RESOURCE_NOT_FOUND"
    default_message = "The requested resource was not found"


class ConflictError(DailyReportError):
    """Uniqueness violation"""

    status_code = 409
    default_code = "RESOURCE_CONFLICT"
    default_message = "The resource already exists"


class RateLimitError(DailyReportError):
    """Too many attempts from one client"""

    status_code = 429
    default_code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(
            message
            or f"Too many login attempts. Please try again in {retry_after} seconds."
        )


class ServerError(DailyReportError):
    """Unexpected failure"""


class ConfigError(DailyReportError):
    """Configuration error (raised at startup, never rendered to clients)"""

    default_code = "CONFIG_ERROR"
    default_message = "Invalid configuration"


class StorageError(ServerError):
    """Sales data could not be read or written; details are logged, not returned"""
