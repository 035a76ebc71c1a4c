"""
Firebase Auth Error Classes

Transport failures, classified API errors, decode failures and session
misuse all derive from FirebaseAuthError.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from .error_codes import ErrorCode, ErrorKind

if TYPE_CHECKING:
    from .types import ApiErrorResponse


class FirebaseAuthError(Exception):
    """Base error class for the Firebase Auth client."""
    
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 0,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "name": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }
    
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NetworkError(FirebaseAuthError):
    """Network error (connection issues, timeouts)."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("NETWORK_ERROR", message, 0, details)


class ApiError(FirebaseAuthError):
    """Error response returned by the Firebase Auth API."""
    
    def __init__(
        self,
        status_code: int,
        error_code: ErrorCode,
        response: "ApiErrorResponse",
    ):
        super().__init__(
            error_code.kind.value,
            error_code.message,
            status_code,
            {"api_code": response.code, "errors": [e.to_dict() for e in response.errors]},
        )
        self.error_code = error_code
        self.response = response
    
    @property
    def kind(self) -> ErrorKind:
        return self.error_code.kind
    
    @property
    def is_retryable(self) -> bool:
        """Check if refreshing tokens and calling again may succeed."""
        return self.error_code.is_retryable


class DecodeError(FirebaseAuthError):
    """Response body did not match the expected schema."""
    
    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__("DECODE_ERROR", message, 0, {"body": body} if body is not None else None)
        self.body = body


class UserDataNotFoundError(FirebaseAuthError):
    """Account lookup succeeded but returned no user."""
    
    def __init__(self, message: str = "Not found any user data"):
        super().__init__("USER_DATA_NOT_FOUND", message)


class ConfigurationError(FirebaseAuthError):
    """Configuration error."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, 0, details)


class SessionConsumedError(FirebaseAuthError):
    """An operation was called on a session that was already used."""
    
    def __init__(self, message: str = "Session was already consumed by a previous operation"):
        super().__init__("SESSION_CONSUMED", message)


def is_firebase_auth_error(error: Any) -> bool:
    """Check if error is a FirebaseAuthError."""
    return isinstance(error, FirebaseAuthError)


def is_retryable_error(error: Any) -> bool:
    """Check if error can be recovered by one token refresh."""
    return isinstance(error, ApiError) and error.is_retryable
