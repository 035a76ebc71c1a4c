"""
Firebase Auth REST Python SDK
firebase-rest-auth

An async client for the Firebase Auth REST API. Sessions are consumed by
every operation and replaced with a new session; an operation rejected
with INVALID_ID_TOKEN is retried once after refreshing the tokens.
"""

from .client import FirebaseAuth, create_firebase_auth
from .session import AuthSession
from .retry import CallShape, RETRY_LIMIT, call_with_refreshing_tokens
from .error_codes import ErrorCode, ErrorKind, classify_error_message
from .types import (
    FirebaseAuthConfig,
    Timeout,
    Tokens,
    UserData,
    ProviderUserInfo,
    ProviderId,
    DeleteAttribute,
    IdpPostBody,
    EmailVerificationResult,
    ApiErrorResponse,
    ErrorElement,
)
from .errors import (
    FirebaseAuthError,
    NetworkError,
    ApiError,
    DecodeError,
    UserDataNotFoundError,
    ConfigurationError,
    SessionConsumedError,
    is_firebase_auth_error,
    is_retryable_error,
)

__version__ = "0.1.0"
__all__ = [
    # Client
    "FirebaseAuth",
    "create_firebase_auth",
    "AuthSession",
    # Retry
    "CallShape",
    "RETRY_LIMIT",
    "call_with_refreshing_tokens",
    # Error codes
    "ErrorCode",
    "ErrorKind",
    "classify_error_message",
    # Types
    "FirebaseAuthConfig",
    "Timeout",
    "Tokens",
    "UserData",
    "ProviderUserInfo",
    "ProviderId",
    "DeleteAttribute",
    "IdpPostBody",
    "EmailVerificationResult",
    "ApiErrorResponse",
    "ErrorElement",
    # Errors
    "FirebaseAuthError",
    "NetworkError",
    "ApiError",
    "DecodeError",
    "UserDataNotFoundError",
    "ConfigurationError",
    "SessionConsumedError",
    "is_firebase_auth_error",
    "is_retryable_error",
]
