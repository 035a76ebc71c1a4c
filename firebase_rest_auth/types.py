"""
Firebase Auth Type Definitions

Configuration, token pair and response types for the Firebase Auth REST API.
Wire field names follow the API (camelCase for the identity toolkit,
snake_case for the secure token endpoint).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import urlencode

from .errors import DecodeError


T = TypeVar("T")

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1"


def decode(factory: Callable[[Dict[str, Any]], T], data: Any, name: str) -> T:
    """Build a response type, turning schema mismatches into DecodeError."""
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {name}", repr(data))
    try:
        return factory(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Invalid {name} payload: {e!r}", repr(data)) from e


@dataclass(frozen=True)
class Timeout:
    """Connection and total request timeouts in seconds."""
    
    connection_timeout: float = 10.0
    request_timeout: float = 60.0


@dataclass
class FirebaseAuthConfig:
    """Client configuration options."""
    
    # Firebase project Web API key
    api_key: str
    # Timeouts applied to every request
    timeout: Timeout = field(default_factory=Timeout)
    # Base URL of the accounts endpoints (override to use the Auth emulator)
    identity_toolkit_url: str = IDENTITY_TOOLKIT_URL
    # Base URL of the token exchange endpoint
    secure_token_url: str = SECURE_TOKEN_URL
    # Enable debug logging (default: False)
    debug: bool = False
    # Custom headers to include in requests
    headers: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class Tokens:
    """
    ID token, refresh token and ID token lifetime.

    Always built as a whole from one API response, never updated field by field.
    """
    
    id_token: str
    refresh_token: str
    expires_in: int
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tokens":
        """Create from an accounts response or a token exchange response."""
        return cls(
            id_token=str(_field(data, "idToken", "id_token")),
            refresh_token=str(_field(data, "refreshToken", "refresh_token")),
            # The API sends the lifetime as a string, e.g. "3600"
            expires_in=int(_field(data, "expiresIn", "expires_in")),
        )


def _field(data: Dict[str, Any], *names: str) -> Any:
    """Return the first present field, raising KeyError when none is."""
    for name in names:
        if name in data:
            return data[name]
    raise KeyError(names[0])


class ProviderId(str, Enum):
    """Identity provider IDs accepted by the API."""
    PASSWORD = "password"
    GOOGLE = "google.com"
    FACEBOOK = "facebook.com"
    TWITTER = "twitter.com"
    GITHUB = "github.com"
    APPLE = "apple.com"
    
    @classmethod
    def from_string(cls, value: str) -> "ProviderId":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"'{value}' is not a valid provider ID") from None


class DeleteAttribute(str, Enum):
    """Profile attributes that update_profile can delete."""
    DISPLAY_NAME = "DISPLAY_NAME"
    PHOTO_URL = "PHOTO_URL"


@dataclass(frozen=True)
class IdpPostBody:
    """OAuth credential of an identity provider, sent as ``postBody``."""
    
    provider_id: ProviderId
    credentials: Dict[str, str]
    
    @classmethod
    def google(cls, id_token: str) -> "IdpPostBody":
        return cls(ProviderId.GOOGLE, {"id_token": id_token})
    
    @classmethod
    def facebook(cls, access_token: str) -> "IdpPostBody":
        return cls(ProviderId.FACEBOOK, {"access_token": access_token})
    
    @classmethod
    def twitter(cls, access_token: str, oauth_token_secret: str) -> "IdpPostBody":
        return cls(
            ProviderId.TWITTER,
            {"access_token": access_token, "oauth_token_secret": oauth_token_secret},
        )
    
    def to_post_body(self) -> str:
        """Encode as the form string the signInWithIdp endpoint expects."""
        return urlencode({**self.credentials, "providerId": self.provider_id.value})


@dataclass
class ProviderUserInfo:
    """Account information of one linked provider."""
    
    provider_id: str
    federated_id: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    raw_id: Optional[str] = None
    screen_name: Optional[str] = None
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProviderUserInfo":
        return cls(
            provider_id=data["providerId"],
            federated_id=data.get("federatedId"),
            email=data.get("email"),
            display_name=data.get("displayName"),
            photo_url=data.get("photoUrl"),
            raw_id=data.get("rawId"),
            screen_name=data.get("screenName"),
        )


@dataclass
class UserData:
    """User account returned by accounts:lookup."""
    
    local_id: str
    email: Optional[str] = None
    email_verified: bool = False
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    provider_user_info: List[ProviderUserInfo] = field(default_factory=list)
    password_hash: Optional[str] = None
    password_updated_at: Optional[float] = None
    valid_since: Optional[str] = None
    disabled: bool = False
    last_login_at: Optional[str] = None
    created_at: Optional[str] = None
    last_refresh_at: Optional[str] = None
    custom_auth: Optional[bool] = None
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserData":
        """Create from dictionary."""
        return cls(
            local_id=data["localId"],
            email=data.get("email"),
            email_verified=data.get("emailVerified", False),
            display_name=data.get("displayName"),
            photo_url=data.get("photoUrl"),
            provider_user_info=[
                ProviderUserInfo.from_dict(p) for p in data.get("providerUserInfo", [])
            ],
            password_hash=data.get("passwordHash"),
            password_updated_at=data.get("passwordUpdatedAt"),
            valid_since=data.get("validSince"),
            disabled=data.get("disabled", False),
            last_login_at=data.get("lastLoginAt"),
            created_at=data.get("createdAt"),
            last_refresh_at=data.get("lastRefreshAt"),
            custom_auth=data.get("customAuth"),
        )


@dataclass
class EmailVerificationResult:
    """Account state after confirming an email verification code."""
    
    email: str
    email_verified: bool
    local_id: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    provider_user_info: List[ProviderUserInfo] = field(default_factory=list)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailVerificationResult":
        return cls(
            email=data["email"],
            email_verified=data.get("emailVerified", False),
            local_id=data.get("localId"),
            display_name=data.get("displayName"),
            photo_url=data.get("photoUrl"),
            provider_user_info=[
                ProviderUserInfo.from_dict(p) for p in data.get("providerUserInfo", [])
            ],
        )


@dataclass
class ErrorElement:
    """One entry of the ``errors`` list in an error response."""
    domain: str
    reason: str
    message: str
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorElement":
        return cls(
            domain=data.get("domain", ""),
            reason=data.get("reason", ""),
            message=data.get("message", ""),
        )
    
    def to_dict(self) -> Dict[str, str]:
        return {"domain": self.domain, "reason": self.reason, "message": self.message}


@dataclass
class ApiErrorResponse:
    """Error envelope: ``{"error": {"code", "message", "errors": [...]}}``."""
    code: int
    message: str
    errors: List[ErrorElement] = field(default_factory=list)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiErrorResponse":
        error = data["error"]
        return cls(
            code=int(error["code"]),
            message=str(error["message"]),
            errors=[ErrorElement.from_dict(e) for e in error.get("errors", [])],
        )
