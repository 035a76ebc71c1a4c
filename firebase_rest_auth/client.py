"""
Firebase Auth Client

Entry point of the SDK. FirebaseAuth holds the endpoint configuration
and HTTP client, signs users in (returning an AuthSession) and runs the
operations that need no signed in user, such as password reset.
"""

import logging
from typing import Any, List, Optional

import httpx

from . import api
from .errors import ConfigurationError
from .session import AuthSession
from .transport import Transport
from .types import EmailVerificationResult, FirebaseAuthConfig, IdpPostBody, Tokens


logger = logging.getLogger("firebase_rest_auth")


class FirebaseAuth:
    """
    Firebase Auth client - async SDK entry point.

    Sessions created by a client share its HTTP client; closing the
    client ends every session created from it.
    """

    def __init__(
        self,
        config: FirebaseAuthConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the client. ``http_client`` replaces the default httpx client."""
        self._validate_config(config)

        self._config = config
        self._debug = config.debug
        self._transport = Transport(config, http_client)

        self._log("FirebaseAuth initialized")

    def _validate_config(self, config: FirebaseAuthConfig) -> None:
        """Validate configuration."""
        if not config.api_key:
            raise ConfigurationError("api_key is required")
        if config.timeout.connection_timeout <= 0 or config.timeout.request_timeout <= 0:
            raise ConfigurationError(
                "Timeouts must be positive",
                {
                    "connection_timeout": config.timeout.connection_timeout,
                    "request_timeout": config.timeout.request_timeout,
                },
            )
        if not config.identity_toolkit_url or not config.secure_token_url:
            raise ConfigurationError("Base URLs must not be empty")

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[FirebaseAuth] {message}", *args)

    @property
    def config(self) -> FirebaseAuthConfig:
        return self._config

    def _session(self, tokens: Tokens) -> AuthSession:
        return AuthSession(self._transport, tokens)

    # =========================================================================
    # Sign Up / Sign In
    # =========================================================================

    async def sign_up_with_email_password(self, email: str, password: str) -> AuthSession:
        """
        Create a new email and password user.

        Returns:
            Session of the new user

        Raises:
            ApiError: EMAIL_EXISTS, OPERATION_NOT_ALLOWED, TOO_MANY_ATTEMPTS_TRY_LATER, ...
        """
        self._log("Sign up attempt")
        tokens = await api.sign_up_with_email_password(self._transport, email, password)
        return self._session(tokens)

    async def sign_in_with_email_password(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password.

        Raises:
            ApiError: INVALID_LOGIN_CREDENTIALS, EMAIL_NOT_FOUND, INVALID_PASSWORD, USER_DISABLED, ...
        """
        self._log("Sign in attempt")
        tokens = await api.sign_in_with_email_password(self._transport, email, password)
        return self._session(tokens)

    async def sign_in_anonymously(self) -> AuthSession:
        self._log("Anonymous sign in")
        tokens = await api.sign_in_anonymously(self._transport)
        return self._session(tokens)

    async def sign_in_with_oauth_credential(
        self,
        request_uri: str,
        post_body: IdpPostBody,
    ) -> AuthSession:
        """
        Sign in with an identity provider credential.

        Args:
            request_uri: URI the identity provider redirected back to
            post_body: Provider credential, e.g. ``IdpPostBody.google(id_token)``
        """
        self._log("OAuth sign in with %s", post_body.provider_id.value)
        tokens = await api.sign_in_with_oauth_credential(self._transport, request_uri, post_body)
        return self._session(tokens)

    async def sign_in_with_custom_token(self, token: str) -> AuthSession:
        """Exchange a custom token minted by a trusted server for a session."""
        self._log("Custom token sign in")
        tokens = await api.sign_in_with_custom_token(self._transport, token)
        return self._session(tokens)

    async def exchange_refresh_token(self, refresh_token: str) -> AuthSession:
        """
        Start a session from a refresh token obtained earlier.

        Raises:
            ApiError: INVALID_REFRESH_TOKEN, TOKEN_EXPIRED, USER_NOT_FOUND, ...
        """
        tokens = await api.exchange_refresh_token(self._transport, refresh_token)
        return self._session(tokens)

    # =========================================================================
    # Session-less Methods
    # =========================================================================

    async def fetch_providers_for_email(self, email: str, continue_uri: str) -> List[str]:
        """Return the provider IDs registered for ``email``."""
        return await api.fetch_providers_for_email(self._transport, email, continue_uri)

    async def send_password_reset_email(self, email: str, locale: Optional[str] = None) -> None:
        """Send a password reset email. ``locale`` localizes the email."""
        await api.send_password_reset_email(self._transport, email, locale)

    async def verify_password_reset_code(self, oob_code: str) -> str:
        """Check a password reset code. Returns the account email."""
        return await api.verify_password_reset_code(self._transport, oob_code)

    async def confirm_password_reset(self, oob_code: str, new_password: str) -> str:
        """Set a new password with a reset code. Returns the account email."""
        return await api.confirm_password_reset(self._transport, oob_code, new_password)

    async def confirm_email_verification(self, oob_code: str) -> EmailVerificationResult:
        return await api.confirm_email_verification(self._transport, oob_code)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._transport.close()

    async def __aenter__(self) -> "FirebaseAuth":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


# =============================================================================
# Factory Functions
# =============================================================================

def create_firebase_auth(config: FirebaseAuthConfig) -> FirebaseAuth:
    """Create a new Firebase Auth client."""
    return FirebaseAuth(config)
