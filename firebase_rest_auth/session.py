"""
Firebase Auth Session

AuthSession bundles the shared transport with the current token pair.
A session is used once: every operation consumes it and, on success,
returns a new session. Operations that need the ID token refresh the
tokens and retry once when the API reports INVALID_ID_TOKEN.

Example:
    session = await auth.sign_in_with_email_password(email, password)
    session, user = await session.get_user_data()
    session = await session.change_password("new password")
    await session.delete_account()
"""

from typing import Iterable, List, Optional, Tuple

from . import api
from .errors import SessionConsumedError
from .retry import CallShape, call_with_refreshing_tokens
from .transport import Transport
from .types import DeleteAttribute, IdpPostBody, ProviderId, Tokens, UserData


class AuthSession:
    """
    Authenticated session of one Firebase user.

    Do not keep using a session after calling an operation on it; use the
    session the operation returned. Reusing a consumed session raises
    SessionConsumedError. A session is not safe to share between tasks
    without external locking.
    """

    def __init__(self, transport: Transport, tokens: Tokens) -> None:
        self._transport = transport
        self._tokens = tokens
        self._consumed = False

    @property
    def tokens(self) -> Tokens:
        return self._tokens

    @property
    def id_token(self) -> str:
        return self._tokens.id_token

    @property
    def refresh_token(self) -> str:
        return self._tokens.refresh_token

    @property
    def expires_in(self) -> int:
        """ID token lifetime in seconds, as declared when it was issued."""
        return self._tokens.expires_in

    @property
    def is_consumed(self) -> bool:
        return self._consumed

    @property
    def debug(self) -> bool:
        return self._transport.debug

    def __repr__(self) -> str:
        return f"AuthSession(expires_in={self.expires_in}, consumed={self._consumed})"

    # =========================================================================
    # Account Methods
    # =========================================================================

    async def get_user_data(self) -> Tuple["AuthSession", UserData]:
        """
        Fetch the signed in user's account.

        Returns:
            The next session and the user data

        Raises:
            UserDataNotFoundError: If the lookup returned no user
        """
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._get_user_data, CallShape.SESSION_AND_RESULT,
        )

    async def fetch_providers_for_email(
        self,
        email: str,
        continue_uri: str,
    ) -> Tuple["AuthSession", List[str]]:
        """Return the next session and the provider IDs registered for ``email``."""
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._fetch_providers_for_email, CallShape.SESSION_AND_RESULT,
            email, continue_uri,
        )

    async def change_email(self, new_email: str, locale: Optional[str] = None) -> "AuthSession":
        """Change the account email. ``locale`` localizes the notification email."""
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._change_email, CallShape.SESSION_ONLY,
            new_email, locale,
        )

    async def change_password(self, new_password: str) -> "AuthSession":
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._change_password, CallShape.SESSION_ONLY,
            new_password,
        )

    async def update_profile(
        self,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
        delete_attribute: Iterable[DeleteAttribute] = (),
    ) -> "AuthSession":
        """
        Update display name and photo URL.

        Args:
            display_name: New display name, unchanged if None
            photo_url: New photo URL, unchanged if None
            delete_attribute: Attributes to remove from the profile
        """
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._update_profile, CallShape.SESSION_ONLY,
            display_name, photo_url, tuple(delete_attribute),
        )

    async def link_with_email_password(self, email: str, password: str) -> "AuthSession":
        """Link an email and password to the user. Returns a session with the new tokens."""
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._link_with_email_password, CallShape.SESSION_IS_RESULT,
            email, password,
        )

    async def link_with_oauth_credential(
        self,
        request_uri: str,
        post_body: IdpPostBody,
    ) -> "AuthSession":
        """Link an identity provider credential to the user. Returns a session with the new tokens."""
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._link_with_oauth_credential, CallShape.SESSION_IS_RESULT,
            request_uri, post_body,
        )

    async def unlink_provider(self, delete_provider: Iterable[ProviderId]) -> "AuthSession":
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._unlink_provider, CallShape.SESSION_ONLY,
            frozenset(delete_provider),
        )

    async def send_email_verification(self, locale: Optional[str] = None) -> "AuthSession":
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._send_email_verification, CallShape.SESSION_ONLY,
            locale,
        )

    async def send_password_reset_email(
        self,
        email: str,
        locale: Optional[str] = None,
    ) -> "AuthSession":
        self._consume()
        return await call_with_refreshing_tokens(
            self, AuthSession._send_password_reset_email, CallShape.SESSION_ONLY,
            email, locale,
        )

    async def delete_account(self) -> None:
        """Delete the user. The session is consumed and no new session is returned."""
        self._consume()
        await call_with_refreshing_tokens(
            self, AuthSession._delete_account, CallShape.NO_SESSION,
        )

    async def refresh_tokens(self) -> "AuthSession":
        """Exchange the refresh token now. Not retried on failure."""
        self._consume()
        return await self._refresh_tokens()

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _consume(self) -> None:
        if self._consumed:
            raise SessionConsumedError()
        self._consumed = True

    def _successor(self) -> "AuthSession":
        """New session handle with the same tokens."""
        return AuthSession(self._transport, self._tokens)

    def _with_tokens(self, tokens: Tokens) -> "AuthSession":
        return AuthSession(self._transport, tokens)

    async def _refresh_tokens(self) -> "AuthSession":
        tokens = await api.exchange_refresh_token(self._transport, self._tokens.refresh_token)
        return self._with_tokens(tokens)

    async def _get_user_data(self) -> UserData:
        return await api.get_user_data(self._transport, self.id_token)

    async def _fetch_providers_for_email(self, email: str, continue_uri: str) -> List[str]:
        return await api.fetch_providers_for_email(self._transport, email, continue_uri)

    async def _change_email(self, new_email: str, locale: Optional[str]) -> None:
        await api.change_email(self._transport, self.id_token, new_email, locale)

    async def _change_password(self, new_password: str) -> None:
        await api.change_password(self._transport, self.id_token, new_password)

    async def _update_profile(
        self,
        display_name: Optional[str],
        photo_url: Optional[str],
        delete_attribute: Tuple[DeleteAttribute, ...],
    ) -> None:
        await api.update_profile(
            self._transport, self.id_token, display_name, photo_url, delete_attribute,
        )

    async def _link_with_email_password(self, email: str, password: str) -> "AuthSession":
        tokens = await api.link_with_email_password(self._transport, self.id_token, email, password)
        return self._with_tokens(tokens)

    async def _link_with_oauth_credential(
        self,
        request_uri: str,
        post_body: IdpPostBody,
    ) -> "AuthSession":
        tokens = await api.sign_in_with_oauth_credential(
            self._transport, request_uri, post_body, id_token=self.id_token,
        )
        return self._with_tokens(tokens)

    async def _unlink_provider(self, delete_provider: Iterable[ProviderId]) -> None:
        await api.unlink_provider(self._transport, self.id_token, delete_provider)

    async def _send_email_verification(self, locale: Optional[str]) -> None:
        await api.send_email_verification(self._transport, self.id_token, locale)

    async def _send_password_reset_email(self, email: str, locale: Optional[str]) -> None:
        await api.send_password_reset_email(self._transport, email, locale)

    async def _delete_account(self) -> None:
        await api.delete_account(self._transport, self.id_token)
