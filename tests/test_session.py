"""
Tests for AuthSession against a mocked Firebase Auth API.
"""

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest
import respx

from firebase_rest_auth import (
    ApiError,
    DecodeError,
    AuthSession,
    DeleteAttribute,
    ErrorKind,
    FirebaseAuth,
    IdpPostBody,
    NetworkError,
    ProviderId,
    SessionConsumedError,
    UserDataNotFoundError,
)

from conftest import API_KEY


TOKEN_URL = f"https://securetoken.googleapis.com/v1/token?key={API_KEY}"

USER = {
    "localId": "uid-1",
    "email": "user@example.com",
    "emailVerified": True,
    "providerUserInfo": [{"providerId": "password", "email": "user@example.com"}],
}


def accounts_url(operation: str) -> str:
    return f"https://identitytoolkit.googleapis.com/v1/{operation}?key={API_KEY}"


def error_response(message: str, status_code: int = 400) -> httpx.Response:
    return httpx.Response(status_code, json={
        "error": {
            "code": status_code,
            "message": message,
            "errors": [{"domain": "global", "reason": "invalid", "message": message}],
        },
    })


def accounts_tokens(id_token: str, refresh_token: str) -> httpx.Response:
    return httpx.Response(200, json={
        "idToken": id_token,
        "refreshToken": refresh_token,
        "expiresIn": "3600",
        "localId": "uid-1",
    })


def refreshed_tokens(id_token: str, refresh_token: str) -> httpx.Response:
    return httpx.Response(200, json={
        "id_token": id_token,
        "refresh_token": refresh_token,
        "expires_in": "3600",
        "token_type": "Bearer",
        "user_id": "uid-1",
    })


def body(route: respx.Route, index: int = -1) -> dict:
    return json.loads(route.calls[index].request.content)


# =============================================================================
# End to End
# =============================================================================

class TestRefreshScenarios:
    """Sessions recover from one INVALID_ID_TOKEN by refreshing."""
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_sign_in_then_get_user_data_with_refresh(self, auth: FirebaseAuth):
        """Expired ID token is refreshed once and the lookup retried with the new token."""
        respx.post(accounts_url("accounts:signInWithPassword")).mock(
            return_value=accounts_tokens("A", "R1"),
        )
        lookup = respx.post(accounts_url("accounts:lookup")).mock(side_effect=[
            error_response("INVALID_ID_TOKEN"),
            httpx.Response(200, json={"users": [USER]}),
        ])
        token = respx.post(TOKEN_URL).mock(return_value=refreshed_tokens("B", "R2"))
        
        session = await auth.sign_in_with_email_password("user@example.com", "secret")
        assert (session.id_token, session.refresh_token) == ("A", "R1")
        
        session, user = await session.get_user_data()
        
        assert (session.id_token, session.refresh_token) == ("B", "R2")
        assert user.local_id == "uid-1"
        assert user.email_verified is True
        assert token.call_count == 1
        assert lookup.call_count == 2
        assert body(lookup, 0)["idToken"] == "A"
        assert body(lookup, 1)["idToken"] == "B"
        assert parse_qs(token.calls.last.request.content.decode()) == {
            "grant_type": ["refresh_token"],
            "refresh_token": ["R1"],
        }
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_delete_account_user_not_found(self, auth: FirebaseAuth):
        """Non retryable errors propagate classified and without a refresh."""
        respx.post(accounts_url("accounts:signInWithPassword")).mock(
            return_value=accounts_tokens("A", "R1"),
        )
        delete = respx.post(accounts_url("accounts:delete")).mock(
            return_value=error_response("USER_NOT_FOUND"),
        )
        
        session = await auth.sign_in_with_email_password("user@example.com", "secret")
        
        with pytest.raises(ApiError) as exc_info:
            await session.delete_account()
        
        assert exc_info.value.kind is ErrorKind.USER_NOT_FOUND
        assert exc_info.value.status_code == 400
        assert delete.call_count == 1
        assert session.is_consumed
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_double_invalid_id_token(self, session: AuthSession):
        """Second INVALID_ID_TOKEN is raised after a single refresh."""
        update = respx.post(accounts_url("accounts:update")).mock(side_effect=[
            error_response("INVALID_ID_TOKEN"),
            error_response("INVALID_ID_TOKEN"),
        ])
        token = respx.post(TOKEN_URL).mock(return_value=refreshed_tokens("B", "R2"))
        
        with pytest.raises(ApiError) as exc_info:
            await session.change_password("new-secret")
        
        assert exc_info.value.kind is ErrorKind.INVALID_ID_TOKEN
        assert token.call_count == 1
        assert update.call_count == 2
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_weak_password_is_not_retried(self, session: AuthSession):
        """WEAK_PASSWORD with detail text is classified and not retried."""
        message = "WEAK_PASSWORD : Password should be at least 6 characters"
        update = respx.post(accounts_url("accounts:update")).mock(
            return_value=error_response(message),
        )
        
        with pytest.raises(ApiError) as exc_info:
            await session.change_password("123")
        
        assert exc_info.value.kind is ErrorKind.WEAK_PASSWORD
        assert exc_info.value.message == message
        assert update.call_count == 1
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_refresh_failure_propagates(self, session: AuthSession):
        """A rejected refresh token ends the operation with that error."""
        lookup = respx.post(accounts_url("accounts:lookup")).mock(
            return_value=error_response("INVALID_ID_TOKEN"),
        )
        token = respx.post(TOKEN_URL).mock(return_value=error_response("TOKEN_EXPIRED"))
        
        with pytest.raises(ApiError) as exc_info:
            await session.get_user_data()
        
        assert exc_info.value.kind is ErrorKind.TOKEN_EXPIRED
        assert lookup.call_count == 1
        assert token.call_count == 1
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_is_not_retried(self, session: AuthSession):
        """Transport errors propagate without a refresh."""
        lookup = respx.post(accounts_url("accounts:lookup")).mock(
            side_effect=httpx.ConnectError("connection refused"),
        )
        
        with pytest.raises(NetworkError):
            await session.get_user_data()
        
        assert lookup.call_count == 1
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_delete_account_after_refresh(self, session: AuthSession):
        """delete_account retries with the refreshed token and returns nothing."""
        delete = respx.post(accounts_url("accounts:delete")).mock(side_effect=[
            error_response("INVALID_ID_TOKEN"),
            httpx.Response(200, json={"kind": "identitytoolkit#DeleteAccountResponse"}),
        ])
        respx.post(TOKEN_URL).mock(return_value=refreshed_tokens("B", "R2"))
        
        assert await session.delete_account() is None
        assert body(delete, 1) == {"idToken": "B"}


# =============================================================================
# Consumption
# =============================================================================

class TestConsumption:
    """A session handle is used once."""
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_success_returns_fresh_session(self, session: AuthSession):
        """The old handle is consumed and the new one carries the same tokens."""
        respx.post(accounts_url("accounts:update")).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"}),
        )
        
        new_session = await session.change_password("new-secret")
        
        assert session.is_consumed
        assert not new_session.is_consumed
        assert new_session is not session
        assert new_session.tokens == session.tokens
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_reuse_raises(self, session: AuthSession):
        """Calling an operation twice on one handle fails before any request."""
        respx.post(accounts_url("accounts:update")).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"}),
        )
        await session.change_password("new-secret")
        
        with pytest.raises(SessionConsumedError):
            await session.get_user_data()
        with pytest.raises(SessionConsumedError):
            await session.refresh_tokens()
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_operation_consumes(self, session: AuthSession):
        """A failed operation also consumes the handle."""
        respx.post(accounts_url("accounts:update")).mock(
            return_value=error_response("CREDENTIAL_TOO_OLD_LOGIN_AGAIN"),
        )
        
        with pytest.raises(ApiError):
            await session.change_email("new@example.com")
        
        assert session.is_consumed
        with pytest.raises(SessionConsumedError):
            await session.change_email("new@example.com")
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_concurrent_use_of_one_session(self, session: AuthSession):
        """Only the first of two concurrent operations runs."""
        update = respx.post(accounts_url("accounts:update")).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"}),
        )
        
        results = await asyncio.gather(
            session.change_password("first"),
            session.change_password("second"),
            return_exceptions=True,
        )
        
        assert isinstance(results[0], AuthSession)
        assert isinstance(results[1], SessionConsumedError)
        assert update.call_count == 1
        assert body(update)["password"] == "first"


# =============================================================================
# Token Rotation
# =============================================================================

class TestTokenRotation:
    """Operations returning new tokens replace the whole token pair."""
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_refresh_tokens(self, session: AuthSession):
        token = respx.post(TOKEN_URL).mock(return_value=refreshed_tokens("B", "R2"))
        
        new_session = await session.refresh_tokens()
        
        assert (new_session.id_token, new_session.refresh_token) == ("B", "R2")
        assert new_session.expires_in == 3600
        assert token.call_count == 1
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_refresh_tokens_is_not_retried(self, session: AuthSession):
        token = respx.post(TOKEN_URL).mock(return_value=error_response("INVALID_ID_TOKEN"))
        
        with pytest.raises(ApiError):
            await session.refresh_tokens()
        
        assert token.call_count == 1
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_link_with_email_password(self, session: AuthSession):
        """Linking returns a session with the linked account's tokens."""
        update = respx.post(accounts_url("accounts:update")).mock(
            return_value=accounts_tokens("C", "R3"),
        )
        
        new_session = await session.link_with_email_password("user@example.com", "secret")
        
        assert (new_session.id_token, new_session.refresh_token) == ("C", "R3")
        assert body(update) == {
            "idToken": "A",
            "email": "user@example.com",
            "password": "secret",
            "returnSecureToken": True,
        }
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_link_with_oauth_credential_after_refresh(self, session: AuthSession):
        """Linking retried after a refresh uses the refreshed ID token."""
        idp = respx.post(accounts_url("accounts:signInWithIdp")).mock(side_effect=[
            error_response("INVALID_ID_TOKEN"),
            accounts_tokens("C", "R3"),
        ])
        respx.post(TOKEN_URL).mock(return_value=refreshed_tokens("B", "R2"))
        
        new_session = await session.link_with_oauth_credential(
            "http://localhost", IdpPostBody.google("google-id-token"),
        )
        
        assert (new_session.id_token, new_session.refresh_token) == ("C", "R3")
        assert body(idp, 1) == {
            "requestUri": "http://localhost",
            "postBody": "id_token=google-id-token&providerId=google.com",
            "returnSecureToken": True,
            "returnIdpCredential": False,
            "idToken": "B",
        }


# =============================================================================
# Account Operations
# =============================================================================

class TestAccountOperations:
    """Request bodies and results of session operations."""
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_get_user_data_empty(self, session: AuthSession):
        respx.post(accounts_url("accounts:lookup")).mock(
            return_value=httpx.Response(200, json={"kind": "identitytoolkit#GetAccountInfoResponse"}),
        )
        
        with pytest.raises(UserDataNotFoundError):
            await session.get_user_data()
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("users", [{"a": 1}, "uid-1", [None]])
    @respx.mock
    async def test_get_user_data_malformed_users(self, session: AuthSession, users):
        """A users field of the wrong shape is a DecodeError."""
        respx.post(accounts_url("accounts:lookup")).mock(
            return_value=httpx.Response(200, json={"users": users}),
        )
        
        with pytest.raises(DecodeError):
            await session.get_user_data()
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_change_email_with_locale(self, session: AuthSession):
        update = respx.post(accounts_url("accounts:update")).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"}),
        )
        
        await session.change_email("new@example.com", locale="fr")
        
        request = update.calls.last.request
        assert request.headers["X-Firebase-Locale"] == "fr"
        assert json.loads(request.content) == {
            "idToken": "A",
            "email": "new@example.com",
            "returnSecureToken": False,
        }
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_update_profile(self, session: AuthSession):
        update = respx.post(accounts_url("accounts:update")).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"}),
        )
        
        await session.update_profile(
            display_name="Jane",
            delete_attribute=[DeleteAttribute.PHOTO_URL],
        )
        
        assert body(update) == {
            "idToken": "A",
            "returnSecureToken": False,
            "displayName": "Jane",
            "deleteAttribute": ["PHOTO_URL"],
        }
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_unlink_provider(self, session: AuthSession):
        update = respx.post(accounts_url("accounts:update")).mock(
            return_value=httpx.Response(200, json={"localId": "uid-1"}),
        )
        
        await session.unlink_provider([ProviderId.GOOGLE, ProviderId.PASSWORD, ProviderId.GOOGLE])
        
        assert body(update) == {
            "idToken": "A",
            "deleteProvider": ["google.com", "password"],
        }
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_send_email_verification(self, session: AuthSession):
        oob = respx.post(accounts_url("accounts:sendOobCode")).mock(
            return_value=httpx.Response(200, json={"email": "user@example.com"}),
        )
        
        new_session = await session.send_email_verification(locale="de")
        
        assert isinstance(new_session, AuthSession)
        assert oob.calls.last.request.headers["X-Firebase-Locale"] == "de"
        assert body(oob) == {"requestType": "VERIFY_EMAIL", "idToken": "A"}
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_send_password_reset_email(self, session: AuthSession):
        oob = respx.post(accounts_url("accounts:sendOobCode")).mock(
            return_value=httpx.Response(200, json={"email": "user@example.com"}),
        )
        
        await session.send_password_reset_email("user@example.com")
        
        assert "X-Firebase-Locale" not in oob.calls.last.request.headers
        assert body(oob) == {"requestType": "PASSWORD_RESET", "email": "user@example.com"}
    
    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_providers_for_email(self, session: AuthSession):
        respx.post(accounts_url("accounts:createAuthUri")).mock(
            return_value=httpx.Response(200, json={
                "allProviders": ["password", "google.com"],
                "registered": True,
            }),
        )
        
        new_session, providers = await session.fetch_providers_for_email(
            "user@example.com", "http://localhost",
        )
        
        assert providers == ["password", "google.com"]
        assert new_session.tokens == session.tokens
