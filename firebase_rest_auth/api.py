"""
Firebase Auth REST endpoints.

One coroutine per endpoint: build the request body, send it through the
Transport, decode the response. No retries and no session handling here.

See https://firebase.google.com/docs/reference/rest/auth
"""

from typing import Any, Dict, Iterable, List, Optional

from .errors import DecodeError, UserDataNotFoundError
from .transport import (
    CREATE_AUTH_URI,
    DELETE,
    LOOKUP,
    RESET_PASSWORD,
    SEND_OOB_CODE,
    SIGN_IN_WITH_CUSTOM_TOKEN,
    SIGN_IN_WITH_IDP,
    SIGN_IN_WITH_PASSWORD,
    SIGN_UP,
    UPDATE,
    Transport,
)
from .types import (
    DeleteAttribute,
    EmailVerificationResult,
    IdpPostBody,
    ProviderId,
    Tokens,
    UserData,
    decode,
)


# =============================================================================
# Sign up / Sign in
# =============================================================================

async def sign_up_with_email_password(transport: Transport, email: str, password: str) -> Tokens:
    response = await transport.post(SIGN_UP, {
        "email": email,
        "password": password,
        "returnSecureToken": True,
    })
    return decode(Tokens.from_dict, response, "sign up response")


async def sign_in_with_email_password(transport: Transport, email: str, password: str) -> Tokens:
    response = await transport.post(SIGN_IN_WITH_PASSWORD, {
        "email": email,
        "password": password,
        "returnSecureToken": True,
    })
    return decode(Tokens.from_dict, response, "sign in response")


async def sign_in_anonymously(transport: Transport) -> Tokens:
    """Create an anonymous user; signUp without email and password."""
    response = await transport.post(SIGN_UP, {"returnSecureToken": True})
    return decode(Tokens.from_dict, response, "anonymous sign in response")


async def sign_in_with_oauth_credential(
    transport: Transport,
    request_uri: str,
    post_body: IdpPostBody,
    id_token: Optional[str] = None,
) -> Tokens:
    """
    Sign in with an identity provider credential.

    Passing ``id_token`` links the credential to that user instead.
    """
    payload: Dict[str, Any] = {
        "requestUri": request_uri,
        "postBody": post_body.to_post_body(),
        "returnSecureToken": True,
        "returnIdpCredential": False,
    }
    if id_token is not None:
        payload["idToken"] = id_token

    response = await transport.post(SIGN_IN_WITH_IDP, payload)
    return decode(Tokens.from_dict, response, "identity provider response")


async def sign_in_with_custom_token(transport: Transport, token: str) -> Tokens:
    response = await transport.post(SIGN_IN_WITH_CUSTOM_TOKEN, {
        "token": token,
        "returnSecureToken": True,
    })
    return decode(Tokens.from_dict, response, "custom token response")


async def exchange_refresh_token(transport: Transport, refresh_token: str) -> Tokens:
    """Exchange a refresh token for a new ID token and refresh token."""
    response = await transport.exchange_token({
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
    })
    return decode(Tokens.from_dict, response, "token exchange response")


# =============================================================================
# Account
# =============================================================================

async def get_user_data(transport: Transport, id_token: str) -> UserData:
    response = await transport.post(LOOKUP, {"idToken": id_token})

    users = response.get("users") or []
    if not isinstance(users, list):
        raise DecodeError("users is not a list", repr(response))
    if not users:
        raise UserDataNotFoundError()
    return decode(UserData.from_dict, users[0], "user data")


async def change_email(
    transport: Transport,
    id_token: str,
    new_email: str,
    locale: Optional[str] = None,
) -> None:
    await transport.post(UPDATE, {
        "idToken": id_token,
        "email": new_email,
        "returnSecureToken": False,
    }, locale=locale)


async def change_password(transport: Transport, id_token: str, new_password: str) -> None:
    await transport.post(UPDATE, {
        "idToken": id_token,
        "password": new_password,
        "returnSecureToken": False,
    })


async def update_profile(
    transport: Transport,
    id_token: str,
    display_name: Optional[str] = None,
    photo_url: Optional[str] = None,
    delete_attribute: Iterable[DeleteAttribute] = (),
) -> None:
    payload: Dict[str, Any] = {
        "idToken": id_token,
        "returnSecureToken": False,
    }
    if display_name is not None:
        payload["displayName"] = display_name
    if photo_url is not None:
        payload["photoUrl"] = photo_url
    attributes = [DeleteAttribute(a).value for a in delete_attribute]
    if attributes:
        payload["deleteAttribute"] = attributes

    await transport.post(UPDATE, payload)


async def link_with_email_password(
    transport: Transport,
    id_token: str,
    email: str,
    password: str,
) -> Tokens:
    response = await transport.post(UPDATE, {
        "idToken": id_token,
        "email": email,
        "password": password,
        "returnSecureToken": True,
    })
    return decode(Tokens.from_dict, response, "link response")


async def unlink_provider(
    transport: Transport,
    id_token: str,
    delete_provider: Iterable[ProviderId],
) -> None:
    await transport.post(UPDATE, {
        "idToken": id_token,
        "deleteProvider": sorted({ProviderId(p).value for p in delete_provider}),
    })


async def delete_account(transport: Transport, id_token: str) -> None:
    await transport.post(DELETE, {"idToken": id_token})


async def fetch_providers_for_email(
    transport: Transport,
    email: str,
    continue_uri: str,
) -> List[str]:
    """Return the provider IDs registered for an email address."""
    response = await transport.post(CREATE_AUTH_URI, {
        "identifier": email,
        "continueUri": continue_uri,
    })
    providers = response.get("allProviders", [])
    if not isinstance(providers, list):
        raise DecodeError("allProviders is not a list", repr(response))
    return [str(p) for p in providers]


# =============================================================================
# Out of band codes (emails)
# =============================================================================

async def send_email_verification(
    transport: Transport,
    id_token: str,
    locale: Optional[str] = None,
) -> None:
    await transport.post(SEND_OOB_CODE, {
        "requestType": "VERIFY_EMAIL",
        "idToken": id_token,
    }, locale=locale)


async def send_password_reset_email(
    transport: Transport,
    email: str,
    locale: Optional[str] = None,
) -> None:
    await transport.post(SEND_OOB_CODE, {
        "requestType": "PASSWORD_RESET",
        "email": email,
    }, locale=locale)


async def verify_password_reset_code(transport: Transport, oob_code: str) -> str:
    """Check a password reset code and return the account email."""
    response = await transport.post(RESET_PASSWORD, {"oobCode": oob_code})
    return decode(lambda d: str(d["email"]), response, "verify password reset code response")


async def confirm_password_reset(transport: Transport, oob_code: str, new_password: str) -> str:
    """Apply a password reset code and return the account email."""
    response = await transport.post(RESET_PASSWORD, {
        "oobCode": oob_code,
        "newPassword": new_password,
    })
    return decode(lambda d: str(d["email"]), response, "confirm password reset response")


async def confirm_email_verification(transport: Transport, oob_code: str) -> EmailVerificationResult:
    response = await transport.post(UPDATE, {"oobCode": oob_code})
    return decode(EmailVerificationResult.from_dict, response, "email verification response")
