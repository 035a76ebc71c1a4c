"""
Firebase Auth Transport

Sends one request to a named Firebase Auth operation and returns the
decoded JSON body, or raises a classified error. Accounts operations go
to the identity toolkit host as JSON; the token exchange goes to the
secure token host as form data. Nothing here retries.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .error_codes import classify_error_message
from .errors import ApiError, DecodeError, NetworkError
from .types import ApiErrorResponse, FirebaseAuthConfig, decode


logger = logging.getLogger("firebase_rest_auth")

LOCALE_HEADER = "X-Firebase-Locale"

# Remote operation names
SIGN_UP = "accounts:signUp"
SIGN_IN_WITH_PASSWORD = "accounts:signInWithPassword"
SIGN_IN_WITH_IDP = "accounts:signInWithIdp"
SIGN_IN_WITH_CUSTOM_TOKEN = "accounts:signInWithCustomToken"
UPDATE = "accounts:update"
DELETE = "accounts:delete"
LOOKUP = "accounts:lookup"
SEND_OOB_CODE = "accounts:sendOobCode"
RESET_PASSWORD = "accounts:resetPassword"
CREATE_AUTH_URI = "accounts:createAuthUri"
TOKEN = "token"


def create_http_client(config: FirebaseAuthConfig) -> httpx.AsyncClient:
    """Create the async HTTP client shared by every session of a FirebaseAuth."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            config.timeout.request_timeout,
            connect=config.timeout.connection_timeout,
        ),
        headers={"Accept": "application/json", **(config.headers or {})},
    )


class Transport:
    """
    Endpoint configuration plus HTTP client.

    Read-only after construction, so sessions share one instance across
    every generation.
    """

    def __init__(
        self,
        config: FirebaseAuthConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = config.api_key
        self._identity_toolkit_url = config.identity_toolkit_url.rstrip("/")
        self._secure_token_url = config.secure_token_url.rstrip("/")
        self._timeout = config.timeout
        self._debug = config.debug
        self._http_client = http_client if http_client is not None else create_http_client(config)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def debug(self) -> bool:
        return self._debug

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[FirebaseAuth] {message}", *args)

    async def post(
        self,
        operation: str,
        payload: Dict[str, Any],
        locale: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send a JSON payload to an accounts operation.

        Args:
            operation: Remote operation name, e.g. ``accounts:lookup``
            payload: Request body
            locale: Optional language code for emails sent by the API

        Returns:
            Decoded response body
        """
        headers: Dict[str, str] = {}
        if locale:
            headers[LOCALE_HEADER] = locale

        url = f"{self._identity_toolkit_url}/{operation}"
        return await self._send(operation, url, headers, json=payload)

    async def exchange_token(self, form: Dict[str, str]) -> Dict[str, Any]:
        """Send a form encoded payload to the secure token endpoint."""
        url = f"{self._secure_token_url}/{TOKEN}"
        return await self._send(TOKEN, url, {}, data=form)

    async def _send(
        self,
        operation: str,
        url: str,
        headers: Dict[str, str],
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Execute a single HTTP request."""
        self._log("POST %s", operation)

        try:
            response = await self._http_client.post(
                url,
                params={"key": self._api_key},
                headers=headers,
                **kwargs,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(
                "Request timeout",
                {
                    "operation": operation,
                    "connection_timeout": self._timeout.connection_timeout,
                    "request_timeout": self._timeout.request_timeout,
                },
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(str(e), {"operation": operation}) from e

        return self._handle_response(operation, response)

    def _handle_response(self, operation: str, response: httpx.Response) -> Dict[str, Any]:
        """Decode a success body or raise the classified API error."""
        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(
                f"{operation} returned a non JSON body (HTTP {response.status_code})",
                response.text,
            ) from e

        if response.is_success:
            if not isinstance(body, dict):
                raise DecodeError(f"{operation} returned a non object body", response.text)
            return body

        error_response = decode(ApiErrorResponse.from_dict, body, "error response")
        error_code = classify_error_message(error_response.message)
        self._log("%s failed: HTTP %s %s", operation, response.status_code, error_code)
        raise ApiError(response.status_code, error_code, error_response)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http_client.aclose()
