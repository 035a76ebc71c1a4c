"""
Token refresh retry for session operations.

A session operation that fails because the ID token is no longer valid
is retried once after exchanging the refresh token. The refresh call is
not retried itself, and any other failure propagates unchanged.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from .errors import ApiError

if TYPE_CHECKING:
    from .session import AuthSession


logger = logging.getLogger("firebase_rest_auth")

# Fixed policy: one refresh per call
RETRY_LIMIT = 1


class CallShape(str, Enum):
    """What a wrapped operation hands back to the caller."""
    # (session, result), e.g. get_user_data
    SESSION_AND_RESULT = "session_and_result"
    # session only, the primitive's return value is discarded
    SESSION_ONLY = "session_only"
    # the primitive already returns the rotated session, e.g. link operations
    SESSION_IS_RESULT = "session_is_result"
    # nothing, the session is gone, e.g. delete_account
    NO_SESSION = "no_session"


Primitive = Callable[..., Awaitable[Any]]


async def call_with_refreshing_tokens(
    session: "AuthSession",
    primitive: Primitive,
    shape: CallShape,
    *args: Any,
    **kwargs: Any,
) -> Any:
    """
    Call ``primitive(session, *args, **kwargs)`` refreshing tokens once on INVALID_ID_TOKEN.

    Args:
        session: Session the primitive runs against
        primitive: Coroutine function making exactly one API call
        shape: How to build the return value from the final session and result

    Returns:
        Depends on shape: ``(session, result)``, ``session`` or ``None``

    Raises:
        ApiError: Non retryable API error, or a second INVALID_ID_TOKEN
        FirebaseAuthError: Any failure of the refresh call itself
    """
    current = session
    attempts = 0

    while True:
        try:
            result = await primitive(current, *args, **kwargs)
        except ApiError as error:
            if not error.is_retryable or attempts >= RETRY_LIMIT:
                raise

            if current.debug:
                logger.debug(
                    "[FirebaseAuth] %s: ID token rejected, refreshing tokens (attempt %d)",
                    getattr(primitive, "__name__", "operation"),
                    attempts + 1,
                )
            current = await current._refresh_tokens()
            attempts += 1
            continue

        return _shape_result(shape, current, result)


def _shape_result(shape: CallShape, session: "AuthSession", result: Any) -> Any:
    if shape is CallShape.SESSION_AND_RESULT:
        return session._successor(), result
    if shape is CallShape.SESSION_ONLY:
        return session._successor()
    if shape is CallShape.SESSION_IS_RESULT:
        return result
    return None
