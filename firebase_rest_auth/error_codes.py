"""
Firebase Auth Error Codes

Maps the message string of a Firebase Auth error response onto a closed
set of known error kinds. Classification is total: any text the API
returns yields an ErrorCode, falling back to ErrorKind.UNKNOWN.

See https://firebase.google.com/docs/reference/rest/auth#section-error-response
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


# Validation messages embed the offending field name, so they are matched by prefix
INVALID_JSON_PAYLOAD_PREFIX = "Invalid JSON payload received. Unknown name"

# Separator between the error code and the optional human readable detail
DETAIL_SEPARATOR = " : "


class ErrorKind(str, Enum):
    """Known error kinds returned by the Firebase Auth API."""
    OPERATION_NOT_ALLOWED = "OPERATION_NOT_ALLOWED"
    TOO_MANY_ATTEMPTS_TRY_LATER = "TOO_MANY_ATTEMPTS_TRY_LATER"
    INVALID_API_KEY = "INVALID_API_KEY"
    INVALID_CUSTOM_TOKEN = "INVALID_CUSTOM_TOKEN"
    INVALID_ID_TOKEN = "INVALID_ID_TOKEN"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    INVALID_JSON_PAYLOAD_RECEIVED = "INVALID_JSON_PAYLOAD_RECEIVED"
    INVALID_GRANT_TYPE = "INVALID_GRANT_TYPE"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    INVALID_IDP_RESPONSE = "INVALID_IDP_RESPONSE"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_LOGIN_CREDENTIALS = "INVALID_LOGIN_CREDENTIALS"
    CREDENTIAL_MISMATCH = "CREDENTIAL_MISMATCH"
    CREDENTIAL_TOO_OLD_LOGIN_AGAIN = "CREDENTIAL_TOO_OLD_LOGIN_AGAIN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    USER_DISABLED = "USER_DISABLED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    MISSING_REFRESH_TOKEN = "MISSING_REFRESH_TOKEN"
    EMAIL_EXISTS = "EMAIL_EXISTS"
    EMAIL_NOT_FOUND = "EMAIL_NOT_FOUND"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    FEDERATED_USER_ID_ALREADY_LINKED = "FEDERATED_USER_ID_ALREADY_LINKED"
    EXPIRED_OOB_CODE = "EXPIRED_OOB_CODE"
    INVALID_OOB_CODE = "INVALID_OOB_CODE"
    UNKNOWN = "UNKNOWN"


# Kinds matched by exact message. The prefix-matched kind and UNKNOWN are not listed.
ERROR_KIND_TABLE: Dict[str, ErrorKind] = {
    kind.value: kind
    for kind in ErrorKind
    if kind not in (ErrorKind.INVALID_JSON_PAYLOAD_RECEIVED, ErrorKind.UNKNOWN)
}


@dataclass(frozen=True)
class ErrorCode:
    """
    A classified error message.

    ``message`` always holds the text exactly as the API returned it; for
    UNKNOWN and INVALID_JSON_PAYLOAD_RECEIVED it is the variant's payload.
    """
    kind: ErrorKind
    message: str

    @property
    def is_retryable(self) -> bool:
        """Only an invalid ID token can be recovered by refreshing tokens."""
        return self.kind is ErrorKind.INVALID_ID_TOKEN

    def __str__(self) -> str:
        if self.kind in (ErrorKind.UNKNOWN, ErrorKind.INVALID_JSON_PAYLOAD_RECEIVED):
            return f"{self.kind.value}({self.message})"
        return self.kind.value


def classify_error_message(message: str) -> ErrorCode:
    """
    Classify an error message from the Firebase Auth error envelope.

    Never raises. Messages that are not in the table map to
    ErrorKind.UNKNOWN with the original text preserved.
    """
    if message.startswith(INVALID_JSON_PAYLOAD_PREFIX):
        return ErrorCode(ErrorKind.INVALID_JSON_PAYLOAD_RECEIVED, message)

    code = message.split(DETAIL_SEPARATOR, 1)[0]
    kind = ERROR_KIND_TABLE.get(code, ErrorKind.UNKNOWN)
    return ErrorCode(kind, message)
