"""
Shared test fixtures for Firebase Auth SDK tests.

HTTP traffic is faked with respx; fixtures only build configuration,
transport, client and a signed in session.
"""

import pytest

from firebase_rest_auth import AuthSession, FirebaseAuth, FirebaseAuthConfig, Tokens
from firebase_rest_auth.transport import Transport


API_KEY = "test-api-key"


@pytest.fixture
def config() -> FirebaseAuthConfig:
    """Valid configuration for testing."""
    return FirebaseAuthConfig(api_key=API_KEY, debug=True)


@pytest.fixture
def auth(config: FirebaseAuthConfig) -> FirebaseAuth:
    """Client for testing."""
    return FirebaseAuth(config)


@pytest.fixture
def transport(config: FirebaseAuthConfig) -> Transport:
    """Bare transport for testing."""
    return Transport(config)


@pytest.fixture
def session(transport: Transport) -> AuthSession:
    """Session signed in with tokens ("A", "R1")."""
    return AuthSession(transport, Tokens(id_token="A", refresh_token="R1", expires_in=3600))
