"""
Firebase Auth REST Python SDK - Basic Usage Example

Runs against the Firebase Auth emulator by default:

    firebase emulators:start --only auth
    python examples/basic_usage.py
"""

import asyncio
import logging
import os

from firebase_rest_auth import (
    ApiError,
    ErrorKind,
    FirebaseAuth,
    FirebaseAuthConfig,
    SessionConsumedError,
)


EMULATOR = os.environ.get("FIREBASE_AUTH_EMULATOR_HOST", "localhost:9099")


def emulator_config() -> FirebaseAuthConfig:
    return FirebaseAuthConfig(
        api_key=os.environ.get("FIREBASE_API_KEY", "fake-api-key"),
        identity_toolkit_url=f"http://{EMULATOR}/identitytoolkit.googleapis.com/v1",
        secure_token_url=f"http://{EMULATOR}/securetoken.googleapis.com/v1",
        debug=True,
    )


async def account_lifecycle():
    """Sign up, read and update the account, then delete it."""
    print("=== Account Lifecycle ===\n")
    
    async with FirebaseAuth(emulator_config()) as auth:
        session = await auth.sign_up_with_email_password("user@example.com", "SecurePassword123!")
        print(f"Signed up (token valid for {session.expires_in}s)")
        
        # Every call returns the session to use next
        session, user = await session.get_user_data()
        print(f"User {user.local_id} <{user.email}>")
        
        session = await session.update_profile(display_name="Example User")
        session = await session.send_email_verification(locale="en")
        
        try:
            await session.change_password("123")
        except ApiError as e:
            if e.kind is ErrorKind.WEAK_PASSWORD:
                print(f"Rejected: {e.message}")
            else:
                raise
        
        # The failed call consumed the session; sign in again
        try:
            await session.delete_account()
        except SessionConsumedError:
            session = await auth.sign_in_with_email_password("user@example.com", "SecurePassword123!")
        
        await session.delete_account()
        print("Account deleted")


async def password_reset():
    """Password reset flow without a signed in user."""
    print("\n=== Password Reset ===\n")
    
    async with FirebaseAuth(emulator_config()) as auth:
        session = await auth.sign_in_anonymously()
        session = await session.link_with_email_password("reset@example.com", "FirstPassword123!")
        
        await auth.send_password_reset_email("reset@example.com")
        print("Reset email sent; the code is listed by the emulator UI")
        
        providers = await auth.fetch_providers_for_email("reset@example.com", "http://localhost")
        print(f"Providers: {providers}")
        
        await session.delete_account()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    asyncio.run(account_lifecycle())
    asyncio.run(password_reset())
    
    print("\nExamples completed!")
