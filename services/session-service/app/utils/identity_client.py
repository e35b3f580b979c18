"""
Identity Provider Client
Account creation and sign-in against the external identity provider (Supabase Auth)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from supabase import create_client, Client

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Identity provider rejected the request or is unavailable"""
    pass


@dataclass
class AuthUser:
    """Account as known to the identity provider"""
    uid: str
    email: Optional[str] = None


@dataclass
class AuthCredentials:
    """Credentials returned by account creation and sign-in"""
    user: AuthUser
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class IdentityProvider(ABC):
    """Identity provider interface, lets the coordinator run against a fake in tests"""

    @abstractmethod
    async def create_user_with_email_and_password(self, email: str, password: str) -> AuthCredentials:
        """Create an account; credentials.user.uid is the issued identifier"""

    @abstractmethod
    async def sign_in_with_email_and_password(self, email: str, password: str) -> AuthCredentials:
        """Authenticate an existing account"""

    @abstractmethod
    async def sign_out(self) -> None:
        """End the provider session"""


class SupabaseIdentityProvider(IdentityProvider):
    """Supabase Auth implementation of the identity provider"""

    def __init__(self, url: str = "", key: str = "", client: Optional[Client] = None):
        self.url = url
        self.key = key
        self.client: Optional[Client] = client

        if self.client is None:
            if self.url and self.key:
                self.client = create_client(self.url, self.key)
                logger.info("Supabase client initialized successfully")
            else:
                logger.warning("Supabase credentials not configured")

    def is_available(self) -> bool:
        """Check if Supabase is available and configured"""
        return self.client is not None

    def _require_client(self) -> Client:
        if not self.client:
            raise IdentityProviderError("Identity provider not configured")
        return self.client

    @staticmethod
    def _to_credentials(response, email: str) -> AuthCredentials:
        """Map a Supabase auth response onto AuthCredentials"""
        user = getattr(response, 'user', None)
        if not user or not getattr(user, 'id', None):
            raise IdentityProviderError(f"Identity provider returned no user for {email}")

        session = getattr(response, 'session', None)
        return AuthCredentials(
            user=AuthUser(uid=str(user.id), email=getattr(user, 'email', None) or email),
            access_token=getattr(session, 'access_token', None) if session else None,
            refresh_token=getattr(session, 'refresh_token', None) if session else None
        )

    async def create_user_with_email_and_password(self, email: str, password: str) -> AuthCredentials:
        """
        Sign up a new account with Supabase Auth

        Args:
            email: Account email
            password: Account password

        Returns:
            AuthCredentials: credentials.user.uid is the Supabase user id

        Raises:
            IdentityProviderError: Sign up rejected (email in use, weak password, ...)
        """
        client = self._require_client()

        try:
            response = await asyncio.to_thread(
                client.auth.sign_up, {"email": email, "password": password}
            )
        except Exception as e:
            logger.error(f"Supabase sign up error for {email}: {e}")
            raise IdentityProviderError(str(e)) from e

        credentials = self._to_credentials(response, email)
        logger.info(f"Account created with identity provider: {email}")
        return credentials

    async def sign_in_with_email_and_password(self, email: str, password: str) -> AuthCredentials:
        """
        Sign in an existing account with Supabase Auth

        Raises:
            IdentityProviderError: Invalid credentials or provider failure
        """
        client = self._require_client()

        try:
            response = await asyncio.to_thread(
                client.auth.sign_in_with_password, {"email": email, "password": password}
            )
        except Exception as e:
            logger.error(f"Supabase sign in error for {email}: {e}")
            raise IdentityProviderError(str(e)) from e

        credentials = self._to_credentials(response, email)
        logger.info(f"Signed in with identity provider: {email}")
        return credentials

    async def sign_out(self) -> None:
        """Sign out of the current Supabase session"""
        client = self._require_client()

        try:
            await asyncio.to_thread(client.auth.sign_out)
        except Exception as e:
            logger.error(f"Supabase sign out error: {e}")
            raise IdentityProviderError(str(e)) from e

        logger.info("Signed out of identity provider")
