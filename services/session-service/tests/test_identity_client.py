"""
Unit tests for SupabaseIdentityProvider
"""

import pytest
from unittest.mock import MagicMock, patch

from app.utils.identity_client import (
    AuthCredentials,
    IdentityProviderError,
    SupabaseIdentityProvider,
)


def auth_response(user_id="uid123", email="a@x.com", with_session=True):
    """Build a Supabase-style AuthResponse"""
    response = MagicMock()
    response.user = MagicMock(id=user_id, email=email)
    if with_session:
        response.session = MagicMock(access_token="access", refresh_token="refresh")
    else:
        response.session = None
    return response


class TestSupabaseIdentityProvider:
    """Test SupabaseIdentityProvider"""

    @pytest.fixture
    def supabase(self):
        return MagicMock()

    @pytest.fixture
    def provider(self, supabase):
        return SupabaseIdentityProvider(client=supabase)

    @pytest.mark.asyncio
    async def test_create_user_returns_uid(self, provider, supabase):
        supabase.auth.sign_up.return_value = auth_response(with_session=False)

        credentials = await provider.create_user_with_email_and_password("a@x.com", "p")

        supabase.auth.sign_up.assert_called_once_with({"email": "a@x.com", "password": "p"})
        assert isinstance(credentials, AuthCredentials)
        assert credentials.user.uid == "uid123"
        assert credentials.access_token is None

    @pytest.mark.asyncio
    async def test_create_user_rejected(self, provider, supabase):
        supabase.auth.sign_up.side_effect = Exception("User already registered")

        with pytest.raises(IdentityProviderError) as exc_info:
            await provider.create_user_with_email_and_password("a@x.com", "p")

        assert "already registered" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_create_user_without_user(self, provider, supabase):
        response = MagicMock()
        response.user = None
        supabase.auth.sign_up.return_value = response

        with pytest.raises(IdentityProviderError):
            await provider.create_user_with_email_and_password("a@x.com", "p")

    @pytest.mark.asyncio
    async def test_sign_in_returns_tokens(self, provider, supabase):
        supabase.auth.sign_in_with_password.return_value = auth_response()

        credentials = await provider.sign_in_with_email_and_password("a@x.com", "p")

        supabase.auth.sign_in_with_password.assert_called_once_with({"email": "a@x.com", "password": "p"})
        assert credentials.user.uid == "uid123"
        assert credentials.access_token == "access"
        assert credentials.refresh_token == "refresh"

    @pytest.mark.asyncio
    async def test_sign_in_invalid_credentials(self, provider, supabase):
        supabase.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        with pytest.raises(IdentityProviderError):
            await provider.sign_in_with_email_and_password("a@x.com", "wrong")

    @pytest.mark.asyncio
    async def test_sign_out(self, provider, supabase):
        await provider.sign_out()
        supabase.auth.sign_out.assert_called_once()

    @pytest.mark.asyncio
    async def test_not_configured(self):
        provider = SupabaseIdentityProvider()

        assert not provider.is_available()
        with pytest.raises(IdentityProviderError):
            await provider.create_user_with_email_and_password("a@x.com", "p")

    def test_client_created_from_credentials(self):
        with patch("app.utils.identity_client.create_client") as create_client:
            provider = SupabaseIdentityProvider(url="https://project.supabase.co", key="anon-key")

        create_client.assert_called_once_with("https://project.supabase.co", "anon-key")
        assert provider.is_available()
