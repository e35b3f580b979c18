"""
Pytest fixtures for session service tests
"""

import json
import pytest
import httpx
from unittest.mock import AsyncMock
from typing import Any, Dict, List

from app.models.session import MatchPolicy
from app.services.session_service import SessionCoordinator
from app.utils.identity_client import AuthCredentials, AuthUser, IdentityProvider
from app.utils.local_storage import MemoryStorage
from app.utils.profile_store_client import ProfileStoreClient

PROFILE_STORE_URL = "http://profile-store.test/users"


class JsonServerFake:
    """In-memory stand-in for a json-server /users resource"""

    def __init__(self, records: List[Dict[str, Any]] = None):
        self.records: List[Dict[str, Any]] = list(records or [])
        self.requests: List[httpx.Request] = []
        self.fail_with: int = None

    def posted_bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_with:
            return httpx.Response(self.fail_with, json={"error": "store failure"})

        parts = [p for p in request.url.path.split("/") if p]
        if parts[:1] != ["users"]:
            return httpx.Response(404, json={})

        if request.method == "POST" and len(parts) == 1:
            record = json.loads(request.content)
            if "id" not in record:
                ids = [r["id"] for r in self.records if isinstance(r.get("id"), int)]
                record["id"] = max(ids, default=0) + 1
            self.records.append(record)
            return httpx.Response(201, json=record)

        if request.method == "GET" and len(parts) == 2:
            for record in self.records:
                if str(record.get("id")) == parts[1]:
                    return httpx.Response(200, json=record)
            return httpx.Response(404, json={})

        if request.method == "GET" and len(parts) == 1:
            email = request.url.params.get("email")
            matches = [r for r in self.records if email is None or r.get("email") == email]
            return httpx.Response(200, json=matches)

        return httpx.Response(405, json={})


@pytest.fixture
def json_server() -> JsonServerFake:
    """Empty fake profile store"""
    return JsonServerFake()


@pytest.fixture
def profile_store(json_server) -> ProfileStoreClient:
    """Profile store client talking to the fake json-server"""
    return ProfileStoreClient(
        base_url=PROFILE_STORE_URL,
        transport=httpx.MockTransport(json_server.handle)
    )


@pytest.fixture
def identity_provider():
    """Mock identity provider issuing uid123"""
    provider = AsyncMock(spec=IdentityProvider)
    provider.create_user_with_email_and_password.return_value = AuthCredentials(
        user=AuthUser(uid="uid123", email="a@x.com")
    )
    provider.sign_in_with_email_and_password.return_value = AuthCredentials(
        user=AuthUser(uid="uid123", email="a@x.com"),
        access_token="access-token",
        refresh_token="refresh-token"
    )
    provider.sign_out.return_value = None
    return provider


@pytest.fixture
def storage() -> MemoryStorage:
    """Empty in-memory local storage"""
    return MemoryStorage()


@pytest.fixture
def coordinator(identity_provider, profile_store, storage) -> SessionCoordinator:
    """Coordinator wired to the mock provider, fake store and memory storage"""
    return SessionCoordinator(
        identity_provider=identity_provider,
        profile_store=profile_store,
        storage=storage,
        match_policy=MatchPolicy.FIRST
    )


@pytest.fixture
def sample_user_data() -> Dict[str, Any]:
    """Sample registration draft"""
    return {
        "email": "a@x.com",
        "password": "p",
        "username": "A",
    }
