"""
Tests for coordinator wiring
"""

from unittest.mock import patch

from app.main import create_coordinator
from app.models.session import MatchPolicy
from app.services.session_service import SessionCoordinator
from app.utils.config import SessionConfig
from app.utils.identity_client import SupabaseIdentityProvider
from app.utils.local_storage import MemoryStorage


class TestCreateCoordinator:
    """Test create_coordinator"""

    def test_wires_collaborators_from_config(self):
        config = SessionConfig(
            profile_store_url="http://store.test/users",
            storage_backend="memory",
            storage_key="active_user",
            match_policy="unique",
        )

        coordinator = create_coordinator(config, configure_logging=False)

        assert isinstance(coordinator, SessionCoordinator)
        assert isinstance(coordinator.identity_provider, SupabaseIdentityProvider)
        assert isinstance(coordinator.storage, MemoryStorage)
        assert coordinator.profile_store.base_url == "http://store.test/users"
        assert coordinator.storage_key == "active_user"
        assert coordinator.match_policy == MatchPolicy.UNIQUE

    def test_configures_logging(self):
        config = SessionConfig(storage_backend="memory", log_level="DEBUG")

        with patch("app.main.init_logging") as init_logging:
            create_coordinator(config)

        init_logging.assert_called_once_with("DEBUG", "default")
