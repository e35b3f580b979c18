"""
Session Service
Builds a session coordinator wired to the configured identity provider,
profile store and local storage
"""

import logging
from typing import Optional

from shared.utils.logger import init_logging

from app.models.session import MatchPolicy
from app.services.session_service import SessionCoordinator
from app.utils.config import SessionConfig, get_session_config
from app.utils.identity_client import SupabaseIdentityProvider
from app.utils.local_storage import create_storage
from app.utils.profile_store_client import ProfileStoreClient

logger = logging.getLogger(__name__)


def create_coordinator(config: Optional[SessionConfig] = None, configure_logging: bool = True) -> SessionCoordinator:
    """
    Create a session coordinator from configuration

    Args:
        config: Session configuration, defaults to the environment-based instance
        configure_logging: Apply the shared logging configuration first

    Returns:
        SessionCoordinator: Ready to use coordinator
    """
    config = config or get_session_config()

    if configure_logging:
        init_logging(config.log_level, config.log_format)

    config.log_config()

    identity_provider = SupabaseIdentityProvider(
        url=config.supabase_url,
        key=config.supabase_anon_key
    )
    profile_store = ProfileStoreClient(
        base_url=config.profile_store_url,
        timeout=config.profile_store_timeout
    )

    coordinator = SessionCoordinator(
        identity_provider=identity_provider,
        profile_store=profile_store,
        storage=create_storage(config),
        storage_key=config.storage_key,
        match_policy=MatchPolicy(config.match_policy)
    )
    logger.info("Session coordinator ready")
    return coordinator
