"""
Configuration Management
Environment-based configuration for the profile store, identity provider and local storage
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
import logging

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "file", "redis")
MATCH_POLICIES = ("first", "unique")


class SessionConfig(BaseSettings):
    """Session service configuration"""

    # Profile store (json-server style REST resource)
    profile_store_url: str = "http://localhost:8088/users"
    profile_store_timeout: float = 10.0

    # Identity provider
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Local storage
    storage_backend: str = "file"
    storage_path: str = "~/.session-service/local_storage.json"
    storage_key: str = "user"
    redis_url: Optional[str] = None

    # Login lookup tie-break for the email query
    match_policy: str = "first"

    # Logging
    log_level: str = "INFO"
    log_format: str = "default"

    class Config:
        env_prefix = "SESSION_"
        case_sensitive = False

    @field_validator('profile_store_url')
    @classmethod
    def validate_profile_store_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError('Profile store URL must be an http(s) URL')
        return v.rstrip('/')

    @field_validator('profile_store_timeout')
    @classmethod
    def validate_profile_store_timeout(cls, v):
        if v <= 0:
            raise ValueError('Profile store timeout must be positive')
        return v

    @field_validator('storage_backend')
    @classmethod
    def validate_storage_backend(cls, v):
        v = v.lower()
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"Storage backend must be one of {', '.join(STORAGE_BACKENDS)}")
        return v

    @field_validator('match_policy')
    @classmethod
    def validate_match_policy(cls, v):
        v = v.lower()
        if v not in MATCH_POLICIES:
            raise ValueError(f"Match policy must be one of {', '.join(MATCH_POLICIES)}")
        return v

    @field_validator('storage_key')
    @classmethod
    def validate_storage_key(cls, v):
        if not v:
            raise ValueError('Storage key must not be empty')
        return v

    def identity_provider_configured(self) -> bool:
        """Check if identity provider credentials are present"""
        return bool(self.supabase_url and self.supabase_anon_key)

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Profile store: {self.profile_store_url} (timeout {self.profile_store_timeout}s)")
        logger.info(f"Identity provider: {'configured' if self.identity_provider_configured() else 'not configured'}")
        logger.info(f"Local storage: {self.storage_backend} (key '{self.storage_key}')")
        logger.info(f"Login match policy: {self.match_policy}")


# Global configuration instance
_session_config: Optional[SessionConfig] = None


def get_session_config() -> SessionConfig:
    """Get session configuration instance"""
    global _session_config
    if _session_config is None:
        _session_config = SessionConfig()
    return _session_config


def reset_session_config():
    """Drop the cached configuration so the next access re-reads the environment"""
    global _session_config
    _session_config = None
