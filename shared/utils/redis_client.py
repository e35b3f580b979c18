"""
Redis client utilities for the session service

Provides Redis connection management for the redis-backed local storage.
"""

import os
import logging
from typing import Optional
import redis
from redis.connection import ConnectionPool

logger = logging.getLogger(__name__)


class RedisClient:
    """Redis client wrapper with connection management and string key operations"""

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize Redis client

        Args:
            redis_url: Redis connection URL. If None, will use environment variables.
            client: Pre-built redis client, skips pool creation
        """
        self.redis_url = redis_url or self._build_redis_url()
        self.pool = None
        self.client = client
        if self.client is None:
            self._initialize_client()

    def _build_redis_url(self) -> str:
        """Build Redis URL from environment variables"""
        host = os.getenv("REDIS_HOST", "localhost")
        port = os.getenv("REDIS_PORT", "6379")
        password = os.getenv("REDIS_PASSWORD", "")
        db = os.getenv("REDIS_DB", "0")

        if password:
            return f"redis://:{password}@{host}:{port}/{db}"
        else:
            return f"redis://{host}:{port}/{db}"

    def _initialize_client(self):
        """Initialize Redis client with connection pool"""
        try:
            self.pool = ConnectionPool.from_url(
                self.redis_url,
                max_connections=20,
                retry_on_timeout=True,
                socket_keepalive=True,
                health_check_interval=30,
                decode_responses=True
            )
            self.client = redis.Redis(connection_pool=self.pool)

            # Test connection
            self.client.ping()
            logger.info("Redis client initialized successfully")

        except redis.RedisError as e:
            logger.error(f"Failed to initialize Redis client: {e}")
            raise

    def test_connection(self) -> bool:
        """
        Test Redis connection

        Returns:
            True if connection successful, False otherwise
        """
        try:
            self.client.ping()
            return True
        except redis.RedisError as e:
            logger.error(f"Redis connection test failed: {e}")
            return False

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """
        Set a string value in Redis

        Args:
            key: Redis key
            value: Value to store
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        if ttl:
            return bool(self.client.setex(key, ttl, value))
        return bool(self.client.set(key, value))

    def get(self, key: str) -> Optional[str]:
        """
        Get a string value from Redis

        Args:
            key: Redis key

        Returns:
            Stored value or None if the key does not exist
        """
        value = self.client.get(key)
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        return value

    def delete(self, *keys: str) -> int:
        """
        Delete keys from Redis

        Args:
            keys: Redis keys to delete

        Returns:
            Number of keys deleted
        """
        return self.client.delete(*keys)

