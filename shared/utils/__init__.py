"""
Shared utilities for the session service

This package contains logging and redis helpers used by the service code.
"""

from .redis_client import RedisClient
from .logger import setup_logging, init_logging, get_audit_logger, get_request_logger

__all__ = [
    "RedisClient",
    "setup_logging",
    "init_logging",
    "get_audit_logger",
    "get_request_logger",
]

__version__ = "1.0.0"
