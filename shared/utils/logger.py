"""
Logging utilities for the session service

Provides centralized logging configuration plus the request and audit
loggers used by the session coordinator and its HTTP clients.
"""

import os
import copy
import logging
import logging.config
from typing import Optional, Dict, Any
import yaml
from pathlib import Path

# Default logging configuration
DEFAULT_LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
        'detailed': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(lineno)d - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'default',
            'stream': 'ext://sys.stdout'
        }
    },
    'loggers': {
        'app': {
            'level': 'INFO',
            'handlers': ['console'],
            'propagate': False
        },
        'session_service': {
            'level': 'INFO',
            'handlers': ['console'],
            'propagate': False
        }
    }
}

SHARED_CONFIG_PATH = Path(__file__).parent.parent / "configs" / "logging.yml"


def load_logging_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a dictConfig mapping

    Args:
        config_path: Path to a YAML logging configuration file

    Returns:
        dict: Explicit file, else the shared configs/logging.yml, else the default
    """
    for path in (config_path, SHARED_CONFIG_PATH):
        if not path or not os.path.exists(path):
            continue
        try:
            with open(path, 'r') as f:
                config = yaml.safe_load(f)
            if config:
                return config
        except (OSError, yaml.YAMLError) as e:
            logging.getLogger(__name__).warning(f"Failed to load logging config from {path}: {e}")

    return copy.deepcopy(DEFAULT_LOGGING_CONFIG)


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None
) -> Dict[str, Any]:
    """
    Setup logging configuration

    Args:
        config_path: Path to logging configuration file
        log_level: Override log level
        log_format: Override log format ('default', 'detailed')

    Returns:
        dict: The configuration that was applied
    """
    config = load_logging_config(config_path)

    # Apply environment-specific overrides
    environment = os.getenv('ENVIRONMENT', 'development')
    env_config = config.pop(environment, None) if environment in config else None
    if env_config:
        if 'handlers' in env_config:
            config['handlers'].update(env_config['handlers'])
        if 'loggers' in env_config:
            config['loggers'].update(env_config['loggers'])

    # Drop any remaining per-environment sections dictConfig does not understand
    for key in ('development', 'production', 'testing'):
        config.pop(key, None)

    if log_level:
        log_level = log_level.upper()
        for logger_config in config.get('loggers', {}).values():
            logger_config['level'] = log_level
        for handler_config in config.get('handlers', {}).values():
            handler_config['level'] = log_level

    if log_format and log_format in config.get('formatters', {}):
        for handler_config in config.get('handlers', {}).values():
            handler_config['formatter'] = log_format

    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        # Fallback to basic configuration
        logging.basicConfig(
            level=getattr(logging, log_level or 'INFO', logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        logging.getLogger(__name__).error(f"Failed to configure logging: {e}")

    return config


class RequestLogger:
    """Logger for outbound HTTP requests"""

    def __init__(self, name: str = "session_service.requests"):
        self.logger = logging.getLogger(name)

    def log_request(
        self,
        method: str,
        url: str,
        status_code: Optional[int],
        response_time: float
    ):
        """Log HTTP request"""
        self.logger.info(
            f"{method} {url} {status_code if status_code is not None else '-'} {response_time:.3f}s",
            extra={
                'request_method': method,
                'request_url': url,
                'response_status': status_code,
                'response_time': response_time,
                'event_type': 'http_request'
            }
        )


class AuditLogger:
    """Logger for session audit events"""

    def __init__(self, name: str = "session_service.audit"):
        self.logger = logging.getLogger(name)

    def log_user_action(
        self,
        user_id: Optional[str],
        action: str,
        resource: str = "session",
        details: Optional[Dict[str, Any]] = None
    ):
        """Log user action for audit trail"""
        self.logger.info(
            f"User {user_id or 'anonymous'} performed {action} on {resource}",
            extra={
                'user_id': user_id,
                'action': action,
                'resource': resource,
                'details': details or {},
                'event_type': 'user_action'
            }
        )


def get_request_logger() -> RequestLogger:
    """Get request logger instance"""
    return RequestLogger()


def get_audit_logger() -> AuditLogger:
    """Get audit logger instance"""
    return AuditLogger()


def init_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> Dict[str, Any]:
    """Initialize logging with environment variables"""
    config_path = os.getenv('LOGGING_CONFIG_PATH')
    log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
    log_format = log_format or os.getenv('LOG_FORMAT', 'default')

    return setup_logging(config_path, log_level, log_format)
