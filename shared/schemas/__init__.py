"""
Shared data schemas for the session service

This package contains the user record schemas exchanged with the external services.
"""

from .user import UserSchema, UserRegisterSchema

__all__ = [
    "UserSchema",
    "UserRegisterSchema",
]

__version__ = "1.0.0"
