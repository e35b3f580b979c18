"""
Session Models
Result and policy types returned by the session coordinator
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass

from shared.schemas.user import UserSchema


class LoginStatus(str, Enum):
    """Outcome of a login lookup"""
    FOUND = "found"
    NOT_FOUND = "not_found"


class MatchPolicy(str, Enum):
    """How a login picks a record when the email query returns several"""
    FIRST = "first"
    UNIQUE = "unique"


@dataclass
class LoginResult:
    """Tagged login result, the caller decides how to notify the user"""
    status: LoginStatus
    user: Optional[UserSchema] = None

    @property
    def found(self) -> bool:
        return self.status == LoginStatus.FOUND

    @classmethod
    def not_found(cls) -> "LoginResult":
        return cls(status=LoginStatus.NOT_FOUND)
