"""
User data schemas for the session service

Pydantic models for the user record shared between the identity provider,
the profile store and local storage.
"""

from typing import Optional, Dict, Any, Union
from pydantic import BaseModel, model_validator


# Never written to the profile store or local storage
TRANSIENT_FIELDS = {'password'}


def _dump_provided_fields(model: BaseModel, exclude=()) -> Dict[str, Any]:
    """JSON-mode dump of the fields that were actually provided, extras included"""
    provided = set(model.model_fields_set) | set(model.__pydantic_extra__ or {})
    data = model.model_dump(mode='json')
    return {k: v for k, v in data.items() if k in provided and k not in exclude}


class UserSchema(BaseModel):
    """Persisted user record (profile store and local storage)"""
    # provider uid, or an integer id assigned by a json-server store
    id: Optional[Union[str, int]] = None
    email: str
    username: Optional[str] = None

    class Config:
        extra = "allow"

    @model_validator(mode='before')
    @classmethod
    def strip_transient_fields(cls, data):
        """Drop the password from any payload a record is built from"""
        if isinstance(data, dict) and TRANSIENT_FIELDS & data.keys():
            data = {k: v for k, v in data.items() if k not in TRANSIENT_FIELDS}
        return data

    @property
    def profile_fields(self) -> Dict[str, Any]:
        """Arbitrary profile fields carried alongside id/email/username"""
        return dict(self.__pydantic_extra__ or {})

    def to_record(self) -> Dict[str, Any]:
        """Convert to the JSON payload sent to the store and local storage"""
        return _dump_provided_fields(self)


class UserRegisterSchema(BaseModel):
    """Registration draft, the only place a password is held"""
    # kept exactly as given, the identity provider decides what it accepts
    email: str
    password: str
    username: Optional[str] = None

    class Config:
        extra = "allow"

    def to_record(self, user_id: str) -> Dict[str, Any]:
        """
        Build the profile record for a newly registered account

        Args:
            user_id: Identifier issued by the identity provider

        Returns:
            dict: Record without password, id set to the provider identifier
        """
        record = _dump_provided_fields(self, exclude=TRANSIENT_FIELDS)
        record['id'] = user_id
        return record
