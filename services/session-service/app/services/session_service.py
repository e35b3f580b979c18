"""
Session Service
Register/login/logout orchestration across the identity provider, the
profile store and local storage

REGISTER
1) Create the account with the identity provider (email + password)
2) Take the provider uid as the record id, drop the password
3) Save the record to the profile store, mirror it to local storage

LOGIN
- email only: look the record up in the profile store by email
- email + password: authenticate with the identity provider, then fetch
  the profile record by uid
Either way a found record is mirrored to local storage.

LOGOUT
Remove the record from local storage (sign_out also ends the provider session).
"""

import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from shared.schemas.user import UserSchema, UserRegisterSchema
from shared.utils.logger import get_audit_logger

from app.models.session import LoginResult, LoginStatus, MatchPolicy
from app.utils.identity_client import IdentityProvider
from app.utils.local_storage import LocalStorage, LocalStorageError
from app.utils.profile_store_client import ProfileStoreClient, ProfileStoreError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "user"


class AmbiguousUserError(Exception):
    """Email query matched more than one record under MatchPolicy.UNIQUE"""

    def __init__(self, email: str, count: int):
        self.email = email
        self.count = count
        super().__init__(f"{count} profile records match {email}")


class SessionCoordinator:
    """Coordinates the identity provider, profile store and local storage"""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        profile_store: ProfileStoreClient,
        storage: LocalStorage,
        storage_key: str = DEFAULT_STORAGE_KEY,
        match_policy: MatchPolicy = MatchPolicy.FIRST
    ):
        self.identity_provider = identity_provider
        self.profile_store = profile_store
        self.storage = storage
        self.storage_key = storage_key
        self.match_policy = MatchPolicy(match_policy)
        self.audit_logger = get_audit_logger()

    @staticmethod
    def _to_user(data: Dict[str, Any]) -> UserSchema:
        try:
            return UserSchema.model_validate(data)
        except ValidationError as e:
            raise ProfileStoreError(f"Profile store returned an invalid user record: {e}") from e

    def set_user_in_local_storage(self, user: Union[UserSchema, Dict[str, Any]]) -> None:
        """Mirror a record into local storage (password never written)"""
        if not isinstance(user, UserSchema):
            user = UserSchema.model_validate(user)
        self.storage.set_item(self.storage_key, json.dumps(user.to_record()))

    def get_user_from_local_storage(self) -> Optional[UserSchema]:
        """
        Read the active user record

        Returns:
            UserSchema: Mirrored record, or None when nothing is stored

        Raises:
            LocalStorageError: The stored value is not a valid user record
        """
        raw = self.storage.get_item(self.storage_key)
        if not raw:
            return None

        try:
            return UserSchema.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise LocalStorageError(f"Stored user record under '{self.storage_key}' is unreadable: {e}") from e

    async def save_user_to_profile_store(self, user: Union[UserSchema, Dict[str, Any]]) -> UserSchema:
        """
        Create a record in the profile store and mirror the stored copy locally

        Args:
            user: Full record to persist

        Returns:
            UserSchema: Record as returned by the store
        """
        if not isinstance(user, UserSchema):
            user = UserSchema.model_validate(user)

        stored = self._to_user(await self.profile_store.create_user(user.to_record()))
        self.set_user_in_local_storage(stored)
        return stored

    async def register(self, user: Union[UserRegisterSchema, Dict[str, Any]]) -> UserSchema:
        """
        Register a new account

        Args:
            user: Draft with email, password and optional profile fields

        Returns:
            UserSchema: Persisted record, id set to the provider uid, no password

        Raises:
            IdentityProviderError: Account creation rejected
            ProfileStoreError: Profile record could not be created
        """
        draft = user if isinstance(user, UserRegisterSchema) else UserRegisterSchema.model_validate(user)

        credentials = await self.identity_provider.create_user_with_email_and_password(
            draft.email, draft.password
        )
        uid = credentials.user.uid

        try:
            stored = await self.save_user_to_profile_store(draft.to_record(uid))
        except ProfileStoreError:
            # The provider account stays behind without a profile record
            logger.error(f"Profile record not created for provider account {uid} ({draft.email})")
            raise

        self.audit_logger.log_user_action(stored.id, "register")
        return stored

    async def login(self, email: str, password: Optional[str] = None) -> LoginResult:
        """
        Log a user in and mirror the record to local storage

        Args:
            email: Account email
            password: When given, authenticate with the identity provider first

        Returns:
            LoginResult: found with the record, or not_found (local storage untouched)

        Raises:
            IdentityProviderError: Provider rejected the credentials
            ProfileStoreError: Profile store request failed
            AmbiguousUserError: Several records match and the policy is UNIQUE
        """
        if password is not None:
            user = await self._login_with_provider(email, password)
        else:
            user = await self._login_by_email(email)

        if user is None:
            logger.info(f"No user exists with email address {email}")
            return LoginResult.not_found()

        self.set_user_in_local_storage(user)
        self.audit_logger.log_user_action(user.id, "login")
        return LoginResult(status=LoginStatus.FOUND, user=user)

    async def _login_by_email(self, email: str) -> Optional[UserSchema]:
        matches = await self.profile_store.find_users_by_email(email)
        if not matches:
            return None

        if len(matches) > 1:
            if self.match_policy == MatchPolicy.UNIQUE:
                raise AmbiguousUserError(email, len(matches))
            logger.warning(f"{len(matches)} profile records match {email}, using the first")

        return self._to_user(matches[0])

    async def _login_with_provider(self, email: str, password: str) -> Optional[UserSchema]:
        credentials = await self.identity_provider.sign_in_with_email_and_password(email, password)
        return await self.get_user(credentials.user.uid)

    def logout(self) -> None:
        """Remove the active user record from local storage"""
        user_id = None
        try:
            current = self.get_user_from_local_storage()
            user_id = current.id if current else None
        except LocalStorageError:
            logger.warning("Clearing unreadable user record from local storage")

        self.storage.remove_item(self.storage_key)
        self.audit_logger.log_user_action(user_id, "logout")

    async def sign_out(self) -> None:
        """End the identity provider session, then clear local storage"""
        await self.identity_provider.sign_out()
        self.logout()

    async def get_user(self, user_id: str) -> Optional[UserSchema]:
        """
        Fetch a record from the profile store by id

        Returns:
            UserSchema: Record, or None when the store has no such record
        """
        data = await self.profile_store.get_user(user_id)
        if not data:
            return None
        return self._to_user(data)
