"""
Session credential store.

Holds the bearer token, the serialized identity record and the last
activity timestamp under fixed keys of the local store. One Session is
created per storefront session and cleared at logout or when the API
rejects the credential.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storefront.config import LAST_ACTIVITY_KEY, TOKEN_KEY, USER_KEY
from storefront.errors import StorageUnavailableError
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.storage import KeyValueStore

logger = get_logger(__name__)


class Identity(BaseModel):
    """Signed-in user as returned by the auth endpoints."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    email: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    role: str = "CUSTOMER"

    @property
    def is_admin(self) -> bool:
        return self.role.upper() == "ADMIN"


class Session:
    """Credential and identity record for the current user."""

    def __init__(self, storage: KeyValueStore):
        self._storage = storage

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._storage.get(key)
        except StorageUnavailableError as e:
            logger.warning(f"Session store unavailable reading {key}: {e}")
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self._storage.set(key, value)
        except StorageUnavailableError as e:
            logger.warning(f"Session store unavailable writing {key}: {e}")

    def _remove(self, key: str) -> None:
        try:
            self._storage.delete(key)
        except StorageUnavailableError as e:
            logger.warning(f"Session store unavailable removing {key}: {e}")

    @property
    def token(self) -> Optional[str]:
        return self._read(TOKEN_KEY) or None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def user(self) -> Optional[Identity]:
        raw = self._read(USER_KEY)
        if not raw:
            return None
        try:
            return Identity.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Corrupted identity record in session store: {e}")
            return None

    @property
    def last_activity(self) -> Optional[datetime]:
        raw = self._read(LAST_ACTIVITY_KEY)
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    def sign_in(self, token: str, user: Union[Identity, Dict[str, Any]]) -> Identity:
        """Store a fresh credential and identity record."""
        identity = user if isinstance(user, Identity) else Identity.model_validate(user)
        self._write(TOKEN_KEY, token)
        self.set_user(identity)
        self.touch()
        logger.info(f"Signed in user {sanitize_id_for_logging(identity.id)}")
        return identity

    def set_user(self, user: Union[Identity, Dict[str, Any]]) -> Identity:
        identity = user if isinstance(user, Identity) else Identity.model_validate(user)
        self._write(USER_KEY, identity.model_dump_json(by_alias=True))
        return identity

    def touch(self) -> None:
        self._write(LAST_ACTIVITY_KEY, datetime.now(timezone.utc).isoformat())

    def clear(self) -> None:
        """Drop the credential, identity record and activity timestamp."""
        for key in (TOKEN_KEY, USER_KEY, LAST_ACTIVITY_KEY):
            self._remove(key)
        logger.info("Session cleared")
