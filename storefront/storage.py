"""
Local Key-Value Store Backends

The guest cart and the session credential live in a small string
key-value store. Two backends:
- MemoryStorage: process-local dict (tests, single-process tools)
- RedisStorage: Upstash Redis over REST, survives restarts

Backends raise StorageUnavailableError on any backend failure; callers
decide whether that degrades to a default.
"""
from typing import Dict, Optional, Protocol

from upstash_redis import Redis

from storefront.config import STORAGE_REDIS, Settings
from storefront.errors import StorageUnavailableError
from storefront.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Minimal synchronous string store (localStorage-shaped)."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """In-process store backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class RedisStorage:
    """
    Upstash Redis backed store.

    Keys are namespaced with an optional prefix so several storefront
    sessions can share one database.
    """

    def __init__(self, client: Redis, prefix: str = ""):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisStorage":
        if not settings.redis_url or not settings.redis_token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        return cls(Redis(url=settings.redis_url, token=settings.redis_token), settings.storage_prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(self._key(key))
        except Exception as e:
            logger.warning(f"Redis get failed for {key}: {e}")
            raise StorageUnavailableError(str(e)) from e
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except Exception as e:
            logger.warning(f"Redis set failed for {key}: {e}")
            raise StorageUnavailableError(str(e)) from e

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except Exception as e:
            logger.warning(f"Redis delete failed for {key}: {e}")
            raise StorageUnavailableError(str(e)) from e


def create_storage(settings: Settings) -> KeyValueStore:
    """Build the backend selected by settings."""
    if settings.storage_backend == STORAGE_REDIS:
        return RedisStorage.from_settings(settings)
    return MemoryStorage()
