"""
Storefront client configuration.

Values come from environment variables:
- STOREFRONT_API_URL: base URL of the shop API
- STOREFRONT_API_TIMEOUT: request timeout in seconds (unset = no timeout)
- STOREFRONT_STORAGE: "memory" or "redis" local store backend
- STOREFRONT_STORAGE_PREFIX: key prefix applied by the Redis backend
- UPSTASH_REDIS_REST_URL / UPSTASH_REDIS_REST_TOKEN: Redis credentials
"""
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_URL = "http://localhost:3001"

# Fixed keys in the local store
GUEST_CART_KEY = "fusionaura_guest_cart"
TOKEN_KEY = "token"
USER_KEY = "user"
LAST_ACTIVITY_KEY = "lastActivity"

# Paths used by the cart flows
CART_PAGE_PATH = "/cart"
ORDER_CONFIRMATION_PATH = "/order-confirmation/{order_id}"
AUTH_PATH_PREFIX = "/api/auth/"

STORAGE_MEMORY = "memory"
STORAGE_REDIS = "redis"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"STOREFRONT_API_TIMEOUT must be a number, got {raw!r}")
    return value if value > 0 else None


@dataclass(frozen=True)
class Settings:
    """Runtime settings for one storefront session."""
    api_url: str = DEFAULT_API_URL
    api_timeout: Optional[float] = None
    storage_backend: str = STORAGE_MEMORY
    storage_prefix: str = ""
    redis_url: str = ""
    redis_token: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        backend = os.environ.get("STOREFRONT_STORAGE", STORAGE_MEMORY).lower()
        if backend not in (STORAGE_MEMORY, STORAGE_REDIS):
            raise ValueError(f"Unknown STOREFRONT_STORAGE backend: {backend}")
        return cls(
            api_url=os.environ.get("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/"),
            api_timeout=_parse_timeout(os.environ.get("STOREFRONT_API_TIMEOUT")),
            storage_backend=backend,
            storage_prefix=os.environ.get("STOREFRONT_STORAGE_PREFIX", ""),
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        )
