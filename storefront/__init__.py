"""
Storefront Client

Customer-side cart state for the shop:
- storage: local key-value backends (memory, Upstash Redis)
- session: bearer token and identity record
- api: shop API client
- cart: guest cart, item count synchronizer, cart actions
- auth: login/logout lifecycle
- context: per-session wiring
"""

__all__ = [
    "StorefrontContext",
    "Settings",
]


def __getattr__(name):
    """Lazy attribute access so submodules load without the whole stack."""
    if name == "StorefrontContext":
        from storefront.context import StorefrontContext
        return StorefrontContext
    elif name == "Settings":
        from storefront.config import Settings
        return Settings
    raise AttributeError(f"module 'storefront' has no attribute {name!r}")
