"""Cart package: models, guest store, synchronizer and actions."""
from .actions import CartActions, MutationResult
from .counting import COUNT_STRATEGIES, extract_item_count
from .guest import GuestCart
from .models import CartLineItem, CartView, CartViewLine, GuestProduct
from .synchronizer import CartSynchronizer, SyncMode, SyncState

__all__ = [
    "CartActions",
    "MutationResult",
    "COUNT_STRATEGIES",
    "extract_item_count",
    "GuestCart",
    "CartLineItem",
    "CartView",
    "CartViewLine",
    "GuestProduct",
    "CartSynchronizer",
    "SyncMode",
    "SyncState",
]
