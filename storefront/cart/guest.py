"""
Guest cart stored in the local key-value store.

Used when no session credential is present. The whole cart lives under
one key as a JSON array and every mutation rewrites that key. Reads
never fail: a missing, unreadable or corrupted cart is an empty cart.
This layer emits no events; callers publish CART_UPDATED.
"""
import json
from decimal import Decimal
from typing import List, Sequence

from storefront.cart.models import CartLineItem, GuestProduct
from storefront.config import GUEST_CART_KEY
from storefront.errors import StorageUnavailableError
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import to_decimal
from storefront.storage import KeyValueStore

logger = get_logger(__name__)


class GuestCart:
    """Local guest cart keyed by product id."""

    def __init__(self, storage: KeyValueStore, key: str = GUEST_CART_KEY):
        self._storage = storage
        self.key = key

    def read(self) -> List[CartLineItem]:
        """Return stored line items in insertion order, or [] on any problem."""
        try:
            raw = self._storage.get(self.key)
        except StorageUnavailableError as e:
            logger.warning(f"Guest cart storage unavailable: {e}")
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return [CartLineItem.from_dict(item) for item in data]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Corrupted guest cart data: {e}")
            return []

    def write(self, items: Sequence[CartLineItem]) -> None:
        """Replace the stored cart with `items` in one overwrite."""
        payload = json.dumps([item.to_dict() for item in items])
        try:
            self._storage.set(self.key, payload)
        except StorageUnavailableError as e:
            logger.warning(f"Failed to save guest cart: {e}")

    def add(self, product: GuestProduct, quantity: int) -> List[CartLineItem]:
        """Increment the product's line, or append a new one."""
        cart = self.read()
        existing = next((item for item in cart if item.product_id == product.id), None)

        if existing:
            existing.quantity += quantity
        else:
            cart.append(CartLineItem(product_id=product.id, quantity=quantity, product=product))

        self.write(cart)
        logger.debug(f"Guest cart add {sanitize_id_for_logging(product.id)} x{quantity}")
        return cart

    def update(self, product_id: str, quantity: int) -> List[CartLineItem]:
        """Set the exact quantity; zero or less removes the line."""
        cart = self.read()
        item = next((item for item in cart if item.product_id == product_id), None)
        if item is None:
            return cart

        if quantity <= 0:
            return self.remove(product_id)

        item.quantity = quantity
        self.write(cart)
        return cart

    def remove(self, product_id: str) -> List[CartLineItem]:
        cart = [item for item in self.read() if item.product_id != product_id]
        self.write(cart)
        return cart

    def clear(self) -> None:
        try:
            self._storage.delete(self.key)
        except StorageUnavailableError as e:
            logger.warning(f"Failed to clear guest cart: {e}")

    def total(self) -> Decimal:
        """Sum of quantity x snapshot price over all lines."""
        return sum(
            (to_decimal(item.product.price) * item.quantity for item in self.read()),
            Decimal("0"),
        )

    def item_quantity(self) -> int:
        """Total units across all lines."""
        return sum(item.quantity or 0 for item in self.read())
