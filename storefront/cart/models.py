"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Union

from storefront.services.money import multiply, round_money, to_decimal

Price = Union[str, int, float, Decimal]


@dataclass
class GuestProduct:
    """
    Product snapshot frozen into a guest cart line at add time.

    `price` is kept exactly as received (number or decimal string) so the
    stored layout matches what the server sent. `available_quantity` is
    the stock level seen when adding; it is not persisted.
    """
    id: str
    name: str
    slug: str
    price: Price
    images: List[str] = field(default_factory=list)
    available_quantity: Optional[int] = None

    @property
    def unit_price(self) -> Decimal:
        return to_decimal(self.price)

    @property
    def in_stock(self) -> bool:
        return self.available_quantity is None or self.available_quantity > 0

    def to_dict(self) -> dict:
        price = self.price
        if isinstance(price, Decimal):
            price = str(price)
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "price": price,
            "images": list(self.images),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GuestProduct":
        if not isinstance(data, dict):
            raise TypeError(f"product must be an object, got {type(data).__name__}")
        inventory = data.get("inventory")
        available = None
        if isinstance(inventory, dict) and inventory.get("quantity") is not None:
            available = int(inventory["quantity"])
        elif data.get("availableQuantity") is not None:
            available = int(data["availableQuantity"])
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            slug=str(data.get("slug", "")),
            price=data.get("price", 0),
            images=list(data.get("images") or []),
            available_quantity=available,
        )


@dataclass
class CartLineItem:
    """Single line of the guest cart, keyed by product id."""
    product_id: str
    quantity: int
    product: GuestProduct

    @property
    def subtotal(self) -> Decimal:
        return multiply(self.product.unit_price, self.quantity)

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "quantity": self.quantity,
            "product": self.product.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        if not isinstance(data, dict):
            raise TypeError(f"cart line must be an object, got {type(data).__name__}")
        return cls(
            product_id=str(data["productId"]),
            quantity=int(data["quantity"]),
            product=GuestProduct.from_dict(data["product"]),
        )


@dataclass
class CartViewLine:
    """Line as shown on the cart page, for either backend."""
    id: str
    quantity: int
    product_id: str
    name: str
    slug: str
    unit_price: Decimal
    images: List[str] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return round_money(multiply(self.unit_price, self.quantity))


@dataclass
class CartView:
    """Cart page contents from whichever backend is authoritative."""
    items: List[CartViewLine]
    total: Decimal
    item_count: int
    is_guest: bool

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)
