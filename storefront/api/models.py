"""
API Pydantic Models

Tagged request results and the server payloads the cart flows read.
Server payload models are lenient: fields the server may omit or send
in an unexpected shape fall back to defaults instead of failing.
"""
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront.services.money import to_decimal


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _as_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


# ==================== RESULT ====================

class ApiResponse(BaseModel):
    """
    Outcome of one API request. Never raised, always returned.

    Extra fields from the server body (details, code, meta, ...) are kept.
    """
    model_config = ConfigDict(extra="allow")

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = None

    @field_validator("error", "message", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @classmethod
    def ok(cls, body: dict, status_code: Optional[int] = None) -> "ApiResponse":
        success = body.get("success")
        payload = {**body, "success": success if isinstance(success, bool) else True, "status_code": status_code}
        return cls.model_validate(payload)

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None, body: Optional[dict] = None) -> "ApiResponse":
        payload = dict(body or {})
        payload.update(success=False, error=error, status_code=status_code)
        return cls.model_validate(payload)


# ==================== CART ====================

class RemoteCartProduct(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    slug: str = ""
    price: Decimal = Decimal("0")
    images: List[str] = []
    available_quantity: int = Field(default=0, alias="availableQuantity")

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return to_decimal(v)

    @field_validator("available_quantity", mode="before")
    @classmethod
    def coerce_available(cls, v):
        return _as_int(v)


class RemoteCartItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    quantity: int = 0
    product: Optional[RemoteCartProduct] = None
    subtotal: Optional[Decimal] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _as_text(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v):
        return _as_int(v)

    @field_validator("product", mode="before")
    @classmethod
    def tolerate_product(cls, v):
        if v is None:
            return None
        try:
            return RemoteCartProduct.model_validate(v)
        except ValidationError:
            return None

    @field_validator("subtotal", mode="before")
    @classmethod
    def convert_subtotal(cls, v):
        return None if v is None else to_decimal(v)


class RemoteCartData(BaseModel):
    """Payload of GET /api/cart."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: List[RemoteCartItem] = []
    item_count: Optional[int] = Field(default=None, alias="itemCount")
    total: Optional[Decimal] = None

    @field_validator("items", mode="before")
    @classmethod
    def tolerate_items(cls, v):
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]

    @field_validator("item_count", mode="before")
    @classmethod
    def coerce_item_count(cls, v):
        return _as_int(v, default=None) if v is not None else None

    @field_validator("total", mode="before")
    @classmethod
    def convert_total(cls, v):
        return None if v is None else to_decimal(v)

    @classmethod
    def parse(cls, data: Any) -> "RemoteCartData":
        """Build from a server payload; anything that is not an object is an empty cart."""
        if not isinstance(data, dict):
            return cls()
        return cls.model_validate(data)


# ==================== REQUESTS ====================

class AddToCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    quantity: int


class OrderLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: int


class ShippingAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    address_line1: str = Field(alias="addressLine1")
    address_line2: Optional[str] = Field(default=None, alias="addressLine2")
    city: str
    province: Optional[str] = None
    postal_code: str = Field(alias="postalCode")
    phone: Optional[str] = None
    email: Optional[str] = None


class CreateOrderRequest(BaseModel):
    items: List[OrderLine]
    shipping_address: ShippingAddress = Field(alias="shippingAddress")

    model_config = ConfigDict(populate_by_name=True)
