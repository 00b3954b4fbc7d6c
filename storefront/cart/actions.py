"""
Cart mutation entry points.

Each mutation writes to exactly one backend, chosen by whether the
session holds a token at call time: the shop API (remote cart) or the
local guest cart. Remote and guest writes are never combined. After a
successful write CART_UPDATED is published, so the synchronizer
re-derives the badge count only once the write has completed.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union

from storefront.api.client import ApiClient
from storefront.api.models import OrderLine, RemoteCartData, ShippingAddress
from storefront.cart.guest import GuestCart
from storefront.cart.models import CartView, CartViewLine, GuestProduct
from storefront.config import CART_PAGE_PATH, ORDER_CONFIRMATION_PATH
from storefront.errors import (
    ERROR_ADD_TO_CART_FAILED,
    ERROR_EMPTY_CART,
    ERROR_INVALID_QUANTITY,
    ERROR_LOAD_CART_FAILED,
    ERROR_OUT_OF_STOCK,
    ERROR_PLACE_ORDER_FAILED,
    ERROR_REMOVE_ITEM_FAILED,
    ERROR_UPDATE_CART_FAILED,
)
from storefront.events import CartEvent, EventBus
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import to_decimal
from storefront.session import Session

logger = get_logger(__name__)

Navigate = Callable[[str], None]

GUEST_ORDER_NAME = "anonymous"


@dataclass
class MutationResult:
    """Outcome of a cart action, shown inline when it failed."""
    success: bool
    error: Optional[str] = None
    redirect_to: Optional[str] = None
    data: Any = None


def _valid_quantity(quantity: Any) -> bool:
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1


def _no_navigation(path: str) -> None:
    logger.debug(f"Navigation to {path} ignored (no navigator)")


class CartActions:
    """Add, update, remove, view and check out the session's cart."""

    def __init__(
        self,
        session: Session,
        guest_cart: GuestCart,
        client: ApiClient,
        bus: EventBus,
        navigate: Optional[Navigate] = None,
    ):
        self.session = session
        self.guest_cart = guest_cart
        self.client = client
        self.bus = bus
        self.navigate = navigate or _no_navigation

    def _succeed(self, redirect_to: Optional[str] = None, data: Any = None) -> MutationResult:
        self.bus.publish(CartEvent.CART_UPDATED)
        if redirect_to:
            self.navigate(redirect_to)
        return MutationResult(success=True, redirect_to=redirect_to, data=data)

    # ==================== ADD ====================

    async def add_to_cart(
        self,
        product: Union[GuestProduct, Dict[str, Any]],
        quantity: int = 1,
    ) -> MutationResult:
        """
        Add `quantity` units of `product` and go to the cart page.

        Quantity and known stock are checked here, before either backend
        is touched; the guest cart itself does not validate.
        """
        if isinstance(product, dict):
            product = GuestProduct.from_dict(product)

        if not _valid_quantity(quantity):
            return MutationResult(success=False, error=ERROR_INVALID_QUANTITY)
        if not product.in_stock:
            return MutationResult(success=False, error=ERROR_OUT_OF_STOCK)

        if self.session.token:
            response = await self.client.add_cart_item(product.id, quantity)
            if not response.success:
                logger.info(
                    f"Add to cart rejected for {sanitize_id_for_logging(product.id)}: {response.error}"
                )
                return MutationResult(success=False, error=response.error or ERROR_ADD_TO_CART_FAILED)
            return self._succeed(CART_PAGE_PATH, data=response.data)

        self.guest_cart.add(product, quantity)
        return self._succeed(CART_PAGE_PATH)

    # ==================== UPDATE / REMOVE ====================

    async def update_quantity(self, item_id: str, quantity: int) -> MutationResult:
        """Set a line's quantity. Values below 1 are ignored; use remove_item."""
        if not _valid_quantity(quantity):
            return MutationResult(success=False, error=ERROR_INVALID_QUANTITY)

        if not self.session.token:
            self.guest_cart.update(item_id, quantity)
            return self._succeed()

        response = await self.client.update_cart_item(item_id, quantity)
        if not response.success:
            return MutationResult(success=False, error=response.error or ERROR_UPDATE_CART_FAILED)
        return self._succeed(data=response.data)

    async def remove_item(self, item_id: str) -> MutationResult:
        if not self.session.token:
            self.guest_cart.remove(item_id)
            return self._succeed()

        response = await self.client.remove_cart_item(item_id)
        if not response.success:
            return MutationResult(success=False, error=response.error or ERROR_REMOVE_ITEM_FAILED)
        return self._succeed()

    # ==================== VIEW ====================

    def _guest_view(self) -> CartView:
        lines = self.guest_cart.read()
        return CartView(
            items=[
                CartViewLine(
                    id=line.product_id,
                    quantity=line.quantity,
                    product_id=line.product_id,
                    name=line.product.name,
                    slug=line.product.slug,
                    unit_price=line.product.unit_price,
                    images=list(line.product.images),
                )
                for line in lines
            ],
            total=self.guest_cart.total(),
            item_count=len(lines),
            is_guest=True,
        )

    @staticmethod
    def _remote_view(data: RemoteCartData) -> CartView:
        items = []
        for item in data.items:
            product = item.product
            product_id = product.id if product else (item.id or "")
            items.append(
                CartViewLine(
                    id=item.id or product_id,
                    quantity=item.quantity,
                    product_id=product_id,
                    name=product.name if product else "",
                    slug=product.slug if product else "",
                    unit_price=product.price if product else Decimal("0"),
                    images=list(product.images) if product else [],
                )
            )
        total = data.total if data.total is not None else sum(
            (to_decimal(line.unit_price) * line.quantity for line in items), Decimal("0")
        )
        item_count = data.item_count if data.item_count is not None else len(items)
        return CartView(items=items, total=total, item_count=item_count, is_guest=False)

    async def load_cart(self) -> CartView:
        """Cart page contents; a failed remote read shows the guest cart."""
        if not self.session.token:
            return self._guest_view()

        try:
            response = await self.client.get_cart()
        except Exception as e:
            logger.error(f"Error fetching cart: {e}", exc_info=True)
            return self._guest_view()

        if not response.success:
            logger.warning(f"Error fetching cart: {response.error}")
            return self._guest_view()
        return self._remote_view(RemoteCartData.parse(response.data))

    # ==================== CHECKOUT ====================

    async def _order_lines(self) -> Optional[List[OrderLine]]:
        if not self.session.token:
            return [
                OrderLine(product_id=line.product_id, quantity=line.quantity)
                for line in self.guest_cart.read()
            ]

        response = await self.client.get_cart()
        if not response.success:
            return None
        data = RemoteCartData.parse(response.data)
        return [
            OrderLine(product_id=item.product.id, quantity=item.quantity)
            for item in data.items
            if item.product is not None
        ]

    async def checkout(self, shipping_address: Union[ShippingAddress, Dict[str, Any]]) -> MutationResult:
        """
        Place an order for the authoritative cart, then clear that cart.

        Guest orders are placed under the name "anonymous".
        """
        if isinstance(shipping_address, dict):
            shipping_address = ShippingAddress.model_validate(shipping_address)

        is_guest = not self.session.token
        lines = await self._order_lines()
        if lines is None:
            return MutationResult(success=False, error=ERROR_LOAD_CART_FAILED)
        if not lines:
            return MutationResult(success=False, error=ERROR_EMPTY_CART)

        if is_guest:
            shipping_address = shipping_address.model_copy(update={"name": GUEST_ORDER_NAME})

        response = await self.client.create_order(lines, shipping_address)
        if not response.success or not response.data:
            return MutationResult(success=False, error=response.error or ERROR_PLACE_ORDER_FAILED)

        if is_guest:
            self.guest_cart.clear()
        else:
            cleared = await self.client.clear_cart()
            if not cleared.success:
                logger.warning(f"Order placed but remote cart not cleared: {cleared.error}")

        order = response.data if isinstance(response.data, dict) else {}
        order_id = order.get("id") or order.get("orderNumber")
        logger.info(f"Order {sanitize_id_for_logging(str(order_id))} placed ({'guest' if is_guest else 'member'})")
        redirect = ORDER_CONFIRMATION_PATH.format(order_id=order_id) if order_id else None
        return self._succeed(redirect, data=response.data)
