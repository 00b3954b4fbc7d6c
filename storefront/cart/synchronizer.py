"""
Cart State Synchronizer

Derives the single cart item count shown on the cart badge from
whichever backend is authoritative for the session:
- REMOTE (a session token is present): GET /api/cart
- GUEST (no token): the local guest cart

Every trigger (start, STORAGE_CHANGED, CART_UPDATED) runs the same full
refresh. Refreshes are not serialized: when several overlap, each one
publishes when it resolves, so the last to resolve wins. A failing
remote read never reaches subscribers; the guest-derived count is
published instead so a transient API error cannot empty the badge.
"""
from enum import Enum
from typing import Callable, List, Optional

from storefront.api.client import ApiClient
from storefront.api.models import RemoteCartData
from storefront.cart.counting import CountStrategy, extract_item_count
from storefront.cart.guest import GuestCart
from storefront.events import CartEvent, EventBus
from storefront.logging import get_logger
from storefront.session import Session

logger = get_logger(__name__)

CountListener = Callable[[int], None]


class SyncMode(str, Enum):
    REMOTE = "remote"
    GUEST = "guest"


class SyncState(str, Enum):
    UNKNOWN = "unknown"
    SYNCING = "syncing"
    SETTLED = "settled"


class CartSynchronizer:
    """Observable cart item count for one storefront session."""

    def __init__(
        self,
        session: Session,
        guest_cart: GuestCart,
        client: ApiClient,
        bus: EventBus,
        strategies: Optional[List[CountStrategy]] = None,
    ):
        self.session = session
        self.guest_cart = guest_cart
        self.client = client
        self.bus = bus
        self._strategies = strategies
        self._item_count = 0
        self._state = SyncState.UNKNOWN
        self._in_flight = 0
        self._listeners: List[CountListener] = []
        self._bus_unsubscribers: List[Callable[[], None]] = []

    @property
    def item_count(self) -> int:
        return self._item_count

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def mode(self) -> SyncMode:
        return SyncMode.REMOTE if self.session.token else SyncMode.GUEST

    @property
    def started(self) -> bool:
        return bool(self._bus_unsubscribers)

    # ==================== SUBSCRIBERS ====================

    def subscribe(self, listener: CountListener) -> Callable[[], None]:
        """Register a count listener; returns its unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: CountListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, count: int) -> None:
        self._item_count = count
        if self._in_flight == 0:
            self._state = SyncState.SETTLED
        for listener in list(self._listeners):
            try:
                listener(count)
            except Exception as e:
                logger.warning(f"Cart count listener failed: {e}", exc_info=True)

    # ==================== LIFECYCLE ====================

    async def start(self) -> int:
        """Listen for cart and storage signals and run the initial refresh."""
        if not self.started:
            for event in (CartEvent.STORAGE_CHANGED, CartEvent.CART_UPDATED):
                self._bus_unsubscribers.append(self.bus.subscribe(event, self.refresh))
        return await self.refresh()

    def stop(self) -> None:
        for unsubscribe in self._bus_unsubscribers:
            unsubscribe()
        self._bus_unsubscribers.clear()

    # ==================== REFRESH ====================

    async def refresh(self) -> int:
        """Re-derive the item count and publish it to every subscriber."""
        self._in_flight += 1
        self._state = SyncState.SYNCING
        try:
            if self.mode is SyncMode.REMOTE:
                count = await self._remote_count()
            else:
                count = self._guest_count()
        finally:
            self._in_flight -= 1

        self._publish(count)
        return count

    def _guest_count(self) -> int:
        return self.guest_cart.item_quantity()

    async def _remote_count(self) -> int:
        try:
            response = await self.client.get_cart()
        except Exception as e:
            logger.warning(f"Cart fetch raised, using guest cart count: {e}", exc_info=True)
            return self._guest_count()

        if not response.success:
            logger.warning(f"Cart fetch failed ({response.error}), using guest cart count")
            return self._guest_count()

        try:
            data = RemoteCartData.parse(response.data)
            return extract_item_count(data, self._strategies)
        except Exception as e:
            logger.warning(f"Malformed cart payload, using guest cart count: {e}", exc_info=True)
            return self._guest_count()
