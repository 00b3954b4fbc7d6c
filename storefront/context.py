"""
StorefrontContext - wires the collaborators of one storefront session.

    async with StorefrontContext.create() as shop:
        shop.synchronizer.subscribe(render_badge)
        await shop.actions.add_to_cart(product)
        await shop.bus.drain()

Created at session start and closed at teardown; nothing is global, so
tests build a context over MemoryStorage and an httpx.MockTransport.
"""
from dataclasses import dataclass
from typing import Optional

import httpx

from storefront.api.client import ApiClient
from storefront.auth import AuthService
from storefront.cart.actions import CartActions, Navigate
from storefront.cart.guest import GuestCart
from storefront.cart.synchronizer import CartSynchronizer
from storefront.config import Settings
from storefront.events import EventBus
from storefront.logging import get_logger
from storefront.session import Session
from storefront.storage import KeyValueStore, create_storage

logger = get_logger(__name__)


@dataclass
class StorefrontContext:
    settings: Settings
    storage: KeyValueStore
    bus: EventBus
    session: Session
    client: ApiClient
    guest_cart: GuestCart
    synchronizer: CartSynchronizer
    actions: CartActions
    auth: AuthService

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        storage: Optional[KeyValueStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        navigate: Optional[Navigate] = None,
    ) -> "StorefrontContext":
        settings = settings or Settings.from_env()
        storage = storage if storage is not None else create_storage(settings)
        bus = EventBus()
        session = Session(storage)
        client = ApiClient(session, bus, settings=settings, transport=transport)
        guest_cart = GuestCart(storage)
        return cls(
            settings=settings,
            storage=storage,
            bus=bus,
            session=session,
            client=client,
            guest_cart=guest_cart,
            synchronizer=CartSynchronizer(session, guest_cart, client, bus),
            actions=CartActions(session, guest_cart, client, bus, navigate=navigate),
            auth=AuthService(session, client, bus),
        )

    async def start(self) -> int:
        """Begin listening for cart signals; returns the initial item count."""
        count = await self.synchronizer.start()
        logger.debug(f"Storefront context started (mode={self.synchronizer.mode.value}, items={count})")
        return count

    async def aclose(self) -> None:
        self.synchronizer.stop()
        await self.bus.drain()
        await self.client.aclose()

    async def __aenter__(self) -> "StorefrontContext":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
