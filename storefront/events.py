"""
Storefront Event Bus

Payload-free, fire-and-forget signals shared by the components of one
storefront session:
- STORAGE_CHANGED: the session credential or local store changed
  (login, logout, credential invalidated by the API client)
- CART_UPDATED: a cart mutation completed in this session

Listeners may be plain callables or coroutine functions. Coroutine
listeners are scheduled as tasks on the running loop; drain() waits for
everything scheduled so far.
"""
import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Set, Union

from storefront.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[], Union[None, Awaitable[Any]]]


class CartEvent(str, Enum):
    STORAGE_CHANGED = "storage"
    CART_UPDATED = "cartUpdated"


class EventBus:
    """Typed publish/subscribe channel."""

    def __init__(self):
        self._listeners: Dict[CartEvent, List[Listener]] = {event: [] for event in CartEvent}
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, event: CartEvent, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners[event].append(listener)

        def _unsubscribe() -> None:
            self.unsubscribe(event, listener)

        return _unsubscribe

    def unsubscribe(self, event: CartEvent, listener: Listener) -> None:
        listeners = self._listeners[event]
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: CartEvent) -> int:
        return len(self._listeners[event])

    def publish(self, event: CartEvent) -> None:
        """Notify every listener of the event. Never raises."""
        logger.debug(f"Publishing {event.value} to {len(self._listeners[event])} listener(s)")
        for listener in list(self._listeners[event]):
            try:
                result = listener()
            except Exception as e:
                logger.warning(f"Listener for {event.value} failed: {e}", exc_info=True)
                continue
            if inspect.isawaitable(result):
                self._schedule(event, result)

    def _schedule(self, event: CartEvent, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: nothing can drive the coroutine
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.warning(f"Dropped async listener for {event.value}: no running event loop")
            return
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Async listener failed: {exc}", exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait until every scheduled listener task has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
