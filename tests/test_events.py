"""Tests for the event bus"""
import asyncio

import pytest

from storefront.events import CartEvent, EventBus


def test_sync_listener_called():
    bus = EventBus()
    calls = []
    bus.subscribe(CartEvent.CART_UPDATED, lambda: calls.append(1))

    bus.publish(CartEvent.CART_UPDATED)

    assert calls == [1]


def test_events_are_independent():
    bus = EventBus()
    calls = []
    bus.subscribe(CartEvent.CART_UPDATED, lambda: calls.append("cart"))

    bus.publish(CartEvent.STORAGE_CHANGED)

    assert calls == []


def test_unsubscribe_callable():
    bus = EventBus()
    calls = []
    unsubscribe = bus.subscribe(CartEvent.STORAGE_CHANGED, lambda: calls.append(1))

    unsubscribe()
    unsubscribe()
    bus.publish(CartEvent.STORAGE_CHANGED)

    assert calls == []
    assert bus.listener_count(CartEvent.STORAGE_CHANGED) == 0


def test_failing_listener_does_not_stop_others():
    bus = EventBus()
    calls = []

    def broken():
        raise RuntimeError("listener bug")

    bus.subscribe(CartEvent.CART_UPDATED, broken)
    bus.subscribe(CartEvent.CART_UPDATED, lambda: calls.append(1))

    bus.publish(CartEvent.CART_UPDATED)

    assert calls == [1]


def test_async_listener_without_loop_is_dropped():
    bus = EventBus()

    async def listener():
        raise AssertionError("must not run")

    bus.subscribe(CartEvent.CART_UPDATED, listener)

    bus.publish(CartEvent.CART_UPDATED)

    assert bus.pending == 0


@pytest.mark.asyncio
async def test_async_listener_scheduled_and_drained():
    bus = EventBus()
    calls = []

    async def listener():
        await asyncio.sleep(0)
        calls.append("done")

    bus.subscribe(CartEvent.CART_UPDATED, listener)

    bus.publish(CartEvent.CART_UPDATED)
    assert calls == []
    assert bus.pending == 1

    await bus.drain()

    assert calls == ["done"]
    assert bus.pending == 0


@pytest.mark.asyncio
async def test_failing_async_listener_is_contained():
    bus = EventBus()

    async def listener():
        raise RuntimeError("refresh bug")

    bus.subscribe(CartEvent.STORAGE_CHANGED, listener)

    bus.publish(CartEvent.STORAGE_CHANGED)
    await bus.drain()

    assert bus.pending == 0
