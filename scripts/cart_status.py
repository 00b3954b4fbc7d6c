#!/usr/bin/env python3
"""
Print the cart state of a storefront session.

Reads settings from the environment (and .env). With the Redis backend
this shows the cart of whatever session is stored under the prefix.

Usage:
    python scripts/cart_status.py
    python scripts/cart_status.py --items
    python scripts/cart_status.py --clear-guest
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from storefront.config import Settings  # noqa: E402
from storefront.context import StorefrontContext  # noqa: E402
from storefront.events import CartEvent  # noqa: E402


async def show_status(show_items: bool, clear_guest: bool) -> int:
    async with StorefrontContext.create(Settings.from_env()) as shop:
        if clear_guest:
            shop.guest_cart.clear()
            shop.bus.publish(CartEvent.CART_UPDATED)
            await shop.bus.drain()

        user = shop.auth.user
        print(f"Mode:       {shop.synchronizer.mode.value}")
        print(f"User:       {user.email if user else 'guest'}")
        print(f"Item count: {shop.synchronizer.item_count}")

        view = await shop.actions.load_cart()
        print(f"Total:      {view.total:.2f}")
        if show_items:
            for line in view.items:
                print(f"  {line.quantity} x {line.name or line.product_id} @ {line.unit_price} = {line.subtotal}")
            if view.is_empty:
                print("  (empty)")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Show storefront cart status")
    parser.add_argument("--items", action="store_true", help="list cart lines")
    parser.add_argument("--clear-guest", action="store_true", help="empty the guest cart first")
    args = parser.parse_args()

    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return asyncio.run(show_status(args.items, args.clear_guest))


if __name__ == "__main__":
    sys.exit(main())
