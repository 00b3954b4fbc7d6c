"""
Tests for the guest cart store and cart models
"""

import json
from decimal import Decimal

import pytest

from storefront.cart import CartLineItem, GuestCart, GuestProduct
from storefront.config import GUEST_CART_KEY
from storefront.errors import StorageUnavailableError
from storefront.storage import MemoryStorage


def make_product(product_id="prod-1", price="10.50", name="Lavender Soap"):
    return GuestProduct(id=product_id, name=name, slug=name.lower().replace(" ", "-"), price=price, images=[])


class BrokenStorage:
    """Store whose backend is down."""

    def get(self, key):
        raise StorageUnavailableError("backend down")

    def set(self, key, value):
        raise StorageUnavailableError("backend down")

    def delete(self, key):
        raise StorageUnavailableError("backend down")


class TestGuestProduct:
    """Tests for GuestProduct dataclass."""

    def test_unit_price_from_string(self):
        assert make_product(price="10.50").unit_price == Decimal("10.50")

    def test_unit_price_from_number(self):
        assert make_product(price=5).unit_price == Decimal("5")

    def test_from_dict_reads_inventory(self, sample_product):
        product = GuestProduct.from_dict(sample_product)

        assert product.available_quantity == 12
        assert product.in_stock is True

    def test_out_of_stock(self, sample_product):
        product = GuestProduct.from_dict({**sample_product, "inventory": {"quantity": 0}})

        assert product.in_stock is False

    def test_unknown_inventory_counts_as_in_stock(self):
        assert make_product().in_stock is True

    def test_to_dict_drops_inventory(self, sample_product):
        data = GuestProduct.from_dict(sample_product).to_dict()

        assert set(data) == {"id", "name", "slug", "price", "images"}
        assert data["price"] == "10.50"


class TestCartLineItem:
    """Tests for CartLineItem dataclass."""

    def test_stored_layout_uses_camel_case(self):
        item = CartLineItem(product_id="prod-1", quantity=2, product=make_product())

        data = item.to_dict()

        assert data["productId"] == "prod-1"
        assert data["quantity"] == 2
        assert data["product"]["slug"] == "lavender-soap"

    def test_subtotal(self):
        item = CartLineItem(product_id="prod-1", quantity=3, product=make_product(price="2.25"))

        assert item.subtotal == Decimal("6.75")


class TestGuestCart:
    """Tests for GuestCart over the local store."""

    def test_read_empty(self, storage):
        assert GuestCart(storage).read() == []

    def test_add_new_product(self, storage):
        cart = GuestCart(storage)

        cart.add(make_product(), 2)

        items = cart.read()
        assert len(items) == 1
        assert items[0].product_id == "prod-1"
        assert items[0].quantity == 2

    def test_add_same_product_merges_lines(self, storage):
        cart = GuestCart(storage)
        product = make_product()

        cart.add(product, 2)
        cart.add(product, 3)

        items = cart.read()
        assert len(items) == 1
        assert items[0].quantity == 5

    def test_add_keeps_insertion_order(self, storage):
        cart = GuestCart(storage)

        cart.add(make_product("b"), 1)
        cart.add(make_product("a"), 1)
        cart.add(make_product("b"), 1)

        assert [item.product_id for item in cart.read()] == ["b", "a"]

    def test_add_does_not_validate_quantity(self, storage):
        cart = GuestCart(storage)

        cart.add(make_product(), 0)

        assert cart.read()[0].quantity == 0

    def test_update_sets_exact_quantity(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product(), 2)

        cart.update("prod-1", 7)

        assert cart.read()[0].quantity == 7

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_non_positive_removes(self, storage, quantity):
        cart = GuestCart(storage)
        cart.add(make_product("prod-1"), 2)
        cart.add(make_product("prod-2"), 1)

        cart.update("prod-1", quantity)

        assert [item.product_id for item in cart.read()] == ["prod-2"]

    def test_update_zero_equals_remove(self):
        updated, removed = GuestCart(MemoryStorage()), GuestCart(MemoryStorage())
        for cart in (updated, removed):
            cart.add(make_product("prod-1"), 2)
            cart.add(make_product("prod-2"), 4)

        updated.update("prod-1", 0)
        removed.remove("prod-1")

        assert [i.to_dict() for i in updated.read()] == [i.to_dict() for i in removed.read()]

    def test_update_missing_product_is_noop(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product(), 2)

        cart.update("missing", 5)

        assert cart.read()[0].quantity == 2

    def test_remove_missing_product_is_noop(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product(), 1)

        cart.remove("missing")

        assert len(cart.read()) == 1

    def test_operation_sequence_reflects_net_quantities(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product("a"), 1)
        cart.add(make_product("b"), 2)
        cart.add(make_product("c"), 3)
        cart.add(make_product("a"), 4)
        cart.update("b", 0)
        cart.update("c", 9)
        cart.remove("d")

        assert {item.product_id: item.quantity for item in cart.read()} == {"a": 5, "c": 9}

    def test_clear(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product(), 1)

        cart.clear()

        assert GUEST_CART_KEY not in storage
        assert cart.read() == []

    def test_total_mixes_string_and_numeric_prices(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product("prod-1", price="10.50"), 2)
        cart.add(make_product("prod-2", price=5), 1)

        assert cart.total() == Decimal("26.00")

    def test_total_empty_cart(self, storage):
        assert GuestCart(storage).total() == Decimal("0")

    def test_item_quantity(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product("prod-1"), 2)
        cart.add(make_product("prod-2"), 3)

        assert cart.item_quantity() == 5

    def test_write_overwrites_single_key(self, storage):
        cart = GuestCart(storage)
        cart.add(make_product("prod-1"), 2)

        stored = json.loads(storage.get(GUEST_CART_KEY))

        assert stored == [
            {
                "productId": "prod-1",
                "quantity": 2,
                "product": {
                    "id": "prod-1",
                    "name": "Lavender Soap",
                    "slug": "lavender-soap",
                    "price": "10.50",
                    "images": [],
                },
            }
        ]

    def test_reads_layout_written_by_web_client(self):
        raw = json.dumps([
            {
                "productId": "p-9",
                "quantity": 4,
                "product": {"id": "p-9", "name": "Candle", "slug": "candle", "price": 12.5, "images": ["a.jpg"]},
            }
        ])
        cart = GuestCart(MemoryStorage({GUEST_CART_KEY: raw}))

        items = cart.read()

        assert items[0].quantity == 4
        assert cart.total() == Decimal("50.0")

    @pytest.mark.parametrize("raw", [
        "not json",
        "{\"productId\": 1}",
        "[{\"quantity\": 1}]",
        "42",
        "[\"line\"]",
        "[{\"productId\": \"p\", \"quantity\": 1, \"product\": \"x\"}]",
        "[{\"productId\": \"p\", \"quantity\": 1, \"product\": [1]}]",
    ])
    def test_corrupted_data_reads_as_empty(self, raw):
        cart = GuestCart(MemoryStorage({GUEST_CART_KEY: raw}))

        assert cart.read() == []
        assert cart.total() == Decimal("0")

    def test_unavailable_storage_reads_as_empty(self):
        cart = GuestCart(BrokenStorage())

        assert cart.read() == []
        assert cart.item_quantity() == 0

    def test_unavailable_storage_writes_do_not_raise(self):
        cart = GuestCart(BrokenStorage())

        cart.add(make_product(), 1)
        cart.remove("prod-1")
        cart.clear()
