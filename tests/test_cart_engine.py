"""Tests for the cart engine."""
from __future__ import annotations

import asyncio
import json

import pytest

from storefront.models.cart import Cart, CartItem, MetaData
from storefront.services.cart_engine import CartEngine, CheckoutError, EmptyCartError

from tests.fakes import BrokenStore, FakeCatalog, FakeOrders

KEY = "intellismart_cart:test"


async def make_engine(store, catalog, orders, **kwargs) -> CartEngine:
    return await CartEngine.create(store, catalog, orders, key=KEY, **kwargs)


@pytest.mark.asyncio
async def test_new_engine_starts_with_empty_cart(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    cart = await engine.get_cart()

    assert cart.items == []
    assert cart.coupon_code is None
    assert cart.subtotal == 0.0
    assert cart.shipping == 0.0
    assert cart.tax == 0.0
    assert cart.total == 0.0


@pytest.mark.asyncio
async def test_get_cart_is_idempotent(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 2)
    await engine.add_item(3, 1)

    first = await engine.get_cart()
    second = await engine.get_cart()

    assert first.model_dump() == second.model_dump()


@pytest.mark.asyncio
async def test_adding_same_product_merges_lines(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    await engine.add_item(1, 2)
    cart = await engine.add_item(1, 3)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 5
    assert cart.subtotal == 50.0


@pytest.mark.asyncio
async def test_variations_are_separate_lines(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    await engine.add_item(1, 1)
    await engine.add_item(1, 1, variation_id=7)
    cart = await engine.add_item(1, 1, variation_id=7)

    assert [(i.variation_id, i.quantity) for i in cart.items] == [(None, 1), (7, 2)]
    assert cart.items[0].id != cart.items[1].id


@pytest.mark.asyncio
async def test_zero_variation_means_no_variation(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    await engine.add_item(1, 1)
    cart = await engine.add_item(1, 1, variation_id=0)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2


@pytest.mark.asyncio
async def test_item_id_encodes_product_and_variation(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    cart = await engine.add_item(2, 1, variation_id=9)

    assert cart.items[0].id.startswith("2-9-")


@pytest.mark.asyncio
async def test_add_rejects_non_positive_quantity(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    with pytest.raises(ValueError):
        await engine.add_item(1, 0)


@pytest.mark.asyncio
async def test_update_quantity_sets_exact_value(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    cart = await engine.add_item(1, 2)

    cart = await engine.update_quantity(cart.items[0].id, 7)

    assert cart.items[0].quantity == 7
    assert cart.subtotal == 70.0


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [0, -5])
async def test_update_quantity_to_zero_or_less_removes_line(store, catalog, orders, quantity):
    engine = await make_engine(store, catalog, orders)
    cart = await engine.add_item(1, 2)

    cart = await engine.update_quantity(cart.items[0].id, quantity)

    assert cart.items == []
    assert cart.shipping == 0.0


@pytest.mark.asyncio
async def test_unknown_item_ids_are_ignored(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 2)

    await engine.update_quantity("missing", 4)
    await engine.update_item("missing", variation={"color": "red"})
    cart = await engine.remove_item("missing")

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2


@pytest.mark.asyncio
async def test_remove_item(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 1)
    cart = await engine.add_item(2, 2)

    cart = await engine.remove_item(cart.items[0].id)

    assert [i.product_id for i in cart.items] == [2]
    assert cart.subtotal == 9.0


@pytest.mark.asyncio
async def test_update_item_keeps_id_and_quantity(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    cart = await engine.add_item(1, 3)
    item_id = cart.items[0].id

    cart = await engine.update_item(
        item_id,
        variation={"color": "graphite"},
        meta_data=[MetaData(key="gift_wrap", value=True)],
    )

    item = cart.items[0]
    assert item.id == item_id
    assert item.quantity == 3
    assert item.variation == {"color": "graphite"}
    assert item.meta_data[0].key == "gift_wrap"


@pytest.mark.asyncio
async def test_totals_follow_pricing_rules(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    cart = await engine.add_item(1, 2)

    assert cart.subtotal == 20.0
    assert cart.shipping == 10.0
    assert cart.tax == 2.0
    assert cart.discount == 0.0
    assert cart.total == 32.0


@pytest.mark.asyncio
async def test_total_matches_unrounded_components(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    cart = await engine.add_item(3, 3)

    raw_subtotal = 19.99 * 3
    raw_tax = raw_subtotal * 0.1
    assert cart.subtotal == round(raw_subtotal, 2)
    assert cart.tax == round(raw_tax, 2)
    assert cart.total == round(raw_subtotal + 10.0 + raw_tax - 0.0, 2)


@pytest.mark.asyncio
async def test_prices_are_fetched_fresh_on_every_read(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 1)

    catalog.prices[1] = 12.0
    cart = await engine.get_cart()

    assert cart.subtotal == 12.0


@pytest.mark.asyncio
async def test_missing_product_prices_at_zero(store, orders):
    catalog = FakeCatalog(prices={1: 10.0})
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 2)
    await engine.add_item(99, 4)

    cart = await engine.get_cart()

    assert cart.subtotal == 20.0
    assert len(cart.items) == 2


@pytest.mark.asyncio
async def test_failing_lookup_prices_at_zero(store, orders):
    catalog = FakeCatalog(prices={1: 10.0, 2: 5.0}, broken={2})
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 2)

    cart = await engine.add_item(2, 1)

    assert cart.subtotal == 20.0
    assert cart.total == 32.0


@pytest.mark.asyncio
async def test_coupon_uses_discount_policy(store, catalog, orders):
    engine = await make_engine(
        store, catalog, orders,
        discount_policy=lambda subtotal, code: subtotal * 0.25 if code == "QUARTER" else 0.0,
    )
    await engine.add_item(1, 4)

    cart = await engine.apply_coupon("QUARTER")

    assert cart.coupon_code == "QUARTER"
    assert cart.discount == 10.0
    assert cart.total == 40.0 + 10.0 + 4.0 - 10.0


@pytest.mark.asyncio
async def test_default_coupon_is_accepted_without_discount(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 1)

    cart = await engine.apply_coupon("ANYTHING")

    assert cart.coupon_code == "ANYTHING"
    assert cart.discount == 0.0


@pytest.mark.asyncio
async def test_remove_coupon_clears_discount(store, catalog, orders):
    engine = await make_engine(store, catalog, orders, discount_policy=lambda subtotal, code: 3.0)
    await engine.add_item(1, 1)
    await engine.apply_coupon("X")

    cart = await engine.remove_coupon()

    assert cart.coupon_code is None
    assert cart.discount == 0.0
    assert cart.total == 21.0


@pytest.mark.asyncio
async def test_returned_cart_is_a_snapshot(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    cart = await engine.add_item(1, 1)

    cart.items.clear()
    cart.total = 999.0

    fresh = await engine.get_cart()
    assert len(fresh.items) == 1
    assert fresh.total == 21.0


@pytest.mark.asyncio
async def test_clear_empties_and_persists(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 1)
    await engine.apply_coupon("X")

    cart = await engine.clear()

    assert cart.items == []
    assert cart.coupon_code is None
    stored = Cart.model_validate_json(store.data[KEY])
    assert stored.items == []


# ==================== Persistence ====================


@pytest.mark.asyncio
async def test_every_mutation_is_persisted(store, catalog, orders):
    engine = await make_engine(store, catalog, orders)

    await engine.add_item(1, 2)

    stored = json.loads(store.data[KEY])
    assert stored["items"][0]["product_id"] == 1
    assert stored["items"][0]["quantity"] == 2
    assert stored["total"] == 32.0


@pytest.mark.asyncio
async def test_cart_is_restored_from_store(store, catalog, orders):
    first = await make_engine(store, catalog, orders)
    await first.add_item(1, 2)
    await first.apply_coupon("WELCOME")

    second = await make_engine(store, catalog, orders)
    cart = await second.get_cart()

    assert [(i.product_id, i.quantity) for i in cart.items] == [(1, 2)]
    assert cart.coupon_code == "WELCOME"
    assert cart.total == 32.0


@pytest.mark.asyncio
async def test_unreadable_stored_cart_starts_empty(store, catalog, orders):
    store.data[KEY] = "{not json"

    engine = await make_engine(store, catalog, orders)
    cart = await engine.get_cart()

    assert cart.items == []


@pytest.mark.asyncio
async def test_invalid_stored_cart_starts_empty(store, catalog, orders):
    store.data[KEY] = json.dumps({"items": [{"id": "x", "product_id": 1, "quantity": 0}]})

    engine = await make_engine(store, catalog, orders)

    assert (await engine.get_cart()).items == []


@pytest.mark.asyncio
async def test_store_failures_are_not_fatal(catalog, orders):
    engine = await make_engine(BrokenStore(), catalog, orders)

    cart = await engine.add_item(1, 1)
    cart = await engine.add_item(1, 1)

    assert cart.items[0].quantity == 2
    assert cart.total == 32.0


# ==================== Checkout ====================


@pytest.mark.asyncio
async def test_successful_checkout_clears_cart(store, catalog, orders, customer):
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 2)

    order = await engine.checkout(customer)

    assert order["id"] == 501
    assert (await engine.get_cart()).items == []
    assert Cart.model_validate_json(store.data[KEY]).items == []


@pytest.mark.asyncio
async def test_failed_checkout_keeps_cart(store, catalog, customer):
    orders = FakeOrders(ok=False)
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 2)
    await engine.add_item(2, 1)

    with pytest.raises(CheckoutError) as exc_info:
        await engine.checkout(customer)

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    cart = await engine.get_cart()
    assert [(i.product_id, i.quantity) for i in cart.items] == [(1, 2), (2, 1)]


@pytest.mark.asyncio
async def test_checkout_without_order_id_keeps_cart(store, catalog, customer):
    orders = FakeOrders(order_id=None)
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 1)

    order = await engine.checkout(customer)

    assert order["id"] is None
    assert len((await engine.get_cart()).items) == 1


@pytest.mark.asyncio
async def test_checkout_of_empty_cart_is_rejected(store, catalog, orders, customer):
    engine = await make_engine(store, catalog, orders)

    with pytest.raises(EmptyCartError):
        await engine.checkout(customer)

    assert orders.payloads == []


@pytest.mark.asyncio
async def test_checkout_submits_priced_order_payload(store, catalog, orders, customer):
    engine = await make_engine(store, catalog, orders, discount_policy=lambda subtotal, code: 5.0)
    await engine.add_item(1, 2)
    await engine.add_item(2, 1, variation_id=11)
    await engine.apply_coupon("FIVE")

    await engine.checkout(customer)

    payload = orders.payloads[0]
    assert payload["payment_method"] == "bacs"
    assert payload["status"] == "pending"
    assert payload["customer_id"] == 0
    assert payload["line_items"] == [
        {"product_id": 1, "variation_id": 0, "quantity": 2, "meta_data": []},
        {"product_id": 2, "variation_id": 11, "quantity": 1, "meta_data": []},
    ]
    assert payload["shipping_lines"][0]["total"] == "10.00"
    assert payload["fee_lines"] == [{"name": "Discount", "total": "-5.00"}]
    assert payload["coupon_lines"] == [{"code": "FIVE", "discount": "5.00"}]


@pytest.mark.asyncio
async def test_unknown_item_id_still_reprices_restored_cart(store, catalog, orders):
    stale = Cart(items=[CartItem(id="1-0-1", product_id=1, quantity=1)], subtotal=99.0, total=99.0)
    store.data[KEY] = stale.model_dump_json()
    engine = await make_engine(store, catalog, orders)

    updated = await engine.update_quantity("missing", 3)
    edited = await engine.update_item("missing", variation={"color": "red"})

    assert updated.subtotal == 10.0
    assert updated.total == 21.0
    assert edited.subtotal == 10.0


@pytest.mark.asyncio
async def test_concurrent_read_and_clear_leave_consistent_totals(store, orders):
    catalog = FakeCatalog(prices={1: 10.0}, delay=0.01)
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 2)

    await asyncio.gather(engine.get_cart(), engine.clear())

    stored = Cart.model_validate_json(store.data[KEY])
    assert stored.items == []
    assert stored.subtotal == 0.0
    assert stored.total == 0.0
    assert (await engine.get_cart()).total == 0.0


@pytest.mark.asyncio
async def test_items_added_during_checkout_are_kept(store, catalog, customer):
    orders = FakeOrders(delay=0.01)
    engine = await make_engine(store, catalog, orders)
    await engine.add_item(1, 1)

    order, cart = await asyncio.gather(engine.checkout(customer), engine.add_item(2, 3))

    assert order["id"] == 501
    assert [line["product_id"] for line in orders.payloads[0]["line_items"]] == [1]
    assert [(i.product_id, i.quantity) for i in cart.items] == [(2, 3)]
    assert [i.product_id for i in (await engine.get_cart()).items] == [2]
