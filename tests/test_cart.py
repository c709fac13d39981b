import random
from datetime import timedelta
from decimal import Decimal

import pytest

from app.services.cart import Cart, CartStore, Modifier


def test_cart_totals_follow_modifiers_and_quantity_changes():
    cart = Cart(restaurant_id=1)
    a = cart.add_line(1, "A", Decimal("10.00"))
    assert cart.total_price == Decimal("10.00")
    assert cart.total_items == 1

    b = cart.add_line(
        2, "B", Decimal("8.00"), quantity=2,
        size=Modifier("Large", Decimal("2.00")),
        extras=[Modifier("Cheese", Decimal("1.50"))],
    )
    assert b.line_total == Decimal("23.00")
    assert cart.total_price == Decimal("33.00")
    assert cart.total_items == 3

    cart.set_quantity(a.id, 0)
    assert cart.get(a.id) is None
    assert cart.total_price == Decimal("23.00")
    assert cart.total_items == 2

    cart.clear()
    assert cart.total_price == Decimal("0")
    assert cart.total_items == 0
    assert len(cart) == 0


def test_identical_selections_stay_separate_lines():
    cart = Cart(1)
    first = cart.add_line(1, "Soda", 3)
    second = cart.add_line(1, "Soda", 3)
    assert first.id != second.id
    assert len(cart) == 2
    assert cart.total_items == 2

    cart.set_quantity(first.id, 5)
    assert second.quantity == 1
    assert cart.total_items == 6
    cart.remove_line(second.id)
    assert cart.get(first.id).quantity == 5
    assert cart.total_price == Decimal("15")


@pytest.mark.parametrize("quantity", [0, -3])
def test_non_positive_quantity_adds_nothing(quantity):
    cart = Cart(1)
    assert cart.add_line(1, "Soda", 3, quantity=quantity) is None
    assert len(cart) == 0


def test_set_quantity_and_remove_line():
    cart = Cart(1)
    line = cart.add_line(1, "Soda", "3.00")
    cart.set_quantity(line.id, 4)
    assert cart.total_items == 4
    assert cart.total_price == Decimal("12.00")
    cart.set_quantity("missing", 2)
    assert cart.total_items == 4
    cart.remove_line(line.id)
    assert cart.total_items == 0


def test_to_dict_reports_selected_options():
    cart = Cart(7)
    cart.add_line(3, "Burger", 10, size=Modifier("Large", Decimal("2")), extras=[Modifier("Bacon", Decimal("1"))])
    data = cart.to_dict()
    assert data["restaurant_id"] == 7
    line = data["lines"][0]
    assert line["selected_options"] == {
        "size": {"name": "Large", "price": 2.0},
        "extras": [{"name": "Bacon", "price": 1.0}],
    }
    assert line["line_total"] == 13.0
    assert data["total_price"] == 13.0


def test_store_reuses_token_for_same_restaurant():
    store = CartStore()
    token, cart = store.open(None, 1)
    cart.add_line(1, "Soda", 3)
    again, same = store.open(token, 1)
    assert again == token
    assert same is cart
    assert store.peek(token).total_items == 1


def test_store_starts_new_cart_for_other_restaurant():
    store = CartStore()
    token, cart = store.open(None, 1)
    other_token, other = store.open(token, 2)
    assert other_token != token
    assert other is not cart
    assert other.restaurant_id == 2


def test_store_drops_idle_carts():
    store = CartStore()
    token, _ = store.open(None, 1)
    store.idle = timedelta(seconds=-1)
    new_token, _ = store.open("unknown", 1)
    assert store.peek(token) is None
    assert len(store) == 1
    store.discard(new_token)
    assert len(store) == 0


def test_unknown_line_id_leaves_totals_alone():
    cart = Cart(1)
    cart.add_line(1, "Soda", "3.00", quantity=2)
    before = (cart.total_items, cart.total_price, len(cart))
    cart.remove_line("missing")
    cart.set_quantity("missing", 0)
    cart.set_quantity("missing", -1)
    assert (cart.total_items, cart.total_price, len(cart)) == before


@pytest.mark.parametrize("quantity", [-1, -50])
def test_negative_set_quantity_removes_line(quantity):
    cart = Cart(1)
    keep = cart.add_line(1, "Soda", "3.00")
    drop = cart.add_line(2, "Burger", "10.00", quantity=2)
    cart.set_quantity(drop.id, quantity)
    assert cart.get(drop.id) is None
    assert cart.lines == [keep]
    assert cart.total_items == 1
    assert cart.total_price == Decimal("3.00")


def _assert_totals_consistent(cart):
    assert cart.total_items == sum(line.quantity for line in cart)
    assert cart.total_price == sum((line.line_total for line in cart), Decimal("0"))
    assert all(line.quantity > 0 for line in cart)


@pytest.mark.parametrize("seed", range(8))
def test_totals_hold_across_random_edits(seed):
    rng = random.Random(seed)
    cart = Cart(1)
    sizes = [None, Modifier("Large", Decimal("2.00"))]
    extras = [Modifier("Cheese", Decimal("1.50")), Modifier("Bacon", Decimal("0.75"))]
    for _ in range(40):
        action = rng.choice(["add", "add", "remove", "set"])
        if action == "add" or not len(cart):
            cart.add_line(
                rng.randint(1, 5),
                "Item",
                Decimal(rng.randint(100, 2000)) / 100,
                quantity=rng.randint(-1, 4),
                size=rng.choice(sizes),
                extras=rng.sample(extras, rng.randint(0, 2)),
            )
        elif action == "remove":
            target = rng.choice(cart.lines).id if rng.random() < 0.8 else "missing"
            cart.remove_line(target)
        else:
            cart.set_quantity(rng.choice(cart.lines).id, rng.randint(-2, 6))
        _assert_totals_consistent(cart)


def test_snapshot_is_detached_from_later_edits():
    cart = Cart(1)
    line = cart.add_line(1, "Soda", "3.00")
    taken = cart.snapshot()
    cart.set_quantity(line.id, 4)
    cart.add_line(2, "Burger", "10.00")
    assert [(copy.id, copy.quantity) for copy in taken] == [(line.id, 1)]
    cart.remove_lines(copy.id for copy in taken)
    assert [entry.name for entry in cart] == ["Burger"]
