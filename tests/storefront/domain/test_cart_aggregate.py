"""Tests for the Cart aggregate."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.cart.cart import Cart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.cart.owner import Anonymous, Authenticated, new_session_id, owner_from


def _make_cart():
    return Cart.create(user_id="user-001")


class TestCartCreation:
    def test_user_cart(self):
        cart = Cart.create(user_id="user-001")
        assert cart.user_id == "user-001"
        assert len(cart.items) == 0

    def test_guest_cart(self):
        cart = Cart.create(session_id="session_1_abc")
        assert cart.session_id == "session_1_abc"
        assert cart.user_id is None

    def test_cart_needs_an_owner(self):
        with pytest.raises(ValidationError):
            Cart.create()


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        cart.add_item("7", 2, price_snapshot=90)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.items[0].price_snapshot == 90

    def test_add_same_product_increases_quantity(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        cart.add_item("7", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_add_different_products(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        cart.add_item("8", 1)
        assert len(cart.items) == 2
        assert cart.item_count == 2

    def test_add_raises_event(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        cart.add_item("7", 2)
        events = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert [e.new_quantity for e in events] == [1, 3]

    def test_zero_quantity_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("7", 0)


class TestSetQuantity:
    def test_set_quantity(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        cart.set_item_quantity("7", 4)
        assert cart.items[0].quantity == 4
        events = [e for e in cart._events if isinstance(e, CartQuantityUpdated)]
        assert events[0].previous_quantity == 1
        assert events[0].new_quantity == 4

    def test_zero_removes_the_line(self):
        cart = _make_cart()
        cart.add_item("7", 3)
        cart.set_item_quantity("7", 0)
        assert len(cart.items) == 0

    def test_zero_on_missing_line_is_a_no_op(self):
        cart = _make_cart()
        cart.set_item_quantity("7", 0)
        assert len(cart.items) == 0

    def test_positive_quantity_on_missing_line_is_not_found(self):
        cart = _make_cart()
        with pytest.raises(ObjectNotFoundError):
            cart.set_item_quantity("7", 2)

    def test_negative_quantity_rejected(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        with pytest.raises(ValidationError):
            cart.set_item_quantity("7", -1)


class TestRemoveAndClear:
    def test_remove(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        assert cart.remove_item("7") is True
        assert len(cart.items) == 0
        assert any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_remove_is_idempotent(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        cart.remove_item("7")
        assert cart.remove_item("7") is False
        assert len([e for e in cart._events if isinstance(e, CartItemRemoved)]) == 1

    def test_clear(self):
        cart = _make_cart()
        cart.add_item("7", 1)
        cart.add_item("8", 2)
        assert cart.clear(reason="checkout") == 2
        assert len(cart.items) == 0
        cleared = [e for e in cart._events if isinstance(e, CartCleared)]
        assert cleared[0].items_removed == 2
        assert cleared[0].reason == "checkout"

    def test_clear_empty_cart(self):
        cart = _make_cart()
        assert cart.clear() == 0
        assert not [e for e in cart._events if isinstance(e, CartCleared)]


class TestSnapshot:
    def test_snapshot(self):
        cart = _make_cart()
        cart.add_item("7", 2)
        cart.add_item("8", 1)
        assert cart.snapshot() == {"7": 2, "8": 1}


class TestCartOwner:
    def test_user_id_wins_over_session(self):
        assert owner_from(user_id="u1", session_id="s1") == Authenticated(user_id="u1")

    def test_session_owner(self):
        owner = owner_from(session_id="s1")
        assert owner == Anonymous(session_id="s1")
        assert owner.is_guest

    def test_numeric_user_id_is_coerced(self):
        assert Authenticated(user_id=42).user_id == "42"

    def test_owner_needs_an_id(self):
        with pytest.raises(ValidationError):
            Authenticated(user_id="")
        with pytest.raises(ValidationError):
            Anonymous(session_id=None)

    def test_owners_compare_by_value(self):
        assert {Authenticated(user_id="u1"), Authenticated(user_id="u1")} == {Authenticated(user_id="u1")}
        assert Authenticated(user_id="s1") != Anonymous(session_id="s1")

    def test_owner_required(self):
        with pytest.raises(ValidationError):
            owner_from()

    def test_new_session_id_shape(self):
        session_id = new_session_id()
        assert session_id.startswith("session_")
        assert session_id != new_session_id()
