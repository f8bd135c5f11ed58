"""BDD tests for all-or-nothing stock reservation."""

from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.owner import Authenticated
from storefront.errors import InsufficientStock, PersistenceError, PlacementError
from storefront.order.factory import OrderFactory
from storefront.order.repository import OrderRepository

scenarios("features/stock_reservation.feature")


def _checkout(outcome, contact, user_id, items):
    try:
        outcome["placement"] = OrderFactory().place(
            Authenticated(user_id=user_id),
            items,
            contact,
            "12 Market Street, Springfield",
        )
    except PlacementError as exc:
        outcome["exc"] = exc


@given("orders cannot be saved")
def _(monkeypatch):
    def _fail(self, order):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(OrderRepository, "create", _fail)


@when(parsers.cfparse('"{user_id}" checks out {qty:d} of product "{product_id:w}"'))
def _(outcome, contact, user_id, qty, product_id):
    _checkout(outcome, contact, user_id, {product_id: qty})


@when(
    parsers.cfparse(
        '"{user_id}" checks out {first_qty:d} of product "{first_id:w}" and {second_qty:d} of product "{second_id:w}"'
    )
)
def _(outcome, contact, user_id, first_qty, first_id, second_qty, second_id):
    _checkout(outcome, contact, user_id, {first_id: first_qty, second_id: second_qty})


@then(parsers.cfparse('checkout fails because product "{product_id:w}" is short by {short_by:d}'))
def _(outcome, product_id, short_by):
    exc = outcome["exc"]
    assert isinstance(exc, InsufficientStock)
    assert [(s.product_id, s.short_by) for s in exc.shortfalls] == [(product_id, short_by)]


@then("checkout fails with a server error")
def _(outcome):
    assert isinstance(outcome["exc"], PersistenceError)
    assert outcome["exc"].status_code == 500

