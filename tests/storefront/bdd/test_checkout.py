"""BDD tests for checkout."""

from pytest_bdd import parsers, scenarios, then, when
from storefront.cart.owner import Authenticated
from storefront.errors import CheckoutValidationError, PlacementError, ProductUnavailable
from storefront.order.checkout import place_order

scenarios("features/checkout.feature")


def _checkout(outcome, user_id, items, email="alex@example.com", idempotency_key=None):
    try:
        outcome["placement"] = place_order(
            Authenticated(user_id=user_id),
            items,
            customer_name="Alex Doe",
            customer_email=email,
            customer_phone="0901 234 567",
            shipping_address="12 Market Street, Springfield",
            idempotency_key=idempotency_key,
        )
    except PlacementError as exc:
        outcome["exc"] = exc


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user_id}" checks out {qty:d} of product "{product_id:w}"'))
def _(outcome, user_id, qty, product_id):
    _checkout(outcome, user_id, {product_id: qty})


@when(parsers.cfparse('"{user_id}" checks out {qty:d} of product "{product_id:w}" with email "{email}"'))
def _(outcome, user_id, qty, product_id, email):
    _checkout(outcome, user_id, {product_id: qty}, email=email)


@when(parsers.cfparse('"{user_id}" checks out {qty:d} of product "{product_id:w}" with idempotency key "{key}"'))
def _(outcome, user_id, qty, product_id, key):
    _checkout(outcome, user_id, {product_id: qty}, idempotency_key=key)


@when(parsers.cfparse('"{user_id}" checks out their cart'))
def _(outcome, store, user_id):
    _checkout(outcome, user_id, store.snapshot(Authenticated(user_id=user_id)))


@when(parsers.cfparse('"{user_id}" checks out an empty cart'))
def _(outcome, user_id):
    _checkout(outcome, user_id, {})


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is pending")
def _(outcome):
    assert outcome["exc"] is None
    assert outcome["placement"].order.status == "pending"


@then(parsers.cfparse("the order total is {amount:d}"))
def _(outcome, amount):
    assert outcome["exc"] is None
    assert outcome["placement"].order.total_amount == amount


@then(parsers.cfparse('the cart of "{user_id}" is empty'))
def _(store, user_id):
    assert store.snapshot(Authenticated(user_id=user_id)) == {}


@then(parsers.cfparse('checkout fails with missing field "{field}"'))
def _(outcome, field):
    assert isinstance(outcome["exc"], CheckoutValidationError)
    assert field in outcome["exc"].missing_fields


@then(parsers.cfparse('checkout fails with an invalid "{field}"'))
def _(outcome, field):
    assert isinstance(outcome["exc"], CheckoutValidationError)
    assert field in outcome["exc"].errors


@then(parsers.cfparse('checkout fails because product "{product_id:w}" is unavailable'))
def _(outcome, product_id):
    assert isinstance(outcome["exc"], ProductUnavailable)
    assert outcome["exc"].product_ids == [product_id]
