"""BDD tests for shopper order cancellation."""

from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.owner import Authenticated
from storefront.order.cancellation import OrderCancellation
from storefront.order.factory import OrderFactory
from storefront.order.order import Order

scenarios("features/order_cancellation.feature")


@given(parsers.cfparse('"{user_id}" has ordered {qty:d} of product "{product_id:w}"'))
def _(outcome, contact, user_id, qty, product_id):
    outcome["placement"] = OrderFactory().place(
        Authenticated(user_id=user_id),
        {product_id: qty},
        contact,
        "12 Market Street, Springfield",
    )


@given(parsers.cfparse('the order is marked "{status}"'))
def _(outcome, status):
    current_domain.repository_for(Order).update_status(outcome["placement"].order.id, status)


@when(parsers.cfparse('"{user_id}" cancels the order'))
def _(outcome, user_id):
    try:
        OrderCancellation().cancel(outcome["placement"].order.id, user_id=user_id)
    except (ObjectNotFoundError, ValidationError) as exc:
        outcome["exc"] = exc


@then("the order is cancelled")
def _(outcome):
    assert outcome["exc"] is None
    assert current_domain.repository_for(Order).get(outcome["placement"].order.id).status == "cancelled"


@then("cancellation is refused")
def _(outcome):
    assert isinstance(outcome["exc"], ValidationError)


@then("the order is not found")
def _(outcome):
    assert isinstance(outcome["exc"], ObjectNotFoundError)
