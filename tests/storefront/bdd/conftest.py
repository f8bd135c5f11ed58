"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.cart.owner import Authenticated
from storefront.cart.store import CartStore
from storefront.catalogue.product import Product
from storefront.order.order import Order


@pytest.fixture()
def outcome():
    """Container for the last checkout result or the error it raised."""
    return {"placement": None, "exc": None}


@pytest.fixture()
def store():
    return CartStore()


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id:w}" priced {price:d} with {stock:d} in stock'))
def _(add_product, product_id, price, stock):
    add_product(product_id=product_id, price=price, stock_quantity=stock)


@given(parsers.cfparse('a product "{product_id:w}" priced {price:d} with a sale price of {sale_price:d} and {stock:d} in stock'))
def _(add_product, product_id, price, sale_price, stock):
    add_product(product_id=product_id, price=price, sale_price=sale_price, stock_quantity=stock)


@given(parsers.cfparse('product "{product_id:w}" is inactive'))
def _(product_id):
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    product.change_status("inactive")
    repo.add(product)


@given(parsers.cfparse('"{user_id}" has {qty:d} of product "{product_id:w}" in their cart'))
def _(store, user_id, qty, product_id):
    store.add(Authenticated(user_id=user_id), product_id, qty)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('product "{product_id:w}" has {stock:d} in stock'))
def _(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock_quantity == stock


@then(parsers.cfparse("{count:d} order exists"))
def _(count):
    assert current_domain.repository_for(Order).search().total == count


@then("no order exists")
def _():
    assert current_domain.repository_for(Order).search().total == 0
