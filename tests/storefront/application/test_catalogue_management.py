"""Application tests for the catalogue maintenance commands."""

from unittest.mock import patch

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.catalogue.management import AddProduct, ChangeProductPrice, ChangeProductStatus
from storefront.catalogue.product import Product
from storefront.inventory.locks import product_locks


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestAddProduct:
    def test_add(self):
        product_id = current_domain.process(
            AddProduct(product_id="7", name="Mug", sku="MUG-001", price=100, stock_quantity=4),
            asynchronous=False,
        )
        product = _product(product_id)
        assert (product.name, product.stock_quantity, product.manage_stock) == ("Mug", 4, True)

    def test_untracked_product(self):
        current_domain.process(
            AddProduct(product_id="7", name="E-book", sku="EBOOK-1", price=500, manage_stock=False),
            asynchronous=False,
        )
        assert _product("7").manage_stock is False


class TestChangeProduct:
    def test_change_price_holds_the_product_lock(self, add_product):
        add_product(product_id="7", price=100)

        with patch.object(product_locks, "hold", wraps=product_locks.hold) as hold:
            current_domain.process(ChangeProductPrice(product_id="7", price=120, sale_price=99), asynchronous=False)

        hold.assert_called_once_with(["7"])
        assert (_product("7").price, _product("7").effective_price) == (120, 99)
        assert len(product_locks) == 0

    def test_change_status(self, add_product):
        add_product(product_id="7")
        current_domain.process(ChangeProductStatus(product_id="7", status="inactive"), asynchronous=False)
        assert _product("7").is_active is False

    def test_invalid_status_rejected(self, add_product):
        add_product(product_id="7")
        with pytest.raises(ValidationError):
            current_domain.process(ChangeProductStatus(product_id="7", status="archived"), asynchronous=False)
        assert _product("7").is_active
