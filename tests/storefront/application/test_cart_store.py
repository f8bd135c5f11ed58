"""Application tests for cart operations through CartStore and the cart commands."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, SetCartQuantity
from storefront.cart.owner import Anonymous, Authenticated
from storefront.cart.store import CartStore
from storefront.catalogue.product import Product
from storefront.errors import ProductUnavailable


@pytest.fixture()
def store():
    return CartStore()


@pytest.fixture()
def owner():
    return Authenticated(user_id="user-001")


class TestAdd:
    def test_first_add_creates_the_cart(self, store, owner, add_product):
        add_product(product_id="7", price=100, sale_price=90)

        store.add(owner, "7", 2)

        cart = current_domain.repository_for(Cart).find_for(owner)
        assert cart.snapshot() == {"7": 2}
        assert cart.items[0].price_snapshot == 90

    def test_adding_again_sums_quantities(self, store, owner, add_product):
        add_product(product_id="7")
        store.add(owner, "7", 1)
        store.add(owner, "7", 2)
        assert store.snapshot(owner) == {"7": 3}

    def test_add_does_not_check_stock(self, store, owner, add_product):
        add_product(product_id="7", stock_quantity=1)
        store.add(owner, "7", 5)
        assert store.snapshot(owner) == {"7": 5}

    def test_unknown_product_rejected(self, store, owner):
        with pytest.raises(ProductUnavailable):
            store.add(owner, "ghost", 1)
        assert store.snapshot(owner) == {}

    def test_inactive_product_rejected(self, store, owner, add_product):
        add_product(product_id="7", status="inactive")
        with pytest.raises(ProductUnavailable):
            store.add(owner, "7", 1)

    def test_draft_product_can_be_added(self, store, owner, add_product):
        add_product(product_id="7", status="draft")
        store.add(owner, "7", 1)
        assert store.snapshot(owner) == {"7": 1}

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_quantity_must_be_positive(self, store, owner, add_product, quantity):
        add_product(product_id="7")
        with pytest.raises(ValidationError):
            store.add(owner, "7", quantity)

    def test_user_and_guest_carts_are_separate(self, store, add_product):
        add_product(product_id="7")
        store.add(Authenticated(user_id="user-001"), "7", 1)
        store.add(Anonymous(session_id="session_1_abc"), "7", 4)
        assert store.snapshot(Authenticated(user_id="user-001")) == {"7": 1}
        assert store.snapshot(Anonymous(session_id="session_1_abc")) == {"7": 4}


class TestSetQuantityAndRemove:
    def test_set_quantity(self, store, owner, add_product):
        add_product(product_id="7")
        store.add(owner, "7", 1)
        store.set_quantity(owner, "7", 6)
        assert store.snapshot(owner) == {"7": 6}

    def test_zero_removes_the_line(self, store, owner, add_product):
        add_product(product_id="7")
        store.add(owner, "7", 1)
        store.set_quantity(owner, "7", 0)
        assert store.snapshot(owner) == {}

    def test_zero_without_a_cart_is_a_no_op(self, store, owner):
        assert store.set_quantity(owner, "7", 0) is None

    def test_positive_quantity_without_a_cart_is_not_found(self, store, owner):
        with pytest.raises(ObjectNotFoundError):
            store.set_quantity(owner, "7", 2)

    def test_remove_is_idempotent(self, store, owner, add_product):
        add_product(product_id="7")
        store.add(owner, "7", 1)
        store.remove(owner, "7")
        store.remove(owner, "7")
        assert store.snapshot(owner) == {}

    def test_remove_without_a_cart(self, store, owner):
        store.remove(owner, "7")
        assert store.snapshot(owner) == {}

    def test_clear(self, store, owner, add_product):
        add_product(product_id="7")
        add_product(product_id="8")
        store.add(owner, "7", 1)
        store.add(owner, "8", 2)
        assert store.clear(owner) == 2
        assert store.snapshot(owner) == {}


class TestSummarize:
    def test_totals_use_live_prices(self, store, owner, add_product):
        add_product(product_id="7", price=100)
        add_product(product_id="8", price=250)
        store.add(owner, "7", 2)
        store.add(owner, "8", 1)

        repo = current_domain.repository_for(Product)
        product = repo.get("7")
        product.change_price(100, sale_price=80)
        repo.add(product)

        summary = store.summarize(owner)
        assert summary.subtotal == 2 * 80 + 250
        assert summary.item_count == 3
        assert summary.total == summary.subtotal + summary.shipping_fee

    def test_unavailable_products_are_listed_not_counted(self, store, owner, add_product):
        add_product(product_id="7", price=100)
        add_product(product_id="8", price=250)
        store.add(owner, "7", 1)
        store.add(owner, "8", 1)

        repo = current_domain.repository_for(Product)
        product = repo.get("8")
        product.change_status("inactive")
        repo.add(product)

        summary = store.summarize(owner)
        assert [line.product_id for line in summary.lines] == ["7"]
        assert summary.unavailable == ["8"]
        assert summary.subtotal == 100

    def test_empty_summary(self, store, owner):
        payload = store.summarize(owner).to_dict()
        assert payload["items"] == []
        assert payload["summary"] == {"item_count": 0, "subtotal": 0, "shipping_fee": 0, "total": 0}


class TestCartCommands:
    def test_add_to_cart_command(self, add_product):
        add_product(product_id="7")
        cart_id = current_domain.process(AddToCart(user_id="user-001", product_id="7", quantity=2), asynchronous=False)
        cart = current_domain.repository_for(Cart).get(cart_id)
        assert cart.snapshot() == {"7": 2}

    def test_set_quantity_command(self, add_product):
        add_product(product_id="7")
        current_domain.process(AddToCart(session_id="session_1_abc", product_id="7"), asynchronous=False)
        current_domain.process(
            SetCartQuantity(session_id="session_1_abc", product_id="7", quantity=3),
            asynchronous=False,
        )
        assert CartStore().snapshot(Anonymous(session_id="session_1_abc")) == {"7": 3}

    def test_remove_and_clear_commands(self, add_product):
        add_product(product_id="7")
        add_product(product_id="8")
        for product_id in ("7", "8"):
            current_domain.process(AddToCart(user_id="user-001", product_id=product_id), asynchronous=False)

        current_domain.process(RemoveFromCart(user_id="user-001", product_id="7"), asynchronous=False)
        assert CartStore().snapshot(Authenticated(user_id="user-001")) == {"8": 1}

        current_domain.process(RemoveFromCart(user_id="user-001", clear_all=True), asynchronous=False)
        assert CartStore().snapshot(Authenticated(user_id="user-001")) == {}
