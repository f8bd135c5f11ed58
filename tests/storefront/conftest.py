import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def add_product():
    """Store a product and return it. Keyword arguments override the defaults."""
    from protean import current_domain
    from storefront.catalogue.product import Product

    counter = {"n": 0}

    def _add(product_id=None, **overrides):
        counter["n"] += 1
        defaults = {
            "name": f"Product {counter['n']}",
            "sku": f"SKU-{counter['n']:04d}",
            "price": 100,
            "stock_quantity": 10,
        }
        defaults.update(overrides)
        product = Product.add(product_id=product_id, **defaults)
        current_domain.repository_for(Product).add(product)
        return product

    return _add


@pytest.fixture()
def contact():
    return {
        "customer_name": "Alex Doe",
        "customer_email": "alex@example.com",
        "customer_phone": "0901 234 567",
    }


@pytest.fixture(autouse=True)
def _reset_guest_carts():
    from storefront.cart.guest import reset_guest_carts

    reset_guest_carts()
    yield
    reset_guest_carts()
