"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass checkout validation (email
shape, 10-15 digit phone, non-empty address) and match the field names
expected by the API's Pydantic request schemas.

Product ids assume the catalogue was seeded with
``python src/manage.py seed-products --count N``, which stores ids ``1..N``.
"""

import os
import random
import uuid

from faker import Faker

fake = Faker()

PRODUCT_COUNT = int(os.environ.get("LOADTEST_PRODUCT_COUNT", "20"))

# Product id every RushUser competes for.
HOT_PRODUCT_ID = os.environ.get("LOADTEST_HOT_PRODUCT_ID", "1")


# ---------- Shoppers ----------


def user_id() -> str:
    return f"lt-user-{uuid.uuid4().hex[:8]}"


def valid_email() -> str:
    """Generate emails of the form local@domain.tld with no spaces."""
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:4]}@{domain}"


def valid_phone() -> str:
    """Generate phones with exactly 11 digits, e.g. ``+1-415-555-0134``."""
    area = random.randint(200, 999)
    prefix = random.randint(200, 999)
    line = random.randint(1000, 9999)
    return f"+1-{area}-{prefix}-{line}"


def shipping_address() -> str:
    return f"{fake.street_address()}, {fake.city()}, {fake.state_abbr()} {fake.zipcode()}"


def contact_data() -> dict:
    return {
        "customer_name": fake.name()[:255],
        "customer_email": valid_email(),
        "customer_phone": valid_phone(),
        "shipping_address": shipping_address(),
    }


# ---------- Cart ----------


def product_id() -> str:
    return str(random.randint(1, PRODUCT_COUNT))


def cart_item_data(owner: dict, quantity: int | None = None) -> dict:
    """Generate an AddToCartRequest payload for ``owner`` (user_id or session_id)."""
    return {
        **owner,
        "product_id": product_id(),
        "quantity": quantity or random.randint(1, 3),
    }


# ---------- Orders ----------


def order_data(items: list[dict], user_id: str | None = None) -> dict:
    """Generate a PlaceOrderRequest payload for cart ``items``."""
    payload = {
        "items": [{"product_id": i["product_id"], "quantity": i["quantity"]} for i in items],
        **contact_data(),
        "notes": fake.sentence() if random.random() < 0.2 else None,
    }
    if user_id:
        payload["user_id"] = user_id
    return payload


def idempotency_key() -> str:
    return f"lt-{uuid.uuid4().hex}"


def admin_status() -> str:
    return random.choice(["confirmed", "processing", "shipped", "delivered", "cancelled"])
