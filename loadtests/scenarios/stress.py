"""Stress test scenarios for stock contention.

RushUser sends every user after the same product, one unit at a time, to
exercise the per-product locks. Once its stock is gone every checkout must
be refused with a shortfall; a 201 after that point, or a 500 at any point,
is a bug. SpikeUser floods cart writes across the whole catalogue.
"""

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import HOT_PRODUCT_ID, cart_item_data, contact_data, user_id
from loadtests.helpers.response import extract_error_detail, is_stock_rejection


class RushUser(HttpUser):
    """Flash sale: many shoppers buying the last units of one product.

    Run with high user count and instant spawn rate. Afterwards, the hot
    product's stock must be exactly zero and the number of 201s must equal
    its seeded stock.
    """

    wait_time = constant_pacing(0.1)  # ~10 req/sec per user

    @task
    def buy_hot_product(self):
        with self.client.post(
            "/orders",
            json={
                "items": [{"product_id": HOT_PRODUCT_ID, "quantity": 1}],
                "user_id": user_id(),
                **contact_data(),
            },
            catch_response=True,
            name="[RUSH] POST /orders",
        ) as resp:
            if resp.status_code == 201 or is_stock_rejection(resp):
                resp.success()
            else:
                resp.failure(f"Rush checkout failed: {resp.status_code} — {extract_error_detail(resp)}")


class SpikeUser(HttpUser):
    """Spike test: rapid-fire cart writes for throwaway shoppers."""

    wait_time = constant_pacing(0.05)  # ~20 req/sec per user

    @task
    def rapid_add_to_cart(self):
        self.client.post(
            "/cart",
            json=cart_item_data({"user_id": user_id()}),
            name="[SPIKE] POST /cart",
        )
