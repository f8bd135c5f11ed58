"""Cart and checkout load test scenarios.

Stateful SequentialTaskSet journeys covering a guest who checks out and
then tracks the order, and a shopper who browses as a guest, signs in,
merges the guest cart and checks out.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import admin_status, cart_item_data, idempotency_key, order_data, user_id
from loadtests.helpers.response import extract_error_detail, is_stock_rejection
from loadtests.helpers.state import OrderState, ShopperState


class _ShopperJourney(SequentialTaskSet):
    def on_start(self):
        self.state = ShopperState()
        self.order = OrderState()

    def start_session(self):
        with self.client.post("/cart/session", catch_response=True, name="POST /cart/session") as resp:
            if resp.status_code == 201:
                self.state.session_id = resp.json()["data"]["session_id"]
            else:
                resp.failure(f"Start session failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    def add_item(self):
        with self.client.post(
            "/cart",
            json=cart_item_data(self.state.owner),
            catch_response=True,
            name="POST /cart",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    def read_cart(self):
        with self.client.get("/cart", params=self.state.owner, catch_response=True, name="GET /cart") as resp:
            if resp.status_code == 200:
                self.state.cart_items = resp.json()["data"]["items"]
            else:
                resp.failure(f"Read cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    def checkout(self):
        if not self.state.cart_items:
            self.interrupt()
            return
        with self.client.post(
            "/orders",
            json=order_data(self.state.cart_items, user_id=self.state.user_id),
            headers={"Idempotency-Key": idempotency_key()},
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                data = resp.json()["data"]
                self.order.order_id = data["id"]
                self.order.order_number = data["order_number"]
                self.order.customer_email = data["customer_email"]
                self.state.order_ids.append(data["id"])
            elif is_stock_rejection(resp):
                # Seeded stock runs out under sustained load
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()


class GuestCheckoutJourney(_ShopperJourney):
    """Start Session -> Add Items -> Read Cart -> Checkout -> Track Order."""

    @task
    def session(self):
        self.start_session()

    @task
    def add_items(self):
        for _ in range(random.randint(1, 3)):
            self.add_item()

    @task
    def cart(self):
        self.read_cart()

    @task
    def place(self):
        self.checkout()

    @task
    def track(self):
        with self.client.get(
            "/orders/track",
            params={"order_number": self.order.order_number, "email": self.order.customer_email},
            catch_response=True,
            name="GET /orders/track",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Track order failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class SignInAndCheckoutJourney(_ShopperJourney):
    """Browse as Guest -> Sign In -> Merge Cart -> Adjust -> Checkout -> List Orders."""

    @task
    def browse_as_guest(self):
        self.start_session()
        self.add_item()

    @task
    def sign_in_and_merge(self):
        signed_in = user_id()
        with self.client.post(
            "/cart/merge",
            json={"user_id": signed_in, "session_id": self.state.session_id},
            catch_response=True,
            name="POST /cart/merge",
        ) as resp:
            if resp.status_code == 200:
                self.state.user_id = signed_in
            else:
                resp.failure(f"Merge failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_more(self):
        self.add_item()

    @task
    def adjust_quantity(self):
        self.read_cart()
        if not self.state.cart_items:
            return
        line = random.choice(self.state.cart_items)
        with self.client.put(
            "/cart",
            json={**self.state.owner, "product_id": line["product_id"], "quantity": random.randint(1, 2)},
            catch_response=True,
            name="PUT /cart",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Set quantity failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def place(self):
        self.read_cart()
        self.checkout()

    @task
    def list_orders(self):
        with self.client.get(
            "/orders",
            params={"user_id": self.state.user_id, "limit": 10},
            catch_response=True,
            name="GET /orders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List orders failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class AdminStatusJourney(SequentialTaskSet):
    """List Recent Orders -> Move One Along."""

    @task
    def advance_an_order(self):
        resp = self.client.get("/orders", params={"status": "pending", "limit": 20}, name="GET /orders?status")
        if resp.status_code != 200 or not resp.json()["data"]["orders"]:
            self.interrupt()
            return
        order = random.choice(resp.json()["data"]["orders"])
        with self.client.put(
            f"/orders/{order['id']}",
            json={"status": admin_status()},
            catch_response=True,
            name="PUT /orders/{id}",
        ) as put:
            # Another admin may have closed the order first
            if put.status_code not in (200, 400):
                put.failure(f"Status update failed: {put.status_code} — {extract_error_detail(put)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    """Realistic storefront traffic: mostly guests, some sign-ins, a little admin work."""

    wait_time = between(1, 3)
    tasks = {
        GuestCheckoutJourney: 5,
        SignInAndCheckoutJourney: 4,
        AdminStatusJourney: 1,
    }
