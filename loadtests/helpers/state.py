"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across
users. State tracks ids returned by the API so follow-up requests can
reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks one simulated shopper from browsing to checkout."""

    user_id: str | None = None
    session_id: str | None = None
    cart_items: list[dict] = field(default_factory=list)
    order_ids: list[str] = field(default_factory=list)

    @property
    def owner(self) -> dict:
        """Cart owner parameters: the user id once signed in, else the guest session."""
        if self.user_id:
            return {"user_id": self.user_id}
        return {"session_id": self.session_id}


@dataclass
class OrderState:
    """Tracks a placed order for tracking and status updates."""

    order_id: str | None = None
    order_number: str | None = None
    customer_email: str | None = None
    current_status: str = "pending"
