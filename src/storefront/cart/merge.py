"""Guest cart merge on login.

The guest cart is folded into the signed-in user's cart by adding each line
through ``CartStore.add``, so quantities for a product already in the user's
cart are summed. The merge is not atomic with login: each line succeeds or
fails on its own and every failure is reported back, never dropped.
"""

from dataclasses import dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart.guest import GuestCartRepository, get_guest_carts
from storefront.cart.owner import Authenticated
from storefront.cart.store import CartStore
from storefront.errors import PlacementError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MergeReport:
    user_id: str
    merged: dict[str, int] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "merged": self.merged,
            "failed": self.failed,
            "complete": self.complete,
        }


def _reason(exc: Exception) -> str:
    if isinstance(exc, PlacementError):
        return exc.message
    if isinstance(exc, ValidationError):
        return "; ".join(f"{k}: {', '.join(map(str, v))}" for k, v in exc.messages.items())
    return str(getattr(exc, "messages", None) or exc)


class GuestCartBridge:
    def __init__(self, store: CartStore | None = None, guest_carts: GuestCartRepository | None = None):
        self.store = store or CartStore()
        self._guest_carts = guest_carts

    @property
    def guest_carts(self) -> GuestCartRepository:
        return self._guest_carts or get_guest_carts()

    def merge(self, guest_items, user_id) -> MergeReport:
        """Add every ``{product_id: quantity}`` guest line to the user's cart."""
        owner = Authenticated(user_id=user_id)
        merged: dict[str, int] = {}
        failed: dict[str, str] = {}

        for product_id, quantity in dict(guest_items).items():
            product_id = str(product_id)
            try:
                self.store.add(owner, product_id, quantity)
            except (PlacementError, ValidationError, ObjectNotFoundError) as exc:
                failed[product_id] = _reason(exc)
                logger.warning(
                    "guest_cart_line_not_merged",
                    user_id=owner.user_id,
                    product_id=product_id,
                    reason=failed[product_id],
                )
                continue
            merged[product_id] = quantity

        logger.info("guest_cart_merged", user_id=owner.user_id, merged=len(merged), failed=len(failed))
        return MergeReport(user_id=owner.user_id, merged=merged, failed=failed)

    def merge_session(self, session_id, user_id) -> MergeReport:
        """Merge a stored guest cart; only the lines that failed stay behind."""
        guest_items = self.guest_carts.load(str(session_id))
        report = self.merge(guest_items, user_id)
        self.guest_carts.replace(str(session_id), {pid: guest_items[pid] for pid in report.failed})
        return report
