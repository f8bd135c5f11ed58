"""Order cancellation — the only way an order reaches ``cancelled``.

Cancelling puts every line's quantity back through the stock ledger. The
status change and the stock release are committed in one unit of work while
the ordered products are locked, so a cancelled order's stock is returned
exactly once.
"""

import structlog
from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.inventory.ledger import StockLedger, get_ledger
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


def ordered_quantities(order: Order) -> dict[str, int]:
    quantities: dict[str, int] = {}
    for item in order.items:
        key = str(item.product_id)
        quantities[key] = quantities.get(key, 0) + item.quantity
    return quantities


class OrderCancellation:
    def __init__(self, ledger: StockLedger | None = None):
        self.ledger = ledger or get_ledger()

    @property
    def repository(self):
        return current_domain.repository_for(Order)

    def cancel(self, order_id, user_id, reason=None) -> Order:
        """Shopper cancellation of their own order, while pending or confirmed.

        Another user's order reads as not found.
        """
        return self._cancel(
            order_id,
            lambda order: order.cancel(reason=reason, cancelled_by=user_id),
            user_id=user_id,
        )

    def cancel_as_admin(self, order_id, notes=None, comment=None, changed_by=None) -> Order:
        """Admin cancellation; allowed from any status that is not terminal."""
        return self._cancel(
            order_id,
            lambda order: order.change_status(
                OrderStatus.CANCELLED.value, notes=notes, comment=comment, changed_by=changed_by
            ),
        )

    def _cancel(self, order_id, apply, user_id=None) -> Order:
        repo = self.repository
        order = repo.find_by_id(str(order_id))
        if order is None or (user_id is not None and str(order.user_id or "") != str(user_id)):
            raise ObjectNotFoundError("Order not found")

        returned = ordered_quantities(order)
        with self.ledger.locked(returned):
            # Re-read under the locks; a concurrent cancel may have won.
            order = repo.get(str(order_id))
            apply(order)
            with UnitOfWork():
                repo.add(order)
                self.ledger.release(returned)

        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            order_number=order.order_number,
            cancelled_by=str(user_id) if user_id else None,
            items=returned,
        )
        return order
