"""Checkout application service: place the order, then empty the cart it came from."""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart.store import CartStore
from storefront.order.factory import OrderFactory, Placement

logger = structlog.get_logger(__name__)


def place_order(
    owner,
    items,
    customer_name,
    customer_email,
    customer_phone,
    shipping_address,
    billing_address=None,
    notes=None,
    idempotency_key=None,
    factory: OrderFactory | None = None,
    store: CartStore | None = None,
) -> Placement:
    """Place an order from submitted cart lines.

    Guest orders leave cart clearing to the client. For signed-in shoppers
    the server cart is cleared once the order is stored; a failure to clear
    is logged and does not undo the order.
    """
    factory = factory or OrderFactory()
    placement = factory.place(
        owner,
        items,
        {
            "customer_name": customer_name,
            "customer_email": customer_email,
            "customer_phone": customer_phone,
        },
        shipping_address,
        billing_address=billing_address,
        notes=notes,
        idempotency_key=idempotency_key,
    )

    if placement.cart_to_clear is not None:
        try:
            (store or CartStore()).clear(placement.cart_to_clear, reason="checkout")
        except (ValidationError, ObjectNotFoundError) as exc:
            logger.warning(
                "cart_not_cleared_after_checkout",
                order_number=placement.order.order_number,
                error=getattr(exc, "messages", None) or str(exc),
            )

    return placement
