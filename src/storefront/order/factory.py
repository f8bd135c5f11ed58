"""OrderFactory — turns a cart snapshot and contact details into a stored order.

Placement runs in a fixed sequence and the first failure stops it:

1. reject an empty cart, before any product lookup
2. reject missing or malformed contact details
3. re-read every product; missing or inactive products are refused
4. price every line at the live effective price (client prices are ignored)
5. reserve all quantities in one all-or-nothing call
6. generate an unguessable order number
7. store the order; if that fails, release the reservation
8. tell the caller which cart to clear

The ordered products stay locked from step 3 until the order is stored or
the reservation released. A reservation never outlives a failed placement,
and the prices charged are the ones read under the lock.
"""

from collections.abc import Mapping
from dataclasses import dataclass

import structlog
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.owner import Authenticated
from storefront.catalogue.catalog import ProductCatalog
from storefront.errors import CheckoutValidationError, PersistenceError, ProductUnavailable
from storefront.inventory.ledger import StockLedger, get_ledger
from storefront.inventory.locks import idempotency_locks
from storefront.order.contact import validate_contact
from storefront.order.numbers import unique_order_number
from storefront.order.order import Order
from storefront.utils.logging import add_context

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Placement:
    """Outcome of a successful ``place`` call."""

    order: Order
    replayed: bool = False
    cart_to_clear: Authenticated | None = None


def normalize_snapshot(cart_snapshot) -> dict[str, int]:
    """Accept ``{product_id: quantity}`` or a list of ``{product_id, quantity}`` lines.

    Lines for the same product are summed.
    """
    if isinstance(cart_snapshot, Mapping):
        lines = [{"product_id": pid, "quantity": qty} for pid, qty in cart_snapshot.items()]
    else:
        lines = list(cart_snapshot or [])

    wanted: dict[str, int] = {}
    invalid = []
    for line in lines:
        product_id, quantity = line.get("product_id"), line.get("quantity")
        if product_id in (None, "") or isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            invalid.append(str(product_id))
            continue
        wanted[str(product_id)] = wanted.get(str(product_id), 0) + quantity

    if invalid:
        raise CheckoutValidationError(
            "Invalid cart items",
            errors={"items": [f"Quantity must be a positive integer for product {pid}" for pid in invalid]},
        )
    return wanted


class OrderFactory:
    def __init__(self, catalog: ProductCatalog | None = None, ledger: StockLedger | None = None):
        self.catalog = catalog or ProductCatalog()
        self.ledger = ledger or get_ledger()

    @property
    def repository(self):
        return current_domain.repository_for(Order)

    def place(
        self,
        owner,
        cart_snapshot,
        contact: Mapping,
        shipping_address,
        billing_address=None,
        notes=None,
        idempotency_key=None,
    ) -> Placement:
        """Place an order. ``contact`` maps customer_name, customer_email and customer_phone."""
        wanted = normalize_snapshot(cart_snapshot)
        contact = validate_contact(contact, shipping_address, missing_fields=() if wanted else ("items",))

        if not idempotency_key:
            return self._place(owner, wanted, contact, shipping_address, billing_address, notes, None)

        with idempotency_locks.hold([idempotency_key]):
            existing = self.repository.find_by_idempotency_key(idempotency_key)
            if existing is not None:
                logger.info(
                    "order_placement_replayed",
                    order_number=existing.order_number,
                    idempotency_key=idempotency_key,
                )
                return Placement(order=existing, replayed=True)
            return self._place(owner, wanted, contact, shipping_address, billing_address, notes, idempotency_key)

    def _priced_lines(self, wanted) -> list[dict]:
        """Re-read every product and price each line at its live effective price."""
        products = self.catalog.lookup(wanted)
        unavailable = [pid for pid, product in products.items() if product is None or not product.is_active]
        if unavailable:
            raise ProductUnavailable(unavailable)

        return [
            {
                "product_id": pid,
                "product_name": products[pid].name,
                "sku": products[pid].sku,
                "quantity": quantity,
                "price": products[pid].effective_price,
            }
            for pid, quantity in wanted.items()
        ]

    def _place(self, owner, wanted, contact, shipping_address, billing_address, notes, idempotency_key) -> Placement:
        user_id = owner.user_id if isinstance(owner, Authenticated) else None
        repo = self.repository

        with self.ledger.locked(wanted):
            items_data = self._priced_lines(wanted)
            try:
                reservation = self.ledger.reserve(wanted)
            except ExpectedVersionError as exc:
                logger.error("stock_reservation_conflict", error=str(exc), items=wanted)
                raise PersistenceError(str(exc)) from exc

            try:
                order_number = unique_order_number(repo.order_number_exists)
                add_context(order_number=order_number)
                order = Order.place(
                    order_number=order_number,
                    items_data=items_data,
                    customer_name=contact.customer_name,
                    customer_email=contact.customer_email,
                    customer_phone=contact.customer_phone,
                    shipping_address=shipping_address,
                    billing_address=billing_address,
                    notes=notes,
                    user_id=user_id,
                    idempotency_key=idempotency_key,
                )
                repo.create(order)
            except ValidationError as exc:
                self.ledger.release(reservation.items)
                raise CheckoutValidationError("Invalid order details", errors=exc.messages) from exc
            except Exception as exc:
                self.ledger.release(reservation.items)
                logger.error("order_persistence_failed", error=str(exc), items=wanted, exc_info=True)
                raise PersistenceError(str(exc)) from exc
            except BaseException:
                self.ledger.release(reservation.items)
                raise

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=user_id,
            total_amount=order.total_amount,
        )
        return Placement(order=order, cart_to_clear=owner if isinstance(owner, Authenticated) else None)
