"""Stock ledger — the single authority on available quantity.

``reserve`` is all-or-nothing: every requested product is checked first and
stock is decremented only when all of them can be covered. Check and
decrement happen under per-product locks, and the decrement is committed in
one unit of work before the locks are let go. There is no global lock; two
batches that share no product never wait on each other.

The locks only serialize writers in this process. A product saved in between
by another process makes the commit fail its version check; the ledger then
re-reads, re-checks and tries again, so a lost race ends in
``InsufficientStock`` rather than a version conflict.

Products with ``manage_stock`` switched off are never checked or decremented.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from protean import UnitOfWork
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain, current_uow

from storefront.catalogue.product import Product
from storefront.errors import InsufficientStock, ProductUnavailable, Shortfall
from storefront.inventory.locks import KeyedLocks, product_locks

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


@dataclass(frozen=True)
class ReservationToken:
    """Quantities taken out of stock by one ``reserve`` call.

    Untracked products are absent: nothing was taken from them, so nothing
    is put back.
    """

    items: dict[str, int] = field(default_factory=dict)
    reserved_at: datetime | None = None

    @property
    def total_units(self) -> int:
        return sum(self.items.values())


def normalize_reservations(reservations: Mapping) -> dict[str, int]:
    """Coerce ids to strings and check every quantity is a positive integer."""
    normalized: dict[str, int] = {}
    for product_id, quantity in reservations.items():
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": [f"Quantity for product {product_id} must be a positive integer"]})
        key = str(product_id)
        normalized[key] = normalized.get(key, 0) + quantity
    return normalized


class StockLedger:
    def __init__(self, locks: KeyedLocks | None = None, max_attempts: int = MAX_ATTEMPTS):
        self._locks = locks or product_locks
        self.max_attempts = max_attempts

    def locked(self, product_ids):
        """Hold the per-product locks for ``product_ids``.

        Locks are reentrant, so ``reserve``/``release`` may be called while
        they are held. Checkout uses this to keep reserve, persist and
        compensate in one critical section per product.
        """
        return self._locks.hold(product_ids)

    def available(self, product_id) -> int:
        try:
            return current_domain.repository_for(Product).get(str(product_id)).stock_quantity
        except ObjectNotFoundError:
            return 0

    def reserve(self, reservations: Mapping) -> ReservationToken:
        wanted = normalize_reservations(reservations)
        if not wanted:
            return ReservationToken(items={}, reserved_at=datetime.now(UTC))

        with self.locked(wanted):
            taken = self._retrying("reserve", wanted, self._reserve_once)

        logger.info("stock_reserved", items=taken)
        return ReservationToken(items=taken, reserved_at=datetime.now(UTC))

    def release(self, reservations: Mapping) -> None:
        """Put reserved quantities back, for compensation and cancellation."""
        if isinstance(reservations, ReservationToken):
            reservations = reservations.items
        returned = normalize_reservations(reservations)
        if not returned:
            return

        with self.locked(returned):
            restored = self._retrying("release", returned, self._release_once)

        logger.info("stock_released", items=restored)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _retrying(self, operation, quantities, attempt_fn):
        # Inside a caller's unit of work the version check runs at the
        # caller's commit, so a retry here could not see fresh data.
        attempts = 1 if current_uow else self.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return attempt_fn(quantities)
            except ExpectedVersionError:
                if attempt == attempts:
                    logger.warning("stock_write_conflict", operation=operation, items=quantities, attempts=attempt)
                    raise
                logger.info("stock_write_retried", operation=operation, items=quantities, attempt=attempt)

    def _load(self, product_ids) -> dict[str, Product | None]:
        repo = current_domain.repository_for(Product)
        products = {}
        for product_id in product_ids:
            try:
                products[product_id] = repo.get(product_id)
            except ObjectNotFoundError:
                products[product_id] = None
        return products

    def _reserve_once(self, wanted: dict[str, int]) -> dict[str, int]:
        products = self._load(wanted)
        missing = [pid for pid, product in products.items() if product is None]
        if missing:
            raise ProductUnavailable(missing)

        tracked = {pid: qty for pid, qty in wanted.items() if products[pid].manage_stock}
        shortfalls = [
            Shortfall(product_id=pid, requested=qty, available=products[pid].stock_quantity)
            for pid, qty in tracked.items()
            if products[pid].stock_quantity < qty
        ]
        if shortfalls:
            logger.info(
                "stock_reservation_rejected",
                products=[s.product_id for s in shortfalls],
            )
            raise InsufficientStock(shortfalls)

        if tracked:
            repo = current_domain.repository_for(Product)
            with UnitOfWork():
                for product_id, quantity in tracked.items():
                    product = products[product_id]
                    product.withdraw_stock(quantity)
                    repo.add(product)
        return tracked

    def _release_once(self, returned: dict[str, int]) -> dict[str, int]:
        products = self._load(returned)
        restored = {}

        repo = current_domain.repository_for(Product)
        with UnitOfWork():
            for product_id, quantity in returned.items():
                product = products[product_id]
                if product is None or not product.manage_stock:
                    logger.warning("stock_release_skipped", product_id=product_id, quantity=quantity)
                    continue
                product.restore_stock(quantity)
                repo.add(product)
                restored[product_id] = quantity
        return restored


_ledger: StockLedger | None = None


def get_ledger() -> StockLedger:
    global _ledger
    if _ledger is None:
        _ledger = StockLedger()
    return _ledger
