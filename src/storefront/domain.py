"""Storefront bounded context — catalogue, carts, stock and orders.

Placement is synchronous: the product catalogue, the stock ledger and the
order repository live in one domain so a checkout can re-read prices, reserve
stock and persist the order inside a single request.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
