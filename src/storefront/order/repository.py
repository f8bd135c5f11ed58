"""Repository for the Order aggregate."""

import math
from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import Order

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Page:
    orders: list = field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


@storefront.repository(part_of=Order)
class OrderRepository:
    def create(self, order: Order) -> Order:
        """Store the order and all its items atomically."""
        self.add(order)
        return order

    def find_by_id(self, order_id) -> Order | None:
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            return None

    def search(self, user_id=None, status=None, page=1, limit=DEFAULT_PAGE_SIZE) -> Page:
        """Newest-first listing, optionally narrowed to one user and/or one status.

        ``status`` of ``None`` or ``"all"`` means no status filter.
        """
        page = max(int(page or 1), 1)
        limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)

        criteria = {}
        if user_id:
            criteria["user_id"] = str(user_id)
        if status and status != "all":
            criteria["status"] = status

        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return Page(orders=list(results.items), page=page, limit=limit, total=results.total)

    def find_by_user(self, user_id, status=None, page=1, limit=DEFAULT_PAGE_SIZE) -> Page:
        return self.search(user_id=user_id, status=status, page=page, limit=limit)

    def find_by_order_number(self, order_number) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def find_by_order_number_and_contact(self, order_number, email) -> Order | None:
        """Guest order tracking. A wrong email reads exactly like an unknown order number."""
        if not order_number or not email:
            return None
        order = self.find_by_order_number(order_number)
        if order is None or (order.customer_email or "").strip().lower() != email.strip().lower():
            return None
        return order

    def find_by_idempotency_key(self, key) -> Order | None:
        if not key:
            return None
        return self._dao.query.filter(idempotency_key=key).all().first

    def order_number_exists(self, order_number) -> bool:
        return self.find_by_order_number(order_number) is not None

    def update_status(self, order_id, new_status, notes=None, comment=None, changed_by=None) -> Order:
        order = self.get(str(order_id))
        order.change_status(new_status, notes=notes, comment=comment, changed_by=changed_by)
        self.add(order)
        return order
