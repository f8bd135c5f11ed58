"""Order aggregate — an immutable record of a successful checkout.

Line items, prices and totals are fixed when the order is placed. Only the
status (and the admin notes that accompany a status change) move afterwards.

Status model:
    pending → confirmed → processing → shipped → delivered
    Admins may set any status while the order is not terminal;
    delivered and cancelled are terminal. Shoppers may cancel their own
    order only while it is pending or confirmed.

Every status an order passes through is kept in ``status_history``.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
SHOPPER_CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line, with product details copied at purchase time.

    Name and SKU are snapshots so the order still reads correctly after the
    product is renamed or deleted.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Integer(required=True, min_value=0)
    total = Integer(required=True, min_value=0)

    @invariant.post
    def total_is_price_times_quantity(self):
        if self.total != self.price * self.quantity:
            raise ValidationError({"total": ["Item total must equal price times quantity"]})


@storefront.entity(part_of="Order")
class OrderStatusEntry:
    status = String(required=True, choices=OrderStatus)
    comment = Text()
    changed_by = Identifier()  # None for system changes
    created_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    status_history = HasMany(OrderStatusEntry)
    total_amount = Integer(required=True, min_value=0)
    shipping_fee = Integer(default=0, min_value=0)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(required=True, max_length=30)
    shipping_address = Text(required=True)
    billing_address = Text()
    notes = Text()
    user_id = Identifier()  # None for guest orders
    idempotency_key = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_items(self):
        if self.items and self.total_amount != sum(i.total for i in self.items) + (self.shipping_fee or 0):
            raise ValidationError({"total_amount": ["Order total must equal the sum of item totals"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        items_data,
        customer_name,
        customer_email,
        customer_phone,
        shipping_address,
        billing_address=None,
        notes=None,
        user_id=None,
        idempotency_key=None,
    ):
        """Build a pending order from priced lines.

        Args:
            items_data: List of dicts with product_id, product_name, sku,
                        quantity and price (unit price, minor units).
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=str(item["product_id"]),
                product_name=item["product_name"],
                sku=item.get("sku"),
                quantity=item["quantity"],
                price=item["price"],
                total=item["price"] * item["quantity"],
            )
            for item in items_data
        ]
        total_amount = sum(i.total for i in items)

        order = cls(
            order_number=order_number,
            status=OrderStatus.PENDING.value,
            total_amount=0,
            shipping_fee=0,
            payment_method=PaymentMethod.CASH_ON_DELIVERY.value,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            notes=notes,
            user_id=user_id,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )
        with atomic_change(order):
            order.add_items(items)
            order.total_amount = total_amount
        order.add_status_history(
            OrderStatusEntry(status=OrderStatus.PENDING.value, comment="Order placed", created_at=now)
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id) if user_id else None,
                customer_email=customer_email,
                items=json.dumps(
                    [
                        {
                            "product_id": str(i.product_id),
                            "quantity": i.quantity,
                            "price": i.price,
                            "total": i.total,
                        }
                        for i in items
                    ]
                ),
                total_amount=total_amount,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    @property
    def can_be_cancelled_by_shopper(self) -> bool:
        return OrderStatus(self.status) in SHOPPER_CANCELLABLE

    def cancel(self, reason=None, cancelled_by=None):
        """Shopper cancellation. Returning the stock is the caller's job."""
        if not self.can_be_cancelled_by_shopper:
            raise ValidationError({"status": [f"Order is {self.status} and can no longer be cancelled"]})
        self.change_status(
            OrderStatus.CANCELLED.value,
            comment=reason or "Cancelled by customer",
            changed_by=cancelled_by,
        )

    def change_status(self, new_status, notes=None, comment=None, changed_by=None):
        """Move to ``new_status``. Delivered and cancelled orders accept no further change.

        ``notes`` replaces the order's admin notes; ``comment`` is recorded on
        the history entry only (it defaults to ``notes``).
        """
        try:
            target = OrderStatus(new_status)
        except ValueError:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError({"status": [f"Invalid status '{new_status}'. Must be one of: {allowed}"]}) from None

        current = OrderStatus(self.status)
        if current in TERMINAL_STATUSES:
            raise ValidationError({"status": [f"Order is {current.value} and can no longer change status"]})

        now = datetime.now(UTC)
        if notes is not None:
            self.notes = notes
        self.updated_at = now
        if target == current:
            return

        comment = comment if comment is not None else notes
        self.status = target.value
        self.add_status_history(
            OrderStatusEntry(status=target.value, comment=comment, changed_by=changed_by, created_at=now)
        )

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                notes=notes,
                comment=comment,
                changed_by=str(changed_by) if changed_by else None,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    def to_dict(self, images: dict[str, list[str]] | None = None) -> dict:
        """Plain representation for API responses; ``images`` maps product id to image URLs."""
        images = images or {}
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "status": self.status,
            "user_id": str(self.user_id) if self.user_id else None,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "shipping_address": self.shipping_address,
            "billing_address": self.billing_address,
            "notes": self.notes,
            "payment_method": self.payment_method,
            "shipping_fee": self.shipping_fee,
            "total_amount": self.total_amount,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "items": [
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "product_name": item.product_name,
                    "sku": item.sku,
                    "quantity": item.quantity,
                    "price": item.price,
                    "total": item.total,
                    "images": images.get(str(item.product_id), []),
                }
                for item in self.items
            ],
            "status_history": [
                {
                    "status": entry.status,
                    "comment": entry.comment,
                    "changed_by": str(entry.changed_by) if entry.changed_by else None,
                    "created_at": entry.created_at.isoformat(),
                }
                for entry in self.history()
            ],
        }

    def history(self) -> list[OrderStatusEntry]:
        """Status entries, oldest first."""
        return sorted(self.status_history, key=lambda entry: entry.created_at)
