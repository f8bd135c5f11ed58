"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A checkout succeeded: stock was reserved and the order stored."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier()
    customer_email = String(required=True)
    items = Text(required=True)  # JSON: [{product_id, quantity, price, total}, ...]
    total_amount = Integer(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    notes = Text()
    comment = Text()
    changed_by = Identifier()
    changed_at = DateTime(required=True)
