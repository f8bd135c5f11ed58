"""Order status updates and cancellation — commands and handler."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.cancellation import OrderCancellation
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    notes = Text()
    comment = Text()
    changed_by = Identifier()


@storefront.command(part_of="Order")
class CancelOrder:
    """A shopper cancelling their own order."""

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = Text()


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        if command.status == OrderStatus.CANCELLED.value:
            order = OrderCancellation().cancel_as_admin(
                command.order_id,
                notes=command.notes,
                comment=command.comment,
                changed_by=command.changed_by,
            )
        else:
            order = current_domain.repository_for(Order).update_status(
                command.order_id,
                command.status,
                notes=command.notes,
                comment=command.comment,
                changed_by=command.changed_by,
            )
        return order.status

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = OrderCancellation().cancel(command.order_id, user_id=command.user_id, reason=command.reason)
        return order.status
