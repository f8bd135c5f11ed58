"""Cart aggregate — pending line items for one shopper.

A cart is owned either by a signed-in user (``user_id``) or by an anonymous
session (``session_id``). There is exactly one line per product; adding a
product that is already in the cart increases its quantity. Stock is not
checked here, only at checkout.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price_snapshot = Integer(min_value=0)  # effective price when added; informational
    added_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier()  # Nullable for guest carts
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_an_owner(self):
        if not self.user_id and not self.session_id:
            raise ValidationError({"owner": ["A cart needs a user_id or a session_id"]})

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(i.product_id) for i in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None):
        if not user_id and not session_id:
            raise ValidationError({"owner": ["A cart needs a user_id or a session_id"]})

        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def add_item(self, product_id, quantity, price_snapshot=None):
        """Add ``quantity`` units of a product, merging with an existing line."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.item_for(product_id)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            if price_snapshot is not None:
                existing.price_snapshot = price_snapshot
            new_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    product_id=str(product_id),
                    quantity=quantity,
                    price_snapshot=price_snapshot,
                    added_at=now,
                )
            )
            new_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity_added=quantity,
                new_quantity=new_quantity,
                price_snapshot=price_snapshot,
            )
        )

    def set_item_quantity(self, product_id, quantity):
        """Set a line's quantity outright. Zero removes the line."""
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        if quantity == 0:
            self.remove_item(product_id)
            return

        item = self.item_for(product_id)
        if item is None:
            raise ObjectNotFoundError(f"Product {product_id} is not in the cart")

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a product's line. Removing an absent product does nothing."""
        item = self.item_for(product_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
            )
        )
        return True

    def clear(self, reason=None):
        removed = len(self.items)
        if not removed:
            return 0

        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed=removed,
                reason=reason,
            )
        )
        return removed

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def snapshot(self) -> dict[str, int]:
        """``{product_id: quantity}`` for every line, ready for checkout."""
        return {str(i.product_id): i.quantity for i in self.items}
