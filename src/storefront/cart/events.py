"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to a cart, or its quantity was increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity_added = Integer(required=True)
    new_quantity = Integer(required=True)
    price_snapshot = Integer()


@storefront.event(part_of="Cart")
class CartQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    """Every line was removed, usually after a successful checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)
    reason = String(max_length=50)
