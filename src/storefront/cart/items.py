"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String

from storefront.cart.cart import Cart
from storefront.cart.owner import owner_from
from storefront.cart.store import CartStore
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)


@storefront.command(part_of="Cart")
class SetCartQuantity:
    user_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=0)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier()
    clear_all = Boolean(default=False)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        owner = owner_from(command.user_id, command.session_id)
        cart = CartStore().add(owner, command.product_id, command.quantity)
        return str(cart.id)

    @handle(SetCartQuantity)
    def set_cart_quantity(self, command):
        owner = owner_from(command.user_id, command.session_id)
        CartStore().set_quantity(owner, command.product_id, command.quantity)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        owner = owner_from(command.user_id, command.session_id)
        if command.clear_all:
            CartStore().clear(owner, reason="cleared")
        elif command.product_id:
            CartStore().remove(owner, command.product_id)
