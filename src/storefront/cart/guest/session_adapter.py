"""Guest carts kept server-side as anonymous ``Cart`` aggregates."""

from storefront.cart.guest.port import GuestCartRepository
from storefront.cart.owner import Anonymous
from storefront.cart.store import CartStore


class AnonymousSessionGuestCarts(GuestCartRepository):
    def __init__(self, store: CartStore | None = None) -> None:
        self.store = store or CartStore()

    def load(self, session_id: str) -> dict[str, int]:
        return self.store.snapshot(Anonymous(session_id=session_id))

    def replace(self, session_id: str, items: dict[str, int]) -> None:
        owner = Anonymous(session_id=session_id)
        current = self.store.snapshot(owner)
        for product_id in current:
            if product_id not in items:
                self.store.remove(owner, product_id)
        for product_id, quantity in items.items():
            existing = current.get(str(product_id))
            if existing is None:
                self.store.add(owner, product_id, quantity)
            elif existing != quantity:
                self.store.set_quantity(owner, product_id, quantity)
