"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.cart.owner import Anonymous, Authenticated
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_for_user(self, user_id) -> Cart | None:
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def find_for_session(self, session_id) -> Cart | None:
        return self._dao.query.filter(session_id=str(session_id)).all().first

    def find_for(self, owner) -> Cart | None:
        """Find the cart for an ``Authenticated`` or ``Anonymous`` owner."""
        if isinstance(owner, Authenticated):
            return self.find_for_user(owner.user_id)
        if isinstance(owner, Anonymous):
            return self.find_for_session(owner.session_id)
        raise TypeError(f"Unsupported cart owner: {owner!r}")
