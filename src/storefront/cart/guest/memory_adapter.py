"""In-process guest cart storage.

Stands in for the browser's local storage during development and tests.
"""

import threading

from storefront.cart.guest.port import GuestCartRepository


class InMemoryGuestCarts(GuestCartRepository):
    def __init__(self) -> None:
        self._carts: dict[str, dict[str, int]] = {}
        self._lock = threading.Lock()

    def load(self, session_id: str) -> dict[str, int]:
        with self._lock:
            return dict(self._carts.get(session_id, {}))

    def replace(self, session_id: str, items: dict[str, int]) -> None:
        with self._lock:
            if items:
                self._carts[session_id] = {str(pid): qty for pid, qty in items.items()}
            else:
                self._carts.pop(session_id, None)

    def add(self, session_id: str, product_id, quantity: int = 1) -> None:
        """Mimic the storefront script adding to the local cart."""
        with self._lock:
            cart = self._carts.setdefault(session_id, {})
            cart[str(product_id)] = cart.get(str(product_id), 0) + quantity
