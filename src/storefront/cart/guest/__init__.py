"""Guest cart storage factory.

Provides get_guest_carts() / set_guest_carts() to swap implementations:
- InMemoryGuestCarts for development and testing
- AnonymousSessionGuestCarts for server-side anonymous carts
"""

from storefront.cart.guest.memory_adapter import InMemoryGuestCarts
from storefront.cart.guest.port import GuestCartRepository
from storefront.cart.guest.session_adapter import AnonymousSessionGuestCarts

_current_guest_carts: GuestCartRepository | None = None


def get_guest_carts() -> GuestCartRepository:
    """Return the active guest cart storage. Defaults to anonymous server-side carts."""
    global _current_guest_carts
    if _current_guest_carts is None:
        _current_guest_carts = AnonymousSessionGuestCarts()
    return _current_guest_carts


def set_guest_carts(guest_carts: GuestCartRepository) -> None:
    """Override the active guest cart storage (useful for tests)."""
    global _current_guest_carts
    _current_guest_carts = guest_carts


def reset_guest_carts() -> None:
    global _current_guest_carts
    _current_guest_carts = None


__all__ = [
    "AnonymousSessionGuestCarts",
    "GuestCartRepository",
    "InMemoryGuestCarts",
    "get_guest_carts",
    "reset_guest_carts",
    "set_guest_carts",
]
