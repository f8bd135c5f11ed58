"""Guest cart port (abstract interface).

A guest cart lives outside the server's authenticated cart store: in the
browser's local storage, or as an anonymous server-side cart keyed by a
session id. The merge on login only needs to read it, and to write back the
lines that could not be merged.
"""

from abc import ABC, abstractmethod


class GuestCartRepository(ABC):
    """Abstract guest cart storage."""

    @abstractmethod
    def load(self, session_id: str) -> dict[str, int]:
        """Return ``{product_id: quantity}`` for the guest session (empty if unknown)."""
        ...

    @abstractmethod
    def replace(self, session_id: str, items: dict[str, int]) -> None:
        """Overwrite the guest cart with ``items``. An empty mapping discards it."""
        ...
