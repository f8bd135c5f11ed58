"""Placement failures surfaced to shoppers.

Every checkout failure is one of four kinds. The first three are
user-correctable and map to HTTP 400; ``PersistenceError`` is a server fault
(HTTP 500) whose detail is logged but never shown to the shopper.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Shortfall:
    """One product that could not be reserved in full."""

    product_id: str
    requested: int
    available: int

    @property
    def short_by(self) -> int:
        return self.requested - self.available


class PlacementError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class CheckoutValidationError(PlacementError):
    """Checkout input is missing or malformed."""

    def __init__(self, message: str, missing_fields: list[str] | None = None, errors: dict | None = None):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])
        self.errors = dict(errors or {})

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.missing_fields:
            payload["missing_fields"] = self.missing_fields
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ProductUnavailable(PlacementError):
    """One or more products are missing or not on sale."""

    def __init__(self, product_ids):
        self.product_ids = [str(pid) for pid in product_ids]
        super().__init__(f"Products not available: {', '.join(self.product_ids)}")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["products"] = self.product_ids
        return payload


class InsufficientStock(PlacementError):
    """Stock could not cover every requested quantity."""

    def __init__(self, shortfalls: list[Shortfall]):
        self.shortfalls = list(shortfalls)
        details = ", ".join(f"{s.product_id} (requested {s.requested}, available {s.available})" for s in self.shortfalls)
        super().__init__(f"Insufficient stock for: {details}")

    @property
    def product_ids(self) -> list[str]:
        return [s.product_id for s in self.shortfalls]

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["products"] = [
            {
                "product_id": s.product_id,
                "requested": s.requested,
                "available": s.available,
            }
            for s in self.shortfalls
        ]
        return payload


class PersistenceError(PlacementError):
    """The order could not be stored; any reservation has been released."""

    status_code = 500
    public_message = "Could not place the order, please try again"

    def __init__(self, detail: str = ""):
        super().__init__(self.public_message)
        self.detail = detail
