"""Pydantic request/response schemas for the storefront API.

These are external contracts (anti-corruption layer) — separate from the
internal Protean commands. Ids may arrive as numbers or strings and are
always handled as strings inside the domain.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field


def _as_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


Id = Annotated[str, BeforeValidator(_as_str)]
OptionalId = Annotated[str | None, BeforeValidator(_as_str)]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineSchema(BaseModel):
    product_id: Id
    quantity: int
    price: int | None = None  # informational only; the live price always wins


class PlaceOrderRequest(BaseModel):
    items: list[OrderLineSchema] = Field(default_factory=list)
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    shipping_address: str | None = None
    billing_address: str | None = None
    notes: str | None = None
    user_id: OptionalId = None
    idempotency_key: str | None = Field(default=None, max_length=255)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "7", "quantity": 2, "price": 100}],
                    "customer_name": "Alex Doe",
                    "customer_email": "alex@example.com",
                    "customer_phone": "0901 234 567",
                    "shipping_address": "12 Market Street, Springfield",
                    "user_id": "user-001",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str
    notes: str | None = None
    comment: str | None = None
    changed_by: OptionalId = None


class CancelOrderRequest(BaseModel):
    user_id: Id
    reason: str | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartOwnerSchema(BaseModel):
    user_id: OptionalId = None
    session_id: str | None = None


class AddToCartRequest(CartOwnerSchema):
    product_id: Id
    quantity: int = Field(ge=1, default=1)


class SetCartQuantityRequest(CartOwnerSchema):
    product_id: Id
    quantity: int = Field(ge=0)


class MergeCartRequest(BaseModel):
    user_id: Id
    session_id: str | None = None
    items: dict[str, int] | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"user_id": "user-001", "items": {"7": 2, "9": 1}},
                {"user_id": "user-001", "session_id": "session_1718000000000_a1b2c3d4e5f6"},
            ]
        }
    }


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------
class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: Any = None
