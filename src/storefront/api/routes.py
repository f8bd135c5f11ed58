"""FastAPI routes for the storefront — carts and orders."""

from fastapi import APIRouter, Header, Query, Response
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    CancelOrderRequest,
    MergeCartRequest,
    PlaceOrderRequest,
    SetCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from storefront.cart.items import AddToCart, RemoveFromCart, SetCartQuantity
from storefront.cart.merge import GuestCartBridge
from storefront.cart.owner import new_session_id, owner_from
from storefront.cart.store import CartStore
from storefront.catalogue.catalog import ProductCatalog
from storefront.order.checkout import place_order
from storefront.order.order import Order
from storefront.order.repository import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from storefront.order.status import CancelOrder, UpdateOrderStatus


def _images_for(orders) -> dict[str, list[str]]:
    """Current image URLs for every product in ``orders``; deleted products have none."""
    product_ids = {str(item.product_id) for order in orders for item in order.items}
    products = ProductCatalog().lookup(product_ids)
    return {pid: product.image_urls if product else [] for pid, product in products.items()}


def _order_payload(order: Order) -> dict:
    return order.to_dict(images=_images_for([order]))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def create_order(
    body: PlaceOrderRequest,
    response: Response,
    idempotency_header: str | None = Header(default=None, alias="Idempotency-Key"),
) -> dict:
    """Place an order from the submitted cart lines.

    Prices in the request are ignored; every line is charged at the live
    effective price. Repeating a request with the same idempotency key
    returns the original order with status 200.
    """
    owner = owner_from(user_id=body.user_id) if body.user_id else None
    placement = place_order(
        owner,
        [line.model_dump(include={"product_id", "quantity"}) for line in body.items],
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        notes=body.notes,
        idempotency_key=body.idempotency_key or idempotency_header,
    )
    if placement.replayed:
        response.status_code = 200
    return {
        "success": True,
        "message": "Order already placed" if placement.replayed else "Order placed successfully",
        "data": _order_payload(placement.order),
    }


@order_router.get("")
async def list_orders(
    user_id: str | None = None,
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> dict:
    result = current_domain.repository_for(Order).search(user_id=user_id, status=status, page=page, limit=limit)
    images = _images_for(result.orders)
    return {
        "success": True,
        "data": {
            "orders": [order.to_dict(images=images) for order in result.orders],
            "pagination": result.pagination(),
        },
    }


@order_router.get("/track")
async def track_order(order_number: str, email: str) -> dict:
    """Guest order lookup by order number plus the email used at checkout."""
    order = current_domain.repository_for(Order).find_by_order_number_and_contact(order_number, email)
    if order is None:
        raise ObjectNotFoundError("Order not found")
    return {"success": True, "data": _order_payload(order)}


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    order = current_domain.repository_for(Order).find_by_id(order_id)
    if order is None:
        raise ObjectNotFoundError("Order not found")
    return {"success": True, "data": _order_payload(order)}


@order_router.put("/{order_id}")
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> dict:
    repo = current_domain.repository_for(Order)
    if repo.find_by_id(order_id) is None:
        raise ObjectNotFoundError("Order not found")

    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        notes=body.notes,
        comment=body.comment,
        changed_by=body.changed_by,
    )
    current_domain.process(command, asynchronous=False)
    return {
        "success": True,
        "message": "Order updated successfully",
        "data": _order_payload(repo.get(order_id)),
    }


@order_router.put("/{order_id}/cancel")
async def cancel_order(order_id: str, body: CancelOrderRequest) -> dict:
    """Shopper cancellation; the ordered quantities go back into stock."""
    current_domain.process(
        CancelOrder(order_id=order_id, user_id=body.user_id, reason=body.reason),
        asynchronous=False,
    )
    return {
        "success": True,
        "message": "Order cancelled successfully",
        "data": _order_payload(current_domain.repository_for(Order).get(order_id)),
    }


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_payload(user_id=None, session_id=None) -> dict:
    owner = owner_from(user_id, session_id)
    return {"success": True, "data": CartStore().summarize(owner).to_dict()}


@cart_router.get("")
async def get_cart(user_id: str | None = None, session_id: str | None = None) -> dict:
    return _cart_payload(user_id, session_id)


@cart_router.post("/session", status_code=201)
async def start_guest_session() -> dict:
    return {"success": True, "data": {"session_id": new_session_id()}}


@cart_router.post("")
async def add_to_cart(body: AddToCartRequest) -> dict:
    command = AddToCart(
        user_id=body.user_id,
        session_id=body.session_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_payload(body.user_id, body.session_id)


@cart_router.put("")
async def set_cart_quantity(body: SetCartQuantityRequest) -> dict:
    command = SetCartQuantity(
        user_id=body.user_id,
        session_id=body.session_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_payload(body.user_id, body.session_id)


@cart_router.delete("")
async def remove_from_cart(
    user_id: str | None = None,
    session_id: str | None = None,
    product_id: str | None = None,
    clear_all: bool = False,
) -> dict:
    if not clear_all and not product_id:
        raise ValidationError({"product_id": ["product_id is required unless clear_all is set"]})

    command = RemoveFromCart(
        user_id=user_id,
        session_id=session_id,
        product_id=product_id,
        clear_all=clear_all,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_payload(user_id, session_id)


@cart_router.post("/merge")
async def merge_guest_cart(body: MergeCartRequest) -> dict:
    """Fold a guest cart into the signed-in user's cart.

    Send either the client-held ``items`` map or the ``session_id`` of a
    server-side guest cart.
    """
    bridge = GuestCartBridge()
    if body.items is not None:
        report = bridge.merge(body.items, body.user_id)
    elif body.session_id:
        report = bridge.merge_session(body.session_id, body.user_id)
    else:
        raise ValidationError({"items": ["Provide items or a session_id to merge"]})

    return {
        "success": True,
        "message": "Cart merged" if report.complete else "Cart merged with failures",
        "data": report.to_dict(),
    }
