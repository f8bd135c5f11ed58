"""CartStore — cart operations keyed by cart owner.

Carts are created on first add. Every mutation is committed before the call
returns, so the next read by the same owner sees it.
"""

from dataclasses import dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.owner import Anonymous, Authenticated
from storefront.catalogue.catalog import ProductCatalog
from storefront.catalogue.product import ProductStatus
from storefront.errors import ProductUnavailable

logger = structlog.get_logger(__name__)

SHIPPING_FEE = 0


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    sku: str
    quantity: int
    unit_price: int
    line_total: int
    price_snapshot: int | None = None
    images: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CartSummary:
    """Totals computed from live prices. Unavailable lines are listed but not counted."""

    lines: list[CartLine] = field(default_factory=list)
    unavailable: list[str] = field(default_factory=list)
    item_count: int = 0
    subtotal: int = 0
    shipping_fee: int = SHIPPING_FEE

    @property
    def total(self) -> int:
        return self.subtotal + self.shipping_fee

    def to_dict(self) -> dict:
        return {
            "items": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "sku": line.sku,
                    "quantity": line.quantity,
                    "price": line.unit_price,
                    "total": line.line_total,
                    "images": line.images,
                }
                for line in self.lines
            ],
            "unavailable": self.unavailable,
            "summary": {
                "item_count": self.item_count,
                "subtotal": self.subtotal,
                "shipping_fee": self.shipping_fee,
                "total": self.total,
            },
        }


class CartStore:
    def __init__(self, catalog: ProductCatalog | None = None):
        self.catalog = catalog or ProductCatalog()

    @property
    def _repo(self):
        return current_domain.repository_for(Cart)

    def _cart_or_new(self, owner) -> Cart:
        cart = self._repo.find_for(owner)
        if cart is not None:
            return cart
        if isinstance(owner, Authenticated):
            return Cart.create(user_id=owner.user_id)
        if isinstance(owner, Anonymous):
            return Cart.create(session_id=owner.session_id)
        raise TypeError(f"Unsupported cart owner: {owner!r}")

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add(self, owner, product_id, quantity=1) -> Cart:
        """Add units of a product. The product must exist and must not be inactive."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})

        product = self.catalog.get(product_id)
        if product is None or product.status == ProductStatus.INACTIVE.value:
            raise ProductUnavailable([product_id])

        cart = self._cart_or_new(owner)
        cart.add_item(str(product_id), quantity, price_snapshot=product.effective_price)
        self._repo.add(cart)

        logger.debug("cart_item_added", owner=owner, product_id=str(product_id), quantity=quantity)
        return cart

    def set_quantity(self, owner, product_id, quantity) -> Cart | None:
        """Set a line to ``quantity``. Zero removes it; zero on a missing line is a no-op."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise ValidationError({"quantity": ["Quantity must be zero or a positive integer"]})

        cart = self._repo.find_for(owner)
        if cart is None:
            if quantity == 0:
                return None
            raise ObjectNotFoundError(f"Product {product_id} is not in the cart")

        cart.set_item_quantity(str(product_id), quantity)
        self._repo.add(cart)
        return cart

    def remove(self, owner, product_id) -> None:
        cart = self._repo.find_for(owner)
        if cart is not None and cart.remove_item(str(product_id)):
            self._repo.add(cart)

    def clear(self, owner, reason=None) -> int:
        cart = self._repo.find_for(owner)
        if cart is None:
            return 0
        removed = cart.clear(reason=reason)
        if removed:
            self._repo.add(cart)
            logger.info("cart_cleared", owner=owner, items_removed=removed, reason=reason)
        return removed

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def snapshot(self, owner) -> dict[str, int]:
        cart = self._repo.find_for(owner)
        return cart.snapshot() if cart is not None else {}

    def summarize(self, owner) -> CartSummary:
        cart = self._repo.find_for(owner)
        if cart is None or not cart.items:
            return CartSummary()

        products = self.catalog.lookup(str(i.product_id) for i in cart.items)
        lines, unavailable = [], []
        for item in cart.items:
            product = products.get(str(item.product_id))
            if product is None or not product.is_active:
                unavailable.append(str(item.product_id))
                continue
            unit_price = product.effective_price
            lines.append(
                CartLine(
                    product_id=str(item.product_id),
                    name=product.name,
                    sku=product.sku,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    line_total=unit_price * item.quantity,
                    price_snapshot=item.price_snapshot,
                    images=product.image_urls,
                )
            )

        return CartSummary(
            lines=lines,
            unavailable=unavailable,
            item_count=sum(line.quantity for line in lines),
            subtotal=sum(line.line_total for line in lines),
        )
