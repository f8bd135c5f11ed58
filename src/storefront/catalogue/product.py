"""Product aggregate — the catalogue's view of a sellable item.

Prices are integer minor units. ``stock_quantity`` is only ever changed
through ``withdraw_stock``/``restore_stock``, which the stock ledger calls
under its per-product locks.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text

from storefront.catalogue.events import (
    ProductAdded,
    ProductPriceChanged,
    ProductStatusChanged,
    StockRestored,
    StockWithdrawn,
)
from storefront.domain import storefront


class ProductStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


def parse_images(raw) -> list[str]:
    """Decode the stored JSON image list. Anything malformed reads as no images."""
    if not raw:
        return []
    if isinstance(raw, list):
        return [str(url) for url in raw]
    try:
        images = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []
    if not isinstance(images, list):
        return []
    return [str(url) for url in images]


@storefront.aggregate
class Product:
    """Product aggregate root."""

    name: String(required=True, max_length=255)
    sku: String(required=True, max_length=50)
    price: Integer(required=True, min_value=0)
    sale_price: Integer(min_value=0)
    stock_quantity: Integer(default=0, min_value=0)
    manage_stock: Boolean(default=True)  # False: stock is neither checked nor decremented
    status: String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    images: Text()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def sale_price_cannot_exceed_price(self):
        if self.sale_price is not None and self.sale_price > self.price:
            raise ValidationError({"sale_price": ["Sale price cannot be higher than the regular price"]})

    @classmethod
    def add(
        cls,
        name,
        sku,
        price,
        sale_price=None,
        stock_quantity=0,
        status=ProductStatus.ACTIVE.value,
        images=None,
        product_id=None,
        manage_stock=True,
    ):
        now = datetime.now(UTC)
        images_json = json.dumps(images) if isinstance(images, list) else images

        kwargs = {"id": str(product_id)} if product_id is not None else {}
        product = cls(
            name=name,
            sku=sku,
            price=price,
            sale_price=sale_price,
            stock_quantity=stock_quantity,
            manage_stock=manage_stock,
            status=status,
            images=images_json,
            created_at=now,
            updated_at=now,
            **kwargs,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                sku=sku,
                name=name,
                price=price,
                sale_price=sale_price,
                stock_quantity=stock_quantity,
                manage_stock=manage_stock,
                status=status,
                added_at=now,
            )
        )
        return product

    @property
    def effective_price(self) -> int:
        """The price a shopper pays right now: the sale price when one is set."""
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    @property
    def image_urls(self) -> list[str]:
        return parse_images(self.images)

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def change_price(self, price, sale_price=None):
        previous_price, previous_sale_price = self.price, self.sale_price
        with atomic_change(self):
            self.price = price
            self.sale_price = sale_price
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=price,
                previous_sale_price=previous_sale_price,
                new_sale_price=sale_price,
                changed_at=now,
            )
        )

    def change_status(self, status):
        if status not in {s.value for s in ProductStatus}:
            raise ValidationError({"status": [f"Unknown product status '{status}'"]})
        if status == self.status:
            return

        previous = self.status
        self.status = status
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductStatusChanged(
                product_id=str(self.id),
                previous_status=previous,
                new_status=status,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def withdraw_stock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.stock_quantity:
            raise ValidationError(
                {"quantity": [f"Insufficient stock: {self.stock_quantity} available, {quantity} requested"]}
            )

        previous = self.stock_quantity
        self.stock_quantity = previous - quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockWithdrawn(
                product_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.stock_quantity,
                withdrawn_at=now,
            )
        )

    def restore_stock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.stock_quantity
        self.stock_quantity = previous + quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.stock_quantity,
                restored_at=now,
            )
        )
