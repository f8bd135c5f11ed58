"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    price = Integer(required=True)
    sale_price = Integer()
    stock_quantity = Integer(required=True)
    manage_stock = Boolean(default=True)
    status = String(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Integer(required=True)
    new_price = Integer(required=True)
    previous_sale_price = Integer()
    new_sale_price = Integer()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductStatusChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockWithdrawn:
    """Units were taken out of available stock by a reservation."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    withdrawn_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockRestored:
    """Units were put back into available stock (compensation or restock)."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    restored_at = DateTime(required=True)
