"""Catalogue maintenance — commands and handler.

Price and status changes hold the product's stock lock, so they never
interleave with a reservation of the same product in this process.
"""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, ProductStatus
from storefront.domain import storefront
from storefront.inventory.locks import product_locks


@storefront.command(part_of="Product")
class AddProduct:
    product_id: Identifier()
    name: String(required=True, max_length=255)
    sku: String(required=True, max_length=50)
    price: Integer(required=True, min_value=0)
    sale_price: Integer(min_value=0)
    stock_quantity: Integer(default=0, min_value=0)
    manage_stock: Boolean(default=True)
    status: String(max_length=20, default=ProductStatus.ACTIVE.value)
    images: Text()  # JSON array of image URLs


@storefront.command(part_of="Product")
class ChangeProductPrice:
    product_id: Identifier(required=True)
    price: Integer(required=True, min_value=0)
    sale_price: Integer(min_value=0)


@storefront.command(part_of="Product")
class ChangeProductStatus:
    product_id: Identifier(required=True)
    status: String(required=True, max_length=20)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            name=command.name,
            sku=command.sku,
            price=command.price,
            sale_price=command.sale_price,
            stock_quantity=command.stock_quantity,
            manage_stock=command.manage_stock,
            status=command.status,
            images=command.images,
            product_id=command.product_id,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        with product_locks.hold([command.product_id]):
            repo = current_domain.repository_for(Product)
            product = repo.get(command.product_id)
            product.change_price(price=command.price, sale_price=command.sale_price)
            repo.add(product)

    @handle(ChangeProductStatus)
    def change_status(self, command):
        with product_locks.hold([command.product_id]):
            repo = current_domain.repository_for(Product)
            product = repo.get(command.product_id)
            product.change_status(command.status)
            repo.add(product)
