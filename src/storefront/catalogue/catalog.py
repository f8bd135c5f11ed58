"""Read-only product catalogue used by carts and checkout."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product


class ProductCatalog:
    """Live product lookups keyed by product id.

    Reads are never cached: checkout must see the price and status as they
    are at the moment of placement.
    """

    def get(self, product_id) -> Product | None:
        try:
            return current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            return None

    def lookup(self, product_ids) -> dict[str, Product | None]:
        """Fetch several products at once. Missing ids map to ``None``."""
        return {str(pid): self.get(pid) for pid in dict.fromkeys(str(p) for p in product_ids)}
