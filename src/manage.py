"""Storefront management CLI.

Creates and drops the database schema, seeds products for local runs and
changes a product's price or status.

Usage:
    python src/manage.py setup-db
    python src/manage.py drop-db
    python src/manage.py seed-products --count 20 --stock 50
    python src/manage.py set-price 7 --price 1200 --sale-price 990
    python src/manage.py set-status 7 inactive
"""

import argparse
import sys


def setup_database():
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    touched = setup_db(storefront)
    print(f"  schema ready ({', '.join(touched) or 'no SQL providers configured'}).")
    print("Done.")


def drop_database():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    touched = drop_db(storefront)
    print(f"  schema dropped ({', '.join(touched) or 'no SQL providers configured'}).")
    print("Done.")


def seed_products(count, stock, price):
    """Add ``count`` active products, ids ``1..count``, each with ``stock`` units."""
    from protean.utils.globals import current_domain

    from storefront.catalogue.management import AddProduct
    from storefront.domain import storefront

    storefront.init()
    with storefront.domain_context():
        for n in range(1, count + 1):
            current_domain.process(
                AddProduct(
                    product_id=str(n),
                    name=f"Product {n}",
                    sku=f"SKU-{n:05d}",
                    price=price,
                    stock_quantity=stock,
                ),
                asynchronous=False,
            )
    print(f"Seeded {count} products.")


def change_product(command_cls, **fields):
    """Process one catalogue maintenance command against the configured database."""
    from protean.utils.globals import current_domain

    from storefront.domain import storefront

    storefront.init()
    with storefront.domain_context():
        current_domain.process(command_cls(**fields), asynchronous=False)
    print(f"Product {fields['product_id']} updated.")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-products", help="Add sample products")
    seed_parser.add_argument("--count", type=int, default=20)
    seed_parser.add_argument("--stock", type=int, default=50)
    seed_parser.add_argument("--price", type=int, default=1000, help="Price in minor units")

    price_parser = subparsers.add_parser("set-price", help="Change a product's price")
    price_parser.add_argument("product_id")
    price_parser.add_argument("--price", type=int, required=True, help="Price in minor units")
    price_parser.add_argument("--sale-price", type=int, default=None, help="Sale price in minor units")

    status_parser = subparsers.add_parser("set-status", help="Change a product's status")
    status_parser.add_argument("product_id")
    status_parser.add_argument("status", choices=["active", "inactive", "draft"])

    args = parser.parse_args()

    from storefront.utils.logging import configure_logging

    configure_logging()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-products":
        seed_products(args.count, args.stock, args.price)
    elif args.command == "set-price":
        from storefront.catalogue.management import ChangeProductPrice

        change_product(ChangeProductPrice, product_id=args.product_id, price=args.price, sale_price=args.sale_price)
    elif args.command == "set-status":
        from storefront.catalogue.management import ChangeProductStatus

        change_product(ChangeProductStatus, product_id=args.product_id, status=args.status)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
