"""Storefront management CLI.

Usage:
    python src/manage.py setup-db           # Create all tables
    python src/manage.py drop-db            # Drop all tables
    python src/manage.py seed               # Load a demo catalogue and coupons
    python src/manage.py serve --port 8000  # Run the HTTP API
"""

import argparse
import json
import sys
from decimal import Decimal


def _domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def seed():
    """Populate a small catalogue with a variant, a combo offer and two coupons."""
    from storefront.catalogue.management import AddProduct, AddVariant, CreateComboOffer
    from storefront.coupon.management import CreateCoupon

    domain = _domain()
    with domain.domain_context():
        jacket = domain.process(
            AddProduct(title="Waterproof Dog Jacket", sku="DOG-JKT", base_price=Decimal("49.99"), stock=25),
            asynchronous=False,
        )
        domain.process(
            AddVariant(product_id=jacket, option_name="Size", option_value="XL", price=Decimal("54.99"), stock=5),
            asynchronous=False,
        )
        shampoo = domain.process(
            AddProduct(
                title="Oatmeal Shampoo",
                sku="SHAMPOO-OAT",
                base_price=Decimal("14.00"),
                sale_price=Decimal("11.50"),
                stock=100,
            ),
            asynchronous=False,
        )
        towel = domain.process(
            AddProduct(title="Microfibre Towel", sku="TOWEL-MF", base_price=Decimal("9.00"), stock=40),
            asynchronous=False,
        )
        domain.process(
            CreateComboOffer(
                name="Bath Time Bundle",
                product_ids=json.dumps([shampoo, towel]),
                combo_price=Decimal("19.99"),
                original_price=Decimal("23.00"),
            ),
            asynchronous=False,
        )
        domain.process(
            CreateCoupon(code="WELCOME10", coupon_type="percentage", amount=Decimal("10")),
            asynchronous=False,
        )
        domain.process(
            CreateCoupon(
                code="FIVEOFF",
                coupon_type="fixed",
                amount=Decimal("5.00"),
                min_cart_total=Decimal("25.00"),
                max_uses=100,
            ),
            asynchronous=False,
        )
    print("Seeded 3 products, 1 combo offer and 2 coupons.")


def serve(host, port, reload):
    import uvicorn

    uvicorn.run("app:app", host=host, port=port, reload=reload)


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Load a demo catalogue and coupons")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed()
    elif args.command == "serve":
        serve(args.host, args.port, args.reload)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
