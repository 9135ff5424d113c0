"""Seed a small merch catalog for local development.

Creates a handful of published products (tees, vinyl, posters) with
variants whose stock levels cover the interesting cases: plenty, low,
sold out, untracked and backorderable.

Usage:
    python scripts/seed_catalog.py
    PROTEAN_ENV=production python scripts/seed_catalog.py   # into PostgreSQL
"""

import argparse
import sys

# Add src/ to path so we can import domain modules
sys.path.insert(0, "src")

CATALOG = [
    {
        "name": "Encore World Tour Tee",
        "category": "apparel",
        "brand": "Encore",
        "variants": [
            {"sku": "tee-tour-blk-s", "name": "Black / S", "size": "S", "color": "Black", "base_price": 450.0, "stock": 24},
            {"sku": "tee-tour-blk-m", "name": "Black / M", "size": "M", "color": "Black", "base_price": 450.0, "stock": 3},
            {"sku": "tee-tour-blk-l", "name": "Black / L", "size": "L", "color": "Black", "base_price": 450.0, "stock": 0},
        ],
    },
    {
        "name": "Midnight Sessions Vinyl",
        "category": "music",
        "variants": [
            {
                "sku": "lp-midnight-std",
                "name": "Standard Black LP",
                "base_price": 799.0,
                "sale_price": 649.0,
                "stock": 40,
                "low_stock_threshold": 10,
            },
            {
                "sku": "lp-midnight-ltd",
                "name": "Limited Red Splatter",
                "base_price": 1199.0,
                "stock": 0,
                "allow_backorder": True,
            },
        ],
    },
    {
        "name": "Tour Poster 2026",
        "category": "collectibles",
        "variants": [
            {"sku": "poster-2026", "name": "Signed Poster", "base_price": 250.0, "track_inventory": False},
        ],
    },
]


def seed(verbose=True):
    from inventory.catalog.product import Product
    from inventory.domain import inventory

    inventory.init()
    created = []
    with inventory.domain_context():
        repo = inventory.repository_for(Product)
        for entry in CATALOG:
            product = Product.create(name=entry["name"], category=entry["category"], brand=entry.get("brand"))
            for variant in entry["variants"]:
                product.add_variant(**variant)
            product.publish()
            repo.add(product)
            created.append(product)
            if verbose:
                print(f"  {product.name} ({product.slug}): {len(product.variants)} variant(s), status {product.status}")
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed a development merch catalog")
    parser.add_argument("--quiet", action="store_true", help="Do not print created products")
    args = parser.parse_args()

    print("Seeding catalog...")
    products = seed(verbose=not args.quiet)
    print(f"Done. {len(products)} products created.")


if __name__ == "__main__":
    main()
