"""Catalog Service: sample catalog seeding for the store.

Invariants:
    - Seeding is per-product best-effort: one failed insert never aborts the rest
"""

import logging

from diaspora_connect.core.errors import DiasporaConnectError
from diaspora_connect.repositories.content import ProductRepository

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = (
    {
        "name": "DC T-Shirt",
        "description": "Show your support with our official platform t-shirt",
        "price": 25,
        "image": "/images/store/tshirt.png",
        "stock": 50,
        "lowStockThreshold": 10,
        "isActive": True,
    },
    {
        "name": "DC Sticker Pack",
        "description": "Set of 5 high-quality vinyl stickers",
        "price": 5,
        "image": "/images/store/cap.png",
        "stock": 100,
        "lowStockThreshold": 20,
        "isActive": True,
    },
    {
        "name": "DC Flag",
        "description": "3x5 foot flag for rallies and events",
        "price": 35,
        "image": "/images/store/hoodie.png",
        "stock": 30,
        "lowStockThreshold": 10,
        "isActive": True,
    },
    {
        "name": "Diaspora Investment Guide",
        "description": "Expert guide on investment opportunities in Zimbabwe",
        "price": 15,
        "image": "/images/store/hoodie-girl.png",
        "stock": 75,
        "lowStockThreshold": 15,
        "isActive": True,
    },
)


def upload_sample_products(products: ProductRepository) -> dict:
    """Insert the sample catalog; returns {message, results}."""
    results = []
    for product in SAMPLE_PRODUCTS:
        try:
            record = products.create(dict(product))
            results.append({"name": product["name"], "success": True, "id": record["id"]})
        except DiasporaConnectError as e:
            logger.error(f"Failed to upload product {product['name']}: {e.message}")
            results.append({"name": product["name"], "success": False, "error": e.message})
    uploaded = sum(1 for r in results if r["success"])
    return {
        "message": f"Uploaded {uploaded} of {len(SAMPLE_PRODUCTS)} products",
        "results": results,
    }

