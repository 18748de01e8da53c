import json
from pathlib import Path
from typing import List

from db.errors import CatalogError
from db.models import Product
from utils.logger import get_logger

_logger = get_logger(__name__)


def parse_catalog(records: list) -> List[Product]:
    """
    Turn raw catalog records into Products.
    Item names must be unique; price and starting stock must be non-negative.
    """
    if not isinstance(records, list):
        raise CatalogError("Catalog must be a JSON array of products.")

    products: List[Product] = []
    seen: set[str] = set()
    for idx, record in enumerate(records):
        try:
            product = Product.from_dict(record)
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Catalog entry #{idx} is malformed: {e}") from e

        if product.item_name in seen:
            raise CatalogError(f"Duplicate catalog item: {product.item_name}")
        if product.unit_price < 0:
            raise CatalogError(f"Negative unit price for {product.item_name}")
        if product.inventory < 0:
            raise CatalogError(f"Negative inventory for {product.item_name}")
        seen.add(product.item_name)
        products.append(product)
    return products


def load_catalog(path) -> List[Product]:
    """Read the static product catalog from a JSON file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    products = parse_catalog(records)
    _logger.info(f"Loaded {len(products)} products from {path.name}")
    return products
