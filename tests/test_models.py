import json
import os
import tempfile
import unittest
from datetime import datetime, timezone
from decimal import Decimal

from db.catalog import load_catalog, parse_catalog
from db.errors import CatalogError
from db.models import CartLine, CheckoutPlan, Product, Transaction
from utils.config import DEFAULT_CATALOG_PATH


class ModelsTestCase(unittest.TestCase):
    def test_cart_line_total(self):
        product = Product("Tea", "Hot tea", "Drinks", Decimal("1.10"), 4)
        line = CartLine.for_product(product, 3)
        self.assertEqual(line.category, "Drinks")
        self.assertEqual(line.total_price, Decimal("3.30"))

        plan = CheckoutPlan(lines=(line, CartLine.for_product(product)))
        self.assertEqual(plan.total, Decimal("4.40"))

    def test_transaction_json_layout(self):
        when = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
        line = CartLine("Tea", "Drinks", 2, Decimal("1.10"))
        tx = Transaction.from_cart_line("abc", line, when)

        data = tx.to_dict()
        self.assertEqual(
            sorted(data),
            ["category", "date", "id", "productName", "quantity", "totalPrice", "unitPrice"],
        )
        self.assertEqual(data["totalPrice"], "2.20")
        self.assertEqual(data["date"], "2026-10-19T08:30:00+00:00")
        self.assertEqual(Transaction.from_dict(json.loads(json.dumps(data))), tx)

    def test_transaction_from_numeric_payload(self):
        tx = Transaction.from_dict(
            {
                "id": 17,
                "productName": "Tea",
                "category": "Drinks",
                "quantity": 3,
                "unitPrice": 1.1,
                "date": "2026-10-19T01:02:03.456Z",
            }
        )
        self.assertEqual(tx.id, "17")
        self.assertEqual(tx.unit_price, Decimal("1.1"))
        # missing total is derived
        self.assertEqual(tx.total_price, Decimal("3.3"))
        self.assertEqual(tx.date.tzinfo, timezone.utc)

    def test_product_dict_includes_live_stock_only_when_known(self):
        product = Product("Tea", "Hot tea", "Drinks", Decimal("1.10"), 4)
        self.assertNotIn("currentInventory", product.to_dict())
        product = Product.from_dict(product.to_dict())
        self.assertEqual(product.unit_price, Decimal("1.10"))


class CatalogTestCase(unittest.TestCase):
    def test_packaged_catalog(self):
        products = load_catalog(DEFAULT_CATALOG_PATH)
        self.assertGreater(len(products), 0)
        names = [p.item_name for p in products]
        self.assertEqual(len(names), len(set(names)))
        self.assertTrue(all(p.unit_price >= 0 and p.inventory >= 0 for p in products))

    def test_parse_catalog(self):
        products = parse_catalog(
            [
                {
                    "itemName": "Tea",
                    "description": "Hot tea",
                    "category": "Drinks",
                    "unitPrice": 1.5,
                    "inventory": 3,
                }
            ]
        )
        self.assertEqual(products[0].unit_price, Decimal("1.5"))
        self.assertIsNone(products[0].current_inventory)

    def test_invalid_catalogs(self):
        tea = {"itemName": "Tea", "category": "Drinks", "unitPrice": 1, "inventory": 1}
        with self.assertRaises(CatalogError):
            parse_catalog({"itemName": "Tea"})
        with self.assertRaises(CatalogError):
            parse_catalog([tea, dict(tea)])
        with self.assertRaises(CatalogError):
            parse_catalog([dict(tea, unitPrice=-1)])
        with self.assertRaises(CatalogError):
            parse_catalog([dict(tea, inventory=-2)])
        with self.assertRaises(CatalogError):
            parse_catalog([{"itemName": "Tea"}])
        with self.assertRaises(CatalogError):
            parse_catalog([dict(tea, unitPrice="cheap")])

    def test_unreadable_catalog_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(CatalogError):
                load_catalog(os.path.join(tmp, "missing.json"))

            bad = os.path.join(tmp, "bad.json")
            with open(bad, "w") as f:
                f.write("[{")
            with self.assertRaises(CatalogError):
                load_catalog(bad)
