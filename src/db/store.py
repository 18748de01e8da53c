# src/db/store.py
from __future__ import annotations

import asyncio
import json
import random
import string
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from db.database import INVENTORY_KEY, TRANSACTIONS_KEY, KeyValueStore
from db.errors import (
    EmptyCartError,
    InsufficientInventoryError,
    InvalidCartLineError,
    StorageReadError,
)
from db.models import CartLine, CheckoutPlan, Product, Transaction
from utils.logger import get_logger

_logger = get_logger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _new_transaction_id(taken: set[str]) -> str:
    """Millisecond timestamp plus 9 base-36 characters, unique among ``taken``."""
    stamp = str(int(time.time() * 1000))
    while True:
        tid = stamp + "".join(random.choices(_ID_ALPHABET, k=9))
        if tid not in taken:
            taken.add(tid)
            return tid


def _decode_inventory(raw: str) -> Dict[str, int]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageReadError(f"inventory payload is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise StorageReadError("inventory payload is not an object")
    inventory: Dict[str, int] = {}
    for name, qty in data.items():
        if isinstance(qty, bool) or not isinstance(qty, int):
            raise StorageReadError(f"inventory for {name!r} is not an integer")
        inventory[name] = qty
    return inventory


def _ledger_entries(raw: Optional[str]) -> List[Any]:
    """Raw ledger array, untouched. Raises StorageReadError if it is not one."""
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageReadError(f"ledger payload is not JSON: {e}") from e
    if not isinstance(data, list):
        raise StorageReadError("ledger payload is not an array")
    return data


def _decode_entries(entries: List[Any]) -> List[Transaction]:
    # unreadable entries are skipped here but stay in the stored array
    ledger: List[Transaction] = []
    for idx, entry in enumerate(entries):
        try:
            ledger.append(Transaction.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            _logger.warning(f"Skipping malformed ledger entry #{idx}: {e}")
    return ledger


class CatalogLedgerStore:
    """
    Owns the live inventory map and the append-only transaction ledger.

    The catalog itself is static; the inventory map is seeded from it the
    first time it is read and from then on only checkout changes it.

    Seeding and the re-check-then-write of a commit hold one lock, so two
    checkouts awaited together cannot both spend the same stock.
    """

    def __init__(self, kv: KeyValueStore, catalog: Sequence[Product]):
        self.kv = kv
        self.catalog: List[Product] = list(catalog)
        self._by_name: Dict[str, Product] = {p.item_name: p for p in self.catalog}
        self._lock = asyncio.Lock()

    # ---------------------------
    # Inventory
    # ---------------------------

    async def get_inventory(self) -> Dict[str, int]:
        """
        Current stock per product name. Seeds the map from the catalog if it
        was never persisted; a corrupt payload is logged and read as empty.
        """
        async with self._lock:
            return await self._read_inventory()

    async def _read_inventory(self) -> Dict[str, int]:
        # caller holds self._lock
        try:
            raw = await self.kv.load(INVENTORY_KEY)
            if raw is not None:
                return _decode_inventory(raw)
        except StorageReadError as e:
            _logger.warning(f"Error reading inventory: {e}")
            return {}

        inventory = {p.item_name: p.inventory for p in self.catalog}
        await self.kv.save(INVENTORY_KEY, json.dumps(inventory))
        _logger.info(f"Seeded inventory for {len(inventory)} products")
        return inventory

    async def check_availability(self, product_name: str, quantity: int) -> bool:
        """True if the product is stocked with at least ``quantity`` units."""
        inventory = await self.get_inventory()
        return product_name in inventory and inventory[product_name] >= quantity

    # ---------------------------
    # Catalog
    # ---------------------------

    def _with_stock(self, product: Product, inventory: Dict[str, int]) -> Product:
        return replace(
            product,
            current_inventory=inventory.get(product.item_name, product.inventory),
        )

    async def get_catalog(self) -> List[Product]:
        inventory = await self.get_inventory()
        return [self._with_stock(p, inventory) for p in self.catalog]

    async def get_product_by_name(self, name: str) -> Optional[Product]:
        product = self._by_name.get(name)
        if product is None:
            return None
        return self._with_stock(product, await self.get_inventory())

    def categories(self) -> List[str]:
        """Distinct catalog categories, first-seen order."""
        return list(dict.fromkeys(p.category for p in self.catalog))

    async def search_catalog(
        self, term: str = "", category: Optional[str] = None
    ) -> List[Product]:
        """
        Case-insensitive substring search over name and description,
        optionally restricted to one category. Empty term matches everything.
        """
        needle = (term or "").strip().lower()
        return [
            p
            for p in await self.get_catalog()
            if (category is None or p.category == category)
            and (needle in p.item_name.lower() or needle in p.description.lower())
        ]

    # ---------------------------
    # Ledger
    # ---------------------------

    async def get_ledger(self) -> List[Transaction]:
        """
        All transactions in append order. Empty if missing or not a JSON array;
        individual entries that cannot be decoded are skipped.
        """
        try:
            entries = _ledger_entries(await self.kv.load(TRANSACTIONS_KEY))
        except StorageReadError as e:
            _logger.warning(f"Error reading transactions: {e}")
            return []
        return _decode_entries(entries)

    # ---------------------------
    # Checkout (validate, then commit)
    # ---------------------------

    @staticmethod
    def _ensure_available(requested: Dict[str, int], inventory: Dict[str, int]) -> None:
        for name, qty in requested.items():
            available = inventory.get(name)
            if available is None or available < qty:
                raise InsufficientInventoryError(name, qty, available or 0)

    async def validate(self, cart_lines: Iterable[CartLine]) -> CheckoutPlan:
        """
        Check the whole cart against a single inventory snapshot.
        Repeated products are summed before comparing with stock.
        """
        lines = tuple(cart_lines)
        if not lines:
            raise EmptyCartError("Cart is empty.")

        requested: Dict[str, int] = {}
        for line in lines:
            if line.quantity <= 0:
                raise InvalidCartLineError(
                    f"Quantity for {line.product_name} must be positive."
                )
            if line.unit_price < 0:
                raise InvalidCartLineError(
                    f"Unit price for {line.product_name} cannot be negative."
                )
            requested[line.product_name] = requested.get(line.product_name, 0) + line.quantity

        inventory = await self.get_inventory()
        self._ensure_available(requested, inventory)
        return CheckoutPlan(
            lines=lines,
            requested=requested,
            snapshot={name: inventory[name] for name in requested},
        )

    async def commit(
        self, plan: CheckoutPlan, transaction_date: datetime
    ) -> List[Transaction]:
        """
        Append one transaction per cart line and decrement stock, persisting
        ledger and inventory in a single write. Stock is re-checked first, so
        a plan that went stale is rejected without writing anything.

        New entries are appended to the stored array as-is, so entries that
        cannot be decoded are kept. A ledger payload that is not a JSON array
        raises StorageReadError instead of being overwritten.
        """
        async with self._lock:
            inventory = await self._read_inventory()
            self._ensure_available(plan.requested, inventory)

            entries = _ledger_entries(await self.kv.load(TRANSACTIONS_KEY))
            taken = {str(e.get("id")) for e in entries if isinstance(e, dict)}
            created = [
                Transaction.from_cart_line(_new_transaction_id(taken), line, transaction_date)
                for line in plan.lines
            ]

            updated = dict(inventory)
            for name, qty in plan.requested.items():
                updated[name] -= qty

            await self.kv.save_many(
                {
                    TRANSACTIONS_KEY: json.dumps(entries + [t.to_dict() for t in created]),
                    INVENTORY_KEY: json.dumps(updated),
                }
            )
        _logger.info(
            f"Checkout committed: {len(created)} line(s), total {plan.total}"
        )
        return created

    async def checkout(
        self,
        cart_lines: Iterable[CartLine],
        transaction_date: Optional[datetime] = None,
    ) -> List[Transaction]:
        """Validate and commit a cart. Nothing is written unless every line fits."""
        when = transaction_date or datetime.now(timezone.utc)
        plan = await self.validate(cart_lines)
        return await self.commit(plan, when)
