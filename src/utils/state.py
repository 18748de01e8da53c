from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from db.errors import InsufficientInventoryError
from db.models import CartLine, Product, Transaction
from db.store import CatalogLedgerStore
from utils.config import Settings


class Cart:
    """
    Pending sale lines for the current register session. Never persisted.

    Every quantity change is checked against live stock first; a rejected
    change raises InsufficientInventoryError and leaves the cart as it was.
    """

    def __init__(self, store: CatalogLedgerStore):
        self.store = store
        self._lines: List[CartLine] = []

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def _index(self, product_name: str) -> Optional[int]:
        for i, line in enumerate(self._lines):
            if line.product_name == product_name:
                return i
        return None

    async def _require_stock(self, product_name: str, quantity: int) -> None:
        if not await self.store.check_availability(product_name, quantity):
            product = await self.store.get_product_by_name(product_name)
            available = product.current_inventory if product else 0
            raise InsufficientInventoryError(product_name, quantity, available or 0)

    async def add(self, product: Product) -> CartLine:
        """Add one unit of ``product``."""
        idx = self._index(product.item_name)
        if idx is None:
            await self._require_stock(product.item_name, 1)
            line = CartLine.for_product(product)
            self._lines.append(line)
            return line

        line = self._lines[idx]
        await self._require_stock(line.product_name, line.quantity + 1)
        self._lines[idx] = replace(line, quantity=line.quantity + 1)
        return self._lines[idx]

    async def set_quantity(self, product_name: str, quantity: int) -> None:
        """Set the quantity of an existing line; zero or less removes it."""
        idx = self._index(product_name)
        if idx is None:
            raise KeyError(product_name)
        if quantity <= 0:
            del self._lines[idx]
            return
        await self._require_stock(product_name, quantity)
        self._lines[idx] = replace(self._lines[idx], quantity=quantity)

    def remove(self, product_name: str) -> None:
        self._lines = [l for l in self._lines if l.product_name != product_name]

    def clear(self) -> None:
        self._lines = []

    def total(self) -> Decimal:
        return sum((line.total_price for line in self._lines), Decimal("0"))

    async def checkout(self, when: Optional[datetime] = None) -> List[Transaction]:
        """Commit the cart through the store; the cart is emptied only on success."""
        created = await self.store.checkout(self._lines, when)
        self.clear()
        return created


@dataclass
class AppState:
    """
    Centralized application state shared by screens.

    Fields:
      - settings: runtime configuration
      - store: catalog & ledger store
      - cart: the transient cart of this session
    """

    settings: Settings
    store: CatalogLedgerStore
    cart: Cart = field(init=False)

    def __post_init__(self) -> None:
        self.cart = Cart(self.store)
