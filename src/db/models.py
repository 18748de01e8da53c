# dataclass models plus their JSON (camelCase) layout

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple


def to_decimal(value: Any) -> Decimal:
    """Decimal from a JSON number or string; floats go through str() to keep 10.1 exact."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a money amount: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"not a money amount: {value!r}") from None


def parse_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class Product:
    item_name: str
    description: str
    category: str
    unit_price: Decimal
    inventory: int  # initial stock from the catalog
    current_inventory: Optional[int] = None  # live stock, set by the store

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Product:
        return cls(
            item_name=str(data["itemName"]),
            description=str(data.get("description", "")),
            category=str(data.get("category", "")),
            unit_price=to_decimal(data["unitPrice"]),
            inventory=int(data["inventory"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "itemName": self.item_name,
            "description": self.description,
            "category": self.category,
            "unitPrice": str(self.unit_price),
            "inventory": self.inventory,
        }
        if self.current_inventory is not None:
            data["currentInventory"] = self.current_inventory
        return data


@dataclass(frozen=True)
class CartLine:
    product_name: str
    category: str
    quantity: int
    unit_price: Decimal

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def for_product(cls, product: Product, quantity: int = 1) -> CartLine:
        return cls(
            product_name=product.item_name,
            category=product.category,
            quantity=quantity,
            unit_price=product.unit_price,
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    product_name: str
    category: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    date: datetime

    @classmethod
    def from_cart_line(cls, tid: str, line: CartLine, when: datetime) -> Transaction:
        return cls(
            id=tid,
            product_name=line.product_name,
            category=line.category,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.total_price,
            date=when,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Transaction:
        quantity = int(data["quantity"])
        unit_price = to_decimal(data["unitPrice"])
        total = data.get("totalPrice")
        return cls(
            id=str(data["id"]),
            product_name=str(data["productName"]),
            category=str(data.get("category", "")),
            quantity=quantity,
            unit_price=unit_price,
            total_price=to_decimal(total) if total is not None else unit_price * quantity,
            date=parse_date(data["date"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productName": self.product_name,
            "category": self.category,
            "quantity": self.quantity,
            "unitPrice": str(self.unit_price),
            "totalPrice": str(self.total_price),
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class ProductSales:
    product_name: str
    quantity: int
    total_revenue: Decimal


@dataclass(frozen=True)
class CheckoutPlan:
    """
    Result of the validation phase of checkout.

    Fields:
      - lines: the cart lines, in cart order
      - requested: total units asked for per product
      - snapshot: stock per product at validation time
    """

    lines: Tuple[CartLine, ...]
    requested: Dict[str, int] = field(default_factory=dict)
    snapshot: Dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return sum((line.total_price for line in self.lines), Decimal("0"))
