"""
Pure reporting functions over an already-loaded ledger.

Nothing here touches storage. Period filtering and trend bucketing happen in
a caller-supplied timezone (host local time when omitted); ``format_date``
renders in a separate display timezone, UTC+7 unless told otherwise.

Naive datetimes are read differently on each side: filtering and trend
bucketing take them as wall-clock time already in the reporting timezone,
while ``format_date`` takes them as UTC.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from db.models import Product, ProductSales, Transaction

UTC_PLUS_7 = timezone(timedelta(hours=7))
UNKNOWN_CATEGORY = "Unknown"
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class Period(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


class CategorySource(str, Enum):
    CURRENT = "current"  # look the product up in today's catalog
    AS_SOLD = "as_sold"  # category copied onto the transaction at sale time


def _local(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    # naive datetimes are taken to already be local
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz) if tz is not None else moment.astimezone()


def _today(now: Optional[datetime], tz: Optional[tzinfo]) -> date:
    if now is None:
        now = datetime.now(tz) if tz is not None else datetime.now()
    return _local(now, tz).date()


def _month_back(day: date) -> date:
    """
    One calendar month earlier with overflow rolling forward into the next
    month, so Mar 31 gives Mar 3 (Mar 2 in leap years) rather than Feb 28.
    """
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    return date(year, month, 1) + timedelta(days=day.day - 1)


def total_sales(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.total_price for t in transactions), Decimal("0"))


def filter_by_period(
    transactions: Sequence[Transaction],
    period,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[Transaction]:
    """
    Keep transactions whose local calendar day falls in the period:
    today for Daily, the last 7 days for Weekly, since the same day last
    month for Monthly. Any other period value returns the input unchanged.
    """
    try:
        period = Period(period)
    except ValueError:
        return list(transactions)

    today = _today(now, tz)
    if period is Period.DAILY:
        return [t for t in transactions if _local(t.date, tz).date() == today]
    if period is Period.WEEKLY:
        start = today - timedelta(days=7)
    else:
        start = _month_back(today)
    return [t for t in transactions if _local(t.date, tz).date() >= start]


def sales_by_product(transactions: Iterable[Transaction]) -> List[ProductSales]:
    """
    Quantity and revenue per product, highest revenue first.
    Products with equal revenue keep the order they were first seen in.
    """
    quantities: Dict[str, int] = {}
    revenues: Dict[str, Decimal] = {}
    for t in transactions:
        quantities[t.product_name] = quantities.get(t.product_name, 0) + t.quantity
        revenues[t.product_name] = revenues.get(t.product_name, Decimal("0")) + t.total_price

    rows = [
        ProductSales(product_name=name, quantity=quantities[name], total_revenue=revenues[name])
        for name in quantities
    ]
    return sorted(rows, key=lambda r: r.total_revenue, reverse=True)


def sales_by_category(
    transactions: Iterable[Transaction],
    catalog: Sequence[Product] = (),
    *,
    source: CategorySource = CategorySource.CURRENT,
) -> Dict[str, Decimal]:
    """
    Revenue per category.

    With ``CategorySource.CURRENT`` the category comes from the catalog,
    so a product that was re-categorised is reported under its new
    category and one that left the catalog lands in "Unknown".
    ``CategorySource.AS_SOLD`` uses the category stored on the transaction.
    """
    as_sold = CategorySource(source) is CategorySource.AS_SOLD
    lookup = {p.item_name: p.category for p in catalog}
    result: Dict[str, Decimal] = {}
    for t in transactions:
        if as_sold:
            category = t.category or UNKNOWN_CATEGORY
        else:
            category = lookup.get(t.product_name, UNKNOWN_CATEGORY)
        result[category] = result.get(category, Decimal("0")) + t.total_price
    return result


def top_selling_items(
    transactions: Iterable[Transaction], limit: int = 5
) -> List[ProductSales]:
    return sales_by_product(transactions)[: max(limit, 0)]


def trend_bucket(moment: datetime, period, tz: Optional[tzinfo] = None) -> str:
    local = _local(moment, tz)
    period = Period(period)
    if period is Period.DAILY:
        return f"{local.hour}:00"
    if period is Period.WEEKLY:
        # datetime.weekday() has Monday == 0
        return WEEKDAY_LABELS[(local.weekday() + 1) % 7]
    return str(local.day)


def prepare_trend_data(
    transactions: Iterable[Transaction],
    period,
    *,
    tz: Optional[tzinfo] = None,
) -> Dict[str, Decimal]:
    """
    Revenue per bucket: hour of day ("13:00") for Daily, weekday ("Mon")
    for Weekly, day of month ("1".."31") for Monthly. Buckets appear in the
    order first seen; empty buckets are not filled in.

    Raises ValueError for an unknown period.
    """
    period = Period(period)
    data: Dict[str, Decimal] = {}
    for t in transactions:
        key = trend_bucket(t.date, period, tz)
        data[key] = data.get(key, Decimal("0")) + t.total_price
    return data


def format_currency(amount) -> str:
    """US dollars, cents rounded half away from zero: ``-$1,234.50``."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_date(moment, tz: tzinfo = UTC_PLUS_7) -> str:
    """
    e.g. ``Oct 19, 2026, 02:05 PM`` in ``tz``. Naive values and ISO strings
    without an offset are read as UTC.
    """
    if not isinstance(moment, datetime):
        moment = datetime.fromisoformat(str(moment))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(tz)
    return f"{local:%b} {local.day}, {local.year}, {local:%I:%M %p}"


@dataclass(frozen=True)
class DashboardSummary:
    period: Period
    all_time_total: Decimal
    period_total: Decimal
    period_count: int
    by_product: List[ProductSales] = field(default_factory=list)
    by_category: Dict[str, Decimal] = field(default_factory=dict)
    top_items: List[ProductSales] = field(default_factory=list)
    trend: Dict[str, Decimal] = field(default_factory=dict)


def summarize(
    transactions: Sequence[Transaction],
    catalog: Sequence[Product],
    period,
    *,
    top: int = 5,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    category_source: CategorySource = CategorySource.CURRENT,
) -> DashboardSummary:
    """Everything the dashboard shows for one period."""
    period = Period(period)
    in_period = filter_by_period(transactions, period, now=now, tz=tz)
    return DashboardSummary(
        period=period,
        all_time_total=total_sales(transactions),
        period_total=total_sales(in_period),
        period_count=len(in_period),
        by_product=sales_by_product(in_period),
        by_category=sales_by_category(in_period, catalog, source=category_source),
        top_items=top_selling_items(transactions, top),
        trend=prepare_trend_data(in_period, period, tz=tz),
    )
