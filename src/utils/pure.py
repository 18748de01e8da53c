from decimal import Decimal
from typing import Dict, List, Literal, Optional

from db.models import ProductSales
from utils.analytics import format_currency


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[object]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
    empty_text: str = "_No data available for this period_",
) -> str:
    """
    Render rows as a Markdown table.

    Args:
        headers: column headers, or None to take them from the first row.
        rows: table body; cells are passed through str().
        aligns: 'l', 'c' or 'r' per column, centred when omitted.
        empty_text: returned instead of a table when there are no rows.
    """
    if not rows:
        return empty_text

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    if aligns is None:
        aligns = ["c"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines += ["| " + " | ".join(str(cell) for cell in row) + " |" for row in rows]
    return "\n".join(lines)


def product_sales_table(rows: List[ProductSales]) -> str:
    return generate_markdown_table(
        ["Product", "Quantity", "Revenue"],
        [[r.product_name, r.quantity, format_currency(r.total_revenue)] for r in rows],
        ["l", "r", "r"],
    )


def revenue_table(label: str, data: Dict[str, Decimal]) -> str:
    """Two-column table of bucket/category -> revenue, in mapping order."""
    return generate_markdown_table(
        [label, "Revenue"],
        [[key, format_currency(value)] for key, value in data.items()],
        ["l", "r"],
    )
