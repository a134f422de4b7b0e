"""
OPS Inventory Engine — Stock Differ
======================================
Compares the line items an order was saved with against the edited
line items and produces the signed stock deltas the edit implies.

RULES (NON-NEGOTIABLE):
- Pure: no I/O, no shared state.
- quantity_change > 0 means MORE units leave stock (sold); < 0 means
  units come back (line removed or reduced).
- Quantities are summed per product_id on each side; placeholder lines
  with a blank product_id are ignored.
- Zero deltas are omitted: diff(X, X) == [].
- Output order is unspecified. Callers must not depend on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

from core.primitives.money import to_quantity
from engines.pricing.models import LineItem


@dataclass(frozen=True)
class StockDelta:
    product_id: str
    branch_id: str
    quantity_change: int

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string.")
        if not isinstance(self.branch_id, str):
            raise ValueError("branch_id must be a string.")
        if not isinstance(self.quantity_change, int) or isinstance(self.quantity_change, bool):
            raise ValueError("quantity_change must be int.")

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "branch_id": self.branch_id,
            "quantity_change": self.quantity_change,
        }


def quantity_map(items: Iterable[LineItem]) -> Dict[str, int]:
    quantities: Dict[str, int] = {}
    for item in items:
        if not item.product_id:
            continue
        quantities[item.product_id] = (
            quantities.get(item.product_id, 0) + to_quantity(item.quantity)
        )
    return quantities


def diff_line_items(
    original: Iterable[LineItem],
    edited: Iterable[LineItem],
    *,
    branch_id: str = "",
) -> List[StockDelta]:
    before = quantity_map(original)
    after = quantity_map(edited)

    deltas: List[StockDelta] = []
    for product_id, original_qty in before.items():
        change = after.get(product_id, 0) - original_qty
        if change != 0:
            deltas.append(StockDelta(product_id, branch_id, change))

    for product_id, edited_qty in after.items():
        if product_id not in before and edited_qty != 0:
            deltas.append(StockDelta(product_id, branch_id, edited_qty))

    return deltas


def deltas_for_new_order(
    items: Iterable[LineItem], *, branch_id: str = "",
) -> List[StockDelta]:
    """Stock consumed by a brand-new order: every filled line, in full."""
    return diff_line_items((), items, branch_id=branch_id)
