"""
OPS Pricing Engine — Order Value Objects
===========================================
LineItem, OrderDraft, LoyaltyRedemptionRequest and PricingBreakdown.

RULES (NON-NEGOTIABLE):
- All value objects are frozen. A draft edit produces a NEW draft.
- Numeric fields accept loose input (str/float/None) and are NOT
  validated here: the calculator clamps, the policies reject.
- PricingBreakdown amounts are already rounded to 2 places.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Tuple

from core.primitives.money import NumberLike, to_amount


# ══════════════════════════════════════════════════════════════
# LINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineItem:
    """
    One product line on an order.

    product_id is the stock identity used for inventory reconciliation;
    display_id is what the counter staff typed or scanned. A blank
    product_id is a placeholder row that has not been filled in yet.
    unit_price is tax-inclusive.
    """
    product_id: str
    unit_price: NumberLike = 0
    quantity: NumberLike = 0
    display_id: str = ""
    name: str = ""
    tax_code: str = ""

    def __post_init__(self):
        if not isinstance(self.product_id, str):
            raise ValueError("product_id must be a string.")
        if not isinstance(self.display_id, str):
            raise ValueError("display_id must be a string.")
        if not isinstance(self.name, str):
            raise ValueError("name must be a string.")
        if not isinstance(self.tax_code, str):
            raise ValueError("tax_code must be a string.")

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "display_id": self.display_id,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": str(self.quantity),
            "tax_code": self.tax_code,
        }


# ══════════════════════════════════════════════════════════════
# LOYALTY REDEMPTION REQUEST
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LoyaltyRedemptionRequest:
    """
    Customer asked to spend privilege-card points on this order.

    available_points is the account snapshot read when the card was
    looked up; the calculator never reads storage itself.
    """
    requested_amount: NumberLike
    available_points: NumberLike

    @property
    def is_requested(self) -> bool:
        return to_amount(self.requested_amount) > 0


# ══════════════════════════════════════════════════════════════
# ORDER DRAFT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderDraft:
    """
    Everything the Pricing Calculator needs for one order.

    carry_in_discount is imported from a linked prior work order.
    """
    line_items: Tuple[LineItem, ...] = ()
    advance_paid: NumberLike = 0
    manual_discount: NumberLike = 0
    carry_in_discount: NumberLike = 0
    loyalty: Optional[LoyaltyRedemptionRequest] = None

    def __post_init__(self):
        if not isinstance(self.line_items, tuple):
            object.__setattr__(self, "line_items", tuple(self.line_items))
        for item in self.line_items:
            if not isinstance(item, LineItem):
                raise ValueError("line_items must contain LineItem instances.")
        if self.loyalty is not None and not isinstance(
            self.loyalty, LoyaltyRedemptionRequest
        ):
            raise ValueError("loyalty must be LoyaltyRedemptionRequest or None.")

    def with_changes(self, **changes) -> OrderDraft:
        return replace(self, **changes)

    def with_item(self, item: LineItem) -> OrderDraft:
        return replace(self, line_items=self.line_items + (item,))

    def without_item(self, index: int) -> OrderDraft:
        items = list(self.line_items)
        del items[index]
        return replace(self, line_items=tuple(items))


# ══════════════════════════════════════════════════════════════
# PRICING BREAKDOWN
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingBreakdown:
    """Invoice figures for one computation. Replaced, never mutated."""
    gross_value: Decimal
    total_discount: Decimal
    amount_after_discount: Decimal
    taxable_value: Decimal
    gst_amount: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    advance: Decimal
    balance_due: Decimal
    privilege_discount: Decimal
    final_amount_due: Decimal

    def to_dict(self) -> dict:
        return {name: str(getattr(self, name)) for name in _BREAKDOWN_FIELDS}


_BREAKDOWN_FIELDS = (
    "gross_value",
    "total_discount",
    "amount_after_discount",
    "taxable_value",
    "gst_amount",
    "cgst_amount",
    "sgst_amount",
    "advance",
    "balance_due",
    "privilege_discount",
    "final_amount_due",
)

