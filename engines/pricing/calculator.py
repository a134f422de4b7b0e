"""
OPS Pricing Engine — Invoice Calculator
==========================================
Turns line items, discounts, an advance and a loyalty redemption into
a PricingBreakdown.

RULES (NON-NEGOTIABLE):
- Pure: no I/O, no clock, no logging, no shared state.
- The step order below is fixed; totals on issued invoices depend on it.
- Malformed numbers never raise. Negatives and garbage count as 0.
- Full Decimal precision until the breakdown is built; rounding to
  2 places happens once, at output.

Steps:
    1. gross          = Σ unit_price × quantity        (tax-inclusive)
    2. total_discount = manual + carry_in, capped at gross
    3. after          = gross − total_discount
    4. taxable        = basis(after)  (identity by default → gst = 0)
       cgst = sgst    = gst / 2
    5. balance        = max(after − advance, 0)
    6. privilege      = min(requested, available, balance) if requested
       balance        = max(balance − privilege, 0)
    7. final          = balance
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Iterable, Optional

from core.primitives.money import (
    ZERO,
    NumberLike,
    clamp_non_negative,
    round_money,
    to_amount,
    to_quantity,
)
from engines.pricing.models import (
    LineItem,
    LoyaltyRedemptionRequest,
    OrderDraft,
    PricingBreakdown,
)

TaxableBasis = Callable[[Decimal], Decimal]

TWO = Decimal("2")
HUNDRED = Decimal("100")


# ══════════════════════════════════════════════════════════════
# TAX BASIS
# ══════════════════════════════════════════════════════════════

def identity_basis(amount: Decimal) -> Decimal:
    """Net amount is already the taxable value. GST therefore reports 0."""
    return amount


def gst_inclusive_basis(rate: NumberLike) -> TaxableBasis:
    """
    Basis that extracts GST from a tax-inclusive amount.

    gst_inclusive_basis("0.12")(Decimal("112")) → Decimal("100").
    Opt-in only; the default invoice keeps the identity basis.
    """
    divisor = Decimal("1") + to_amount(rate)

    def basis(amount: Decimal) -> Decimal:
        return amount / divisor

    return basis


# ══════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════

def line_total(item: LineItem) -> Decimal:
    return to_amount(item.unit_price) * to_quantity(item.quantity)


def gross_value(line_items: Iterable[LineItem]) -> Decimal:
    return sum((line_total(item) for item in line_items), ZERO)


def discount_from_percentage(
    line_items: Iterable[LineItem], percentage: NumberLike,
) -> Decimal:
    """Manual discount amount for a percentage of gross (capped at 100%)."""
    percent = min(to_amount(percentage), HUNDRED)
    return round_money(gross_value(line_items) * percent / HUNDRED)


# ══════════════════════════════════════════════════════════════
# CALCULATOR
# ══════════════════════════════════════════════════════════════

def compute_pricing(
    line_items: Iterable[LineItem],
    advance_paid: NumberLike = 0,
    manual_discount: NumberLike = 0,
    carry_in_discount: NumberLike = 0,
    loyalty_context: Optional[LoyaltyRedemptionRequest] = None,
    *,
    taxable_basis: Optional[TaxableBasis] = None,
) -> PricingBreakdown:
    basis = taxable_basis if taxable_basis is not None else identity_basis

    # 1. Gross
    gross = gross_value(line_items)

    # 2. Discount, excess silently dropped
    total_discount = to_amount(manual_discount) + to_amount(carry_in_discount)
    if total_discount > gross:
        total_discount = gross

    # 3. Net
    after = gross - total_discount

    # 4. Tax split
    taxable = min(clamp_non_negative(basis(after)), after)
    gst = after - taxable
    half_gst = gst / TWO

    # 5. Advance
    advance = to_amount(advance_paid)
    balance = clamp_non_negative(after - advance)

    # 6. Privilege card
    privilege = ZERO
    if loyalty_context is not None and loyalty_context.is_requested and balance > ZERO:
        privilege = min(
            to_amount(loyalty_context.requested_amount),
            to_amount(loyalty_context.available_points),
            balance,
        )
        balance = clamp_non_negative(balance - privilege)

    # 7. Final
    return PricingBreakdown(
        gross_value=round_money(gross),
        total_discount=round_money(total_discount),
        amount_after_discount=round_money(after),
        taxable_value=round_money(taxable),
        gst_amount=round_money(gst),
        cgst_amount=round_money(half_gst),
        sgst_amount=round_money(half_gst),
        advance=round_money(advance),
        balance_due=round_money(balance),
        privilege_discount=round_money(privilege),
        final_amount_due=round_money(balance),
    )


def compute_draft_pricing(
    draft: OrderDraft,
    *,
    taxable_basis: Optional[TaxableBasis] = None,
) -> PricingBreakdown:
    return compute_pricing(
        draft.line_items,
        advance_paid=draft.advance_paid,
        manual_discount=draft.manual_discount,
        carry_in_discount=draft.carry_in_discount,
        loyalty_context=draft.loyalty,
        taxable_basis=taxable_basis,
    )
