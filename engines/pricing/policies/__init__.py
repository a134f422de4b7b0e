"""
OPS Pricing Engine — Draft Policies
=====================================
Strict validation layered ABOVE the calculator.

The calculator clamps bad numbers to zero and carries on; order entry
calls validate_draft() first when it wants to refuse a draft with a
precise reason instead. Every policy returns None or a RejectionReason
with code INVALID_INPUT.
"""

from typing import Optional, Tuple

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.money import to_amount, to_decimal
from engines.loyalty.policies import redeem_within_balance_policy
from engines.pricing.calculator import gross_value
from engines.pricing.models import OrderDraft


def _invalid(message: str, policy_name: str, *subjects: str) -> RejectionReason:
    return RejectionReason(
        code=ReasonCode.INVALID_INPUT,
        message=message,
        policy_name=policy_name,
        subjects=tuple(subjects),
    )


def has_valid_products_policy(draft: OrderDraft) -> Optional[RejectionReason]:
    """At least one line must name a product with a positive quantity."""
    for item in draft.line_items:
        if item.product_id and to_decimal(item.quantity) > 0:
            return None
    return _invalid(
        "Order has no valid products.",
        "has_valid_products_policy",
    )


def line_quantities_policy(draft: OrderDraft) -> Optional[RejectionReason]:
    """Filled lines need a positive whole-number quantity."""
    bad = [
        item.product_id
        for item in draft.line_items
        if item.product_id and (
            to_decimal(item.quantity) <= 0
            or to_decimal(item.quantity) != to_decimal(item.quantity).to_integral_value()
        )
    ]
    if bad:
        return _invalid(
            f"Quantity must be a positive whole number for: {', '.join(bad)}.",
            "line_quantities_policy",
            *bad,
        )
    return None


def line_prices_policy(draft: OrderDraft) -> Optional[RejectionReason]:
    """No negative unit prices."""
    bad = [
        item.product_id or item.display_id or item.name
        for item in draft.line_items
        if to_decimal(item.unit_price) < 0
    ]
    if bad:
        return _invalid(
            f"Unit price cannot be negative for: {', '.join(bad)}.",
            "line_prices_policy",
            *bad,
        )
    return None


def amounts_non_negative_policy(draft: OrderDraft) -> Optional[RejectionReason]:
    for field_name in ("advance_paid", "manual_discount", "carry_in_discount"):
        value = to_decimal(getattr(draft, field_name))
        if value < 0:
            return _invalid(
                f"{field_name} cannot be negative, got {value}.",
                "amounts_non_negative_policy",
                field_name,
            )
    return None


def discount_within_gross_policy(draft: OrderDraft) -> Optional[RejectionReason]:
    """Discounts may not exceed what the items are worth."""
    gross = gross_value(draft.line_items)
    discount = to_amount(draft.manual_discount) + to_amount(draft.carry_in_discount)
    if discount > gross:
        return _invalid(
            f"Total discount {discount} exceeds order value {gross}.",
            "discount_within_gross_policy",
        )
    return None


def advance_within_gross_policy(draft: OrderDraft) -> Optional[RejectionReason]:
    gross = gross_value(draft.line_items)
    advance = to_amount(draft.advance_paid)
    if advance > gross:
        return _invalid(
            f"Advance {advance} exceeds order value {gross}.",
            "advance_within_gross_policy",
            "advance_paid",
        )
    return None


def discount_percentage_policy(percentage) -> Optional[RejectionReason]:
    """A percentage discount entered at the counter must lie in 0..100."""
    percent = to_decimal(percentage)
    if percent < 0 or percent > 100:
        return _invalid(
            "Discount percentage must be between 0 and 100.",
            "discount_percentage_policy",
        )
    return None


def redemption_policy(draft: OrderDraft) -> Optional[RejectionReason]:
    if draft.loyalty is None:
        return None
    return redeem_within_balance_policy(
        draft.loyalty.requested_amount,
        draft.loyalty.available_points,
    )


DRAFT_POLICIES = (
    has_valid_products_policy,
    line_quantities_policy,
    line_prices_policy,
    amounts_non_negative_policy,
    discount_within_gross_policy,
    advance_within_gross_policy,
    redemption_policy,
)


def validate_draft(draft: OrderDraft) -> Tuple[RejectionReason, ...]:
    """Run every draft policy; empty tuple means the draft is acceptable."""
    results = (policy(draft) for policy in DRAFT_POLICIES)
    return tuple(reason for reason in results if reason is not None)
