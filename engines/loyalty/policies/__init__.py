"""
OPS Loyalty Engine — Policies
=============================
Redemption guards for the order-entry validation layer.

The ledger calculator itself clamps instead of rejecting; these
policies let a caller refuse a request up front with a precise reason.
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.money import to_amount, to_decimal


def redemption_requires_card_policy(
    requested_amount,
    has_loyalty_account: bool,
) -> Optional[RejectionReason]:
    """Points can only be redeemed against an existing privilege card."""
    if to_amount(requested_amount) > 0 and not has_loyalty_account:
        return RejectionReason(
            code=ReasonCode.INVALID_INPUT,
            message="Cannot redeem points without a privilege card.",
            policy_name="redemption_requires_card_policy",
        )
    return None


def redeem_within_balance_policy(
    requested_amount,
    available_points,
) -> Optional[RejectionReason]:
    """Customer must have enough points to cover the requested redemption."""
    requested = to_decimal(requested_amount)
    available = to_amount(available_points)
    if requested < 0:
        return RejectionReason(
            code=ReasonCode.INVALID_INPUT,
            message=f"Redeem amount cannot be negative, got {requested}.",
            policy_name="redeem_within_balance_policy",
        )
    if requested > available:
        return RejectionReason(
            code=ReasonCode.INVALID_INPUT,
            message=f"Customer has {available} points, requested {requested}.",
            policy_name="redeem_within_balance_policy",
        )
    return None
