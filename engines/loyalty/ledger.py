"""
OPS Loyalty Engine — Ledger Calculator
=========================================
Privilege-card redemption and accrual against an account snapshot.

RULES (NON-NEGOTIABLE):
- Pure: reads a snapshot, returns a proposed balance, never writes.
- Redemption is capped at the current balance → new balance ≥ 0.
- Accrual is floor(taxable × rate), credited even when nothing was
  redeemed.
- Persisting the proposal is the caller's job and must be a
  compare-and-swap against previous_balance (see LoyaltyService).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from core.primitives.money import ZERO, NumberLike, to_amount

DEFAULT_ACCRUAL_RATE = Decimal("0.05")


@dataclass(frozen=True)
class LoyaltyAccountSnapshot:
    """Point balance read from the loyalty store at one moment."""
    account_id: str
    point_balance: Decimal

    def __post_init__(self):
        if not self.account_id or not isinstance(self.account_id, str):
            raise ValueError("account_id must be a non-empty string.")
        if not isinstance(self.point_balance, Decimal):
            object.__setattr__(self, "point_balance", to_amount(self.point_balance))


@dataclass(frozen=True)
class LedgerUpdate:
    previous_balance: Decimal
    new_balance: Decimal
    points_redeemed: Decimal
    points_accrued: int

    @property
    def net_change(self) -> Decimal:
        return self.new_balance - self.previous_balance

    def to_dict(self) -> dict:
        return {
            "previous_balance": str(self.previous_balance),
            "new_balance": str(self.new_balance),
            "points_redeemed": str(self.points_redeemed),
            "points_accrued": self.points_accrued,
        }


def accrue_points(taxable_amount: NumberLike, rate: Decimal = DEFAULT_ACCRUAL_RATE) -> int:
    """Whole points earned on a taxable amount, rounded down."""
    raw = to_amount(taxable_amount) * rate
    return int(raw.to_integral_value(rounding=ROUND_FLOOR))


def compute_ledger_update(
    taxable_amount: NumberLike,
    requested_redeem_amount: NumberLike,
    has_loyalty_account: bool,
    account_snapshot: Optional[LoyaltyAccountSnapshot],
    *,
    accrual_rate: Decimal = DEFAULT_ACCRUAL_RATE,
) -> LedgerUpdate:
    current = account_snapshot.point_balance if account_snapshot is not None else ZERO
    current = max(current, ZERO)

    redeemed = ZERO
    if has_loyalty_account:
        redeemed = min(to_amount(requested_redeem_amount), current)

    accrued = accrue_points(taxable_amount, accrual_rate)

    return LedgerUpdate(
        previous_balance=current,
        new_balance=current - redeemed + accrued,
        points_redeemed=redeemed,
        points_accrued=accrued,
    )

