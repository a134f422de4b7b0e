"""
OPS Loyalty Engine — Service Layer
==================================
Reads a privilege-card balance, runs the ledger calculator and writes
the result back with compare-and-swap.

Two terminals redeeming on the same card at once cannot both spend the
same points: the loser's CAS fails, it re-reads the balance and
recomputes. After LoyaltyRules.max_conflict_retries attempts the
commit is rejected with CONCURRENT_MODIFICATION.

With exact_redemption=True the requested redemption is a debt already
granted on the invoice: if the live balance no longer covers it the
commit is rejected with INSUFFICIENT_POINTS and nothing is written,
instead of capping the redemption at the balance.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import LoyaltyRules
from core.primitives.money import NumberLike, to_amount
from core.resilience.retry import retry_on_conflict
from core.storage.contracts import OrderStorage
from core.storage.errors import (
    ConcurrentModificationError,
    LoyaltyAccountNotFoundError,
)
from engines.loyalty.ledger import (
    LedgerUpdate,
    LoyaltyAccountSnapshot,
    compute_ledger_update,
)
from engines.loyalty.policies import redemption_requires_card_policy

logger = logging.getLogger("ops.loyalty")


# ── Result Record ─────────────────────────────────────────────

@dataclass(frozen=True)
class LoyaltyCommitResult:
    """
    accepted=True with persisted=False means the order had no card:
    the update is informational (accrual shown on the invoice only).
    """
    accepted: bool
    account_id: Optional[str] = None
    update: Optional[LedgerUpdate] = None
    persisted: bool = False
    attempts: int = 0
    rejection: Optional[RejectionReason] = None


# ── Service ───────────────────────────────────────────────────

class LoyaltyService:
    """Privilege-card balance operations. All writes are CAS."""

    def __init__(
        self,
        storage: OrderStorage,
        rules: Optional[LoyaltyRules] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._storage = storage
        self._rules = rules if rules is not None else LoyaltyRules()
        self._sleep = sleep

    def open_account(
        self, account_id: str, initial_points: NumberLike = 0,
    ) -> LoyaltyAccountSnapshot:
        """Issue a new privilege card. Raises ConcurrentModificationError if it exists."""
        snapshot = LoyaltyAccountSnapshot(
            account_id=account_id, point_balance=to_amount(initial_points),
        )
        self._storage.create_loyalty_account(account_id, snapshot.point_balance)
        logger.info(f"Opened privilege card {account_id} with {snapshot.point_balance} points")
        return snapshot

    def get_snapshot(self, account_id: str) -> LoyaltyAccountSnapshot:
        balance = self._storage.get_loyalty_balance(account_id)
        return LoyaltyAccountSnapshot(account_id=account_id, point_balance=balance)

    def preview(
        self,
        account_id: Optional[str],
        taxable_amount: NumberLike,
        requested_redeem_amount: NumberLike = 0,
    ) -> LedgerUpdate:
        """Ledger update against the current balance, without writing."""
        snapshot = self.get_snapshot(account_id) if account_id else None
        return compute_ledger_update(
            taxable_amount,
            requested_redeem_amount,
            snapshot is not None,
            snapshot,
            accrual_rate=self._rules.accrual_rate,
        )

    def commit_ledger_update(
        self,
        account_id: Optional[str],
        taxable_amount: NumberLike,
        requested_redeem_amount: NumberLike = 0,
        *,
        exact_redemption: bool = False,
    ) -> LoyaltyCommitResult:
        requested = to_amount(requested_redeem_amount)

        if not account_id:
            if exact_redemption:
                refusal = redemption_requires_card_policy(requested, False)
                if refusal is not None:
                    return LoyaltyCommitResult(accepted=False, rejection=refusal)
            update = compute_ledger_update(
                taxable_amount, requested, False, None,
                accrual_rate=self._rules.accrual_rate,
            )
            return LoyaltyCommitResult(accepted=True, update=update)

        attempts = 0
        shortfall: Optional[LedgerUpdate] = None

        def attempt() -> LedgerUpdate:
            nonlocal attempts, shortfall
            attempts += 1
            snapshot = self.get_snapshot(account_id)
            update = compute_ledger_update(
                taxable_amount,
                requested,
                True,
                snapshot,
                accrual_rate=self._rules.accrual_rate,
            )
            if exact_redemption and update.points_redeemed < requested:
                shortfall = update
                return update
            shortfall = None
            self._storage.atomic_set_loyalty_balance(
                account_id, update.previous_balance, update.new_balance,
            )
            return update

        try:
            update = retry_on_conflict(
                attempt,
                attempts=self._rules.max_conflict_retries,
                backoff_seconds=self._rules.retry_backoff_seconds,
                sleep=self._sleep,
            )
        except LoyaltyAccountNotFoundError:
            logger.warning(f"Loyalty commit for unknown card {account_id}")
            return LoyaltyCommitResult(
                accepted=False,
                account_id=account_id,
                attempts=attempts,
                rejection=RejectionReason(
                    code=ReasonCode.LOYALTY_ACCOUNT_NOT_FOUND,
                    message=f"Privilege card '{account_id}' does not exist.",
                    policy_name="LoyaltyService.commit_ledger_update",
                    subjects=(account_id,),
                ),
            )
        except ConcurrentModificationError:
            return LoyaltyCommitResult(
                accepted=False,
                account_id=account_id,
                attempts=attempts,
                rejection=RejectionReason(
                    code=ReasonCode.CONCURRENT_MODIFICATION,
                    message=(
                        f"Privilege card '{account_id}' kept changing during "
                        f"{attempts} attempts. Retry the order."
                    ),
                    policy_name="LoyaltyService.commit_ledger_update",
                    subjects=(account_id,),
                ),
            )

        if shortfall is not None:
            logger.warning(
                f"Card {account_id} holds {shortfall.previous_balance} points, "
                f"{requested} already granted"
            )
            return LoyaltyCommitResult(
                accepted=False,
                account_id=account_id,
                attempts=attempts,
                rejection=RejectionReason(
                    code=ReasonCode.INSUFFICIENT_POINTS,
                    message=(
                        f"Privilege card '{account_id}' has "
                        f"{shortfall.previous_balance} points, "
                        f"{requested} needed. No points were spent."
                    ),
                    policy_name="LoyaltyService.commit_ledger_update",
                    subjects=(account_id,),
                ),
            )

        logger.info(
            f"Card {account_id}: -{update.points_redeemed} +{update.points_accrued} "
            f"→ {update.new_balance}"
        )
        return LoyaltyCommitResult(
            accepted=True,
            account_id=account_id,
            update=update,
            persisted=True,
            attempts=attempts,
        )


__all__ = [
    "LoyaltyCommitResult",
    "LoyaltyService",
]
