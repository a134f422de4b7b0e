"""
OPS Orders Engine — Checkout Service
=======================================
Orchestrates the save of a sales order, work order or consultation:

    new order:    price → allocate id → deduct stock → commit loyalty
    edited order: price → diff original vs edited → adjust stock

Stock and loyalty live behind separate atomic writes. If the loyalty
commit is rejected after stock has been deducted, the deduction is
reversed before the rejection is returned, so a refused order leaves
no stock movement behind. The privilege discount printed on the invoice
must be paid in full from the live card balance; a balance that shrank
since pricing refuses the order with INSUFFICIENT_POINTS.

The allocated order number is not returned to the pool; a gap in the
sequence is acceptable.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from core.commands.rejection import RejectionReason
from core.config.rules import EngineConfig, default_engine_config
from core.numbering.allocator import SequenceAllocator
from core.storage.contracts import OrderStorage
from engines.inventory.adjuster import AdjustmentResult, InventoryAdjuster
from engines.inventory.differ import StockDelta, deltas_for_new_order, diff_line_items
from engines.loyalty.services import LoyaltyCommitResult, LoyaltyService
from engines.pricing.calculator import TaxableBasis, compute_draft_pricing
from engines.pricing.models import LineItem, OrderDraft, PricingBreakdown

logger = logging.getLogger("ops.orders")


# ══════════════════════════════════════════════════════════════
# SAVE RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderSaveResult:
    accepted: bool
    order_id: Optional[str] = None
    sequence: Optional[int] = None
    breakdown: Optional[PricingBreakdown] = None
    stock: Optional[AdjustmentResult] = None
    loyalty: Optional[LoyaltyCommitResult] = None
    rejection: Optional[RejectionReason] = None

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "order_id": self.order_id,
            "sequence": self.sequence,
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "stock_changes": [
                delta.to_dict() for delta in (self.stock.applied if self.stock else ())
            ],
            "loyalty": (
                self.loyalty.update.to_dict()
                if self.loyalty is not None and self.loyalty.update is not None
                else None
            ),
            "rejection": self.rejection.to_dict() if self.rejection else None,
        }


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class OrderCheckoutService:
    """
    Order save workflow over one OrderStorage.

    Without an explicit config the chain defaults apply: branch counter
    seeds and numbering policies from default_engine_config().
    """

    def __init__(
        self,
        storage: OrderStorage,
        config: Optional[EngineConfig] = None,
        *,
        taxable_basis: Optional[TaxableBasis] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        config = config if config is not None else default_engine_config()
        self._taxable_basis = taxable_basis
        self._allocator = SequenceAllocator(storage, config)
        self._adjuster = InventoryAdjuster(storage)
        self._loyalty = LoyaltyService(storage, config.loyalty, sleep=sleep)

    @property
    def allocator(self) -> SequenceAllocator:
        return self._allocator

    @property
    def loyalty(self) -> LoyaltyService:
        return self._loyalty

    def price(self, draft: OrderDraft) -> PricingBreakdown:
        return compute_draft_pricing(draft, taxable_basis=self._taxable_basis)

    # ── New order ─────────────────────────────────────────────

    def finalize_new_order(
        self,
        draft: OrderDraft,
        *,
        branch_id: str,
        category_code: str,
        loyalty_account_id: Optional[str] = None,
    ) -> OrderSaveResult:
        breakdown = self.price(draft)

        allocation = self._allocator.allocate(branch_id, category_code)
        if not allocation.accepted:
            return OrderSaveResult(
                accepted=False, breakdown=breakdown, rejection=allocation.rejection,
            )
        order_id = allocation.order_id

        deltas = deltas_for_new_order(draft.line_items, branch_id=branch_id)
        stock = self._adjuster.apply(deltas, branch_id)
        if not stock.accepted:
            logger.warning(f"Order {order_id} not saved: {stock.rejection.message}")
            return OrderSaveResult(
                accepted=False,
                order_id=order_id,
                sequence=allocation.sequence,
                breakdown=breakdown,
                stock=stock,
                rejection=stock.rejection,
            )

        loyalty = self._loyalty.commit_ledger_update(
            loyalty_account_id,
            breakdown.taxable_value,
            breakdown.privilege_discount,
            exact_redemption=True,
        )
        if not loyalty.accepted:
            self._reverse(stock.applied, branch_id, order_id)
            return OrderSaveResult(
                accepted=False,
                order_id=order_id,
                sequence=allocation.sequence,
                breakdown=breakdown,
                stock=stock,
                loyalty=loyalty,
                rejection=loyalty.rejection,
            )

        logger.info(f"Order {order_id} saved, due {breakdown.final_amount_due}")
        return OrderSaveResult(
            accepted=True,
            order_id=order_id,
            sequence=allocation.sequence,
            breakdown=breakdown,
            stock=stock,
            loyalty=loyalty,
        )

    # ── Edited order ──────────────────────────────────────────

    def finalize_edited_order(
        self,
        order_id: str,
        original_items: Iterable[LineItem],
        draft: OrderDraft,
        *,
        branch_id: str,
    ) -> OrderSaveResult:
        """Re-price and reconcile stock. The order keeps its id; loyalty is untouched."""
        breakdown = self.price(draft)
        deltas = diff_line_items(original_items, draft.line_items, branch_id=branch_id)
        stock = self._adjuster.apply(deltas, branch_id)
        if not stock.accepted:
            logger.warning(f"Edit of {order_id} not saved: {stock.rejection.message}")
            return OrderSaveResult(
                accepted=False,
                order_id=order_id,
                breakdown=breakdown,
                stock=stock,
                rejection=stock.rejection,
            )

        logger.info(f"Order {order_id} edited, {len(stock.applied)} stock change(s)")
        return OrderSaveResult(
            accepted=True, order_id=order_id, breakdown=breakdown, stock=stock,
        )

    # ── Compensation ──────────────────────────────────────────

    def _reverse(self, applied: Iterable[StockDelta], branch_id: str, order_id: str) -> None:
        reversal = [
            StockDelta(delta.product_id, branch_id, -delta.quantity_change)
            for delta in applied
        ]
        result = self._adjuster.apply(reversal, branch_id)
        if not result.accepted:
            logger.error(
                f"Could not reverse stock for refused order {order_id}: "
                f"{result.rejection.message}"
            )
