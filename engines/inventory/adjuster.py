"""
OPS Inventory Engine — Stock Adjuster
========================================
Applies a batch of StockDeltas to one branch's stock, all or nothing.

Write flow (NON-NEGOTIABLE):
    1. Merge deltas per product
    2. Read on-hand for every product, compute on_hand − change
    3. Any product below zero → reject, listing EVERY short product,
       nothing written
    4. One atomic_adjust_stock call commits the batch
    5. The store re-checks under its lock; a race that empties stock
       between 2 and 4 becomes an INSUFFICIENT_STOCK rejection, a lost
       write becomes CONCURRENT_MODIFICATION, again nothing written

StorageUnavailableError is not caught here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from core.commands.rejection import ReasonCode, RejectionReason
from core.storage.contracts import OrderStorage, StockChange
from core.storage.errors import ConcurrentModificationError, InsufficientStockError
from engines.inventory.differ import StockDelta

logger = logging.getLogger("ops.inventory")


@dataclass(frozen=True)
class AdjustmentResult:
    accepted: bool
    applied: Tuple[StockDelta, ...] = ()
    insufficient_product_ids: Tuple[str, ...] = ()
    rejection: Optional[RejectionReason] = None


def _insufficient(product_ids: Iterable[str], branch_id: str) -> AdjustmentResult:
    ids = tuple(sorted(set(product_ids)))
    return AdjustmentResult(
        accepted=False,
        insufficient_product_ids=ids,
        rejection=RejectionReason(
            code=ReasonCode.INSUFFICIENT_STOCK,
            message=(
                f"Insufficient stock at branch {branch_id} for product(s): "
                f"{', '.join(ids)}. Cannot reduce stock below zero."
            ),
            policy_name="InventoryAdjuster.apply",
            subjects=ids,
        ),
    )


class InventoryAdjuster:

    def __init__(self, storage: OrderStorage):
        self._storage = storage

    def apply(self, deltas: Iterable[StockDelta], branch_id: str) -> AdjustmentResult:
        if not isinstance(branch_id, str):
            raise ValueError("branch_id must be a string.")

        merged: Dict[str, int] = {}
        for delta in deltas:
            if delta.branch_id and delta.branch_id != branch_id:
                raise ValueError(
                    f"Delta for {delta.product_id} targets branch "
                    f"'{delta.branch_id}', batch is for '{branch_id}'."
                )
            merged[delta.product_id] = merged.get(delta.product_id, 0) + delta.quantity_change
        merged = {pid: change for pid, change in merged.items() if change != 0}

        if not merged:
            return AdjustmentResult(accepted=True)

        short = [
            product_id
            for product_id, change in merged.items()
            if self._storage.get_stock(product_id, branch_id) - change < 0
        ]
        if short:
            logger.warning(f"Stock batch for {branch_id} rejected, short: {sorted(short)}")
            return _insufficient(short, branch_id)

        changes = [
            StockChange(product_id=pid, branch_id=branch_id, change=-change)
            for pid, change in merged.items()
        ]
        try:
            self._storage.atomic_adjust_stock(changes)
        except InsufficientStockError as exc:
            logger.warning(
                f"Stock for {exc.product_ids} at {branch_id} drained concurrently"
            )
            return _insufficient(exc.product_ids, branch_id)
        except ConcurrentModificationError as exc:
            logger.warning(f"Stock batch for {branch_id} lost a race: {exc}")
            return AdjustmentResult(
                accepted=False,
                rejection=RejectionReason(
                    code=ReasonCode.CONCURRENT_MODIFICATION,
                    message=(
                        f"Stock at branch {branch_id} changed while saving. "
                        f"No changes were applied; retry."
                    ),
                    policy_name="InventoryAdjuster.apply",
                    subjects=tuple(sorted(merged)),
                ),
            )

        applied = tuple(
            StockDelta(product_id=pid, branch_id=branch_id, quantity_change=change)
            for pid, change in merged.items()
        )
        logger.info(f"Applied {len(applied)} stock change(s) at {branch_id}")
        return AdjustmentResult(accepted=True, applied=applied)
