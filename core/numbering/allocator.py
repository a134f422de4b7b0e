"""
OPS Numbering — Sequence Allocator
=====================================
Issues collision-free, strictly increasing order numbers per
(branch, category).

Doctrine:
- Exactly ONE storage call per number: atomic_increment_counter.
- Never derive the next number from existing orders (max + 1 races
  between terminals of the same branch).
- Gaps are acceptable (a number allocated for an order that then fails
  to save is simply skipped). Duplicates are not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import EngineConfig, OrderNumberPolicy
from core.numbering.engine import format_order_id
from core.storage.contracts import OrderStorage
from core.storage.errors import ConcurrentModificationError

logger = logging.getLogger("ops.numbering")


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of one allocation. Exactly one of sequence/rejection is set."""

    accepted: bool
    sequence: Optional[int] = None
    order_id: Optional[str] = None
    rejection: Optional[RejectionReason] = None


class SequenceAllocator:

    def __init__(self, storage: OrderStorage, config: Optional[EngineConfig] = None):
        self._storage = storage
        self._config = config if config is not None else EngineConfig()

    def next_id(self, branch_id: str, category_code: str) -> int:
        """
        Atomically issue the next number for (branch_id, category_code).

        Raises ConcurrentModificationError / StorageUnavailableError from
        the storage layer unchanged.
        """
        if not branch_id or not isinstance(branch_id, str):
            raise ValueError("branch_id must be a non-empty string.")
        if not category_code or not isinstance(category_code, str):
            raise ValueError("category_code must be a non-empty string.")

        sequence = self._storage.atomic_increment_counter(
            branch_id,
            category_code,
            start_at=self._config.seed_for(branch_id),
        )
        logger.debug(f"Allocated {category_code} #{sequence} for branch {branch_id}")
        return sequence

    def policy_for(self, category_code: str) -> OrderNumberPolicy:
        policy = self._config.policy_for(category_code)
        if policy is None:
            policy = OrderNumberPolicy(category_code=category_code)
        return policy

    def allocate(self, branch_id: str, category_code: str) -> AllocationResult:
        """next_id plus the formatted order id, with conflicts as a rejection."""
        try:
            sequence = self.next_id(branch_id, category_code)
        except ConcurrentModificationError as exc:
            logger.warning(
                f"Order number allocation conflicted for {branch_id}/{category_code}: {exc}"
            )
            return AllocationResult(
                accepted=False,
                rejection=RejectionReason(
                    code=ReasonCode.CONCURRENT_MODIFICATION,
                    message=(
                        f"Could not allocate a {category_code} number for branch "
                        f"{branch_id}: concurrent update. Retry."
                    ),
                    policy_name="SequenceAllocator.allocate",
                    subjects=(branch_id, category_code),
                ),
            )

        order_id = format_order_id(
            self.policy_for(category_code), sequence, branch_id=branch_id,
        )
        logger.info(f"Issued order id {order_id}")
        return AllocationResult(accepted=True, sequence=sequence, order_id=order_id)
