"""
OPS Storage — Collaborator Protocol
=====================================
The only I/O surface the engines touch.

Doctrine:
- Engines depend on this Protocol, never on a concrete store.
- Every write is atomic: a batch commits fully or not at all.
- Read-then-unconditional-write is not an acceptable implementation
  of any atomic_* method.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, Sequence


# ══════════════════════════════════════════════════════════════
# STOCK CHANGE (storage-level write instruction)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StockChange:
    """
    Signed change to on-hand quantity.

    change > 0 adds stock, change < 0 removes it. This is the opposite
    sign of a sales StockDelta, which counts units consumed.
    """

    product_id: str
    branch_id: str
    change: int

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string.")
        if not isinstance(self.branch_id, str):
            raise ValueError("branch_id must be a string.")
        if not isinstance(self.change, int) or isinstance(self.change, bool):
            raise ValueError("change must be int.")


# ══════════════════════════════════════════════════════════════
# PROTOCOL
# ══════════════════════════════════════════════════════════════

class OrderStorage(Protocol):

    def get_stock(self, product_id: str, branch_id: str) -> int:
        """Return on-hand quantity, 0 when no record exists."""
        ...  # pragma: no cover

    def set_stock(self, product_id: str, branch_id: str, quantity: int) -> None:
        """Overwrite on-hand quantity (stock-take, seeding)."""
        ...  # pragma: no cover

    def atomic_adjust_stock(self, changes: Sequence[StockChange]) -> None:
        """
        Apply every change or none.

        Raises InsufficientStockError if any row would go negative,
        ConcurrentModificationError on a lost race.
        """
        ...  # pragma: no cover

    def get_loyalty_balance(self, account_id: str) -> Decimal:
        """Raises LoyaltyAccountNotFoundError for unknown accounts."""
        ...  # pragma: no cover

    def create_loyalty_account(self, account_id: str, initial_balance: Decimal) -> None:
        ...  # pragma: no cover

    def atomic_set_loyalty_balance(
        self, account_id: str, expected_old: Decimal, new_balance: Decimal,
    ) -> None:
        """
        Compare-and-swap the balance.

        Raises ConcurrentModificationError if the stored balance is no
        longer expected_old.
        """
        ...  # pragma: no cover

    def atomic_increment_counter(
        self, branch_id: str, category_code: str, *, start_at: int = 1,
    ) -> int:
        """
        Read-and-increment the (branch, category) counter in one step.

        A fresh counter returns start_at.
        """
        ...  # pragma: no cover
