"""
OPS Storage — In-Memory Implementation
========================================
Thread-safe in-memory OrderStorage.
Used in tests, bootstrap, and single-terminal deployments.

Doctrine:
- One lock guards all state; every public method holds it for its
  whole read-modify-write, so no caller ever observes a half batch.
- Stock batches are validated in full before the first row changes.
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Dict, Sequence, Tuple

from core.storage.contracts import StockChange
from core.storage.errors import (
    ConcurrentModificationError,
    InsufficientStockError,
    LoyaltyAccountNotFoundError,
)


class InMemoryOrderStorage:
    """
    In-memory stock, loyalty and counter tables.

    Keys:
        stock:    (product_id, branch_id) → on-hand quantity
        loyalty:  account_id → point balance
        counters: (branch_id, category_code) → last issued value
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._stock: Dict[Tuple[str, str], int] = {}
        self._loyalty: Dict[str, Decimal] = {}
        self._counters: Dict[Tuple[str, str], int] = {}

    # ── Stock ─────────────────────────────────────────────────

    def get_stock(self, product_id: str, branch_id: str) -> int:
        with self._lock:
            return self._stock.get((product_id, branch_id), 0)

    def set_stock(self, product_id: str, branch_id: str, quantity: int) -> None:
        if not isinstance(quantity, int) or quantity < 0:
            raise ValueError("quantity must be int >= 0.")
        with self._lock:
            self._stock[(product_id, branch_id)] = quantity

    def atomic_adjust_stock(self, changes: Sequence[StockChange]) -> None:
        with self._lock:
            pending: Dict[Tuple[str, str], int] = {}
            for change in changes:
                key = (change.product_id, change.branch_id)
                base = pending.get(key, self._stock.get(key, 0))
                pending[key] = base + change.change

            short = [key for key, qty in pending.items() if qty < 0]
            if short:
                raise InsufficientStockError(
                    [product_id for product_id, _ in short],
                    branch_id=short[0][1],
                )
            self._stock.update(pending)

    def snapshot_stock(self) -> Dict[Tuple[str, str], int]:
        """Copy of the stock table (test helper)."""
        with self._lock:
            return dict(self._stock)

    # ── Loyalty ───────────────────────────────────────────────

    def get_loyalty_balance(self, account_id: str) -> Decimal:
        with self._lock:
            if account_id not in self._loyalty:
                raise LoyaltyAccountNotFoundError(account_id)
            return self._loyalty[account_id]

    def create_loyalty_account(self, account_id: str, initial_balance: Decimal) -> None:
        with self._lock:
            if account_id in self._loyalty:
                raise ConcurrentModificationError(
                    f"Loyalty account '{account_id}' already exists.",
                    key=account_id,
                )
            self._loyalty[account_id] = initial_balance

    def atomic_set_loyalty_balance(
        self, account_id: str, expected_old: Decimal, new_balance: Decimal,
    ) -> None:
        with self._lock:
            if account_id not in self._loyalty:
                raise LoyaltyAccountNotFoundError(account_id)
            current = self._loyalty[account_id]
            if current != expected_old:
                raise ConcurrentModificationError(
                    f"Loyalty balance for '{account_id}' changed: "
                    f"expected {expected_old}, found {current}.",
                    key=account_id,
                )
            self._loyalty[account_id] = new_balance

    # ── Counters ──────────────────────────────────────────────

    def atomic_increment_counter(
        self, branch_id: str, category_code: str, *, start_at: int = 1,
    ) -> int:
        with self._lock:
            key = (branch_id, category_code)
            last = self._counters.get(key)
            value = start_at if last is None else last + 1
            self._counters[key] = value
            return value

    def current_counter(self, branch_id: str, category_code: str) -> int:
        """Last issued value, 0 if none (test helper)."""
        with self._lock:
            return self._counters.get((branch_id, category_code), 0)
