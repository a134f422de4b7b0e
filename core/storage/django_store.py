"""
OPS Storage — Django ORM Implementation
=========================================
OrderStorage backed by the order_storage tables.

Write flow (NON-NEGOTIABLE):
    1. Open one transaction per call
    2. Lock the touched rows (select_for_update)
    3. Validate the whole batch
    4. Conditional UPDATE guarded by the value that was read
    5. Commit, or raise and let the transaction roll back

This module does NOT:
- Retry on conflict (callers own retry policy)
- Swallow errors silently
- Interpret order semantics
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from functools import reduce
from operator import or_
from typing import Dict, Iterator, Sequence, Tuple

from django.db import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    transaction,
)
from django.db.models import F, Q

from core.storage.contracts import StockChange
from core.storage.errors import (
    ConcurrentModificationError,
    InsufficientStockError,
    LoyaltyAccountNotFoundError,
    StorageUnavailableError,
)
from core.storage.models import LoyaltyAccount, SequenceCounter, StockRecord

logger = logging.getLogger("ops.storage")


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Map driver-level failures onto the storage error taxonomy."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error(f"Storage unavailable during {operation}: {exc}", exc_info=True)
        raise StorageUnavailableError(f"{operation} failed: {exc}") from exc
    except IntegrityError as exc:
        raise ConcurrentModificationError(
            f"{operation} conflicted with a concurrent write: {exc}",
        ) from exc


def _merge_changes(changes: Sequence[StockChange]) -> Dict[Tuple[str, str], int]:
    merged: Dict[Tuple[str, str], int] = {}
    for change in changes:
        key = (change.product_id, change.branch_id)
        merged[key] = merged.get(key, 0) + change.change
    return merged


class DjangoOrderStorage:
    """
    Transactional OrderStorage.

    Row locks serialise writers on Postgres; on SQLite the database-wide
    write lock does the same. Every UPDATE is additionally conditioned on
    the value read inside the transaction, so a stale read can never be
    written back.
    """

    def __init__(self, using: str = "default"):
        self._using = using

    # ── Stock ─────────────────────────────────────────────────

    def get_stock(self, product_id: str, branch_id: str) -> int:
        with _storage_errors("get_stock"):
            quantity = (
                StockRecord.objects.using(self._using)
                .filter(product_id=product_id, branch_id=branch_id)
                .values_list("quantity_on_hand", flat=True)
                .first()
            )
        return quantity if quantity is not None else 0

    def set_stock(self, product_id: str, branch_id: str, quantity: int) -> None:
        if not isinstance(quantity, int) or quantity < 0:
            raise ValueError("quantity must be int >= 0.")
        with _storage_errors("set_stock"):
            StockRecord.objects.using(self._using).update_or_create(
                product_id=product_id,
                branch_id=branch_id,
                defaults={"quantity_on_hand": quantity},
            )

    def atomic_adjust_stock(self, changes: Sequence[StockChange]) -> None:
        merged = _merge_changes(changes)
        if not merged:
            return
        with _storage_errors("atomic_adjust_stock"):
            with transaction.atomic(using=self._using):
                self._adjust_locked(merged)

    def _adjust_locked(self, merged: Dict[Tuple[str, str], int]) -> None:
        selector = reduce(
            or_,
            (Q(product_id=p, branch_id=b) for p, b in merged),
        )
        rows = {
            (row.product_id, row.branch_id): row
            for row in StockRecord.objects.using(self._using)
            .select_for_update()
            .filter(selector)
        }

        short = []
        for key, change in merged.items():
            row = rows.get(key)
            current = row.quantity_on_hand if row is not None else 0
            if current + change < 0:
                short.append(key)
        if short:
            raise InsufficientStockError(
                [product_id for product_id, _ in short],
                branch_id=short[0][1],
            )

        for (product_id, branch_id), change in merged.items():
            row = rows.get((product_id, branch_id))
            if row is None:
                StockRecord.objects.using(self._using).create(
                    product_id=product_id,
                    branch_id=branch_id,
                    quantity_on_hand=change,
                )
                continue
            updated = (
                StockRecord.objects.using(self._using)
                .filter(pk=row.pk, quantity_on_hand=row.quantity_on_hand)
                .update(quantity_on_hand=row.quantity_on_hand + change)
            )
            if updated != 1:
                raise ConcurrentModificationError(
                    f"Stock for '{product_id}' at '{branch_id}' changed mid-batch.",
                    key=(product_id, branch_id),
                )

    # ── Loyalty ───────────────────────────────────────────────

    def get_loyalty_balance(self, account_id: str) -> Decimal:
        with _storage_errors("get_loyalty_balance"):
            balance = (
                LoyaltyAccount.objects.using(self._using)
                .filter(account_id=account_id)
                .values_list("point_balance", flat=True)
                .first()
            )
        if balance is None:
            raise LoyaltyAccountNotFoundError(account_id)
        return balance

    def create_loyalty_account(self, account_id: str, initial_balance: Decimal) -> None:
        with _storage_errors("create_loyalty_account"):
            with transaction.atomic(using=self._using):
                LoyaltyAccount.objects.using(self._using).create(
                    account_id=account_id,
                    point_balance=initial_balance,
                )

    def atomic_set_loyalty_balance(
        self, account_id: str, expected_old: Decimal, new_balance: Decimal,
    ) -> None:
        with _storage_errors("atomic_set_loyalty_balance"):
            with transaction.atomic(using=self._using):
                updated = (
                    LoyaltyAccount.objects.using(self._using)
                    .filter(account_id=account_id, point_balance=expected_old)
                    .update(point_balance=new_balance)
                )
                if updated == 1:
                    return
                exists = (
                    LoyaltyAccount.objects.using(self._using)
                    .filter(account_id=account_id)
                    .exists()
                )
        if not exists:
            raise LoyaltyAccountNotFoundError(account_id)
        raise ConcurrentModificationError(
            f"Loyalty balance for '{account_id}' is no longer {expected_old}.",
            key=account_id,
        )

    # ── Counters ──────────────────────────────────────────────

    def atomic_increment_counter(
        self, branch_id: str, category_code: str, *, start_at: int = 1,
    ) -> int:
        with _storage_errors("atomic_increment_counter"):
            with transaction.atomic(using=self._using):
                counters = SequenceCounter.objects.using(self._using).filter(
                    branch_id=branch_id, category_code=category_code,
                )
                if counters.update(last_value=F("last_value") + 1) == 0:
                    if self._create_counter(branch_id, category_code, start_at):
                        return start_at
                    counters.update(last_value=F("last_value") + 1)
                return counters.values_list("last_value", flat=True).get()

    def _create_counter(self, branch_id: str, category_code: str, start_at: int) -> bool:
        """Insert a fresh counter. False if another writer inserted it first."""
        try:
            with transaction.atomic(using=self._using):
                SequenceCounter.objects.using(self._using).create(
                    branch_id=branch_id,
                    category_code=category_code,
                    last_value=start_at,
                )
        except IntegrityError:
            logger.info(
                f"Counter {branch_id}/{category_code} created concurrently; incrementing."
            )
            return False
        return True


__all__ = [
    "DjangoOrderStorage",
]
