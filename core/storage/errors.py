"""
OPS Storage — Errors
======================
Typed failures raised by storage implementations.

Engines translate ConcurrentModificationError and InsufficientStockError
into RejectionReasons. StorageUnavailableError is never translated:
it propagates to the caller, who owns the retry policy.
"""

from __future__ import annotations

from typing import Iterable, Tuple


class StorageError(Exception):
    """Base class for every storage-layer failure."""


class ConcurrentModificationError(StorageError):
    """An atomic write lost a race against another writer."""

    def __init__(self, message: str, *, key: object = None):
        super().__init__(message)
        self.key = key


class StorageUnavailableError(StorageError):
    """The backing store could not be reached or refused the transaction."""


class InsufficientStockError(StorageError):
    """A conditional stock write would have driven on-hand below zero."""

    def __init__(self, product_ids: Iterable[str], *, branch_id: str = ""):
        self.product_ids: Tuple[str, ...] = tuple(sorted(set(product_ids)))
        self.branch_id = branch_id
        super().__init__(
            f"Insufficient stock at branch '{branch_id}' for: "
            f"{', '.join(self.product_ids)}."
        )


class LoyaltyAccountNotFoundError(StorageError):
    """No privilege card exists for the given account id."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Loyalty account '{account_id}' does not exist.")
