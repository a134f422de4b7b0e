"""
OPS Storage — Public API
==========================
Storage collaborator protocol, error taxonomy and in-memory store.

The Django-backed store lives in core.storage.django_store and is
imported explicitly, after Django settings are configured.
"""

from core.storage.contracts import OrderStorage, StockChange
from core.storage.errors import (
    ConcurrentModificationError,
    InsufficientStockError,
    LoyaltyAccountNotFoundError,
    StorageError,
    StorageUnavailableError,
)
from core.storage.memory import InMemoryOrderStorage

__all__ = [
    "OrderStorage",
    "StockChange",
    "StorageError",
    "ConcurrentModificationError",
    "StorageUnavailableError",
    "InsufficientStockError",
    "LoyaltyAccountNotFoundError",
    "InMemoryOrderStorage",
]
