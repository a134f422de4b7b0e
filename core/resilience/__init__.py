"""
OPS Core Resilience — Public API
===================================
Conflict handling for optimistic storage writes.
"""

from core.resilience.retry import retry_on_conflict

__all__ = [
    "retry_on_conflict",
]
