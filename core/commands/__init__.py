"""
OPS Command Layer — Outcomes
===============================
Every transactional operation produces exactly one outcome.
REJECTED outcomes are first-class citizens, not exceptions.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "RejectionReason",
    "ReasonCode",
]
