"""
OPS Command Layer — Rejection Model
======================================
Structured rejection reasons for refused operations.

Transactional components (Inventory Adjuster, Sequence Allocator,
Loyalty Service, Checkout Service) never answer with a bare False.
They return a result carrying one of these, so the caller can show
"insufficient stock for product X" instead of a generic failure.

Every rejection must be:
- Deterministic (same input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (reason_code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for an operation being refused.

    Fields:
        code:        Machine-readable rejection code (e.g. 'INSUFFICIENT_STOCK').
        message:     Human-readable explanation.
        policy_name: Name of the policy or component that refused.
        subjects:    Identifiers the rejection is about (product ids, keys).
    """

    code: str
    message: str
    policy_name: str
    subjects: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

        if not isinstance(self.subjects, tuple):
            raise ValueError("subjects must be a tuple.")

    def to_dict(self) -> dict:
        """Serialize for order audit payloads."""
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
            "subjects": list(self.subjects),
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Input ─────────────────────────────────────────────────
    INVALID_INPUT = "INVALID_INPUT"

    # ── Inventory ─────────────────────────────────────────────
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"

    # ── Concurrency / storage ─────────────────────────────────
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    # Engines raise StorageUnavailableError instead of returning this;
    # reserved for callers that surface an outage as a rejection.
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"

    # ── Loyalty ───────────────────────────────────────────────
    LOYALTY_ACCOUNT_NOT_FOUND = "LOYALTY_ACCOUNT_NOT_FOUND"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"
