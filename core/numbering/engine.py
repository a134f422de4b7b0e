"""
OPS Numbering — Order Id Formatting
======================================
Deterministic order id composition from an OrderNumberPolicy and an
allocated sequence number.

Doctrine:
- Stateless: same policy + branch + sequence → same order id.
- Pure string composition. Uniqueness comes from the allocator,
  never from this module.
"""

from __future__ import annotations

import re
from typing import Optional

from core.config.rules import OrderNumberPolicy


def format_order_id(
    policy: OrderNumberPolicy,
    sequence: int,
    *,
    branch_id: str = "",
) -> str:
    """
    Compose a human-facing order id.

    Examples:
        OrderNumberPolicy("OPS"), 42, branch_id="TVR"  → "OPS-TVR-0042"
        OrderNumberPolicy("OPW", include_branch=False), 7 → "OPW-0007"
    """
    if not isinstance(sequence, int) or isinstance(sequence, bool) or sequence < 1:
        raise ValueError("sequence must be int >= 1.")

    parts = [policy.effective_prefix]
    if policy.include_branch and branch_id:
        parts.append(branch_id)
    parts.append(str(sequence).zfill(policy.padding))
    return policy.separator.join(parts)


def parse_sequence(order_id: str) -> Optional[int]:
    """
    Trailing numeric suffix of an order id, or None.

    Used to read ids back (reports, linking a sale to its work order).
    Never used to decide the next number.
    """
    match = re.search(r"(\d+)$", order_id or "")
    if match is None:
        return None
    return int(match.group(1))
