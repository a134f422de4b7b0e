"""
OPS Numbering — Public API
=============================
"""

from core.numbering.allocator import AllocationResult, SequenceAllocator
from core.numbering.engine import format_order_id, parse_sequence

__all__ = [
    "AllocationResult",
    "SequenceAllocator",
    "format_order_id",
    "parse_sequence",
]
