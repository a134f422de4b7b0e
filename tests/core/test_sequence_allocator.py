"""
Tests for core.numbering — order id formatting and sequence allocation.
"""

import threading

import pytest

from core.commands.rejection import ReasonCode
from core.config.rules import (
    CATEGORY_SALES,
    CATEGORY_WORK_ORDER,
    EngineConfig,
    OrderNumberPolicy,
    default_engine_config,
)
from core.numbering.allocator import SequenceAllocator
from core.numbering.engine import format_order_id, parse_sequence
from core.storage import ConcurrentModificationError, InMemoryOrderStorage


# ── Formatting ────────────────────────────────────────────────

class TestFormatOrderId:
    def test_branch_and_padding(self):
        assert format_order_id(OrderNumberPolicy("OPS"), 42, branch_id="TVR") == "OPS-TVR-0042"

    def test_without_branch(self):
        policy = OrderNumberPolicy("OPW", include_branch=False)
        assert format_order_id(policy, 7, branch_id="TVR") == "OPW-0007"

    def test_custom_prefix_and_separator(self):
        policy = OrderNumberPolicy("CR", prefix="CONS", separator="/", padding=6)
        assert format_order_id(policy, 3742, branch_id="KAT") == "CONS/KAT/003742"

    def test_wide_sequence_not_truncated(self):
        assert format_order_id(OrderNumberPolicy("OPS", padding=2), 12345) == "OPS-12345"

    @pytest.mark.parametrize("bad", [0, -1, True, "5"])
    def test_invalid_sequence(self, bad):
        with pytest.raises(ValueError):
            format_order_id(OrderNumberPolicy("OPS"), bad)

    def test_parse_sequence(self):
        assert parse_sequence("OPS-TVR-3742") == 3742
        assert parse_sequence("OPS-TVR-") is None
        assert parse_sequence("") is None


# ── Allocation ────────────────────────────────────────────────

class TestSequenceAllocator:
    def test_strictly_increasing(self):
        allocator = SequenceAllocator(InMemoryOrderStorage())
        issued = [allocator.next_id("TVR", CATEGORY_SALES) for _ in range(5)]
        assert issued == [1, 2, 3, 4, 5]

    def test_branch_seed_from_config(self):
        allocator = SequenceAllocator(InMemoryOrderStorage(), default_engine_config())
        assert allocator.next_id("TVR", CATEGORY_SALES) == 3742
        assert allocator.next_id("KAT", CATEGORY_SALES) == 7701
        assert allocator.next_id("XYZ", CATEGORY_SALES) == 1001

    def test_categories_independent(self):
        allocator = SequenceAllocator(InMemoryOrderStorage())
        allocator.next_id("TVR", CATEGORY_SALES)
        allocator.next_id("TVR", CATEGORY_SALES)
        assert allocator.next_id("TVR", CATEGORY_WORK_ORDER) == 1

    @pytest.mark.parametrize("branch, category", [("", "OPS"), ("TVR", ""), (None, "OPS")])
    def test_blank_keys_rejected(self, branch, category):
        allocator = SequenceAllocator(InMemoryOrderStorage())
        with pytest.raises(ValueError):
            allocator.next_id(branch, category)

    def test_allocate_formats_id(self):
        allocator = SequenceAllocator(InMemoryOrderStorage(), default_engine_config())
        result = allocator.allocate("NTA", CATEGORY_WORK_ORDER)
        assert result.accepted
        assert result.sequence == 4701
        assert result.order_id == "OPW-NTA-4701"

    def test_unconfigured_category_uses_default_policy(self):
        allocator = SequenceAllocator(InMemoryOrderStorage(), EngineConfig())
        assert allocator.allocate("TVR", "RX").order_id == "RX-TVR-0001"

    def test_conflict_becomes_rejection(self):
        class ConflictingStore(InMemoryOrderStorage):
            def atomic_increment_counter(self, branch_id, category_code, *, start_at=1):
                raise ConcurrentModificationError("lost race", key=(branch_id, category_code))

        result = SequenceAllocator(ConflictingStore()).allocate("TVR", CATEGORY_SALES)

        assert not result.accepted
        assert result.order_id is None
        assert result.rejection.code == ReasonCode.CONCURRENT_MODIFICATION

    def test_concurrent_allocations_are_distinct(self):
        allocator = SequenceAllocator(InMemoryOrderStorage(), default_engine_config())
        issued = []
        lock = threading.Lock()

        def worker():
            for _ in range(25):
                value = allocator.next_id("KOT1", CATEGORY_SALES)
                with lock:
                    issued.append(value)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(issued)) == 200
        assert min(issued) == 5701
        assert max(issued) == 5701 + 199
