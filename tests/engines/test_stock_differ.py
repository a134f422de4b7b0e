"""OPS Inventory Engine tests (stock differ)."""

import pytest

from engines.inventory.differ import (
    StockDelta,
    deltas_for_new_order,
    diff_line_items,
    quantity_map,
)
from engines.pricing.models import LineItem


def line(product_id, qty):
    return LineItem(product_id=product_id, unit_price=100, quantity=qty)


def as_map(deltas):
    return {d.product_id: d.quantity_change for d in deltas}


class TestStockDelta:
    def test_requires_product(self):
        with pytest.raises(ValueError):
            StockDelta("", "TVR", 1)

    def test_requires_int_change(self):
        with pytest.raises(ValueError):
            StockDelta("A", "TVR", 1.5)
        with pytest.raises(ValueError):
            StockDelta("A", "TVR", True)


class TestQuantityMap:
    def test_sums_duplicates_and_skips_placeholders(self):
        result = quantity_map([line("A", 1), line("", 4), line("A", 2), line("B", "x")])
        assert result == {"A": 3, "B": 0}


class TestDiffLineItems:
    def test_worked_example(self):
        deltas = diff_line_items([line("A", 2)], [line("A", 5), line("B", 1)], branch_id="TVR")
        assert as_map(deltas) == {"A": 3, "B": 1}
        assert all(d.branch_id == "TVR" for d in deltas)

    def test_identical_lists_produce_nothing(self):
        same = [line("A", 2), line("B", 1)]
        assert diff_line_items(same, list(same)) == []

    def test_removed_line_returns_stock(self):
        assert as_map(diff_line_items([line("A", 2), line("B", 1)], [line("A", 2)])) == {"B": -1}

    def test_reduced_quantity(self):
        assert as_map(diff_line_items([line("A", 5)], [line("A", 2)])) == {"A": -3}

    def test_reordering_is_not_a_change(self):
        assert diff_line_items([line("A", 1), line("B", 2)], [line("B", 2), line("A", 1)]) == []

    def test_split_line_is_not_a_change(self):
        assert diff_line_items([line("A", 3)], [line("A", 1), line("A", 2)]) == []

    def test_new_zero_quantity_line_ignored(self):
        assert diff_line_items([], [line("A", 0)]) == []

    @pytest.mark.parametrize(
        "original, edited",
        [
            ([("A", 2)], [("A", 5), ("B", 1)]),
            ([("A", 1), ("C", 4)], [("C", 1)]),
            ([], [("A", 3)]),
            ([("A", 3)], []),
        ],
    )
    def test_applying_diff_reaches_edited_quantities(self, original, edited):
        before = [line(p, q) for p, q in original]
        after = [line(p, q) for p, q in edited]
        totals = quantity_map(before)
        for delta in diff_line_items(before, after):
            totals[delta.product_id] = totals.get(delta.product_id, 0) + delta.quantity_change
        expected = quantity_map(after)
        assert {k: v for k, v in totals.items() if v} == expected


class TestNewOrderDeltas:
    def test_every_filled_line_consumed(self):
        deltas = deltas_for_new_order([line("A", 2), line("", 1), line("B", 1)], branch_id="KAT")
        assert as_map(deltas) == {"A": 2, "B": 1}
