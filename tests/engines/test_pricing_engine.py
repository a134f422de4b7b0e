"""OPS Pricing Engine tests (calculator and order value objects)."""

from decimal import Decimal

import pytest

from engines.pricing.calculator import (
    compute_draft_pricing,
    compute_pricing,
    discount_from_percentage,
    gross_value,
    gst_inclusive_basis,
)
from engines.pricing.models import (
    LineItem,
    LoyaltyRedemptionRequest,
    OrderDraft,
)


def items(*pairs):
    return [
        LineItem(product_id=f"P{i}", unit_price=price, quantity=qty)
        for i, (price, qty) in enumerate(pairs)
    ]


class TestOrderValueObjects:
    def test_line_items_coerced_to_tuple(self):
        draft = OrderDraft(line_items=items((500, 1)))
        assert isinstance(draft.line_items, tuple)

    def test_draft_rejects_foreign_items(self):
        with pytest.raises(ValueError):
            OrderDraft(line_items=[{"price": 500}])

    def test_line_item_requires_string_ids(self):
        with pytest.raises(ValueError):
            LineItem(product_id=42)

    def test_with_and_without_item_return_new_drafts(self):
        draft = OrderDraft(line_items=items((500, 1)))
        grown = draft.with_item(LineItem("FRAME-9", 1200, 1))
        shrunk = grown.without_item(0)

        assert len(draft.line_items) == 1
        assert len(grown.line_items) == 2
        assert [i.product_id for i in shrunk.line_items] == ["FRAME-9"]

    def test_redemption_request_flag(self):
        assert LoyaltyRedemptionRequest(50, 100).is_requested
        assert not LoyaltyRedemptionRequest(0, 100).is_requested
        assert not LoyaltyRedemptionRequest("junk", 100).is_requested


class TestComputePricing:
    def test_worked_example(self):
        result = compute_pricing(
            items((500, 1), (800, 2)), advance_paid=200, manual_discount=100,
        )
        assert result.gross_value == Decimal("2100.00")
        assert result.total_discount == Decimal("100.00")
        assert result.amount_after_discount == Decimal("2000.00")
        assert result.balance_due == Decimal("1800.00")
        assert result.final_amount_due == Decimal("1800.00")
        assert str(result.final_amount_due) == "1800.00"

    def test_gst_is_zero_by_default(self):
        result = compute_pricing(items((1120, 1)))
        assert result.taxable_value == Decimal("1120.00")
        assert result.gst_amount == Decimal("0.00")
        assert result.cgst_amount == result.sgst_amount == Decimal("0.00")

    def test_gst_inclusive_basis_opt_in(self):
        result = compute_pricing(items((1120, 1)), taxable_basis=gst_inclusive_basis("0.12"))
        assert result.taxable_value == Decimal("1000.00")
        assert result.gst_amount == Decimal("120.00")
        assert result.cgst_amount == Decimal("60.00")
        assert result.sgst_amount == Decimal("60.00")

    def test_discount_capped_at_gross(self):
        result = compute_pricing(items((300, 1)), manual_discount=200, carry_in_discount=250)
        assert result.total_discount == Decimal("300.00")
        assert result.amount_after_discount == Decimal("0.00")
        assert result.final_amount_due == Decimal("0.00")

    def test_advance_beyond_total_clamps_balance(self):
        result = compute_pricing(items((500, 1)), advance_paid=900)
        assert result.balance_due == Decimal("0.00")
        assert result.final_amount_due == Decimal("0.00")

    @pytest.mark.parametrize("junk", [None, "", "abc", "-50", float("nan")])
    def test_malformed_numbers_count_as_zero(self, junk):
        result = compute_pricing(
            [LineItem("P1", unit_price=junk, quantity=2), LineItem("P2", 100, junk)],
            advance_paid=junk,
            manual_discount=junk,
            carry_in_discount=junk,
        )
        assert result.gross_value == Decimal("0.00")
        assert result.final_amount_due == Decimal("0.00")

    def test_fractional_quantity_truncated(self):
        assert gross_value(items((100, "2.9"))) == Decimal("200")

    def test_loyalty_limited_by_available_points(self):
        result = compute_pricing(
            items((1000, 1)), loyalty_context=LoyaltyRedemptionRequest(300, 120),
        )
        assert result.privilege_discount == Decimal("120.00")
        assert result.balance_due == Decimal("880.00")
        assert result.final_amount_due == Decimal("880.00")

    def test_loyalty_limited_by_balance(self):
        result = compute_pricing(
            items((1000, 1)),
            advance_paid=950,
            loyalty_context=LoyaltyRedemptionRequest(300, 500),
        )
        assert result.privilege_discount == Decimal("50.00")
        assert result.final_amount_due == Decimal("0.00")

    def test_loyalty_ignored_when_nothing_due(self):
        result = compute_pricing(
            items((1000, 1)),
            advance_paid=1000,
            loyalty_context=LoyaltyRedemptionRequest(300, 500),
        )
        assert result.privilege_discount == Decimal("0.00")

    def test_loyalty_not_requested(self):
        result = compute_pricing(
            items((1000, 1)), loyalty_context=LoyaltyRedemptionRequest(0, 500),
        )
        assert result.privilege_discount == Decimal("0.00")
        assert result.final_amount_due == Decimal("1000.00")

    def test_rounding_happens_at_output(self):
        result = compute_pricing(items(("0.335", 3)))
        assert result.gross_value == Decimal("1.01")

    def test_huge_price_rounds_instead_of_raising(self):
        result = compute_pricing([LineItem("A", "1e27", 1)], advance_paid=1)
        assert result.gross_value == Decimal("1e27")
        assert result.final_amount_due == Decimal("999999999999999999999999999")
        assert result.to_dict()["gross_value"] == "1000000000000000000000000000.00"

    def test_huge_quantity_rounds_instead_of_raising(self):
        result = compute_pricing([LineItem("A", "2.50", "1e30")])
        assert result.gross_value == Decimal("2.5e30")

    def test_draft_wrapper_matches_direct_call(self):
        draft = OrderDraft(
            line_items=items((500, 1), (800, 2)), advance_paid=200, manual_discount=100,
        )
        assert compute_draft_pricing(draft) == compute_pricing(
            draft.line_items, advance_paid=200, manual_discount=100,
        )

    def test_breakdown_serializes_as_strings(self):
        payload = compute_pricing(items((500, 1))).to_dict()
        assert payload["gross_value"] == "500.00"
        assert len(payload) == 11


class TestDiscountFromPercentage:
    def test_percentage(self):
        assert discount_from_percentage(items((500, 1), (800, 2)), 10) == Decimal("210.00")

    def test_capped_at_hundred(self):
        assert discount_from_percentage(items((500, 1)), 150) == Decimal("500.00")

    def test_negative_is_zero(self):
        assert discount_from_percentage(items((500, 1)), -5) == Decimal("0.00")
