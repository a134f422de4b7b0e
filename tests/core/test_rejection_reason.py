"""
Tests for core.commands.rejection — structured refusal reasons.
"""

import pytest

from core.commands import ReasonCode, RejectionReason


class TestRejectionReason:
    def test_to_dict(self):
        reason = RejectionReason(
            code=ReasonCode.INSUFFICIENT_STOCK,
            message="Not enough LENS-1.",
            policy_name="InventoryAdjuster.apply",
            subjects=("LENS-1",),
        )
        assert reason.to_dict() == {
            "code": "INSUFFICIENT_STOCK",
            "message": "Not enough LENS-1.",
            "policy_name": "InventoryAdjuster.apply",
            "subjects": ["LENS-1"],
        }

    @pytest.mark.parametrize("field", ["code", "message", "policy_name"])
    def test_blank_fields_rejected(self, field):
        kwargs = {"code": "X", "message": "m", "policy_name": "p"}
        kwargs[field] = ""
        with pytest.raises(ValueError):
            RejectionReason(**kwargs)

    def test_subjects_must_be_tuple(self):
        with pytest.raises(ValueError):
            RejectionReason(code="X", message="m", policy_name="p", subjects=["a"])

    def test_frozen(self):
        reason = RejectionReason(code="X", message="m", policy_name="p")
        with pytest.raises(AttributeError):
            reason.code = "Y"


class TestReasonCode:
    def test_codes_are_distinct_and_self_named(self):
        codes = {
            name: value for name, value in vars(ReasonCode).items()
            if name.isupper()
        }
        assert len(set(codes.values())) == len(codes)
        assert all(name == value for name, value in codes.items())
        assert "STORAGE_UNAVAILABLE" in codes
        assert "INSUFFICIENT_POINTS" in codes
