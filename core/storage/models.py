"""
OPS Storage — Persistent Tables
=================================
Engine: Storage (Core Infrastructure)

Three tables back the OrderStorage protocol:
    StockRecord      — on-hand quantity per (product, branch)
    LoyaltyAccount   — privilege-card point balance
    SequenceCounter  — last issued order number per (branch, category)

RULES (NON-NEGOTIABLE):
- quantity_on_hand never goes negative (DB check constraint backs the
  application-level validation)
- one row per (product, branch) and per (branch, category)
- counters only move forward

This file contains NO business logic.
"""

from django.db import models


class StockRecord(models.Model):
    product_id = models.CharField(max_length=64)
    branch_id = models.CharField(max_length=32)
    quantity_on_hand = models.IntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ops_stock_records"
        constraints = [
            models.UniqueConstraint(
                fields=["product_id", "branch_id"],
                name="uq_stock_product_branch",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity_on_hand__gte=0),
                name="ck_stock_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id}@{self.branch_id}: {self.quantity_on_hand}"


class LoyaltyAccount(models.Model):
    account_id = models.CharField(max_length=64, primary_key=True)
    point_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ops_loyalty_accounts"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(point_balance__gte=0),
                name="ck_loyalty_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.account_id} ({self.point_balance})"


class SequenceCounter(models.Model):
    branch_id = models.CharField(max_length=32)
    category_code = models.CharField(max_length=16)
    last_value = models.BigIntegerField()

    class Meta:
        db_table = "ops_sequence_counters"
        constraints = [
            models.UniqueConstraint(
                fields=["branch_id", "category_code"],
                name="uq_counter_branch_category",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.branch_id}/{self.category_code} → {self.last_value}"
