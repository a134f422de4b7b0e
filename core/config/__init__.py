"""
OPS Core Config — Public API
===============================
Engine rules (loyalty accrual, order numbering, branch seeds).
"""

from core.config.rules import (
    CATEGORY_CONSULTATION,
    CATEGORY_SALES,
    CATEGORY_WORK_ORDER,
    DEFAULT_BRANCH_SEEDS,
    DEFAULT_SEED,
    VALID_CATEGORIES,
    EngineConfig,
    LoyaltyRules,
    OrderNumberPolicy,
    default_engine_config,
)

__all__ = [
    "CATEGORY_SALES",
    "CATEGORY_WORK_ORDER",
    "CATEGORY_CONSULTATION",
    "VALID_CATEGORIES",
    "DEFAULT_BRANCH_SEEDS",
    "DEFAULT_SEED",
    "EngineConfig",
    "LoyaltyRules",
    "OrderNumberPolicy",
    "default_engine_config",
]
