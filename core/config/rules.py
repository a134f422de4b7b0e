"""
OPS Core Config — Engine Rules
=================================
Doctrine: No hardcoded branch numbers or rates in engine logic.
Accrual rates, order-number layouts and branch counter seeds come
from configuration data, not from the engines themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Mapping, Optional, Tuple


# ══════════════════════════════════════════════════════════════
# CATEGORY CODES
# ══════════════════════════════════════════════════════════════

CATEGORY_SALES = "OPS"          # Walk-in sales order
CATEGORY_WORK_ORDER = "OPW"     # Work order (deposit-taking, precedes a sale)
CATEGORY_CONSULTATION = "CR"    # Consultation record

VALID_CATEGORIES = frozenset({
    CATEGORY_SALES,
    CATEGORY_WORK_ORDER,
    CATEGORY_CONSULTATION,
})


# ══════════════════════════════════════════════════════════════
# LOYALTY RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LoyaltyRules:
    """
    Privilege-card program rules.

    accrual_rate:          fraction of taxable value credited as points.
    max_conflict_retries:  compare-and-swap attempts before giving up.
    retry_backoff_seconds: base delay between attempts (doubles each time).
    """

    accrual_rate: Decimal = Decimal("0.05")
    max_conflict_retries: int = 5
    retry_backoff_seconds: float = 0.01

    def __post_init__(self) -> None:
        if not isinstance(self.accrual_rate, Decimal):
            raise ValueError("accrual_rate must be Decimal.")
        if not Decimal("0") <= self.accrual_rate <= Decimal("1"):
            raise ValueError(
                f"accrual_rate must be between 0 and 1, got {self.accrual_rate}."
            )
        if not isinstance(self.max_conflict_retries, int) or self.max_conflict_retries < 1:
            raise ValueError("max_conflict_retries must be int >= 1.")
        if self.retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must be >= 0.")


# ══════════════════════════════════════════════════════════════
# ORDER NUMBER POLICY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderNumberPolicy:
    """
    Declares how an order id is composed from an allocated sequence.

    Fields:
        category_code:  OPS | OPW | CR
        prefix:         category token at the front (defaults to category_code)
        padding:        minimum digit width of the numeric suffix
        include_branch: put the branch code between prefix and number
        separator:      joiner between the parts
    """

    category_code: str
    prefix: str = ""
    padding: int = 4
    include_branch: bool = True
    separator: str = "-"

    def __post_init__(self) -> None:
        if not self.category_code or not isinstance(self.category_code, str):
            raise ValueError("category_code must be a non-empty string.")
        if not isinstance(self.prefix, str):
            raise ValueError("prefix must be a string.")
        if not isinstance(self.padding, int) or self.padding < 1:
            raise ValueError("padding must be int >= 1.")
        if not isinstance(self.separator, str):
            raise ValueError("separator must be a string.")

    @property
    def effective_prefix(self) -> str:
        return self.prefix or self.category_code


# ══════════════════════════════════════════════════════════════
# ENGINE CONFIG
# ══════════════════════════════════════════════════════════════

DEFAULT_BRANCH_SEEDS: Dict[str, int] = {
    "TVR": 3742,    # Trivandrum
    "NTA": 4701,    # Neyyantinkara
    "KOT1": 5701,   # Kottarakara 1
    "KOT2": 6701,   # Kottarakara 2
    "KAT": 7701,    # Kattakada
}

DEFAULT_SEED = 1001


@dataclass(frozen=True)
class EngineConfig:
    """
    Everything the engines read from configuration.

    branch_seeds: first number a fresh (branch, category) counter issues.
    """

    loyalty: LoyaltyRules = field(default_factory=LoyaltyRules)
    branch_seeds: Mapping[str, int] = field(default_factory=dict)
    default_seed: int = 1
    numbering_policies: Tuple[OrderNumberPolicy, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.default_seed, int) or self.default_seed < 1:
            raise ValueError("default_seed must be int >= 1.")
        for branch_id, seed in self.branch_seeds.items():
            if not isinstance(seed, int) or seed < 1:
                raise ValueError(
                    f"seed for branch '{branch_id}' must be int >= 1, got {seed!r}."
                )

    def seed_for(self, branch_id: str) -> int:
        return self.branch_seeds.get(branch_id, self.default_seed)

    def policy_for(self, category_code: str) -> Optional[OrderNumberPolicy]:
        for policy in self.numbering_policies:
            if policy.category_code == category_code:
                return policy
        return None


def default_engine_config() -> EngineConfig:
    """Configuration matching the chain's existing branch numbering."""
    return EngineConfig(
        loyalty=LoyaltyRules(),
        branch_seeds=dict(DEFAULT_BRANCH_SEEDS),
        default_seed=DEFAULT_SEED,
        numbering_policies=(
            OrderNumberPolicy(category_code=CATEGORY_SALES),
            OrderNumberPolicy(category_code=CATEGORY_WORK_ORDER),
            OrderNumberPolicy(category_code=CATEGORY_CONSULTATION),
        ),
    )
