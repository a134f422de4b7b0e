"""
OPS Money Primitive — Fixed-Precision Amounts and Quantities
==============================================================
Engine: Core Primitives

The Money Primitive provides the numeric foundation used by: Pricing
Engine, Loyalty Ledger, Inventory Differ, Inventory Adjuster.

RULES (NON-NEGOTIABLE):
- All amounts are Decimal. No float arithmetic inside engines.
- Rounding happens ONCE, at output (2 places, ROUND_HALF_UP).
- Coercion is lenient: None, blanks, NaN, garbage → 0.
  So is anything above 10^MAX_MAGNITUDE.
- Negative amounts and quantities are clamped to 0 (never raised).
- Quantities are integers, truncated toward zero.

This file contains NO persistence logic.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

NumberLike = Union[Decimal, int, float, str, None]

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Decimal exponent beyond which input is treated as garbage. Keeps every
# product and sum far inside the context exponent range.
MAX_MAGNITUDE = 1000


# ══════════════════════════════════════════════════════════════
# COERCION
# ══════════════════════════════════════════════════════════════

def to_decimal(value: NumberLike) -> Decimal:
    """
    Coerce a loosely-typed number into Decimal.

    Floats go through str() so 0.1 stays 0.1 rather than its binary
    expansion. Anything unparseable or non-finite becomes 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not result.is_finite() or result.adjusted() > MAX_MAGNITUDE:
        return ZERO
    return result


def clamp_non_negative(value: Decimal) -> Decimal:
    """Return value, or 0 if value is negative."""
    return value if value > ZERO else ZERO


def to_amount(value: NumberLike) -> Decimal:
    """Lenient monetary coercion: unparseable or negative → 0."""
    return clamp_non_negative(to_decimal(value))


def to_quantity(value: NumberLike) -> int:
    """
    Lenient quantity coercion.

    "3.9" → 3, -2 → 0, "abc" → 0.
    """
    number = to_decimal(value)
    if number <= ZERO:
        return 0
    return int(number.to_integral_value(rounding=ROUND_DOWN))


# ══════════════════════════════════════════════════════════════
# ROUNDING
# ══════════════════════════════════════════════════════════════

def round_money(value: Decimal) -> Decimal:
    """
    Quantize to 2 decimal places, half-up. Output boundary only.

    Precision is widened to fit every integer digit, so large amounts
    round instead of raising InvalidOperation.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
