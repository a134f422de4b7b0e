"""
OPS Core Primitives — Shared Numeric Building Blocks
======================================================
Primitives are the engine-agnostic helpers every OPS engine consumes.
They are:

- Pure Python (no Django dependency)
- Deterministic (same input → same output)
- Lenient on input, exact on output

Primitives:
    money — Decimal coercion, clamping and output rounding
"""
