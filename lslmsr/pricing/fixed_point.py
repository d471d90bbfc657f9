"""Deterministic fixed-point ``exp`` and ``ln``.

Values are non-negative integers scaled by ``SCALE = 10**18``. Series
lengths (12 terms for ``exp``, 30 for ``ln``) are those of the on-chain
contract.

``exp`` saturates at ``EXP_CAP`` (6.0): larger arguments evaluate to
``exp(6.0)``, so price differences beyond that multiple of ``b`` collapse to
the same extreme price. This is a precision ceiling of the contract, callers
learn about it through :func:`exp_saturates`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Union

SCALE = 10**18
EXP_CAP = 6 * SCALE
EXP_TERMS = 12
LN_TERMS = 30
LN2 = 693147180559945309  # ln(2) * SCALE
SQRT2 = 1414213562373095048  # sqrt(2) * SCALE
HALF_LN2 = 346573590279972655  # ln(sqrt(2)) * SCALE


def exp_saturates(x: int) -> bool:
    return x > EXP_CAP


def exp(x: int) -> int:
    """Taylor series ``sum(x**i / i!)`` with ``x`` clamped to ``EXP_CAP``."""
    if x < 0:
        raise ValueError(f"exp is only defined for non-negative arguments, got {x}")
    if x > EXP_CAP:
        x = EXP_CAP
    result = SCALE
    term = SCALE
    for i in range(1, EXP_TERMS + 1):
        term = term * x // (i * SCALE)
        result += term
        if term < 1:
            break
    return result


def ln(x: int) -> int:
    """Natural log for ``x >= SCALE``; returns 0 at or below ``SCALE``.

    Halves ``x`` into ``[SCALE, 2*SCALE)``, divides once more by sqrt(2) when
    it is still above it, and sums the alternating series
    ``y - y**2/2 + y**3/3 - ...`` on ``y = x - SCALE``.

    The sqrt(2) step keeps ``y`` below 0.415. On the full ``[0, 1)`` range
    thirty terms are off by up to 0.016 near ``y = 1``, which is exactly
    where a balanced market evaluates ``ln(expYes + expNo)``.
    """
    if x < 0:
        raise ValueError(f"ln is only defined for non-negative arguments, got {x}")
    if x <= SCALE:
        return 0
    halvings = 0
    while x >= 2 * SCALE:
        x //= 2
        halvings += 1
    result = halvings * LN2
    if x >= SQRT2:
        x = x * SCALE // SQRT2
        result += HALF_LN2
    y = x - SCALE
    term = y
    for i in range(1, LN_TERMS + 1):
        if i % 2:
            result += term // i
        else:
            result -= term // i
        term = term * y // SCALE
        if term < 1:
            break
    return result


def to_fixed(value: Union[int, float, str]) -> int:
    """Convert a human-readable number to fixed point, e.g. ``to_fixed("0.03")``."""
    return int(Decimal(str(value)) * SCALE)
