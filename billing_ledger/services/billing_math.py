# billing_ledger/services/billing_math.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable

Q2 = Decimal("0.01")
ZERO = Decimal("0.00")


def D(x) -> Decimal:
    """Safe Decimal conversion (never Decimal -= float). NaN/Infinity -> 0."""
    if x is None:
        return Decimal("0")
    if isinstance(x, Decimal):
        return x if x.is_finite() else Decimal("0")
    try:
        v = Decimal(str(x))  # str() avoids float binary issues
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return v if v.is_finite() else Decimal("0")


def is_finite(x) -> bool:
    """True when x is None or converts to a finite Decimal."""
    if x is None:
        return True
    try:
        v = x if isinstance(x, Decimal) else Decimal(str(x))
    except (InvalidOperation, ValueError):
        return False
    return v.is_finite()


def money2(x) -> Decimal:
    return D(x).quantize(Q2, rounding=ROUND_HALF_UP)


def msum(values: Iterable) -> Decimal:
    return money2(sum((money2(v) for v in values), ZERO))


def floor_zero(x) -> Decimal:
    x = money2(x)
    return x if x > 0 else ZERO
