"""
Decimal primitives on canonical decimal strings.

- Every operation accepts `str | int | Decimal` and returns a canonical string
  (plain notation, no exponent, no trailing zeros, "0" for zero).
- No binary float ever enters the arithmetic; a float argument is converted
  through its `str()` form at the boundary.
- Non-numeric input and division by zero yield "0"; comparisons involving a
  non-numeric operand are False. Callers that must reject such input validate
  it first (see `engine.SwapEngine.validate`).

# Alignment notes:
# - Arithmetic runs in a private Context (DECIMAL_CONTEXT_PRECISION digits), so
#   the process-wide decimal context is never touched.
# - Division keeps DIVISION_PLACES fractional digits (half-up), enough for
#   price ratios between assets with different decimal precision.
"""

from __future__ import annotations

from decimal import Context, Decimal, InvalidOperation, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_UP
from typing import Iterable, Optional, Union

from .constants import DECIMAL_CONTEXT_PRECISION, DIVISION_PLACES

DecimalLike = Union[str, int, Decimal]

_CTX = Context(prec=DECIMAL_CONTEXT_PRECISION, rounding=ROUND_HALF_UP)
_ZERO = Decimal(0)


# ----------------------------
# Boundary helpers
# ----------------------------

def to_decimal(x: object) -> Optional[Decimal]:
    """Parse `x` into a finite Decimal, or None when it is not a number."""
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, Decimal):
        d = x
    else:
        text = str(x).strip()
        if not text:
            return None
        try:
            d = Decimal(text)
        except InvalidOperation:
            return None
    if not d.is_finite():
        return None
    return d


def canonical(d: Decimal) -> str:
    """Render a Decimal as a canonical plain-notation string."""
    if d.is_zero():
        return "0"
    s = format(d, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def _or_zero(x: object) -> Decimal:
    d = to_decimal(x)
    return _ZERO if d is None else d


# ----------------------------
# Predicates and comparisons
# ----------------------------

def is_finite(x: object) -> bool:
    return to_decimal(x) is not None


def is_integer(x: object) -> bool:
    d = to_decimal(x)
    return d is not None and d == d.to_integral_value()


def _cmp(a: object, b: object) -> Optional[int]:
    da, db = to_decimal(a), to_decimal(b)
    if da is None or db is None:
        return None
    return (da > db) - (da < db)


def gt(a: object, b: object) -> bool:
    c = _cmp(a, b)
    return c is not None and c > 0


def gte(a: object, b: object) -> bool:
    c = _cmp(a, b)
    return c is not None and c >= 0


def lt(a: object, b: object) -> bool:
    c = _cmp(a, b)
    return c is not None and c < 0


def lte(a: object, b: object) -> bool:
    c = _cmp(a, b)
    return c is not None and c <= 0


def eq(a: object, b: object) -> bool:
    return _cmp(a, b) == 0


# ----------------------------
# Arithmetic
# ----------------------------

def plus(a: object, b: object) -> str:
    return canonical(_CTX.add(_or_zero(a), _or_zero(b)))


def minus(a: object, b: object) -> str:
    return canonical(_CTX.subtract(_or_zero(a), _or_zero(b)))


def times(a: object, b: object) -> str:
    return canonical(_CTX.multiply(_or_zero(a), _or_zero(b)))


def div(a: object, b: object) -> str:
    """Divide `a` by `b`, keeping DIVISION_PLACES fractional digits; "0" on zero divisor."""
    num, den = to_decimal(a), to_decimal(b)
    if num is None or den is None or den.is_zero():
        return "0"
    q = _CTX.divide(num, den)
    return canonical(q.quantize(Decimal(1).scaleb(-DIVISION_PLACES), rounding=ROUND_HALF_UP, context=_CTX))


def floor(x: object) -> str:
    """Round toward negative infinity to an integer string."""
    return canonical(_or_zero(x).to_integral_value(rounding=ROUND_FLOOR))


def decimal_n(x: object, places: int) -> str:
    """Truncate `x` to at most `places` fractional digits."""
    d = _or_zero(x)
    return canonical(d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN, context=_CTX))


def max_of(values: Iterable[object]) -> str:
    """Largest numeric value of `values` ("0" when none is numeric)."""
    parsed = [d for d in (to_decimal(v) for v in values) if d is not None]
    return canonical(max(parsed)) if parsed else "0"


def min_of(values: Iterable[object]) -> str:
    parsed = [d for d in (to_decimal(v) for v in values) if d is not None]
    return canonical(min(parsed)) if parsed else "0"


def percent(x: object, places: int = 2) -> str:
    """Format a fraction as a percentage string, e.g. "0.005" -> "0.50%"."""
    d = _CTX.multiply(_or_zero(x), Decimal(100))
    q = d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP, context=_CTX)
    if q.is_zero():
        q = abs(q)
    return f"{q:f}%"


__all__ = [
    "DecimalLike",
    "to_decimal",
    "canonical",
    "is_finite",
    "is_integer",
    "gt",
    "gte",
    "lt",
    "lte",
    "eq",
    "plus",
    "minus",
    "times",
    "div",
    "floor",
    "decimal_n",
    "max_of",
    "min_of",
    "percent",
]
