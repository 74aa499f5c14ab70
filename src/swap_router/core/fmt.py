"""
Formatting helpers at the I/O edge (human input <-> raw amounts, display).

Core arithmetic works on raw integer strings; the functions here are the only
place where an asset's decimal precision turns a raw amount into a human value
or back.
"""

from __future__ import annotations

import re
from decimal import Decimal, ROUND_DOWN
from typing import Optional, Tuple

from .constants import DEFAULT_ASSET_DECIMALS, NATIVE_DENOM
from .decimals import canonical, decimal_n, div, floor, times, to_decimal

#: Fractional digits shown for display amounts, whatever the asset precision.
DISPLAY_PLACES: int = 6

_TOKEN_TEXT = re.compile(r"^(\d+)(\S*)$")


# ---------------------------------------------------------------------------
# Human input <-> raw amount
# ---------------------------------------------------------------------------

def to_amount(value: object, decimals: Optional[int] = None) -> str:
    """Human input ("1.5") -> raw integer amount ("1500000"), floored to the asset grid."""
    d = to_decimal(value)
    if d is None:
        return "0"
    places = DEFAULT_ASSET_DECIMALS if decimals is None else decimals
    return floor(times(d, Decimal(10) ** places))


def to_input(amount: object, decimals: Optional[int] = None) -> str:
    """Raw integer amount -> human value, exact to the asset's precision."""
    places = DEFAULT_ASSET_DECIMALS if decimals is None else decimals
    return decimal_n(div(amount, Decimal(10) ** places), places)


def format_amount(amount: object, decimals: Optional[int] = None) -> str:
    """Display form of a raw amount: grouped thousands, truncated to DISPLAY_PLACES."""
    places = DEFAULT_ASSET_DECIMALS if decimals is None else decimals
    shown = min(places, DISPLAY_PLACES)
    value = Decimal(to_input(amount, places))
    q = value.quantize(Decimal(1).scaleb(-shown), rounding=ROUND_DOWN)
    return f"{q:,.{shown}f}"


# ---------------------------------------------------------------------------
# Denominations and log values
# ---------------------------------------------------------------------------

def denom_symbol(denom: str) -> str:
    """Display symbol of a native denom: uluna -> Luna, uusd -> UST, ukrw -> KRT."""
    if denom == NATIVE_DENOM:
        return "Luna"
    if denom.startswith("u") and len(denom) == 4:
        return denom[1:3].upper() + "T"
    return denom


def split_token_text(text: Optional[str]) -> Tuple[str, str]:
    """Split a coin string from settlement logs: "123uluna" -> ("123", "uluna").

    A bare number is returned as the amount with an empty token.
    """
    raw = (text or "").strip()
    m = _TOKEN_TEXT.match(raw)
    if m is None:
        d = to_decimal(raw)
        return (canonical(d) if d is not None else "0"), ""
    return m.group(1), m.group(2)


__all__ = [
    "DISPLAY_PLACES",
    "to_amount",
    "to_input",
    "format_amount",
    "denom_symbol",
    "split_token_text",
]
