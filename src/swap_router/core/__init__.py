"""
Swap Router Core
================

Unified exports for the decimal-string arithmetic, I/O formatting helpers,
datatypes and exceptions shared by every engine component.
"""

# NOTE:
#   Amounts are raw integer strings in the asset's smallest unit. Arithmetic on
#   them goes through `decimals` (never through float); `fmt` is the only place
#   that knows about human-readable values.

from .constants import (
    DECIMAL_CONTEXT_PRECISION,
    DIVISION_PLACES,
    DEFAULT_ASSET_DECIMALS,
    NATIVE_DENOM,
    BRIDGE_ASSET,
    DEFAULT_SLIPPAGE_PERCENT,
    MAX_FEE_GAS,
)

from .decimals import (
    to_decimal,
    canonical,
    is_finite,
    is_integer,
    gt,
    gte,
    lt,
    lte,
    eq,
    plus,
    minus,
    times,
    div,
    floor,
    decimal_n,
    max_of,
    min_of,
    percent,
)

from .fmt import (
    to_amount,
    to_input,
    format_amount,
    denom_symbol,
    split_token_text,
)

from .datatypes import (
    Asset,
    Pair,
    Coin,
    Venue,
    RoutePlan,
    Quote,
    OracleParameters,
    TradeIntent,
    SpendableResult,
    SimulationOutcome,
)

from .exc import (
    SwapRouterError,
    ValidationError,
    SimulationError,
    NoVenueAvailable,
    AmbiguousSelection,
    TransportError,
)

__all__ = [
    # constants
    "DECIMAL_CONTEXT_PRECISION",
    "DIVISION_PLACES",
    "DEFAULT_ASSET_DECIMALS",
    "NATIVE_DENOM",
    "BRIDGE_ASSET",
    "DEFAULT_SLIPPAGE_PERCENT",
    "MAX_FEE_GAS",
    # decimals
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
    # fmt
    "to_amount",
    "to_input",
    "format_amount",
    "denom_symbol",
    "split_token_text",
    # datatypes
    "Asset",
    "Pair",
    "Coin",
    "Venue",
    "RoutePlan",
    "Quote",
    "OracleParameters",
    "TradeIntent",
    "SpendableResult",
    "SimulationOutcome",
    # exceptions
    "SwapRouterError",
    "ValidationError",
    "SimulationError",
    "NoVenueAvailable",
    "AmbiguousSelection",
    "TransportError",
]
