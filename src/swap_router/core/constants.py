"""
Swap Router Core Constants
==========================

Chain-level defaults shared by the resolver, price model and guard. Network
specific values (contract addresses, endpoints) live in `swap_router.config`.
"""

# NOTE: All amounts handled by the engine are raw integer strings in the asset's
# smallest unit (e.g. uluna). Human-readable values only appear at the I/O edge.

# ---------------------------------------------------------------------------
# Decimal arithmetic
# ---------------------------------------------------------------------------

#: Significant digits of the local decimal context used by `decimals.py`.
DECIMAL_CONTEXT_PRECISION: int = 60

#: Fractional digits kept by division (price ratios must not truncate early).
DIVISION_PLACES: int = 18


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

#: Decimal precision assumed when the registry does not know an asset.
DEFAULT_ASSET_DECIMALS: int = 6

#: Native settlement asset of the chain.
NATIVE_DENOM: str = "uluna"

#: Intermediate asset bridging two assets that share no venue.
BRIDGE_ASSET: str = "uusd"


# ---------------------------------------------------------------------------
# Trade defaults
# ---------------------------------------------------------------------------

#: Default slippage tolerance, in percent.
DEFAULT_SLIPPAGE_PERCENT: str = "1"

#: Reference gas reserved when computing the spendable maximum.
MAX_FEE_GAS: int = 800_000


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

__all__ = [
    "DECIMAL_CONTEXT_PRECISION",
    "DIVISION_PLACES",
    "DEFAULT_ASSET_DECIMALS",
    "NATIVE_DENOM",
    "BRIDGE_ASSET",
    "DEFAULT_SLIPPAGE_PERCENT",
    "MAX_FEE_GAS",
]
