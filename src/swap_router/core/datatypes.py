"""
Core datatypes used by the engine.

Value types are immutable so that cached quotes and snapshots can be shared
with callers without defensive copies. The only mutable type is `TradeIntent`,
which the engine owns and mutates through explicit methods.

Notes:
- Amounts are raw integer strings in the asset's smallest unit.
- `Venue` is a closed enum; code that branches on it handles every member.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import DEFAULT_ASSET_DECIMALS, DEFAULT_SLIPPAGE_PERCENT


# ---------------------------------------------------------------------------
# Assets and pairs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Asset:
    """A tradable asset: native denom ("uluna") or token contract address.

    Fields:
    - identifier: denom or contract address; the key used everywhere else.
    - symbol: display symbol.
    - decimals: precision of the raw amount (input granularity, display rounding).
    - icon: optional icon reference.
    - native: True for chain-native denoms, which are the oracle-eligible ones.
    """

    identifier: str
    symbol: str
    decimals: int = DEFAULT_ASSET_DECIMALS
    icon: Optional[str] = None
    native: bool = False

    def __post_init__(self):
        if self.decimals < 0:
            raise ValueError(f"decimals must be >= 0 for {self.identifier}")


@dataclass(frozen=True)
class Pair:
    """A pool on the Pool venue trading `assets[0]` against `assets[1]`."""

    contract: str
    assets: Tuple[str, str]

    def trades(self, a: str, b: str) -> bool:
        return {a, b} == set(self.assets) and a != b


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: str

    def to_dict(self) -> Dict[str, str]:
        return {"denom": self.denom, "amount": self.amount}


# ---------------------------------------------------------------------------
# Venues and quotes
# ---------------------------------------------------------------------------

class Venue(Enum):
    """Execution venues, in resolution order."""
    DIRECT = "Direct"
    POOL = "Pool"
    ROUTED = "Routed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RoutePlan:
    """Two-hop path `from -> bridge -> to` executed by the route contract.

    `operations` holds the swap operations in the route contract's message
    format, one per hop.
    """

    from_asset: str
    bridge: str
    to_asset: str
    operations: Tuple[Dict[str, Any], ...]
    contract: Optional[str] = None

    @property
    def path(self) -> Tuple[str, str, str]:
        return self.from_asset, self.bridge, self.to_asset


@dataclass(frozen=True)
class Quote:
    """Memoised result of simulating one venue for one exact (from, to, amount).

    - aux_fee: pool commission (Pool only).
    - principal / rate: oracle reference value and unit rate (Direct only).
    - route: the plan that was simulated (Routed only).
    """

    from_asset: str
    to_asset: str
    amount: str
    venue: Venue
    output_amount: str
    aux_fee: Optional[str] = None
    principal: Optional[str] = None
    rate: Optional[str] = None
    route: Optional[RoutePlan] = field(default=None, compare=False)

    @classmethod
    def zero(cls, from_asset: str, to_asset: str, amount: str, venue: Venue) -> "Quote":
        return cls(from_asset, to_asset, amount, venue, "0")

    @property
    def triple(self) -> Tuple[str, str, str]:
        return self.from_asset, self.to_asset, self.amount


@dataclass(frozen=True)
class OracleParameters:
    """Oracle-side spread parameters shown next to a Direct quote."""

    min_spread: str = "0"
    tax_rates: Mapping[str, str] = field(default_factory=dict)

    def tax_rate(self, denom: str) -> str:
        return self.tax_rates.get(denom, "0")


# ---------------------------------------------------------------------------
# Trade intent
# ---------------------------------------------------------------------------

@dataclass
class TradeIntent:
    """User-driven trade state. `input_amount` is a raw amount of `from_asset`."""

    venue: Optional[Venue] = None
    slippage_percent: str = DEFAULT_SLIPPAGE_PERCENT
    from_asset: str = ""
    to_asset: str = ""
    input_amount: str = ""

    @property
    def triple(self) -> Tuple[str, str, str]:
        return self.from_asset, self.to_asset, self.input_amount

    def copy(self, **changes: Any) -> "TradeIntent":
        return replace(self, **changes)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpendableResult:
    max_input_amount: str


@dataclass(frozen=True)
class SimulationOutcome:
    """Result of one simulation batch.

    `error` is the first failure observed (soft: the successful venues are
    still in `quotes_by_venue`). `stale` marks a batch superseded by a newer
    one before it finished; its results were not recorded.
    """

    quotes_by_venue: Mapping[Venue, Quote] = field(default_factory=dict)
    error: Optional[Exception] = None
    generation: int = 0
    stale: bool = False


__all__ = [
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
]
