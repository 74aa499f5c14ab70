"""Collaborator seams: quote transport, balance provider, fee estimator.

Every method that reaches the network is a coroutine; the engine awaits them
on a single event loop and never blocks on one venue while another is running.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from .core import OracleParameters, Pair, RoutePlan


# ---------------------------------------------------------------------------
# Transport results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectSimulation:
    """Oracle swap estimate plus the prevailing unit rate (to per from)."""
    output_amount: str
    rate: str = "0"


@dataclass(frozen=True)
class PoolSimulation:
    """Pool swap estimate plus the commission charged by the pool."""
    output_amount: str
    commission: str = "0"


@dataclass(frozen=True)
class RouteSimulation:
    """Net output after both hops of a route plan."""
    output_amount: str


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

class QuoteTransport(Protocol):

    async def simulate_direct(self, from_asset: str, to_asset: str, amount: str) -> DirectSimulation:
        ...

    async def simulate_pool(self, pair: Pair, offer_asset: str, offer_amount: str) -> PoolSimulation:
        ...

    async def simulate_route(self, plan: RoutePlan, amount: str,
                             minimum_receive: Optional[str] = None) -> RouteSimulation:
        ...

    async def oracle_parameters(self) -> OracleParameters:
        ...


class BalanceProvider(Protocol):

    def current_balance(self, asset: str) -> str:
        ...

    def balances(self) -> Mapping[str, str]:
        """Native holdings backing the account, keyed by denom."""
        ...

    async def refresh(self) -> None:
        ...


class FeeEstimator(Protocol):

    async def estimate_fee(self, gas_units: int, fee_asset: str) -> str:
        ...


__all__ = [
    "DirectSimulation",
    "PoolSimulation",
    "RouteSimulation",
    "QuoteTransport",
    "BalanceProvider",
    "FeeEstimator",
]
