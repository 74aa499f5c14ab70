from __future__ import annotations

import asyncio
from typing import Dict, List, Mapping, Optional, Tuple

import pytest

# Import project primitives
from swap_router.config import NetworkConfig
from swap_router.core import Asset, OracleParameters, Pair, RoutePlan
from swap_router.engine import SwapEngine
from swap_router.registry import AssetRegistry, PairRegistry
from swap_router.transport import DirectSimulation, PoolSimulation, RouteSimulation

ANC = "terra14z56l0fp2lsf86zy3hty2z47ezkhnthtr9yq76"
MIR = "terra15gwkyepfc6xgca5t5zefzwy42uts8l2m4g40k6"
UST_ANC_POOL = "terra1gm5p3ner9x9xpwugn9sp6gvhd0lwrtkyrecdn3"
UST_MIR_POOL = "terra1amv303y8kzxuegvurh0gug2xe9wkgj65enq2ux"
LUNA_UST_POOL = "terra1tndcaqxkpc5ce9qee5ggqf430mr2z3pefe5wj6"


# -----------------------------
# Test doubles (collaborators)
# -----------------------------


class FakeTransport:
    """Scripted quote transport.

    - direct / pool / route: output amount per (from, to) pair.
    - failures: venue names ("direct", "pool", "route") that raise.
    - gate: optional asyncio.Event every simulation waits on before answering.
    """

    def __init__(self,
                 direct: Optional[Dict[Tuple[str, str], str]] = None,
                 pool: Optional[Dict[Tuple[str, str], str]] = None,
                 route: Optional[Dict[Tuple[str, str], str]] = None,
                 *,
                 rate: str = "10",
                 commission: str = "3",
                 failures: Tuple[str, ...] = (),
                 ) -> None:
        self.direct = direct or {}
        self.pool = pool or {}
        self.route = route or {}
        self.rate = rate
        self.commission = commission
        self.failures = failures
        self.calls: List[Tuple] = []
        self.gate: Optional[asyncio.Event] = None
        self.started: List[str] = []

    async def _enter(self, name: str) -> None:
        self.started.append(name)
        if self.gate is not None:
            await self.gate.wait()
        if name in self.failures:
            raise RuntimeError(f"{name} transport down")

    async def simulate_direct(self, from_asset, to_asset, amount):
        self.calls.append(("direct", from_asset, to_asset, amount))
        await self._enter("direct")
        return DirectSimulation(output_amount=self.direct.get((from_asset, to_asset), "0"), rate=self.rate)

    async def simulate_pool(self, pair: Pair, offer_asset, offer_amount):
        ask = pair.assets[1] if pair.assets[0] == offer_asset else pair.assets[0]
        self.calls.append(("pool", pair.contract, offer_asset, offer_amount))
        await self._enter("pool")
        return PoolSimulation(output_amount=self.pool.get((offer_asset, ask), "0"), commission=self.commission)

    async def simulate_route(self, plan: RoutePlan, amount, minimum_receive=None):
        self.calls.append(("route", plan.from_asset, plan.to_asset, amount, minimum_receive))
        await self._enter("route")
        return RouteSimulation(output_amount=self.route.get((plan.from_asset, plan.to_asset), "0"))

    async def oracle_parameters(self) -> OracleParameters:
        self.calls.append(("oracle_parameters",))
        return OracleParameters(min_spread="0.02", tax_rates={"uusd": "0.0035"})


class FakeBalances:
    def __init__(self, holdings: Mapping[str, str]) -> None:
        self.holdings = dict(holdings)
        self.refreshed = 0

    def current_balance(self, asset: str) -> str:
        return self.holdings.get(asset, "0")

    def balances(self) -> Mapping[str, str]:
        return {k: v for k, v in self.holdings.items() if not k.startswith("terra1")}

    async def refresh(self) -> None:
        self.refreshed += 1


class FakeFeeEstimator:
    def __init__(self, fee: str = "2000") -> None:
        self.fee = fee
        self.calls: List[Tuple[int, str]] = []

    async def estimate_fee(self, gas_units: int, fee_asset: str) -> str:
        self.calls.append((gas_units, fee_asset))
        return self.fee


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def assets() -> AssetRegistry:
    return AssetRegistry([
        Asset("uluna", "Luna", native=True),
        Asset("uusd", "UST", native=True),
        Asset("ukrw", "KRT", native=True),
        Asset(ANC, "ANC", decimals=6),
        Asset(MIR, "MIR", decimals=6),
    ])


@pytest.fixture()
def pairs() -> PairRegistry:
    return PairRegistry([
        Pair(LUNA_UST_POOL, ("uluna", "uusd")),
        Pair(UST_ANC_POOL, ("uusd", ANC)),
        Pair(UST_MIR_POOL, (MIR, "uusd")),
    ])


@pytest.fixture()
def network() -> NetworkConfig:
    return NetworkConfig(
        name="testnet",
        fcd_url="https://fcd.example",
        lcd_url="https://lcd.example",
        assert_limit_order_contract="terra1assert0000000000000000000000000000000",
        route_contract="terra1router0000000000000000000000000000000",
    )


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport(
        direct={("uluna", "uusd"): "100", ("uusd", "uluna"): "9"},
        pool={("uluna", "uusd"): "95", ("uusd", ANC): "40"},
        route={(ANC, MIR): "77", ("uluna", ANC): "400"},
    )


@pytest.fixture()
def engine(assets, pairs, transport, network) -> SwapEngine:
    return SwapEngine(assets, pairs, transport, network, sender="terra1sender")
