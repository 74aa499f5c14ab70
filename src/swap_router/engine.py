"""Swap engine: one explicit object per user session.

The engine owns the Trade Intent, the Quote Cache and the simulation
generation counter. Callers mutate state only through `set_intent`,
`choose_venue` and `record_quote`, and read it through immutable snapshots.

One evaluation cycle:
  resolve venues -> simulate concurrently -> auto-select -> price model
  (the spendable guard runs alongside, gated by `from`)
Settlement instructions are built only once a venue is selected and the
intent validates.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .cache import QuoteCache
from .config import NetworkConfig
from .core import (
    AmbiguousSelection,
    Asset,
    NoVenueAvailable,
    OracleParameters,
    Quote,
    SimulationOutcome,
    SpendableResult,
    TradeIntent,
    ValidationError,
    Venue,
    canonical,
    gt,
    gte,
    is_finite,
    is_integer,
    lt,
    lte,
    times,
    to_amount,
    to_decimal,
)
from .guard import evaluate_spendable
from .registry import AssetRegistry, PairRegistry
from .resolver import VenueResolver
from .selector import (
    ExpectedPrice,
    VenueDetail,
    expected_price,
    minimum_receive,
    select_venue,
    venue_detail,
)
from .settlement import Settlement, build_settlement
from .simulator import Simulator
from .transport import BalanceProvider, FeeEstimator, QuoteTransport

LOGGER = logging.getLogger(__name__)


def _normalize_amount(value: object) -> str:
    """Canonical form of a raw amount ("1e6" -> "1000000"); non-numeric text is kept for validation."""
    d = to_decimal(value)
    if d is None:
        return "" if value is None else str(value).strip()
    return canonical(d)


@dataclass(frozen=True)
class EngineSnapshot:
    """Immutable view of one evaluation cycle, for the presentation layer."""

    intent: TradeIntent
    venues: Tuple[Venue, ...]
    quotes: Mapping[Venue, Quote]
    output_amount: str
    minimum_receive: str
    expected_price: Optional[ExpectedPrice]
    detail: Optional[VenueDetail]
    spendable: Optional[SpendableResult]
    simulating: bool
    error: Optional[Exception]
    validation: Mapping[str, str] = field(default_factory=dict)

    @property
    def can_settle(self) -> bool:
        return (not self.validation
                and not self.simulating
                and self.error is None
                and self.intent.venue is not None
                and gt(self.output_amount, 0))


class SwapEngine:
    """Quote aggregation and routing for one user session."""

    def __init__(self,
                 assets: AssetRegistry,
                 pairs: PairRegistry,
                 transport: QuoteTransport,
                 network: NetworkConfig,
                 *,
                 sender: str = "",
                 balances: Optional[BalanceProvider] = None,
                 fee_estimator: Optional[FeeEstimator] = None,
                 ):
        self.assets = assets
        self.pairs = pairs
        self.transport = transport
        self.network = network
        self.sender = sender
        self.balances = balances
        self.fee_estimator = fee_estimator
        self.resolver = VenueResolver(
            assets, pairs,
            bridge_asset=network.bridge_asset,
            route_contract=network.route_contract,
        )
        self.cache = QuoteCache()
        self.simulator = Simulator(transport, self.cache, self.resolver)
        self.oracle_params: Optional[OracleParameters] = None
        self._intent = TradeIntent(slippage_percent=network.default_slippage_percent)
        self._spendable: Optional[SpendableResult] = None
        self._spendable_for: Optional[str] = None
        self._inflight = 0
        self._error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Intent
    # ------------------------------------------------------------------

    @property
    def intent(self) -> TradeIntent:
        """Copy of the current intent; mutate through `set_intent`."""
        return self._intent.copy()

    @property
    def simulating(self) -> bool:
        return self._inflight > 0

    def reset(self, **values: Any) -> TradeIntent:
        """Start a fresh intent, keeping only the given fields."""
        self._intent = TradeIntent(slippage_percent=self.network.default_slippage_percent).copy(**values)
        self._error = None
        return self.intent

    def set_intent(self, **changes: Any) -> TradeIntent:
        """Apply field changes to the intent.

        - A new `from` starts a fresh intent (keeping `from` and slippage).
        - A new `to` clears the selected venue.
        - `from == to` resets the intent to just `from`.
        """
        unknown = set(changes) - {"venue", "slippage_percent", "from_asset", "to_asset", "input_amount"}
        if unknown:
            raise TypeError(f"unknown intent fields: {sorted(unknown)}")
        if "input_amount" in changes:
            changes = {**changes, "input_amount": _normalize_amount(changes["input_amount"])}
        current = self._intent
        if "from_asset" in changes and changes["from_asset"] != current.from_asset:
            rest = {k: v for k, v in changes.items() if k not in ("from_asset", "venue")}
            self.reset(from_asset=changes["from_asset"], slippage_percent=current.slippage_percent)
            current = self._intent
            changes = rest
        if "to_asset" in changes and changes["to_asset"] != current.to_asset:
            changes = {**changes, "venue": None}
        updated = current.copy(**changes)
        if updated.from_asset and updated.from_asset == updated.to_asset:
            return self.reset(from_asset=updated.from_asset)
        if updated.triple != current.triple:
            self._error = None
        self._intent = updated
        return self.intent

    def set_input(self, value: object) -> TradeIntent:
        """Set the input amount from a human value, using the `from` asset's precision."""
        decimals = self.assets.decimals(self._intent.from_asset)
        return self.set_intent(input_amount=to_amount(value, decimals))

    def choose_venue(self, venue: Venue) -> TradeIntent:
        """Manual venue choice; must be one of the currently available venues."""
        venues = self.resolve_venues(self._intent.from_asset, self._intent.to_asset)
        if venue not in venues:
            raise ValidationError("venue", f"{venue} is not available for this pair")
        return self.set_intent(venue=venue)

    # ------------------------------------------------------------------
    # Resolution and simulation
    # ------------------------------------------------------------------

    def resolve_venues(self, from_asset: str, to_asset: str) -> List[Venue]:
        return self.resolver.resolve_venues(from_asset, to_asset)

    def destination_options(self) -> List[Asset]:
        return self.resolver.destination_options(self._intent.from_asset)

    def source_options(self) -> List[Asset]:
        """Assets the account holds a positive balance of."""
        if self.balances is None:
            return list(self.assets)
        return [a for a in self.assets if gt(self.balances.current_balance(a.identifier), 0)]

    def record_quote(self, quote: Quote) -> None:
        self.cache.record(quote)

    def quote(self, venue: Optional[Venue] = None) -> Quote:
        """Cached quote of the current triple for `venue` (zero quote when absent)."""
        from_asset, to_asset, amount = self._intent.triple
        venue = venue or self._intent.venue
        if venue is None:
            return Quote.zero(from_asset, to_asset, amount, Venue.DIRECT)
        return self.cache.lookup(from_asset, to_asset, amount, venue)

    def select_venue(self, quotes: Mapping[Venue, Quote]) -> Optional[Venue]:
        return select_venue(quotes, self.resolve_venues(self._intent.from_asset, self._intent.to_asset))

    async def simulate(self, intent: Optional[TradeIntent] = None) -> SimulationOutcome:
        """Simulate the intent on every available venue and auto-select when possible.

        `from == to` resets the intent and returns without touching the transport.
        """
        if intent is not None:
            self.set_intent(**{
                "from_asset": intent.from_asset,
                "to_asset": intent.to_asset,
                "input_amount": intent.input_amount,
                "slippage_percent": intent.slippage_percent,
            })
        current = self._intent
        from_asset, to_asset, amount = current.triple
        if not from_asset or not to_asset:
            return SimulationOutcome()
        if from_asset == to_asset:
            self.reset(from_asset=from_asset)
            return SimulationOutcome()
        if not gt(amount, 0):
            return SimulationOutcome()

        venues = self.resolve_venues(from_asset, to_asset)
        if not venues:
            self._error = NoVenueAvailable(from_asset, to_asset)
            return SimulationOutcome(error=self._error)

        previous_route = self.cache.get(from_asset, to_asset, amount, Venue.ROUTED)
        route_floor = (minimum_receive(previous_route.output_amount, current.slippage_percent)
                       if previous_route is not None else None)

        self._error = None
        self._inflight += 1
        try:
            outcome = await self.simulator.run(from_asset, to_asset, amount, venues,
                                               route_minimum_receive=route_floor)
        finally:
            self._inflight -= 1

        if outcome.stale or self._intent.triple != (from_asset, to_asset, amount):
            return outcome
        self._error = outcome.error
        selected = select_venue(self.cache.quotes_for(from_asset, to_asset, amount), venues)
        if selected is not None:
            LOGGER.info("selected %s for %s %s -> %s", selected, amount, from_asset, to_asset)
            self._intent = self._intent.copy(venue=selected)
        return outcome

    # ------------------------------------------------------------------
    # Guard, parameters, refresh
    # ------------------------------------------------------------------

    async def update_spendable(self) -> Optional[SpendableResult]:
        from_asset = self._intent.from_asset
        if not from_asset or self.balances is None:
            self._spendable, self._spendable_for = None, None
            return None
        result = await evaluate_spendable(from_asset, self.balances, self.fee_estimator,
                                          self.network.max_fee_gas)
        if self._intent.from_asset == from_asset:
            self._spendable, self._spendable_for = result, from_asset
        return result

    @property
    def spendable(self) -> Optional[SpendableResult]:
        if self._spendable_for != self._intent.from_asset:
            return None
        return self._spendable

    async def load_parameters(self) -> OracleParameters:
        self.oracle_params = await self.transport.oracle_parameters()
        return self.oracle_params

    async def refresh(self) -> None:
        """Reset the intent and reload balances (after a settlement, for instance)."""
        self.reset()
        if self.balances is not None:
            await self.balances.refresh()

    async def evaluate(self) -> EngineSnapshot:
        """Run one evaluation cycle: simulation and spendable guard concurrently."""
        await asyncio.gather(self.simulate(), self.update_spendable())
        return self.snapshot()

    # ------------------------------------------------------------------
    # Validation, snapshot, settlement
    # ------------------------------------------------------------------

    def validate(self) -> Dict[str, str]:
        """Field -> message for every invalid intent field (empty when valid)."""
        errors: Dict[str, str] = {}
        intent = self._intent

        slippage = intent.slippage_percent
        if not is_finite(slippage) or not is_integer(times(slippage, 100)):
            errors["slippage"] = "Slippage must be within 2 decimal points"
        elif lt(slippage, 0) or gte(slippage, 100):
            errors["slippage"] = "Slippage must be between 0 and 100"

        if not intent.from_asset:
            errors["from"] = "Required"
        if not intent.to_asset:
            errors["to"] = "Required"
        elif intent.from_asset == intent.to_asset:
            errors["to"] = "Source and destination must differ"

        amount = intent.input_amount
        if not amount:
            errors["input"] = "Required"
        elif not is_finite(amount) or not is_integer(amount):
            errors["input"] = "Invalid amount"
        elif not gt(amount, 0):
            errors["input"] = "Amount must be greater than 0"
        else:
            spendable = self.spendable
            if self.balances is not None and spendable is None:
                errors["input"] = "Balance not loaded"
            elif spendable is not None and not lte(amount, spendable.max_input_amount):
                errors["input"] = "Insufficient balance"
        return errors

    def expected_price(self) -> Optional[ExpectedPrice]:
        from_asset, to_asset, amount = self._intent.triple
        return expected_price(amount, self.quote().output_amount,
                              self.assets.decimals(from_asset), self.assets.decimals(to_asset))

    def snapshot(self) -> EngineSnapshot:
        intent = self.intent
        quote = self.quote() if intent.venue is not None else None
        output = quote.output_amount if quote is not None else "0"
        return EngineSnapshot(
            intent=intent,
            venues=tuple(self.resolve_venues(intent.from_asset, intent.to_asset)),
            quotes=self.cache.quotes_for(*intent.triple),
            output_amount=output,
            minimum_receive=minimum_receive(output, intent.slippage_percent),
            expected_price=self.expected_price() if quote is not None else None,
            detail=(venue_detail(quote, self.oracle_params)
                    if quote is not None and gt(output, 0) else None),
            spendable=self.spendable,
            simulating=self.simulating,
            error=self._error,
            validation=self.validate(),
        )

    def _reference_rate(self) -> Optional[str]:
        direct = self.cache.get(*self._intent.triple, Venue.DIRECT)
        if direct is None or not gt(direct.rate, 0):
            return None
        return direct.rate

    def build_settlement(self, intent: Optional[TradeIntent] = None,
                         venue: Optional[Venue] = None) -> Settlement:
        """Unsigned instructions for the selected (or given) venue.

        Raises ValidationError while the intent is invalid, a simulation is in
        flight or an error is pending; NoVenueAvailable / AmbiguousSelection
        when there is no venue to use.
        """
        if intent is not None:
            self.set_intent(**{k: getattr(intent, k) for k in
                               ("from_asset", "to_asset", "input_amount", "slippage_percent")})
            if intent.venue is not None:
                self.set_intent(venue=intent.venue)
        errors = self.validate()
        if errors:
            field_name, message = next(iter(errors.items()))
            raise ValidationError(field_name, message)
        if self.simulating:
            raise ValidationError("input", "Simulation in progress")
        if self._error is not None:
            raise ValidationError("input", f"Pending error: {self._error}")

        current = self._intent
        venues = self.resolve_venues(current.from_asset, current.to_asset)
        chosen = venue or current.venue
        if chosen is None:
            if not venues:
                raise NoVenueAvailable(current.from_asset, current.to_asset)
            raise AmbiguousSelection(venues)
        if chosen not in venues:
            raise ValidationError("venue", f"{chosen} is not available for this pair")

        quote = self.cache.lookup(*current.triple, chosen)
        if not gt(quote.output_amount, 0):
            raise ValidationError("input", "No positive quote for the selected venue")
        return build_settlement(
            current, chosen,
            sender=self.sender,
            quote=quote,
            resolver=self.resolver,
            network=self.network,
            reference_rate=self._reference_rate(),
        )


__all__ = ["EngineSnapshot", "SwapEngine"]
