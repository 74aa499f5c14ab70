"""Concurrent venue simulation.

One batch = one (from, to, amount) triple and its available venues. Each venue
is an independent coroutine against the quote transport; all of them are
dispatched together and awaited with `asyncio.gather`, so a slow venue never
delays the others.

Failure semantics:
- A venue failure is wrapped in SimulationError and does not abort the batch.
- The batch reports the first error observed and still records every venue
  that succeeded.

Staleness:
- Every batch takes the next generation number. A venue result that completes
  after a newer batch has started is dropped instead of being recorded; the
  in-flight call itself is not cancelled.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from .cache import QuoteCache
from .core import (
    Quote,
    SimulationError,
    SimulationOutcome,
    Venue,
    canonical,
    times,
    to_decimal,
)
from .resolver import VenueResolver
from .transport import QuoteTransport

LOGGER = logging.getLogger(__name__)


def _amount(value: object) -> str:
    d = to_decimal(value)
    return "0" if d is None else canonical(d)


class Simulator:
    """Fire per-venue simulations concurrently and record them in the cache."""

    def __init__(self, transport: QuoteTransport, cache: QuoteCache, resolver: VenueResolver):
        self.transport = transport
        self.cache = cache
        self.resolver = resolver
        self._generation = 0

    @property
    def generation(self) -> int:
        """Generation of the most recently started batch."""
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def run(self,
                  from_asset: str,
                  to_asset: str,
                  amount: str,
                  venues: Iterable[Venue],
                  *,
                  route_minimum_receive: Optional[str] = None,
                  ) -> SimulationOutcome:
        """Simulate `amount` of `from_asset -> to_asset` on every venue in `venues`."""
        self._generation += 1
        generation = self._generation
        errors: List[SimulationError] = []

        async def _one(venue: Venue) -> Optional[Quote]:
            try:
                quote = await self._simulate(venue, from_asset, to_asset, amount, route_minimum_receive)
            except Exception as exc:
                err = exc if isinstance(exc, SimulationError) else SimulationError(venue, exc)
                LOGGER.warning(
                    "%s simulation failed for %s -> %s",
                    venue, from_asset, to_asset,
                    extra={"error": str(exc)},
                )
                errors.append(err)
                return None
            if not self.is_current(generation):
                LOGGER.debug("dropping %s quote from stale batch %d", venue, generation)
                return None
            self.cache.record(quote)
            LOGGER.debug("%s quote %s %s -> %s %s", venue, amount, from_asset, quote.output_amount, to_asset)
            return quote

        results = await asyncio.gather(*(_one(v) for v in venues))

        quotes: Dict[Venue, Quote] = {q.venue: q for q in results if q is not None}
        return SimulationOutcome(
            quotes_by_venue=quotes,
            error=errors[0] if errors else None,
            generation=generation,
            stale=not self.is_current(generation),
        )

    async def _simulate(self,
                        venue: Venue,
                        from_asset: str,
                        to_asset: str,
                        amount: str,
                        route_minimum_receive: Optional[str],
                        ) -> Quote:
        if venue is Venue.DIRECT:
            result = await self.transport.simulate_direct(from_asset, to_asset, amount)
            rate = _amount(result.rate)
            return Quote(
                from_asset, to_asset, amount, venue,
                output_amount=_amount(result.output_amount),
                principal=times(amount, rate),
                rate=rate,
            )
        if venue is Venue.POOL:
            pair = self.resolver.pairs.find(from_asset, to_asset)
            if pair is None:
                raise SimulationError(venue, f"no pool for {from_asset} -> {to_asset}")
            result = await self.transport.simulate_pool(pair, from_asset, amount)
            return Quote(
                from_asset, to_asset, amount, venue,
                output_amount=_amount(result.output_amount),
                aux_fee=_amount(result.commission),
            )
        if venue is Venue.ROUTED:
            plan = self.resolver.plan_route(from_asset, to_asset)
            if plan is None:
                raise SimulationError(venue, f"no route for {from_asset} -> {to_asset}")
            result = await self.transport.simulate_route(plan, amount, route_minimum_receive)
            return Quote(
                from_asset, to_asset, amount, venue,
                output_amount=_amount(result.output_amount),
                route=plan,
            )
        raise ValueError(f"unknown venue {venue!r}")


__all__ = ["Simulator"]
