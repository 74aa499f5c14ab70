"""Venue selection and the price model derived from the selected quote.

Selection rule (after a batch for the current triple completes):
  1. Direct and Pool both quoted strictly positive -> the larger output wins,
     ties go to Direct.
  2. Otherwise, a single available venue is selected whatever its output.
  3. Otherwise nothing is selected and the user must choose.

Price model:
  - minimum receive = floor(output * (1 - slippage/100))
  - expected price in natural units, both directions, corrected for the
    decimal-precision difference between the two assets
  - spread (Direct only) = principal reference value - output
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional, Sequence, Tuple, Union

from .core import (
    DEFAULT_SLIPPAGE_PERCENT,
    DIVISION_PLACES,
    OracleParameters,
    Quote,
    Venue,
    decimal_n,
    div,
    floor,
    gt,
    gte,
    is_finite,
    lt,
    max_of,
    minus,
    times,
)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def select_venue(quotes: Mapping[Venue, Quote], venues: Sequence[Venue]) -> Optional[Venue]:
    """Pick the venue to use for `quotes` of the current triple, or None for a manual choice."""
    direct = quotes.get(Venue.DIRECT)
    pool = quotes.get(Venue.POOL)
    both_available = Venue.DIRECT in venues and Venue.POOL in venues
    if both_available and direct is not None and pool is not None:
        if gt(direct.output_amount, 0) and gt(pool.output_amount, 0):
            return Venue.DIRECT if gte(direct.output_amount, pool.output_amount) else Venue.POOL
    if len(venues) == 1:
        return venues[0]
    return None


# ---------------------------------------------------------------------------
# Price model
# ---------------------------------------------------------------------------

def slippage_fraction(slippage_percent: object) -> str:
    """Tolerance as a fraction; input that is non-numeric or outside [0, 100) falls back to the default 1%."""
    if not is_finite(slippage_percent) or lt(slippage_percent, 0) or gte(slippage_percent, 100):
        slippage_percent = DEFAULT_SLIPPAGE_PERCENT
    return div(slippage_percent, 100)


def minimum_receive(output_amount: object, slippage_percent: object) -> str:
    return floor(times(output_amount, minus(1, slippage_fraction(slippage_percent))))


@dataclass(frozen=True)
class ExpectedPrice:
    """Expected unit price of a quote.

    - destination_per_source: how many `to` units one `from` unit buys.
    - source_per_destination: how many `from` units one `to` unit costs.
    - belief_price: raw offer/return ratio submitted to a pool.
    """

    destination_per_source: str
    source_per_destination: str
    belief_price: str

    @property
    def quoted_in_source(self) -> bool:
        """True when the natural display is "1 to = x from" (one `to` costs more than one `from`)."""
        return gt(self.source_per_destination, 1)


def expected_price(amount: object, output_amount: object,
                   from_decimals: int, to_decimals: int) -> Optional[ExpectedPrice]:
    """Expected price of `amount -> output_amount`; None until a positive quote exists."""
    if not (gt(amount, 0) and gt(output_amount, 0)):
        return None
    raw = div(amount, output_amount)
    scale = Decimal(10) ** (to_decimals - from_decimals)
    inverse_scale = Decimal(10) ** (from_decimals - to_decimals)
    return ExpectedPrice(
        destination_per_source=times(div(output_amount, amount), inverse_scale),
        source_per_destination=times(raw, scale),
        belief_price=decimal_n(raw, DIVISION_PLACES),
    )


def spread(principal: object, output_amount: object) -> str:
    """Oracle spread cost; never negative."""
    return max_of([minus(principal, output_amount), "0"])


# ---------------------------------------------------------------------------
# Venue details
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectDetail:
    spread: str
    min_spread: str
    tax_rate: str


@dataclass(frozen=True)
class PoolDetail:
    trading_fee: str


@dataclass(frozen=True)
class RoutedDetail:
    path: Tuple[str, ...]


VenueDetail = Union[DirectDetail, PoolDetail, RoutedDetail]


def venue_detail(quote: Quote, params: Optional[OracleParameters] = None) -> VenueDetail:
    """Venue-specific cost information for a quote."""
    venue = quote.venue
    if venue is Venue.DIRECT:
        params = params or OracleParameters()
        return DirectDetail(
            spread=spread(quote.principal or "0", quote.output_amount),
            min_spread=params.min_spread,
            tax_rate=params.tax_rate(quote.to_asset),
        )
    if venue is Venue.POOL:
        return PoolDetail(trading_fee=quote.aux_fee or "0")
    if venue is Venue.ROUTED:
        if quote.route is not None:
            return RoutedDetail(path=quote.route.path)
        return RoutedDetail(path=(quote.from_asset, quote.to_asset))
    raise ValueError(f"unknown venue {venue!r}")


__all__ = [
    "select_venue",
    "slippage_fraction",
    "minimum_receive",
    "ExpectedPrice",
    "expected_price",
    "spread",
    "DirectDetail",
    "PoolDetail",
    "RoutedDetail",
    "VenueDetail",
    "venue_detail",
]
