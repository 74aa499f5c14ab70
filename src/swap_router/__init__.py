# Top-level API for swap_router.
"""
Top-level API for swap_router.

This module exposes the production-facing interface of the swap
quote-aggregation and routing engine:
  - SwapEngine: per-session engine (intent, quote cache, simulation, settlement)
  - VenueResolver: Direct / Pool / Routed availability for a pair
  - FcdTransport: HTTP quote transport

Amounts are raw integer strings in each asset's smallest unit; arithmetic on
them goes through `swap_router.core` decimal-string helpers.
"""

from __future__ import annotations


from .engine import SwapEngine, EngineSnapshot
from .resolver import VenueResolver
from .cache import QuoteCache
from .simulator import Simulator
from .registry import AssetRegistry, PairRegistry
from .config import NetworkConfig, SessionConfig, get_network, load_session_config
from .fcd import FcdTransport
from .settlement import Settlement, SettlementResultParser, build_settlement
from .selector import select_venue, minimum_receive, expected_price
from .guard import spendable_amount

from .core import (
    Asset,
    Pair,
    Venue,
    Quote,
    TradeIntent,
    SwapRouterError,
    ValidationError,
    SimulationError,
    NoVenueAvailable,
    AmbiguousSelection,
    TransportError,
)

__all__ = [
    # engine
    "SwapEngine",
    "EngineSnapshot",
    "VenueResolver",
    "QuoteCache",
    "Simulator",
    "AssetRegistry",
    "PairRegistry",
    # config / transport
    "NetworkConfig",
    "SessionConfig",
    "get_network",
    "load_session_config",
    "FcdTransport",
    # pure helpers
    "Settlement",
    "SettlementResultParser",
    "build_settlement",
    "select_venue",
    "minimum_receive",
    "expected_price",
    "spendable_amount",
    # core types
    "Asset",
    "Pair",
    "Venue",
    "Quote",
    "TradeIntent",
    "SwapRouterError",
    "ValidationError",
    "SimulationError",
    "NoVenueAvailable",
    "AmbiguousSelection",
    "TransportError",
]
