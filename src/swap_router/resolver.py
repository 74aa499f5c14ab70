"""Venue availability: which of Direct / Pool / Routed can fill a pair.

Resolution order is fixed (Direct, Pool) and Routed is a fallback only: it is
offered when neither Direct nor Pool applies and both hops through the bridge
asset are covered by the oracle or by a pool. The result only depends on the
registry snapshot, so repeated calls return the same ordered list.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .core import BRIDGE_ASSET, Asset, RoutePlan, Venue
from .registry import AssetRegistry, PairRegistry

LOGGER = logging.getLogger(__name__)


class VenueResolver:
    """Resolve venues and route plans from the asset and pair registries."""

    def __init__(self,
                 assets: AssetRegistry,
                 pairs: PairRegistry,
                 *,
                 bridge_asset: str = BRIDGE_ASSET,
                 route_contract: Optional[str] = None,
                 ):
        self.assets = assets
        self.pairs = pairs
        self.bridge_asset = bridge_asset
        self.route_contract = route_contract

    # --- single-hop coverage ---

    def is_direct_available(self, from_asset: str, to_asset: str) -> bool:
        return (from_asset != to_asset
                and self.assets.is_oracle_listed(from_asset)
                and self.assets.is_oracle_listed(to_asset))

    def is_pool_available(self, from_asset: str, to_asset: str) -> bool:
        return self.pairs.find(from_asset, to_asset) is not None

    def _hop_covered(self, a: str, b: str) -> bool:
        return self.is_direct_available(a, b) or self.is_pool_available(a, b)

    def is_route_available(self, from_asset: str, to_asset: str) -> bool:
        bridge = self.bridge_asset
        if bridge in (from_asset, to_asset):
            return False
        return self._hop_covered(from_asset, bridge) and self._hop_covered(bridge, to_asset)

    # --- public API ---

    def resolve_venues(self, from_asset: str, to_asset: str) -> List[Venue]:
        """Ordered venues able to execute `from_asset -> to_asset` (empty when none)."""
        if not from_asset or not to_asset or from_asset == to_asset:
            return []
        venues: List[Venue] = []
        if self.is_direct_available(from_asset, to_asset):
            venues.append(Venue.DIRECT)
        if self.is_pool_available(from_asset, to_asset):
            venues.append(Venue.POOL)
        if venues:
            return venues
        if self.is_route_available(from_asset, to_asset):
            return [Venue.ROUTED]
        return []

    def destination_options(self, from_asset: str,
                            candidates: Optional[Iterable[Asset]] = None) -> List[Asset]:
        """Assets (other than `from_asset`) reachable through at least one venue."""
        pool = self.assets if candidates is None else candidates
        return [a for a in pool
                if a.identifier != from_asset and self.resolve_venues(from_asset, a.identifier)]

    def plan_route(self, from_asset: str, to_asset: str) -> Optional[RoutePlan]:
        """Swap operations for `from -> bridge -> to`, or None when no route exists."""
        if not self.is_route_available(from_asset, to_asset):
            return None
        bridge = self.bridge_asset
        operations = (
            self._operation(from_asset, bridge),
            self._operation(bridge, to_asset),
        )
        LOGGER.debug("route plan %s -> %s -> %s", from_asset, bridge, to_asset)
        return RoutePlan(
            from_asset=from_asset,
            bridge=bridge,
            to_asset=to_asset,
            operations=operations,
            contract=self.route_contract,
        )

    # --- helpers ---

    def asset_info(self, identifier: str) -> Dict[str, Any]:
        return self.assets.asset_info(identifier)

    def _operation(self, offer: str, ask: str) -> Dict[str, Any]:
        if self.is_direct_available(offer, ask):
            return {"native_swap": {"offer_denom": offer, "ask_denom": ask}}
        return {
            "terra_swap": {
                "offer_asset_info": self.asset_info(offer),
                "ask_asset_info": self.asset_info(ask),
            }
        }


__all__ = ["VenueResolver"]
