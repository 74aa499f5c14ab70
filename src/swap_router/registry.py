"""Asset and pair registries: read-only lookups loaded once per session.

The engine only reads from these. Unknown asset identifiers resolve to a
placeholder `Asset` with the default precision so that lookups never fail on
partially loaded data.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .core import DEFAULT_ASSET_DECIMALS, Asset, Pair, denom_symbol


class AssetRegistry:
    """Native and token assets keyed by identifier, in registration order."""

    def __init__(self, assets: Iterable[Asset]):
        self._assets: Dict[str, Asset] = {}
        for asset in assets:
            self._assets[asset.identifier] = asset

    @classmethod
    def from_whitelist(cls,
                       native_denoms: Sequence[str],
                       tokens: Mapping[str, Mapping[str, object]] | None = None,
                       ) -> "AssetRegistry":
        """Build a registry from native denoms and a token whitelist.

        `tokens` maps a contract address to `{"symbol", "decimals", "icon"}`.
        """
        assets: List[Asset] = [
            Asset(identifier=d, symbol=denom_symbol(d), native=True) for d in native_denoms
        ]
        for address, info in (tokens or {}).items():
            assets.append(Asset(
                identifier=address,
                symbol=str(info.get("symbol") or address),
                decimals=int(info.get("decimals", DEFAULT_ASSET_DECIMALS)),
                icon=info.get("icon"),  # type: ignore[arg-type]
                native=False,
            ))
        return cls(assets)

    def get(self, identifier: str) -> Asset:
        asset = self._assets.get(identifier)
        if asset is None:
            return Asset(identifier=identifier, symbol=denom_symbol(identifier))
        return asset

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._assets

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._assets.values())

    def __len__(self) -> int:
        return len(self._assets)

    def decimals(self, identifier: str) -> int:
        return self.get(identifier).decimals

    def is_oracle_listed(self, identifier: str) -> bool:
        """True for registered native assets, the only ones the exchange-rate oracle prices."""
        asset = self._assets.get(identifier)
        return asset is not None and asset.native

    def asset_info(self, identifier: str) -> Dict[str, Any]:
        """Asset descriptor in the pool/route contract message format."""
        if self.is_oracle_listed(identifier):
            return {"native_token": {"denom": identifier}}
        return {"token": {"contract_addr": identifier}}

    def native(self) -> List[Asset]:
        return [a for a in self._assets.values() if a.native]

    def tokens(self) -> List[Asset]:
        return [a for a in self._assets.values() if not a.native]


class PairRegistry:
    """Pool contracts of the Pool venue, searchable in either asset order."""

    def __init__(self, pairs: Iterable[Pair]):
        self._pairs: List[Pair] = list(pairs)
        self._index: Dict[Tuple[str, str], Pair] = {}
        for p in self._pairs:
            a, b = p.assets
            self._index.setdefault((a, b), p)
            self._index.setdefault((b, a), p)

    @classmethod
    def from_mapping(cls, pairs: Mapping[str, Sequence[str]]) -> "PairRegistry":
        """Build from `{pool_contract: [asset_a, asset_b]}`."""
        return cls(Pair(contract=c, assets=(str(a[0]), str(a[1]))) for c, a in pairs.items())

    def find(self, from_asset: str, to_asset: str) -> Optional[Pair]:
        if not from_asset or not to_asset or from_asset == to_asset:
            return None
        return self._index.get((from_asset, to_asset))

    def __iter__(self) -> Iterator[Pair]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)


__all__ = ["AssetRegistry", "PairRegistry"]
