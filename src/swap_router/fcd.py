"""HTTP quote transport against the chain's public FCD and LCD endpoints.

Endpoints:
  - FCD  GET /market/swap?offer_coin=<amount><denom>&ask_denom=<denom>
  - FCD  GET /v1/market/swaprate/<denom>
  - FCD  GET /market/parameters, /oracle/parameters
  - LCD  GET /wasm/contracts/<addr>/store?query_msg=<json>
         (pool `simulation`, route `simulate_swap_operations`)

Every failure (HTTP status, connection error, malformed payload) surfaces as
TransportError; retry policy is left to the caller.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import httpx

from .config import NetworkConfig
from .core import OracleParameters, Pair, RoutePlan, TransportError
from .registry import AssetRegistry
from .transport import DirectSimulation, PoolSimulation, RouteSimulation

LOGGER = logging.getLogger(__name__)


class FcdTransport:
    """`QuoteTransport` over httpx; share one instance (and client) per session.

    `assets` is the session registry; pool queries describe the offer asset
    with the same descriptor the settlement messages use.
    """

    def __init__(self, network: NetworkConfig, assets: AssetRegistry,
                 client: Optional[httpx.AsyncClient] = None):
        self.network = network
        self.assets = assets
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "FcdTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.network.timeout)
        return self._client

    async def _get(self, url: str, params: Optional[Mapping[str, str]] = None) -> Any:
        try:
            response = await self._http().get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            LOGGER.warning("transport request failed", extra={"url": url, "error": str(exc)})
            raise TransportError(f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"GET {url} returned invalid JSON") from exc

    async def _query_contract(self, contract: str, msg: Mapping[str, Any]) -> Mapping[str, Any]:
        url = f"{self.network.lcd_url}/wasm/contracts/{contract}/store"
        payload = await self._get(url, params={"query_msg": json.dumps(msg, separators=(",", ":"))})
        result = payload.get("result") if isinstance(payload, Mapping) else None
        if not isinstance(result, Mapping):
            raise TransportError(f"contract {contract} returned no result")
        return result

    # --- QuoteTransport ---

    async def simulate_direct(self, from_asset: str, to_asset: str, amount: str) -> DirectSimulation:
        swap = await self._get(
            f"{self.network.fcd_url}/market/swap",
            params={"offer_coin": f"{amount}{from_asset}", "ask_denom": to_asset},
        )
        try:
            swapped = str(swap["result"]["amount"])
        except (KeyError, TypeError) as exc:
            raise TransportError("market swap response missing result.amount") from exc

        rates = await self._get(f"{self.network.fcd_url}/v1/market/swaprate/{from_asset}")
        rate = "0"
        for entry in rates if isinstance(rates, list) else []:
            if isinstance(entry, Mapping) and entry.get("denom") == to_asset:
                rate = str(entry.get("swaprate", "0"))
                break
        return DirectSimulation(output_amount=swapped, rate=rate)

    async def simulate_pool(self, pair: Pair, offer_asset: str, offer_amount: str) -> PoolSimulation:
        result = await self._query_contract(pair.contract, {
            "simulation": {"offer_asset": {"amount": offer_amount, "info": self.assets.asset_info(offer_asset)}}
        })
        try:
            return PoolSimulation(
                output_amount=str(result["return_amount"]),
                commission=str(result.get("commission_amount", "0")),
            )
        except KeyError as exc:
            raise TransportError(f"pool {pair.contract} simulation missing return_amount") from exc

    async def simulate_route(self, plan: RoutePlan, amount: str,
                             minimum_receive: Optional[str] = None) -> RouteSimulation:
        """Net output of `plan`. The router query has no floor argument, so `minimum_receive` is not sent."""
        if not plan.contract:
            raise TransportError("route contract is not configured")
        result = await self._query_contract(plan.contract, {
            "simulate_swap_operations": {"offer_amount": amount, "operations": list(plan.operations)}
        })
        try:
            output = str(result["amount"])
        except KeyError as exc:
            raise TransportError("route simulation missing amount") from exc
        return RouteSimulation(output_amount=output)

    async def oracle_parameters(self) -> OracleParameters:
        market = await self._get(f"{self.network.fcd_url}/market/parameters")
        oracle = await self._get(f"{self.network.fcd_url}/oracle/parameters")
        try:
            min_spread = str(market["result"]["min_spread"])
            whitelist = oracle["result"].get("whitelist") or []
        except (KeyError, TypeError, AttributeError) as exc:
            raise TransportError("malformed market/oracle parameters") from exc
        tax_rates = {str(item["name"]): str(item.get("tobin_tax", "0"))
                     for item in whitelist if isinstance(item, Mapping) and "name" in item}
        return OracleParameters(min_spread=min_spread, tax_rates=tax_rates)


__all__ = ["FcdTransport"]
