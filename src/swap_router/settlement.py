"""Settlement instructions for the selected venue, and the template that reads them back.

Instruction shapes per venue:
  - Direct : oracle swap, optionally preceded by an `assert_limit_order` call
             that aborts settlement below the minimum receive (only on networks
             that configure the guard contract).
  - Pool   : pool `swap` call (native offer, coins attached) or cw20 `send`
             with the swap hook (token offer), carrying belief price and max spread.
  - Routed : route contract `execute_swap_operations` with the precomputed
             operations and the route's minimum receive.

All instructions are unsigned; submission is someone else's job.
"""
from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from .config import NetworkConfig
from .core import (
    Coin,
    Quote,
    RoutePlan,
    TradeIntent,
    Venue,
    decimal_n,
    div,
    gt,
    max_of,
    minus,
    percent,
    split_token_text,
)
from .resolver import VenueResolver
from .selector import expected_price, minimum_receive, slippage_fraction

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SwapInstruction:
    """Oracle exchange-rate swap of `offer_coin` into `ask_denom`."""

    sender: str
    offer_coin: Coin
    ask_denom: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "market/MsgSwap",
            "value": {
                "trader": self.sender,
                "offer_coin": self.offer_coin.to_dict(),
                "ask_denom": self.ask_denom,
            },
        }


@dataclass(frozen=True)
class ExecuteContractInstruction:
    """Contract call with a JSON execute message and optional attached coins."""

    sender: str
    contract: str
    execute_msg: Mapping[str, Any]
    coins: Tuple[Coin, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "wasm/MsgExecuteContract",
            "value": {
                "sender": self.sender,
                "contract": self.contract,
                "execute_msg": dict(self.execute_msg),
                "coins": [c.to_dict() for c in self.coins],
            },
        }


Instruction = Union[SwapInstruction, ExecuteContractInstruction]


def _encode_hook(msg: Mapping[str, Any]) -> str:
    """cw20 `send` hook: base64 of the compact JSON message."""
    raw = json.dumps(msg, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


# ---------------------------------------------------------------------------
# Result parsing
# ---------------------------------------------------------------------------

_PAID_KEYS = {
    Venue.DIRECT: ("offer", "offer_amount"),
    Venue.POOL: ("offer_amount", "offer"),
    Venue.ROUTED: ("offer_amount", "offer"),
}
_RECEIVED_KEYS = {
    Venue.DIRECT: ("swap_coin", "return_amount"),
    Venue.POOL: ("return_amount", "swap_coin"),
    Venue.ROUTED: ("return_amount", "swap_coin"),
}


@dataclass(frozen=True)
class SettlementReport:
    """Realised amounts of a settled swap.

    `slippage` is a percent string, or None when no single reference price
    applies (Routed) or none was known before the trade.
    """

    paid: str
    received: str
    executed_price: str
    slippage: Optional[str] = None


def _attributes(logs: Sequence[Mapping[str, Any]]):
    for log in logs or ():
        for event in log.get("events") or ():
            for attr in event.get("attributes") or ():
                yield attr.get("key"), attr.get("value")


@dataclass(frozen=True)
class SettlementResultParser:
    """Template for reading a venue's settlement log events.

    `reference_rate` is the pre-trade oracle rate (to per from) of the pair;
    realised slippage is reported against it for Direct and Pool settlements.
    """

    venue: Venue
    from_asset: str
    to_asset: str
    amount: str
    reference_rate: Optional[str] = None

    def _find(self, logs, keys: Tuple[str, ...], *, last: bool) -> Optional[str]:
        found: Dict[str, str] = {}
        for key, value in _attributes(logs):
            if key in keys and value is not None:
                if last or key not in found:
                    found[key] = value
        for key in keys:
            if key in found:
                return found[key]
        return None

    def parse(self, logs: Sequence[Mapping[str, Any]]) -> Optional[SettlementReport]:
        """Extract paid/received amounts; None when the logs carry no swap attributes."""
        paid_text = self._find(logs, _PAID_KEYS[self.venue], last=False)
        received_text = self._find(logs, _RECEIVED_KEYS[self.venue], last=True)
        if paid_text is None or received_text is None:
            return None
        paid, _ = split_token_text(paid_text)
        received, _ = split_token_text(received_text)
        executed = div(received, paid)

        slippage: Optional[str] = None
        if self.venue is not Venue.ROUTED and gt(self.reference_rate, 0):
            slippage = percent(max_of([minus(div(executed, self.reference_rate), 1), "0"]))
        return SettlementReport(paid=paid, received=received, executed_price=executed, slippage=slippage)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settlement:
    venue: Venue
    instructions: Tuple[Instruction, ...]
    result_parser: SettlementResultParser
    minimum_receive: str

    def to_dicts(self):
        return [i.to_dict() for i in self.instructions]


def build_settlement(intent: TradeIntent,
                     venue: Venue,
                     *,
                     sender: str,
                     quote: Quote,
                     resolver: VenueResolver,
                     network: NetworkConfig,
                     reference_rate: Optional[str] = None,
                     ) -> Settlement:
    """Turn the selected venue and its quote into unsigned instructions."""
    from_asset, to_asset, amount = intent.triple
    min_receive = minimum_receive(quote.output_amount, intent.slippage_percent)

    if venue is Venue.DIRECT:
        instructions = _direct_instructions(sender, from_asset, to_asset, amount, min_receive, network)
    elif venue is Venue.POOL:
        pair = resolver.pairs.find(from_asset, to_asset)
        if pair is None:
            raise ValueError(f"no pool for {from_asset} -> {to_asset}")
        price = expected_price(amount, quote.output_amount,
                               resolver.assets.decimals(from_asset), resolver.assets.decimals(to_asset))
        belief_price = price.belief_price if price is not None else "0"
        instructions = (_pool_instruction(sender, pair.contract, from_asset, amount,
                                          belief_price, slippage_fraction(intent.slippage_percent), resolver),)
    elif venue is Venue.ROUTED:
        plan = quote.route or resolver.plan_route(from_asset, to_asset)
        if plan is None:
            raise ValueError(f"no route for {from_asset} -> {to_asset}")
        instructions = (_route_instruction(sender, plan, amount, min_receive, resolver),)
    else:
        raise ValueError(f"unknown venue {venue!r}")

    LOGGER.info("built %d %s instruction(s) for %s %s -> %s",
                len(instructions), venue, amount, from_asset, to_asset)
    parser = SettlementResultParser(venue, from_asset, to_asset, amount, reference_rate)
    return Settlement(venue=venue, instructions=instructions, result_parser=parser, minimum_receive=min_receive)


def _direct_instructions(sender: str, from_asset: str, to_asset: str, amount: str,
                         min_receive: str, network: NetworkConfig) -> Tuple[Instruction, ...]:
    swap = SwapInstruction(sender=sender, offer_coin=Coin(from_asset, amount), ask_denom=to_asset)
    guard_contract = network.assert_limit_order_contract
    if not guard_contract:
        return (swap,)
    assert_limit_order = ExecuteContractInstruction(
        sender=sender,
        contract=guard_contract,
        execute_msg={
            "assert_limit_order": {
                "offer_coin": {"denom": from_asset, "amount": amount},
                "ask_denom": to_asset,
                "minimum_receive": min_receive,
            }
        },
    )
    return (assert_limit_order, swap)


def _pool_instruction(sender: str, pair_contract: str, from_asset: str, amount: str,
                      belief_price: str, max_spread: str, resolver: VenueResolver) -> Instruction:
    swap_args = {"belief_price": decimal_n(belief_price, 18), "max_spread": max_spread}
    if resolver.assets.is_oracle_listed(from_asset):
        return ExecuteContractInstruction(
            sender=sender,
            contract=pair_contract,
            execute_msg={
                "swap": {
                    "offer_asset": {"info": resolver.asset_info(from_asset), "amount": amount},
                    **swap_args,
                }
            },
            coins=(Coin(from_asset, amount),),
        )
    return ExecuteContractInstruction(
        sender=sender,
        contract=from_asset,
        execute_msg={
            "send": {
                "contract": pair_contract,
                "amount": amount,
                "msg": _encode_hook({"swap": swap_args}),
            }
        },
    )


def _route_instruction(sender: str, plan: RoutePlan, amount: str, min_receive: str,
                       resolver: VenueResolver) -> Instruction:
    if not plan.contract:
        raise ValueError("route contract is not configured for this network")
    operations = [dict(op) for op in plan.operations]
    if resolver.assets.is_oracle_listed(plan.from_asset):
        return ExecuteContractInstruction(
            sender=sender,
            contract=plan.contract,
            execute_msg={
                "execute_swap_operations": {
                    "operations": operations,
                    "offer_amount": amount,
                    "minimum_receive": min_receive,
                }
            },
            coins=(Coin(plan.from_asset, amount),),
        )
    return ExecuteContractInstruction(
        sender=sender,
        contract=plan.from_asset,
        execute_msg={
            "send": {
                "contract": plan.contract,
                "amount": amount,
                "msg": _encode_hook({
                    "execute_swap_operations": {
                        "operations": operations,
                        "minimum_receive": min_receive,
                    }
                }),
            }
        },
    )


__all__ = [
    "SwapInstruction",
    "ExecuteContractInstruction",
    "Instruction",
    "SettlementReport",
    "SettlementResultParser",
    "Settlement",
    "build_settlement",
]
