#!/usr/bin/env python3
"""Quote a swap across every available venue and print the settlement plan.

Example:
    python apps/quote.py session.yaml uluna uusd 10 --slippage 0.5 --sender terra1...
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from swap_router import FcdTransport, SwapEngine, SwapRouterError, load_session_config
from swap_router.core import format_amount


def setup_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s :: %(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.INFO)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Quote a swap across Direct / Pool / Routed venues.")
    parser.add_argument("session", help="Session YAML (network + asset/pair registry)")
    parser.add_argument("from_asset", help="Source denom or token address")
    parser.add_argument("to_asset", help="Destination denom or token address")
    parser.add_argument("amount", help="Input amount in human units, e.g. 10.5")
    parser.add_argument("--slippage", default=None, help="Slippage tolerance in percent")
    parser.add_argument("--venue", default=None, help="Force a venue (Direct, Pool, Routed)")
    parser.add_argument("--sender", default="", help="Sender address; prints settlement instructions when set")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args()


async def run(args: argparse.Namespace) -> int:
    session = load_session_config(args.session)
    assets = session.asset_registry()
    async with FcdTransport(session.network, assets) as transport:
        engine = SwapEngine(assets, session.pair_registry(), transport, session.network, sender=args.sender)
        engine.set_intent(from_asset=args.from_asset, to_asset=args.to_asset)
        if args.slippage is not None:
            engine.set_intent(slippage_percent=args.slippage)
        engine.set_input(args.amount)

        venues = engine.resolve_venues(args.from_asset, args.to_asset)
        print(f"venues: {', '.join(str(v) for v in venues) or '(none)'}")
        outcome = await engine.simulate()
        if outcome.error is not None:
            print(f"warning: {outcome.error}", file=sys.stderr)

        to_decimals = assets.decimals(args.to_asset)
        for venue, quote in outcome.quotes_by_venue.items():
            print(f"  {str(venue):<7} -> {format_amount(quote.output_amount, to_decimals)}")

        if args.venue:
            chosen = next((v for v in venues if v.value.lower() == args.venue.lower()), None)
            if chosen is None:
                print(f"venue {args.venue} is not available", file=sys.stderr)
                return 2
            engine.choose_venue(chosen)

        snap = engine.snapshot()
        if snap.intent.venue is None:
            print("no venue selected; pass --venue to choose one")
            return 1
        print(f"selected: {snap.intent.venue}")
        print(f"minimum receive: {format_amount(snap.minimum_receive, to_decimals)}")
        if snap.expected_price is not None:
            print(f"expected price: 1 {assets.get(args.from_asset).symbol} = "
                  f"{snap.expected_price.destination_per_source} {assets.get(args.to_asset).symbol}")

        if args.sender:
            try:
                settlement = engine.build_settlement()
            except SwapRouterError as exc:
                print(f"cannot build settlement: {exc}", file=sys.stderr)
                return 1
            print(json.dumps(settlement.to_dicts(), indent=2))
    return 0


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
