"""Quote cache: memoised venue quotes keyed by the exact (from, to, amount) triple.

- One entry per venue per triple; recording the same triple+venue replaces it.
- Entries for other triples or other venues are never touched.
- Lookups are exact: a missing triple/venue yields a zero quote, never an
  extrapolation from a neighbouring amount.
- Nothing is evicted; the cache lives as long as one user session.
"""
from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from .core import Quote, Venue

Triple = Tuple[str, str, str]


class QuoteCache:

    def __init__(self) -> None:
        self._entries: Dict[Triple, Dict[Venue, Quote]] = {}

    def record(self, quote: Quote) -> None:
        self._entries.setdefault(quote.triple, {})[quote.venue] = quote

    def lookup(self, from_asset: str, to_asset: str, amount: str, venue: Venue) -> Quote:
        found = self.get(from_asset, to_asset, amount, venue)
        return found if found is not None else Quote.zero(from_asset, to_asset, amount, venue)

    def get(self, from_asset: str, to_asset: str, amount: str, venue: Venue) -> Optional[Quote]:
        return self._entries.get((from_asset, to_asset, amount), {}).get(venue)

    def quotes_for(self, from_asset: str, to_asset: str, amount: str) -> Dict[Venue, Quote]:
        """Recorded quotes of one triple, in venue declaration order."""
        entry = self._entries.get((from_asset, to_asset, amount), {})
        return {v: entry[v] for v in Venue if v in entry}

    def __len__(self) -> int:
        return sum(len(e) for e in self._entries.values())

    def __iter__(self) -> Iterator[Quote]:
        for entry in self._entries.values():
            yield from entry.values()

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["QuoteCache", "Triple"]
