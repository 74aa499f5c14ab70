"""Spendable-amount guard: the largest input the account can offer.

When the account's whole balance is a single asset, the network fee has to be
paid from the asset being swapped, so a fee for a fixed reference gas amount
is reserved. Otherwise the fee comes out of another asset and the raw balance
is spendable.
"""
from __future__ import annotations

import logging
from typing import Optional

from .core import SpendableResult, max_of, minus
from .transport import BalanceProvider, FeeEstimator

LOGGER = logging.getLogger(__name__)


def spendable_amount(balance: object, fee: Optional[object], *, single_asset: bool) -> SpendableResult:
    """Return `max(balance - fee, 0)` for single-asset accounts, else the raw balance."""
    if single_asset and fee is not None:
        return SpendableResult(max_input_amount=max_of([minus(balance, fee), "0"]))
    return SpendableResult(max_input_amount=max_of([balance, "0"]))


async def evaluate_spendable(from_asset: str,
                             balances: BalanceProvider,
                             fee_estimator: Optional[FeeEstimator],
                             gas_units: int,
                             ) -> SpendableResult:
    """Fetch balance and fee estimate for `from_asset` and apply `spendable_amount`."""
    balance = balances.current_balance(from_asset)
    single_asset = len(balances.balances()) == 1
    fee: Optional[str] = None
    if single_asset and fee_estimator is not None:
        fee = await fee_estimator.estimate_fee(gas_units, from_asset)
        LOGGER.debug("reserving fee %s %s for %d gas", fee, from_asset, gas_units)
    return spendable_amount(balance, fee, single_asset=single_asset)


__all__ = ["spendable_amount", "evaluate_spendable"]
