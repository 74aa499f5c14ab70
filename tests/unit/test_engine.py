import asyncio

import pytest

from swap_router.core import (
    AmbiguousSelection,
    NoVenueAvailable,
    Quote,
    SimulationError,
    TradeIntent,
    ValidationError,
    Venue,
)
from swap_router.engine import SwapEngine
from swap_router.selector import DirectDetail

from tests.conftest import ANC, MIR, FakeBalances, FakeFeeEstimator, FakeTransport


def _ready(engine, from_asset="uluna", to_asset="uusd", amount="1000000"):
    engine.set_intent(from_asset=from_asset, to_asset=to_asset, input_amount=amount)
    return engine


# -----------------------------
# Intent transitions
# -----------------------------

def test_same_source_and_destination_resets_intent(engine):
    _ready(engine).set_intent(slippage_percent="0.5")
    intent = engine.set_intent(to_asset="uluna")
    print("[intent] after from == to:", intent)
    assert intent.from_asset == "uluna"
    assert intent.to_asset == ""
    assert intent.input_amount == ""
    assert intent.venue is None


def test_new_source_starts_fresh_intent_keeping_slippage(engine):
    _ready(engine).set_intent(slippage_percent="0.5", venue=Venue.DIRECT)
    intent = engine.set_intent(from_asset="ukrw")
    assert intent.from_asset == "ukrw"
    assert intent.to_asset == ""
    assert intent.input_amount == ""
    assert intent.venue is None
    assert intent.slippage_percent == "0.5"


def test_new_destination_clears_venue(engine):
    _ready(engine).set_intent(venue=Venue.DIRECT)
    intent = engine.set_intent(to_asset="ukrw")
    assert intent.venue is None
    assert intent.input_amount == "1000000"


def test_unknown_intent_field_rejected(engine):
    with pytest.raises(TypeError):
        engine.set_intent(amount="1")


def test_set_input_uses_source_precision(engine):
    engine.set_intent(from_asset="uluna", to_asset="uusd")
    assert engine.set_input("1.5").input_amount == "1500000"


def test_intent_property_is_a_copy(engine):
    _ready(engine)
    engine.intent.input_amount = "5"
    assert engine.intent.input_amount == "1000000"


def test_choose_unavailable_venue_rejected(engine):
    _ready(engine)
    with pytest.raises(ValidationError):
        engine.choose_venue(Venue.ROUTED)
    assert engine.choose_venue(Venue.POOL).venue is Venue.POOL


# -----------------------------
# Simulation and auto-selection
# -----------------------------

@pytest.mark.asyncio
async def test_same_asset_simulation_makes_no_transport_call(engine, transport):
    outcome = await engine.simulate(TradeIntent(from_asset="uluna", to_asset="uluna", input_amount="1000000"))
    assert outcome.quotes_by_venue == {}
    assert transport.calls == []
    assert engine.intent.to_asset == ""


@pytest.mark.asyncio
async def test_zero_or_missing_amount_skips_simulation(engine, transport):
    _ready(engine, amount="0")
    await engine.simulate()
    engine.set_intent(input_amount="")
    await engine.simulate()
    assert transport.calls == []


@pytest.mark.asyncio
async def test_direct_beats_pool_and_min_receive(engine):
    _ready(engine)
    outcome = await engine.simulate()
    assert outcome.error is None
    snap = engine.snapshot()
    print("[engine] snapshot:", snap)
    assert snap.intent.venue is Venue.DIRECT
    assert snap.output_amount == "100"
    assert snap.minimum_receive == "99"
    assert snap.venues == (Venue.DIRECT, Venue.POOL)
    assert set(snap.quotes) == {Venue.DIRECT, Venue.POOL}
    assert isinstance(snap.detail, DirectDetail)
    assert snap.can_settle


@pytest.mark.asyncio
async def test_pool_selected_when_larger(assets, pairs, network):
    transport = FakeTransport(direct={("uluna", "uusd"): "90"}, pool={("uluna", "uusd"): "95"})
    engine = _ready(SwapEngine(assets, pairs, transport, network))
    await engine.simulate()
    assert engine.intent.venue is Venue.POOL


@pytest.mark.asyncio
async def test_tie_selects_direct(assets, pairs, network):
    transport = FakeTransport(direct={("uluna", "uusd"): "95"}, pool={("uluna", "uusd"): "95"})
    engine = _ready(SwapEngine(assets, pairs, transport, network))
    await engine.simulate()
    assert engine.intent.venue is Venue.DIRECT


@pytest.mark.asyncio
async def test_routed_only_pair_is_auto_selected(engine):
    _ready(engine, ANC, MIR, "1000")
    await engine.simulate()
    snap = engine.snapshot()
    assert snap.venues == (Venue.ROUTED,)
    assert snap.intent.venue is Venue.ROUTED
    assert snap.output_amount == "77"
    assert snap.detail.path == (ANC, "uusd", MIR)


@pytest.mark.asyncio
async def test_repeated_route_simulation_passes_previous_floor(engine, transport):
    _ready(engine, ANC, MIR, "1000")
    await engine.simulate()
    await engine.simulate()
    routes = [c for c in transport.calls if c[0] == "route"]
    assert routes[0][-1] is None
    assert routes[1][-1] == "76"


@pytest.mark.asyncio
async def test_unreachable_pair_reports_no_venue(engine, transport):
    _ready(engine, ANC, "terra1orphan", "1000")
    outcome = await engine.simulate()
    assert isinstance(outcome.error, NoVenueAvailable)
    assert isinstance(engine.snapshot().error, NoVenueAvailable)
    assert transport.calls == []


@pytest.mark.asyncio
async def test_partial_failure_surfaces_error_without_auto_choice(assets, pairs, network):
    transport = FakeTransport(direct={("uluna", "uusd"): "100"}, failures=("pool",))
    engine = _ready(SwapEngine(assets, pairs, transport, network, sender="terra1sender"))
    outcome = await engine.simulate()
    assert isinstance(outcome.error, SimulationError)
    assert engine.intent.venue is None
    assert engine.quote(Venue.DIRECT).output_amount == "100"
    with pytest.raises(ValidationError):
        engine.build_settlement(venue=Venue.DIRECT)


@pytest.mark.asyncio
async def test_changing_triple_clears_pending_error(assets, pairs, network):
    transport = FakeTransport(failures=("pool",))
    engine = _ready(SwapEngine(assets, pairs, transport, network))
    await engine.simulate()
    assert engine.snapshot().error is not None
    engine.set_intent(input_amount="2000000")
    assert engine.snapshot().error is None


@pytest.mark.asyncio
async def test_superseded_simulation_does_not_select(engine, transport):
    """Only the latest amount's results drive the selection."""
    transport.gate = asyncio.Event()
    _ready(engine)
    first = asyncio.create_task(engine.simulate())
    for _ in range(20):
        await asyncio.sleep(0)
    assert engine.simulating
    engine.set_intent(input_amount="2000000")
    second = asyncio.create_task(engine.simulate())
    for _ in range(20):
        await asyncio.sleep(0)
    transport.gate.set()
    old, new = await asyncio.wait_for(asyncio.gather(first, second), timeout=1)
    assert old.stale
    assert not new.stale
    assert not engine.simulating
    assert engine.cache.get("uluna", "uusd", "1000000", Venue.DIRECT) is None
    assert engine.intent.venue is Venue.DIRECT
    assert engine.intent.input_amount == "2000000"


@pytest.mark.asyncio
async def test_record_quote_feeds_snapshot(engine):
    _ready(engine)
    engine.record_quote(Quote("uluna", "uusd", "1000000", Venue.POOL, "95", aux_fee="3"))
    engine.choose_venue(Venue.POOL)
    snap = engine.snapshot()
    assert snap.output_amount == "95"
    assert snap.detail.trading_fee == "3"


# -----------------------------
# Guard, parameters and refresh
# -----------------------------

@pytest.mark.asyncio
async def test_evaluate_applies_spendable_guard(assets, pairs, transport, network):
    balances = FakeBalances({"uluna": "1000000"})
    engine = SwapEngine(assets, pairs, transport, network,
                        balances=balances, fee_estimator=FakeFeeEstimator("2000"))
    _ready(engine, amount="999000")
    assert engine.validate()["input"] == "Balance not loaded"
    snap = await engine.evaluate()
    assert snap.spendable.max_input_amount == "998000"
    assert snap.validation["input"] == "Insufficient balance"
    engine.set_intent(input_amount="998000")
    assert "input" not in engine.validate()


@pytest.mark.asyncio
async def test_spendable_is_keyed_by_source(assets, pairs, transport, network):
    balances = FakeBalances({"uluna": "1000000", "uusd": "10"})
    engine = SwapEngine(assets, pairs, transport, network, balances=balances)
    _ready(engine)
    await engine.update_spendable()
    assert engine.spendable.max_input_amount == "1000000"
    engine.set_intent(from_asset="uusd")
    assert engine.spendable is None


@pytest.mark.asyncio
async def test_source_options_follow_balances(assets, pairs, transport, network):
    balances = FakeBalances({"uluna": "1000000", ANC: "0"})
    engine = SwapEngine(assets, pairs, transport, network, balances=balances)
    assert [a.identifier for a in engine.source_options()] == ["uluna"]


@pytest.mark.asyncio
async def test_load_parameters_feed_direct_detail(engine):
    await engine.load_parameters()
    _ready(engine)
    await engine.simulate()
    detail = engine.snapshot().detail
    assert detail.min_spread == "0.02"
    assert detail.tax_rate == "0.0035"


@pytest.mark.asyncio
async def test_refresh_resets_intent_and_reloads_balances(assets, pairs, transport, network):
    balances = FakeBalances({"uluna": "1000000"})
    engine = _ready(SwapEngine(assets, pairs, transport, network, balances=balances))
    await engine.refresh()
    assert engine.intent.from_asset == ""
    assert balances.refreshed == 1


# -----------------------------
# Validation
# -----------------------------

@pytest.mark.parametrize(
    "slippage,message",
    [
        ("0.123", "Slippage must be within 2 decimal points"),
        ("abc", "Slippage must be within 2 decimal points"),
        ("100", "Slippage must be between 0 and 100"),
        ("-1", "Slippage must be between 0 and 100"),
    ],
)
def test_validate_slippage(engine, slippage, message):
    _ready(engine).set_intent(slippage_percent=slippage)
    assert engine.validate()["slippage"] == message


def test_validate_required_fields(engine):
    errors = engine.validate()
    assert errors == {"from": "Required", "to": "Required", "input": "Required"}


@pytest.mark.parametrize(
    "amount,message",
    [("1.5", "Invalid amount"), ("x", "Invalid amount"), ("0", "Amount must be greater than 0")],
)
def test_validate_input(engine, amount, message):
    _ready(engine, amount=amount)
    assert engine.validate()["input"] == message


# -----------------------------
# Settlement
# -----------------------------

@pytest.mark.asyncio
async def test_build_settlement_for_selected_direct(engine):
    _ready(engine)
    await engine.simulate()
    settlement = engine.build_settlement()
    assert settlement.venue is Venue.DIRECT
    assert settlement.minimum_receive == "99"
    assert [d["type"] for d in settlement.to_dicts()] == ["wasm/MsgExecuteContract", "market/MsgSwap"]
    assert settlement.result_parser.reference_rate == "10"


def test_build_settlement_invalid_intent(engine):
    with pytest.raises(ValidationError) as err:
        engine.build_settlement()
    assert err.value.field == "from"


def test_build_settlement_without_choice_is_ambiguous(engine):
    _ready(engine)
    engine.record_quote(Quote("uluna", "uusd", "1000000", Venue.DIRECT, "100"))
    with pytest.raises(AmbiguousSelection) as err:
        engine.build_settlement()
    assert err.value.venues == (Venue.DIRECT, Venue.POOL)


def test_build_settlement_unreachable_pair(engine):
    _ready(engine, ANC, "terra1orphan", "1000")
    with pytest.raises(NoVenueAvailable):
        engine.build_settlement()


def test_build_settlement_needs_positive_quote(engine):
    _ready(engine)
    engine.choose_venue(Venue.POOL)
    with pytest.raises(ValidationError):
        engine.build_settlement()


@pytest.mark.parametrize("raw", ["1000000.0", "1e6", " 1000000", "1000000"])
def test_input_amount_is_stored_canonical(engine, raw):
    assert _ready(engine, amount=raw).intent.input_amount == "1000000"


@pytest.mark.asyncio
async def test_non_canonical_amount_reaches_settlement_canonical(engine, transport):
    """Cache keys, transport calls and coin amounts all carry the canonical integer."""
    _ready(engine, amount="1000000.0")
    assert engine.validate() == {}
    await engine.simulate()
    assert all(c[3] == "1000000" for c in transport.calls if c[0] in ("direct", "pool"))
    assert engine.cache.get("uluna", "uusd", "1000000", Venue.DIRECT) is not None
    swap = engine.build_settlement().to_dicts()[-1]
    assert swap["value"]["offer_coin"]["amount"] == "1000000"


@pytest.mark.asyncio
async def test_snapshot_minimum_receive_bounded_for_invalid_slippage(engine):
    _ready(engine).set_intent(slippage_percent="-5")
    await engine.simulate()
    snap = engine.snapshot()
    assert "slippage" in snap.validation
    assert int(snap.minimum_receive) <= int(snap.output_amount)
