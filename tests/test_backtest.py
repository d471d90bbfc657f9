import pytest

from lslmsr.backtest.engine import (
    ScenarioStep,
    TradeAction,
    apply_buy,
    apply_sell,
    run_scenario,
    settle,
)
from lslmsr.backtest.scenarios import imbalanced_stress, random_flow, seed_market
from lslmsr.core.config import EngineSettings
from lslmsr.core.errors import InvalidTradeError, SlippageExceededError
from lslmsr.core.types import Resolution
from lslmsr.pricing.fixed_point import SCALE
from lslmsr.pricing.quotes import QuoteEngine
from lslmsr.risk.solvency import check_solvency, minted

USDC = 10**6


def _stress(buffer):
    state = seed_market(
        initial_shares=100,
        alpha="0.03",
        min_liquidity=10,
        creator_buffer=buffer,
        collateral_decimals=18,
    )
    engine = QuoteEngine(EngineSettings(fee_rate_bps=100))
    return run_scenario(state, imbalanced_stress(), engine)


def test_imbalanced_stress_exposes_shortfall():
    result = _stress(10)
    assert minted(result.state) == (500 * SCALE, 10 * SCALE)
    report = check_solvency(result.state)
    assert 11.7 * SCALE < report.required_buffer < 11.9 * SCALE
    assert 1.7 * SCALE < report.yes_shortfall < 1.9 * SCALE
    assert report.no_shortfall < 0
    assert not report.solvent


def test_larger_buffer_covers_stress():
    short = _stress(10)
    covered = _stress(12)
    report = check_solvency(covered.state)
    assert report.required_buffer == check_solvency(short.state).required_buffer
    assert report.solvent
    payouts = settle(covered, Resolution.YES)
    assert payouts["alice"] == 100 * SCALE
    assert payouts["frank"] == 0


def test_stress_fees_and_holdings():
    result = _stress(10)
    assert len(result.trades) == 6
    assert result.ledger.total == sum(t.fees.fee for t in result.trades)
    assert result.holdings.balance("alice", True) == 100 * SCALE
    assert result.holdings.balance("frank", False) == 10 * SCALE
    # fees are carved out of the cost, so the pool receives less than it charged
    for t in result.trades:
        assert t.collateral_delta == t.fees.net < t.fees.gross


def test_shortfall_means_winners_take_a_haircut():
    payouts = settle(_stress(10), Resolution.YES)
    assert payouts["alice"] < 100 * SCALE
    assert payouts["alice"] > 99 * SCALE


def test_apply_buy_then_sell_round_trip():
    state = seed_market()
    engine = QuoteEngine()
    bought = apply_buy(state, True, 10 * USDC, engine)
    assert bought.state.yes_shares == state.yes_shares + bought.shares
    assert bought.state.total_collateral == state.total_collateral + bought.collateral_delta
    sold = apply_sell(bought.state, True, bought.shares, engine)
    assert sold.state.yes_shares == state.yes_shares
    assert sold.state.total_collateral >= state.total_collateral


def test_apply_buy_rechecks_slippage_on_current_state():
    state = seed_market()
    engine = QuoteEngine()
    quoted = engine.quote_buy(state, True, 10 * USDC)
    front_run = apply_buy(state, True, 10 * USDC, engine)
    with pytest.raises(SlippageExceededError):
        apply_buy(front_run.state, True, 10 * USDC, engine, min_shares=quoted.shares)


def test_selling_more_than_held_is_rejected():
    state = seed_market()
    steps = [
        ScenarioStep("a", TradeAction.BUY, True, 5 * USDC),
        ScenarioStep("a", TradeAction.SELL, True, 1000 * SCALE),
    ]
    with pytest.raises(InvalidTradeError):
        run_scenario(state, steps, QuoteEngine())


def test_sell_everything_and_skip_empty_exits():
    state = seed_market()
    steps = [
        ScenarioStep("a", TradeAction.BUY, False, 5 * USDC),
        ScenarioStep("a", TradeAction.SELL, False),
        ScenarioStep("b", TradeAction.SELL, True),
    ]
    result = run_scenario(state, steps, QuoteEngine())
    assert len(result.trades) == 2
    assert result.holdings.balance("a", False) == 0
    assert result.state.no_shares == state.no_shares


def test_random_flow_keeps_pool_funded():
    state = seed_market()
    engine = QuoteEngine()
    result = run_scenario(state, random_flow(20, max_payment=50 * USDC, seed=7), engine)
    assert result.state.yes_shares >= state.initial_yes_shares
    assert result.state.no_shares >= state.initial_no_shares
    assert result.state.total_collateral >= state.creator_buffer
    assert result.ledger.total == sum(t.fees.fee for t in result.trades)


def test_random_flow_is_deterministic_per_seed():
    a = list(random_flow(10, max_payment=USDC, seed=1))
    b = list(random_flow(10, max_payment=USDC, seed=1))
    assert a == b
