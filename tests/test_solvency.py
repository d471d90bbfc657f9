from dataclasses import replace

import pytest

from lslmsr.backtest.scenarios import seed_market
from lslmsr.core.errors import InsolventMarketError, InvalidStateError, MarketResolvedError
from lslmsr.core.types import Resolution
from lslmsr.pricing.fixed_point import SCALE
from lslmsr.risk.solvency import (
    assert_solvent,
    check_solvency,
    minted,
    redemption_payout,
    required_buffer,
    resolve,
    shortfall,
)

USDC = 10**6


@pytest.fixture
def state():
    return seed_market(creator_buffer=10)


def test_fresh_market_needs_no_buffer(state):
    assert minted(state) == (0, 0)
    assert required_buffer(state) == 0
    assert check_solvency(state).solvent


def test_required_buffer_in_collateral_scale(state):
    traded = replace(state, yes_shares=150 * SCALE, total_collateral=50 * USDC)
    assert minted(traded) == (50 * SCALE, 0)
    assert required_buffer(traded) == 10 * USDC
    assert shortfall(traded, True) == 0
    assert shortfall(traded, False) == -50 * USDC


def test_insolvent_market_is_reported(state):
    traded = replace(state, yes_shares=180 * SCALE, total_collateral=50 * USDC)
    report = check_solvency(traded)
    assert report.required_buffer == 40 * USDC
    assert report.yes_shortfall == 30 * USDC
    assert report.headroom == -30 * USDC
    assert not report.solvent
    with pytest.raises(InsolventMarketError):
        assert_solvent(traded)


def test_resolution_state_machine(state):
    done = resolve(state, Resolution.NO)
    assert done.resolved
    assert not done.yes_wins
    with pytest.raises(MarketResolvedError):
        resolve(done, Resolution.YES)
    with pytest.raises(InvalidStateError):
        resolve(state, Resolution.ACTIVE)


def test_redemption_requires_resolution(state):
    with pytest.raises(InvalidStateError):
        redemption_payout(state, SCALE, 0)


def test_winners_redeem_one_to_one(state):
    traded = replace(
        state, yes_shares=150 * SCALE, no_shares=120 * SCALE, total_collateral=80 * USDC
    )
    assert redemption_payout(resolve(traded, Resolution.YES), 10 * SCALE, 5 * SCALE) == 10 * USDC
    assert redemption_payout(resolve(traded, Resolution.NO), 10 * SCALE, 5 * SCALE) == 5 * USDC
    assert redemption_payout(resolve(traded, Resolution.YES), 0, 5 * SCALE) == 0


def test_invalid_market_pays_half(state):
    traded = replace(
        state, yes_shares=150 * SCALE, no_shares=120 * SCALE, total_collateral=80 * USDC
    )
    done = resolve(traded, Resolution.INVALID)
    assert redemption_payout(done, 10 * SCALE, 5 * SCALE) == 7_500_000


def test_insolvent_redemption_is_pro_rata(state):
    traded = replace(state, yes_shares=150 * SCALE, total_collateral=25 * USDC)
    done = resolve(traded, Resolution.YES)
    assert redemption_payout(done, 10 * SCALE, 0) == 5 * USDC
