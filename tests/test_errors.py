from dataclasses import replace

import pytest

from lslmsr.backtest.scenarios import seed_market
from lslmsr.core.errors import (
    ArithmeticOverflowError,
    ArithmeticSaturationError,
    EngineError,
    InsolventMarketError,
    InvalidStateError,
    InvalidTradeError,
    MarketResolvedError,
    NonConvergenceError,
    SlippageExceededError,
)
from lslmsr.core.types import Resolution
from lslmsr.core.utils import UINT256_MAX, checked
from lslmsr.pricing.fixed_point import SCALE


@pytest.mark.parametrize(
    "err,code",
    [
        (InvalidStateError("x"), 1001),
        (MarketResolvedError("YES"), 1002),
        (ArithmeticSaturationError(7 * SCALE, 6 * SCALE), 2001),
        (ArithmeticOverflowError(-1), 2002),
        (SlippageExceededError(10, 9), 3001),
        (InvalidTradeError("x"), 3002),
        (InsolventMarketError(2, 1), 3003),
        (NonConvergenceError(64, 0, 10), 4001),
    ],
)
def test_error_codes(err, code):
    assert isinstance(err, EngineError)
    assert err.code == code
    assert str(err) == err.message


def test_resolved_is_a_state_error():
    assert issubclass(MarketResolvedError, InvalidStateError)


def test_checked_rejects_values_outside_uint256():
    assert checked(UINT256_MAX) == UINT256_MAX
    with pytest.raises(ArithmeticOverflowError):
        checked(UINT256_MAX + 1)
    with pytest.raises(ArithmeticOverflowError):
        checked(-1)


def test_market_state_validation():
    state = seed_market()
    with pytest.raises(InvalidStateError):
        replace(state, yes_shares=-1)
    with pytest.raises(InvalidStateError):
        replace(state, share_decimals=6)
    with pytest.raises(InvalidStateError):
        replace(state, collateral_decimals=19)


def test_require_active():
    state = seed_market()
    state.require_active()
    with pytest.raises(MarketResolvedError) as exc:
        replace(state, resolution=Resolution.INVALID).require_active()
    assert exc.value.code == 1002


def test_state_apply_rejects_negative_collateral():
    state = seed_market(creator_buffer=0)
    with pytest.raises(InvalidStateError):
        state.apply(True, SCALE, -1)
