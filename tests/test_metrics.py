import pytest
from prometheus_client import REGISTRY

from lslmsr.backtest.scenarios import seed_market
from lslmsr.core.errors import SlippageExceededError
from lslmsr.pricing.quotes import QuoteEngine


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_quotes_are_counted():
    state = seed_market()
    before = _sample("lslmsr_quotes_total", {"side": "buy"})
    QuoteEngine().quote_buy(state, True, 10**6)
    assert _sample("lslmsr_quotes_total", {"side": "buy"}) == before + 1


def test_slippage_rejections_are_counted():
    state = seed_market()
    before = _sample("lslmsr_slippage_rejections_total")
    with pytest.raises(SlippageExceededError):
        QuoteEngine().quote_buy(state, True, 10**6, min_shares=10**30)
    assert _sample("lslmsr_slippage_rejections_total") == before + 1
