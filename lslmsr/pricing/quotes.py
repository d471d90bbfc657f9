"""Quote engine: trade costs, share estimates and sell payouts.

Every method is a pure function of the ``MarketState`` snapshot it is
given. Share amounts are in share scale (fixed point), payments and payouts
in collateral units; conversions use ``state.collateral_factor``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Tuple

from .fixed_point import EXP_CAP, SCALE
from .lmsr import LSLMSR, CostEvaluation
from ..core.config import EngineSettings
from ..core.errors import (
    ArithmeticSaturationError,
    InvalidTradeError,
    NonConvergenceError,
)
from ..core.types import BuyQuote, MarketPrices, MarketState, SellQuote, TradeCost
from ..core.utils import checked, to_collateral_scale, to_share_scale
from ..io.metrics import inc_quotes, inc_saturated, inc_search_failures
from ..risk.fees import FeeSchedule
from ..risk.limits import SlippageLimits

logger = logging.getLogger(__name__)


class QuoteEngine:
    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.fees = FeeSchedule.from_settings(self.settings)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> QuoteEngine:
        return cls(EngineSettings.from_env(dotenv_path))

    def schedule(self, fee_rate_bps: Optional[int] = None) -> FeeSchedule:
        if fee_rate_bps is None:
            return self.fees
        return FeeSchedule(fee_rate_bps, self.settings.creator_share_bps)

    # ---- saturation policy ----

    def _saturation(self, *evaluations: CostEvaluation) -> bool:
        saturated = [ev for ev in evaluations if ev.saturated]
        if not saturated:
            return False
        inc_saturated()
        worst = max(ev.gap_ratio for ev in saturated)
        if self.settings.strict_saturation:
            raise ArithmeticSaturationError(worst, EXP_CAP)
        logger.warning(
            "Quote hit the exp saturation cap (gap/b=%.4f > %.1f); price is clamped",
            worst / SCALE,
            EXP_CAP / SCALE,
        )
        return True

    # ---- cost function and prices ----

    def cost(self, state: MarketState) -> int:
        state.require_active()
        ev = LSLMSR.from_state(state).evaluate(state.yes_shares, state.no_shares)
        self._saturation(ev)
        return ev.value

    def price(self, state: MarketState) -> MarketPrices:
        state.require_active()
        model = LSLMSR.from_state(state)
        ev = model.evaluate(state.yes_shares, state.no_shares)
        p_yes, p_no = model.probabilities_from(ev)
        spread = model.entropy_term(ev)
        saturated = self._saturation(ev)
        return MarketPrices(
            yes=p_yes,
            no=p_no,
            yes_price=p_yes + spread,
            no_price=p_no + spread,
            saturated=saturated,
        )

    # ---- buys ----

    def _buy_delta(
        self, model: LSLMSR, state: MarketState, before: CostEvaluation, is_yes: bool, shares: int
    ) -> Tuple[int, CostEvaluation]:
        after = model.evaluate(*state.with_shares(is_yes, shares))
        delta = after.value - before.value
        if delta < 0:
            logger.debug("negative cost delta %d clamped to zero (shares=%d)", delta, shares)
            delta = 0
        return delta, after

    def get_cost(self, state: MarketState, is_yes: bool, shares: int) -> TradeCost:
        """Share-scale payment for buying ``shares`` of one side."""
        state.require_active()
        if shares < 0:
            raise InvalidTradeError(f"shares must be non-negative, got {shares}")
        if shares == 0:
            return TradeCost(0)
        model = LSLMSR.from_state(state)
        before = model.evaluate(state.yes_shares, state.no_shares)
        delta, after = self._buy_delta(model, state, before, is_yes, shares)
        return TradeCost(delta, self._saturation(before, after))

    def get_cost_in_collateral(self, state: MarketState, is_yes: bool, shares: int) -> int:
        """Collateral the pool must collect for ``shares``, rounded up."""
        cost = self.get_cost(state, is_yes, shares)
        return to_collateral_scale(cost.amount, state.collateral_factor, round_up=True)

    def _search(
        self, model: LSLMSR, state: MarketState, before: CostEvaluation, is_yes: bool, budget: int
    ) -> int:
        """Largest share amount whose cost fits ``budget`` (share scale).

        Starts from ``[0, budget * search_upper_multiplier]``; on a cheap side
        the upper bound can still be affordable, so it doubles until it is not.
        Doubling and bisection share the iteration budget.
        """
        if budget == 0:
            return 0
        low = 0
        high = checked(budget * self.settings.search_upper_multiplier)
        iterations = 0
        top, _ = self._buy_delta(model, state, before, is_yes, high)
        while top <= budget:
            if iterations >= self.settings.search_max_iterations:
                inc_search_failures()
                raise NonConvergenceError(iterations, low, high, "upper bound still affordable")
            low = high
            high = checked(high * 2)
            top, _ = self._buy_delta(model, state, before, is_yes, high)
            iterations += 1
        if iterations:
            logger.debug("search bracket grown %d times to %d shares", iterations, high)

        while high - low > 1:
            if iterations >= self.settings.search_max_iterations:
                inc_search_failures()
                raise NonConvergenceError(iterations, low, high)
            mid = (low + high) // 2
            cost, _ = self._buy_delta(model, state, before, is_yes, mid)
            if cost <= budget:
                low = mid
            else:
                high = mid
            iterations += 1
        logger.debug("share search converged in %d iterations: %d shares", iterations, low)
        return low

    def estimate_shares_for_payment(
        self,
        state: MarketState,
        is_yes: bool,
        gross_payment: int,
        fee_rate_bps: Optional[int] = None,
    ) -> int:
        return self.quote_buy(state, is_yes, gross_payment, fee_rate_bps).shares

    def quote_buy(
        self,
        state: MarketState,
        is_yes: bool,
        gross_payment: int,
        fee_rate_bps: Optional[int] = None,
        min_shares: int = 0,
    ) -> BuyQuote:
        state.require_active()
        if gross_payment < 0:
            raise InvalidTradeError(f"payment must be non-negative, got {gross_payment}")
        fees = self.schedule(fee_rate_bps).apply(gross_payment)
        factor = state.collateral_factor
        budget = to_share_scale(fees.net, factor)

        model = LSLMSR.from_state(state)
        before = model.evaluate(state.yes_shares, state.no_shares)
        shares = self._search(model, state, before, is_yes, budget)
        cost, after = self._buy_delta(model, state, before, is_yes, shares)
        inc_quotes("buy")
        saturated = self._saturation(before, after)

        spot = model.probabilities_from(before)[0 if is_yes else 1]
        impact = 0
        if shares > 0:
            avg = cost * SCALE // shares
            impact = (avg - spot) * SCALE // spot
        SlippageLimits(min_shares=min_shares).check_shares(shares)
        return BuyQuote(
            is_yes=is_yes,
            gross_payment=gross_payment,
            shares=shares,
            fees=fees,
            cost=to_collateral_scale(cost, factor, round_up=True),
            price_impact=impact,
            saturated=saturated,
        )

    # ---- sells ----

    def _sell_delta(
        self, state: MarketState, is_yes: bool, shares: int
    ) -> Tuple[int, CostEvaluation, CostEvaluation, LSLMSR]:
        state.require_active()
        if shares < 0:
            raise InvalidTradeError(f"shares must be non-negative, got {shares}")
        if shares > state.shares(is_yes):
            raise InvalidTradeError(
                f"cannot sell {shares} {'YES' if is_yes else 'NO'} shares, "
                f"only {state.shares(is_yes)} outstanding"
            )
        model = LSLMSR.from_state(state)
        before = model.evaluate(state.yes_shares, state.no_shares)
        after = model.evaluate(*state.with_shares(is_yes, -shares))
        delta = before.value - after.value
        if delta < 0:
            logger.debug("negative payout delta %d clamped to zero (shares=%d)", delta, shares)
            delta = 0
        return delta, before, after, model

    def estimate_payout_for_shares(
        self,
        state: MarketState,
        is_yes: bool,
        shares: int,
        fee_rate_bps: Optional[int] = None,
    ) -> int:
        """Net collateral paid to the seller of ``shares`` after the fee."""
        return self.quote_sell(state, is_yes, shares, fee_rate_bps).payout

    def get_payout_for_sell_in_collateral(
        self, state: MarketState, is_yes: bool, shares: int
    ) -> int:
        """Gross collateral released by selling ``shares``, rounded down."""
        delta, before, after, _ = self._sell_delta(state, is_yes, shares)
        self._saturation(before, after)
        return to_collateral_scale(delta, state.collateral_factor)

    def quote_sell(
        self,
        state: MarketState,
        is_yes: bool,
        shares: int,
        fee_rate_bps: Optional[int] = None,
        min_payout: int = 0,
    ) -> SellQuote:
        delta, before, after, model = self._sell_delta(state, is_yes, shares)
        gross = to_collateral_scale(delta, state.collateral_factor)
        if gross > state.total_collateral:
            raise InvalidTradeError(
                f"payout {gross} exceeds pool collateral {state.total_collateral}"
            )
        fees = self.schedule(fee_rate_bps).apply(gross)
        inc_quotes("sell")
        saturated = self._saturation(before, after)

        spot = model.probabilities_from(before)[0 if is_yes else 1]
        impact = 0
        if shares > 0:
            avg = delta * SCALE // shares
            impact = (spot - avg) * SCALE // spot
        SlippageLimits(min_payout=min_payout).check_payout(fees.net)
        return SellQuote(
            is_yes=is_yes,
            shares=shares,
            fees=fees,
            price_impact=impact,
            saturated=saturated,
        )


@lru_cache(maxsize=1)
def default_engine() -> QuoteEngine:
    return QuoteEngine.from_env()


def cost(state: MarketState) -> int:
    return default_engine().cost(state)


def price(state: MarketState) -> MarketPrices:
    return default_engine().price(state)


def quote_buy(
    state: MarketState, is_yes: bool, gross_payment: int, fee_rate_bps: Optional[int] = None
) -> BuyQuote:
    return default_engine().quote_buy(state, is_yes, gross_payment, fee_rate_bps)


def quote_sell(
    state: MarketState, is_yes: bool, shares: int, fee_rate_bps: Optional[int] = None
) -> SellQuote:
    return default_engine().quote_sell(state, is_yes, shares, fee_rate_bps)
