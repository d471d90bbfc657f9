"""Trade application and scenario runner.

The pricing engine never mutates a market; this module is the explicit
"apply trade" step used for simulations and risk analysis. Each trade is
re-quoted against the state it is applied to, so slippage bounds are always
checked against the current snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..core.errors import InvalidTradeError
from ..core.types import FeeBreakdown, MarketState, Resolution
from ..pricing.quotes import QuoteEngine
from ..risk.fees import FeeLedger
from ..risk.solvency import redemption_payout, resolve

logger = logging.getLogger(__name__)


class TradeAction(str, Enum):
    BUY = "BUY"  # spend a collateral amount
    BUY_SHARES = "BUY_SHARES"  # buy an exact share amount, fee carved from the cost
    SELL = "SELL"


@dataclass(frozen=True)
class ScenarioStep:
    trader: str
    action: TradeAction
    is_yes: bool
    amount: Optional[int] = None  # collateral for BUY, shares otherwise; None sells everything
    min_out: int = 0


@dataclass(frozen=True)
class TradeResult:
    state: MarketState
    trader: str
    action: TradeAction
    is_yes: bool
    shares: int
    collateral_delta: int  # signed change of the pool's collateral
    fees: FeeBreakdown


@dataclass
class Holdings:
    balances: Dict[str, Dict[bool, int]] = field(default_factory=dict)

    def update(self, trader: str, is_yes: bool, delta: int):
        book = self.balances.setdefault(trader, {True: 0, False: 0})
        book[is_yes] += delta

    def balance(self, trader: str, is_yes: bool) -> int:
        return self.balances.get(trader, {}).get(is_yes, 0)


@dataclass
class SimulationResult:
    state: MarketState
    ledger: FeeLedger
    holdings: Holdings
    trades: List[TradeResult]


def apply_buy(
    state: MarketState,
    is_yes: bool,
    gross_payment: int,
    engine: QuoteEngine,
    min_shares: int = 0,
    trader: str = "",
) -> TradeResult:
    quote = engine.quote_buy(state, is_yes, gross_payment, min_shares=min_shares)
    return TradeResult(
        state=state.apply(is_yes, quote.shares, quote.cost),
        trader=trader,
        action=TradeAction.BUY,
        is_yes=is_yes,
        shares=quote.shares,
        collateral_delta=quote.cost,
        fees=quote.fees,
    )


def apply_buy_shares(
    state: MarketState,
    is_yes: bool,
    shares: int,
    engine: QuoteEngine,
    trader: str = "",
) -> TradeResult:
    """Buy an exact share amount paying the cost-function delta.

    The fee is taken out of that payment, so the pool receives
    ``cost - fee``: less than the cost delta. Heavily one-sided flow of
    these trades is how a market drifts into a redemption shortfall.
    """
    cost = engine.get_cost_in_collateral(state, is_yes, shares)
    fees = engine.schedule().apply(cost)
    return TradeResult(
        state=state.apply(is_yes, shares, fees.net),
        trader=trader,
        action=TradeAction.BUY_SHARES,
        is_yes=is_yes,
        shares=shares,
        collateral_delta=fees.net,
        fees=fees,
    )


def apply_sell(
    state: MarketState,
    is_yes: bool,
    shares: int,
    engine: QuoteEngine,
    min_payout: int = 0,
    trader: str = "",
) -> TradeResult:
    quote = engine.quote_sell(state, is_yes, shares, min_payout=min_payout)
    return TradeResult(
        state=state.apply(is_yes, -shares, -quote.gross_payout),
        trader=trader,
        action=TradeAction.SELL,
        is_yes=is_yes,
        shares=shares,
        collateral_delta=-quote.gross_payout,
        fees=quote.fees,
    )


def _apply_step(
    state: MarketState, step: ScenarioStep, engine: QuoteEngine, holdings: Holdings
) -> Optional[TradeResult]:
    if step.action == TradeAction.BUY:
        if step.amount is None:
            raise InvalidTradeError("BUY steps need a collateral amount")
        return apply_buy(state, step.is_yes, step.amount, engine, step.min_out, step.trader)
    if step.action == TradeAction.BUY_SHARES:
        if step.amount is None:
            raise InvalidTradeError("BUY_SHARES steps need a share amount")
        return apply_buy_shares(state, step.is_yes, step.amount, engine, step.trader)

    held = holdings.balance(step.trader, step.is_yes)
    shares = held if step.amount is None else step.amount
    if shares > held:
        raise InvalidTradeError(f"{step.trader} holds {held} shares, cannot sell {shares}")
    if shares == 0:
        return None
    return apply_sell(state, step.is_yes, shares, engine, step.min_out, step.trader)


def run_scenario(
    state: MarketState, scenario: Iterable[ScenarioStep], engine: QuoteEngine
) -> SimulationResult:
    ledger = FeeLedger()
    holdings = Holdings()
    trades: List[TradeResult] = []
    for step in scenario:
        result = _apply_step(state, step, engine, holdings)
        if result is None:
            continue
        signed = result.shares if result.action != TradeAction.SELL else -result.shares
        holdings.update(step.trader, step.is_yes, signed)
        ledger = ledger.record(result.fees)
        state = result.state
        trades.append(result)
        logger.debug(
            "%s %s %s %d shares, collateral %+d",
            step.trader,
            step.action.value,
            "YES" if step.is_yes else "NO",
            result.shares,
            result.collateral_delta,
        )
    return SimulationResult(state=state, ledger=ledger, holdings=holdings, trades=trades)


def settle(result: SimulationResult, outcome: Resolution) -> Dict[str, int]:
    """Resolve the simulated market and compute every trader's redemption."""
    final = resolve(result.state, outcome)
    return {
        trader: redemption_payout(final, book[True], book[False])
        for trader, book in result.holdings.balances.items()
    }
