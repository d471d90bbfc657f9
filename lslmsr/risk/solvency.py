"""Solvency model and redemption math.

Winning shares redeem for one collateral unit each. The pool holds the
creator's buffer plus whatever trading collected, so the buffer needed to
cover the worst resolution is

    required = max(yes_minted, no_minted) - (total_collateral - creator_buffer)

where minted counts exclude the initial seed shares. All results are in
collateral units.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Tuple

from ..core.errors import InsolventMarketError, InvalidStateError, InvalidTradeError
from ..core.types import MarketState, Resolution
from ..core.utils import to_collateral_scale

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolvencyReport:
    required_buffer: int
    yes_shortfall: int
    no_shortfall: int
    creator_buffer: int

    @property
    def headroom(self) -> int:
        return self.creator_buffer - self.required_buffer

    @property
    def solvent(self) -> bool:
        return self.headroom >= 0


def minted(state: MarketState) -> Tuple[int, int]:
    """Shares minted to traders on each side, excluding the seed (share scale)."""
    return (
        max(state.yes_shares - state.initial_yes_shares, 0),
        max(state.no_shares - state.initial_no_shares, 0),
    )


def redemption_needed(state: MarketState, yes_wins: bool) -> int:
    yes_minted, no_minted = minted(state)
    winning = yes_minted if yes_wins else no_minted
    return to_collateral_scale(winning, state.collateral_factor, round_up=True)


def shortfall(state: MarketState, yes_wins: bool) -> int:
    """Collateral missing to redeem every winning share; negative is a surplus."""
    return redemption_needed(state, yes_wins) - state.total_collateral


def required_buffer(state: MarketState) -> int:
    worst = max(redemption_needed(state, True), redemption_needed(state, False))
    from_trades = state.total_collateral - state.creator_buffer
    return worst - from_trades


def check_solvency(state: MarketState) -> SolvencyReport:
    report = SolvencyReport(
        required_buffer=required_buffer(state),
        yes_shortfall=shortfall(state, True),
        no_shortfall=shortfall(state, False),
        creator_buffer=state.creator_buffer,
    )
    if not report.solvent:
        logger.warning(
            "Market under-collateralized: required buffer %d > creator buffer %d "
            "(YES shortfall %d, NO shortfall %d)",
            report.required_buffer,
            report.creator_buffer,
            report.yes_shortfall,
            report.no_shortfall,
        )
    return report


def assert_solvent(state: MarketState) -> SolvencyReport:
    report = check_solvency(state)
    if not report.solvent:
        raise InsolventMarketError(report.required_buffer, report.creator_buffer)
    return report


def resolve(state: MarketState, outcome: Resolution) -> MarketState:
    """Move an active market to its terminal resolution."""
    if outcome == Resolution.ACTIVE:
        raise InvalidStateError("cannot resolve a market to ACTIVE")
    state.require_active()
    logger.info("Market resolved: %s", outcome.value)
    return replace(state, resolution=outcome)


def redemption_payout(state: MarketState, yes_balance: int, no_balance: int) -> int:
    """Collateral paid to a holder of ``yes_balance``/``no_balance`` shares.

    Winners get one unit per share and losers nothing; an INVALID market pays
    half a unit per share on both sides. When the pool cannot cover every
    outstanding winning share, each holder gets a pro-rata slice.
    """
    if not state.resolved:
        raise InvalidStateError("redemption is only valid after resolution")
    if yes_balance < 0 or no_balance < 0:
        raise InvalidTradeError("balances must be non-negative")
    yes_minted, no_minted = minted(state)
    if state.resolution == Resolution.INVALID:
        shares = (yes_balance + no_balance) // 2
        outstanding = (yes_minted + no_minted) // 2
    elif state.yes_wins:
        shares, outstanding = yes_balance, yes_minted
    else:
        shares, outstanding = no_balance, no_minted

    factor = state.collateral_factor
    payout = to_collateral_scale(shares, factor)
    needed = to_collateral_scale(outstanding, factor, round_up=True)
    if needed > state.total_collateral:
        return payout * state.total_collateral // needed
    return payout
