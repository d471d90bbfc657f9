"""Scenario generators."""

from __future__ import annotations

import random
from decimal import Decimal
from typing import Iterable, List, Union

from .engine import ScenarioStep, TradeAction
from ..core.types import FIXED_POINT_DECIMALS, MarketState
from ..pricing.fixed_point import to_fixed

Number = Union[int, float, str]


def seed_market(
    initial_shares: Number = 100,
    alpha: Number = "0.03",
    min_liquidity: Number = 1,
    creator_buffer: Number = 10,
    collateral_decimals: int = 6,
) -> MarketState:
    """Fresh 50/50 market funded only by the creator's buffer."""
    seed = to_fixed(initial_shares)
    buffer = int(Decimal(str(creator_buffer)) * 10**collateral_decimals)
    return MarketState(
        yes_shares=seed,
        no_shares=seed,
        alpha=to_fixed(alpha),
        min_liquidity=to_fixed(min_liquidity),
        total_collateral=buffer,
        collateral_decimals=collateral_decimals,
        share_decimals=FIXED_POINT_DECIMALS,
        initial_yes_shares=seed,
        initial_no_shares=seed,
        creator_buffer=buffer,
    )


def imbalanced_stress() -> List[ScenarioStep]:
    """Five traders buy 100 YES shares each, one buys 10 NO."""
    steps = [
        ScenarioStep(name, TradeAction.BUY_SHARES, True, to_fixed(100))
        for name in ("alice", "bob", "carol", "dave", "eve")
    ]
    steps.append(ScenarioStep("frank", TradeAction.BUY_SHARES, False, to_fixed(10)))
    return steps


def random_flow(
    steps: int,
    max_payment: int,
    min_payment: int | None = None,
    traders: int = 3,
    sell_prob: float = 0.2,
    seed: int | None = None,
) -> Iterable[ScenarioStep]:
    """Random buys of ``min_payment..max_payment`` collateral, with occasional full exits."""
    lo = max_payment // 2 if min_payment is None else min_payment
    rng = random.Random(seed)
    names = [f"trader{i}" for i in range(traders)]
    for _ in range(steps):
        trader = rng.choice(names)
        is_yes = rng.random() < 0.5
        if rng.random() < sell_prob:
            yield ScenarioStep(trader, TradeAction.SELL, is_yes)
        else:
            yield ScenarioStep(trader, TradeAction.BUY, is_yes, rng.randint(lo, max_payment))
