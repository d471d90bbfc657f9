"""LS-LMSR (liquidity-sensitive LMSR) pricing for a binary market.

Cost function: C(q) = b * ln(exp(q_yes / b) + exp(q_no / b)) with
b = max(alpha * (q_yes + q_no), min_liquidity).

Fixed-point ``exp`` cannot represent exp(q / b) for realistic share counts,
so the larger side is factored out (log-sum-exp):

    C = max(q) + b * ln(1 + exp(-gap / b))

The larger side's exponential is exactly SCALE and the smaller side is the
reciprocal of exp(gap / b), so ``exp`` only ever sees a non-negative
argument and the denominator of the softmax is at least SCALE.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .base import PricingModel
from .fixed_point import SCALE, LN2, exp, exp_saturates, ln
from ..core.types import MarketState
from ..core.utils import checked

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostEvaluation:
    """One anchored evaluation shared by the cost and the prices."""

    value: int
    liquidity: int
    exp_yes: int
    exp_no: int
    exp_gap: int  # exp(gap / b), SCALE when the sides are level
    gap_ratio: int  # gap / b, fixed-point, before clamping
    saturated: bool

    @property
    def yes_leads(self) -> bool:
        return self.exp_yes >= self.exp_no


class LSLMSR(PricingModel):
    def __init__(self, alpha: int, min_liquidity: int):
        if alpha < 0 or min_liquidity < 0:
            raise ValueError("alpha and min_liquidity must be non-negative")
        self.alpha = alpha
        self.min_liquidity = min_liquidity

    @classmethod
    def from_state(cls, state: MarketState) -> LSLMSR:
        return cls(state.alpha, state.min_liquidity)

    def liquidity(self, yes_shares: int, no_shares: int) -> int:
        b = self.alpha * (yes_shares + no_shares) // SCALE
        if b < self.min_liquidity:
            b = self.min_liquidity
        if b == 0:
            b = SCALE
        return b

    def evaluate(self, yes_shares: int, no_shares: int) -> CostEvaluation:
        if yes_shares < 0 or no_shares < 0:
            raise ValueError(f"negative share count: yes={yes_shares} no={no_shares}")
        b = self.liquidity(yes_shares, no_shares)
        gap = abs(yes_shares - no_shares)
        if gap == 0:
            ratio = 0
            exp_gap = SCALE
            exp_small = SCALE
        else:
            ratio = gap * SCALE // b
            exp_gap = exp(ratio)
            exp_small = SCALE * SCALE // exp_gap
        if yes_shares >= no_shares:
            exp_yes, exp_no = SCALE, exp_small
        else:
            exp_yes, exp_no = exp_small, SCALE

        if yes_shares + no_shares == 0:
            value = 0
        else:
            max_shares = max(yes_shares, no_shares)
            value = checked(max_shares + b * ln(exp_yes + exp_no) // SCALE)

        saturated = exp_saturates(ratio)
        if saturated:
            logger.debug(
                "exp saturated: gap/b=%d cap reached (yes=%d no=%d b=%d)",
                ratio,
                yes_shares,
                no_shares,
                b,
            )
        return CostEvaluation(value, b, exp_yes, exp_no, exp_gap, ratio, saturated)

    def cost(self, yes_shares: int, no_shares: int) -> int:
        return self.evaluate(yes_shares, no_shares).value

    def probabilities(self, yes_shares: int, no_shares: int) -> Tuple[int, int]:
        return self.probabilities_from(self.evaluate(yes_shares, no_shares))

    @staticmethod
    def probabilities_from(ev: CostEvaluation) -> Tuple[int, int]:
        denom = ev.exp_yes + ev.exp_no
        return ev.exp_yes * SCALE // denom, ev.exp_no * SCALE // denom

    def entropy_term(self, ev: CostEvaluation) -> int:
        """alpha * H(s), the liquidity-sensitivity part of the marginal price.

        H(s) = ln(1 + exp(d)) - s_max * d for d = gap / b (Othman et al.,
        Theorem 4.3). At d = 0 this is ln 2.
        """
        if ev.gap_ratio == 0:
            return self.alpha * LN2 // SCALE
        p_yes, p_no = self.probabilities_from(ev)
        s_max = p_yes if ev.yes_leads else p_no
        lse = ln(ev.exp_gap + SCALE)
        weighted = s_max * ev.gap_ratio // SCALE
        entropy = lse - weighted if lse > weighted else 0
        return self.alpha * entropy // SCALE

    def prices(self, yes_shares: int, no_shares: int) -> Tuple[int, int]:
        """Marginal LS-LMSR prices; their sum exceeds SCALE by 2 * alpha * H(s)."""
        ev = self.evaluate(yes_shares, no_shares)
        p_yes, p_no = self.probabilities_from(ev)
        spread = self.entropy_term(ev)
        return p_yes + spread, p_no + spread
