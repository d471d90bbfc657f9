"""Slippage bounds checked when a quote is turned into a trade."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.errors import SlippageExceededError
from ..io.metrics import inc_slippage_rejections


@dataclass(frozen=True)
class SlippageLimits:
    min_shares: int = 0
    min_payout: int = 0

    def within_shares(self, shares: int) -> bool:
        return shares >= self.min_shares

    def within_payout(self, payout: int) -> bool:
        return payout >= self.min_payout

    def check_shares(self, shares: int) -> None:
        if not self.within_shares(shares):
            inc_slippage_rejections()
            raise SlippageExceededError(self.min_shares, shares, "shares")

    def check_payout(self, payout: int) -> None:
        if not self.within_payout(payout):
            inc_slippage_rejections()
            raise SlippageExceededError(self.min_payout, payout, "payout")
