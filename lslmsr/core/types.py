"""Core type definitions for the LS-LMSR engine.

All amounts are plain ``int`` values. Share amounts are fixed-point with
``share_decimals`` fractional digits; collateral amounts use the collateral
asset's own ``collateral_decimals``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

from .errors import InvalidStateError, MarketResolvedError
from .utils import UINT256_MAX, scale_factor

# Fixed-point precision of share amounts (see pricing.fixed_point.SCALE).
FIXED_POINT_DECIMALS = 18


class Resolution(str, Enum):
    ACTIVE = "ACTIVE"
    YES = "YES"
    NO = "NO"
    INVALID = "INVALID"


@dataclass(frozen=True)
class MarketState:
    """Read-only snapshot of a market as held by the settlement layer."""

    yes_shares: int
    no_shares: int
    alpha: int
    min_liquidity: int
    total_collateral: int
    collateral_decimals: int
    share_decimals: int
    initial_yes_shares: int = 0
    initial_no_shares: int = 0
    creator_buffer: int = 0
    resolution: Resolution = Resolution.ACTIVE

    def __post_init__(self):
        for name in (
            "yes_shares",
            "no_shares",
            "alpha",
            "min_liquidity",
            "total_collateral",
            "initial_yes_shares",
            "initial_no_shares",
            "creator_buffer",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidStateError(f"{name} must be an int, got {value!r}")
            if value < 0 or value > UINT256_MAX:
                raise InvalidStateError(f"{name} out of range: {value}")
        if self.share_decimals != FIXED_POINT_DECIMALS:
            raise InvalidStateError(
                f"share decimals must be {FIXED_POINT_DECIMALS}, got {self.share_decimals}"
            )
        if not 0 <= self.collateral_decimals <= self.share_decimals:
            raise InvalidStateError(
                f"collateral decimals out of range: {self.collateral_decimals}"
            )

    @property
    def resolved(self) -> bool:
        return self.resolution != Resolution.ACTIVE

    @property
    def yes_wins(self) -> bool:
        return self.resolution == Resolution.YES

    @property
    def collateral_factor(self) -> int:
        """Multiplier from collateral units to share units."""
        return scale_factor(self.collateral_decimals, self.share_decimals)

    def shares(self, is_yes: bool) -> int:
        return self.yes_shares if is_yes else self.no_shares

    def require_active(self) -> None:
        if self.resolved:
            raise MarketResolvedError(self.resolution.value)

    def with_shares(self, is_yes: bool, delta: int) -> Tuple[int, int]:
        """Share pair after adding ``delta`` (may be negative) to one side."""
        if is_yes:
            return self.yes_shares + delta, self.no_shares
        return self.yes_shares, self.no_shares + delta

    def apply(self, is_yes: bool, share_delta: int, collateral_delta: int) -> MarketState:
        yes, no = self.with_shares(is_yes, share_delta)
        return replace(
            self,
            yes_shares=yes,
            no_shares=no,
            total_collateral=self.total_collateral + collateral_delta,
        )


@dataclass(frozen=True)
class FeeBreakdown:
    gross: int
    fee: int
    net: int
    creator_fee: int
    protocol_fee: int


@dataclass(frozen=True)
class TradeCost:
    """Share-scale payment (buy) or payout (sell) for a trade."""

    amount: int
    saturated: bool = False


@dataclass(frozen=True)
class MarketPrices:
    """Implied probabilities and LS-LMSR marginal prices, all fixed-point."""

    yes: int
    no: int
    yes_price: int
    no_price: int
    saturated: bool = False

    @property
    def spread(self) -> int:
        return self.yes_price + self.no_price - (self.yes + self.no)


@dataclass(frozen=True)
class BuyQuote:
    is_yes: bool
    gross_payment: int
    shares: int
    fees: FeeBreakdown
    cost: int  # collateral units actually charged for ``shares``
    price_impact: int  # fixed-point fraction, (avg - spot) / spot
    saturated: bool = False

    @property
    def fee(self) -> int:
        return self.fees.fee

    @property
    def net_payment(self) -> int:
        return self.fees.net

    @property
    def refund(self) -> int:
        return self.fees.net - self.cost


@dataclass(frozen=True)
class SellQuote:
    is_yes: bool
    shares: int
    fees: FeeBreakdown
    price_impact: int
    saturated: bool = False

    @property
    def gross_payout(self) -> int:
        return self.fees.gross

    @property
    def fee(self) -> int:
        return self.fees.fee

    @property
    def payout(self) -> int:
        return self.fees.net
