"""Trading fee schedule and fee accumulators.

All arithmetic is integer. Rounding is floor throughout: the fee is
``gross * rate // 10000`` so the division remainder stays with the trader's
net amount, and the creator/protocol split gives the remainder to the
creator.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from ..core.config import EngineSettings
from ..core.types import FeeBreakdown
from ..core.utils import BPS_DENOMINATOR, bps_of


@dataclass(frozen=True)
class FeeSchedule:
    fee_rate_bps: int
    creator_share_bps: int = 5000

    def __post_init__(self):
        if not 0 <= self.fee_rate_bps <= BPS_DENOMINATOR:
            raise ValueError(f"fee rate must be within [0, 10000] bps, got {self.fee_rate_bps}")
        if not 0 <= self.creator_share_bps <= BPS_DENOMINATOR:
            raise ValueError(
                f"creator share must be within [0, 10000] bps, got {self.creator_share_bps}"
            )

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> FeeSchedule:
        return cls(settings.fee_rate_bps, settings.creator_share_bps)

    def fee_for(self, gross: int) -> int:
        return bps_of(gross, self.fee_rate_bps)

    def split(self, fee: int) -> Tuple[int, int]:
        """Return ``(creator_fee, protocol_fee)``."""
        protocol = bps_of(fee, BPS_DENOMINATOR - self.creator_share_bps)
        return fee - protocol, protocol

    def apply(self, gross: int) -> FeeBreakdown:
        if gross < 0:
            raise ValueError(f"gross amount must be non-negative, got {gross}")
        fee = self.fee_for(gross)
        creator, protocol = self.split(fee)
        return FeeBreakdown(
            gross=gross,
            fee=fee,
            net=gross - fee,
            creator_fee=creator,
            protocol_fee=protocol,
        )


@dataclass(frozen=True)
class FeeLedger:
    """Accumulated creator and protocol fees, in collateral units."""

    creator_fees: int = 0
    protocol_fees: int = 0

    @property
    def total(self) -> int:
        return self.creator_fees + self.protocol_fees

    def record(self, breakdown: FeeBreakdown) -> FeeLedger:
        return FeeLedger(
            creator_fees=self.creator_fees + breakdown.creator_fee,
            protocol_fees=self.protocol_fees + breakdown.protocol_fee,
        )

    def claim_creator(self) -> Tuple[int, FeeLedger]:
        return self.creator_fees, replace(self, creator_fees=0)
