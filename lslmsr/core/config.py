"""Engine settings loaded from the environment (``.env`` supported)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .utils import BPS_DENOMINATOR

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def _bool_env(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean flag, got {raw!r}")


@dataclass(frozen=True)
class EngineSettings:
    fee_rate_bps: int = 50  # 0.5%
    creator_share_bps: int = 5000  # 50/50 creator/protocol
    search_max_iterations: int = 256
    search_upper_multiplier: int = 100
    strict_saturation: bool = False

    def __post_init__(self):
        if not 0 <= self.fee_rate_bps <= BPS_DENOMINATOR:
            raise ValueError(f"fee_rate_bps out of range: {self.fee_rate_bps}")
        if not 0 <= self.creator_share_bps <= BPS_DENOMINATOR:
            raise ValueError(f"creator_share_bps out of range: {self.creator_share_bps}")
        if self.search_max_iterations < 1:
            raise ValueError("search_max_iterations must be positive")
        if self.search_upper_multiplier < 1:
            raise ValueError("search_upper_multiplier must be positive")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> EngineSettings:
        load_dotenv(dotenv_path)
        return cls(
            fee_rate_bps=_int_env("LSLMSR_FEE_RATE_BPS", cls.fee_rate_bps),
            creator_share_bps=_int_env("LSLMSR_CREATOR_SHARE_BPS", cls.creator_share_bps),
            search_max_iterations=_int_env(
                "LSLMSR_SEARCH_MAX_ITERATIONS", cls.search_max_iterations
            ),
            search_upper_multiplier=_int_env(
                "LSLMSR_SEARCH_UPPER_MULTIPLIER", cls.search_upper_multiplier
            ),
            strict_saturation=_bool_env("LSLMSR_STRICT_SATURATION", cls.strict_saturation),
        )
