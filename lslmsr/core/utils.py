"""Small integer utilities shared by the pricing and risk modules."""

from __future__ import annotations

from .errors import ArithmeticOverflowError

UINT256_MAX = 2**256 - 1
BPS_DENOMINATOR = 10_000


def checked(value: int) -> int:
    """Return ``value`` if it fits an unsigned 256-bit word, else raise."""
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflowError(value)
    return value


def ceil_div(n: int, d: int) -> int:
    """Integer ceiling division for non-negative ``n`` and positive ``d``."""
    return -(-n // d)


def scale_factor(collateral_decimals: int, share_decimals: int) -> int:
    """Multiplier taking a collateral amount to share scale.

    Collateral with more decimals than shares is not supported by the
    contract, so a negative exponent is rejected.
    """
    if collateral_decimals < 0 or share_decimals < collateral_decimals:
        raise ValueError(
            f"collateral decimals {collateral_decimals} must be within [0, {share_decimals}]"
        )
    return 10 ** (share_decimals - collateral_decimals)


def to_share_scale(amount: int, factor: int) -> int:
    return checked(amount * factor)


def to_collateral_scale(amount: int, factor: int, round_up: bool = False) -> int:
    """Convert a share-scale amount to collateral units.

    Floors by default; ``round_up`` is used when the pool is the one being paid.
    """
    if round_up:
        return ceil_div(amount, factor)
    return amount // factor


def bps_of(amount: int, bps: int) -> int:
    """Floor of ``amount * bps / 10000``."""
    return amount * bps // BPS_DENOMINATOR
