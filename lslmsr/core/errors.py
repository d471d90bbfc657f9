"""Engine error codes and exceptions.

Error code ranges:
  1xxx: Market state
  2xxx: Fixed-point arithmetic
  3xxx: Trading
  4xxx: Search
"""

from __future__ import annotations

from typing import Optional


class EngineError(Exception):
    """Base engine error."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


# --- 1xxx: Market state ---


class InvalidStateError(EngineError):
    def __init__(self, detail: str, code: int = 1001) -> None:
        super().__init__(code, f"Invalid market state: {detail}")


class MarketResolvedError(InvalidStateError):
    def __init__(self, resolution: str) -> None:
        super().__init__(f"market already resolved ({resolution})", code=1002)
        self.resolution = resolution


# --- 2xxx: Arithmetic ---


class ArithmeticSaturationError(EngineError):
    def __init__(self, argument: int, cap: int) -> None:
        super().__init__(
            2001, f"exp argument {argument} exceeds the saturation cap {cap}"
        )
        self.argument = argument
        self.cap = cap


class ArithmeticOverflowError(EngineError):
    def __init__(self, value: int) -> None:
        super().__init__(2002, f"Value outside the uint256 domain: {value}")
        self.value = value


# --- 3xxx: Trading ---


class SlippageExceededError(EngineError):
    def __init__(self, expected: int, actual: int, what: str = "shares") -> None:
        super().__init__(
            3001, f"Slippage exceeded: minimum {what} {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class InvalidTradeError(EngineError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Invalid trade: {detail}")


class InsolventMarketError(EngineError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            3003,
            f"Insolvent market: required buffer {required}, creator buffer {available}",
        )
        self.required = required
        self.available = available


# --- 4xxx: Search ---


class NonConvergenceError(EngineError):
    def __init__(
        self, iterations: int, low: int, high: int, detail: Optional[str] = None
    ) -> None:
        msg = f"Binary search did not converge after {iterations} iterations ({low}..{high})"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(4001, msg)
        self.iterations = iterations
        self.low = low
        self.high = high
