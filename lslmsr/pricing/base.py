"""Pricing model abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple


class PricingModel(ABC):
    @abstractmethod
    def cost(self, yes_shares: int, no_shares: int) -> int:
        """Return the cost-function value for the given outstanding shares."""
        ...

    @abstractmethod
    def probabilities(self, yes_shares: int, no_shares: int) -> Tuple[int, int]:
        """Return fixed-point implied probabilities for YES and NO."""
        ...
