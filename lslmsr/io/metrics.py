"""Metrics instrumentation for the quote engine."""

from __future__ import annotations

from prometheus_client import Counter

quotes_total = Counter("lslmsr_quotes_total", "Quotes computed", ["side"])
saturated_quotes_total = Counter(
    "lslmsr_saturated_quotes_total", "Quotes that hit the exp saturation cap"
)
slippage_rejections_total = Counter(
    "lslmsr_slippage_rejections_total", "Quotes rejected by a slippage bound"
)
search_failures_total = Counter(
    "lslmsr_search_failures_total", "Share searches that failed to converge"
)


def inc_quotes(side: str, n: int = 1) -> None:
    quotes_total.labels(side=side).inc(n)


def inc_saturated(n: int = 1) -> None:
    saturated_quotes_total.inc(n)


def inc_slippage_rejections(n: int = 1) -> None:
    slippage_rejections_total.inc(n)


def inc_search_failures(n: int = 1) -> None:
    search_failures_total.inc(n)
