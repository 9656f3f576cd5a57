"""
momentum.py
-----------
Endpoint-delta momentum over a symbol's retained price window.

momentum = (latest - earliest) / earliest

Positive is upward, negative downward. Fewer than two samples is the
"insufficient data" state and reads as exactly 0.
"""

from __future__ import annotations

import math

from models.price import MomentumReading, PriceSeries


class MomentumCalculator:
    """Stateless; the window lives in PriceHistoryStore."""

    def compute(self, series: PriceSeries) -> float:
        if len(series) < 2:
            return 0.0

        earliest = series[0].price
        latest = series[-1].price
        if earliest == 0:
            return math.nan
        return (latest - earliest) / earliest

    def reading(self, symbol: str, series: PriceSeries) -> MomentumReading:
        return MomentumReading(
            symbol=symbol,
            ratio=self.compute(series),
            sample_count=len(series),
        )
