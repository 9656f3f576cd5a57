"""
price_history.py
----------------
Per-symbol rolling buffer of price samples used for momentum.

In-memory only: a restart cold-starts every momentum signal.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List

from models.price import PriceSample, PriceSeries

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MS = 300_000


class PriceHistoryStore:
    """Sliding-window sample buffers, one per symbol, created lazily."""

    def __init__(self, window_ms: int = DEFAULT_WINDOW_MS) -> None:
        self.window_ms = window_ms
        self._series: Dict[str, Deque[PriceSample]] = {}

    def record(self, symbol: str, price: float, now: int) -> PriceSeries:
        """Append ``price`` observed at ``now`` (epoch-ms) and evict
        everything at or before ``now - window``. Returns what is retained.

        NaN prices are stored as-is; filtering them is the caller's job.
        """
        buf = self._series.setdefault(symbol, deque())
        sample = PriceSample(price=price, observed_at=now)
        if buf and buf[-1].observed_at > now:
            # wall clock stepped back; keep the buffer ordered by time
            logger.warning("%s sample at %d is older than the last one (%d)",
                           symbol, now, buf[-1].observed_at)
            ordered = sorted([*buf, sample], key=lambda s: s.observed_at)
            buf.clear()
            buf.extend(ordered)
        else:
            buf.append(sample)

        cutoff = now - self.window_ms
        if any(s.observed_at <= cutoff for s in buf):
            kept = [s for s in buf if s.observed_at > cutoff]
            buf.clear()
            buf.extend(kept)

        logger.debug("%s history: %d samples in window", symbol, len(buf))
        return tuple(buf)

    def series(self, symbol: str) -> PriceSeries:
        return tuple(self._series.get(symbol, ()))

    def symbols(self) -> List[str]:
        return list(self._series)

    def clear(self) -> None:
        self._series.clear()
