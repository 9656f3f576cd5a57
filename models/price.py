# --------------------------------------------------------------------
# models/price.py
# Price samples, pairs and momentum readings. Plain dataclasses shared by
# the history store, the momentum calculator and the evaluator.
# --------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class PriceSample:
    price: float
    observed_at: int  # epoch-ms


# oldest first
PriceSeries = Tuple[PriceSample, ...]


@dataclass(frozen=True, slots=True)
class TradingPair:
    token_in: str
    token_out: str

    @classmethod
    def parse(cls, raw: str) -> "TradingPair":
        """Build a pair from ``"SUI:USDC"`` (``/`` and ``-`` also accepted)."""
        for sep in (":", "/", "-"):
            if sep in raw:
                token_in, token_out = (p.strip() for p in raw.split(sep, 1))
                break
        else:
            raise ValueError(f"Trading pair '{raw}' has no separator")
        if not token_in or not token_out:
            raise ValueError(f"Trading pair '{raw}' is missing a token")
        return cls(token_in=token_in.upper(), token_out=token_out.upper())

    def __str__(self) -> str:
        return f"{self.token_in}->{self.token_out}"


@dataclass(frozen=True, slots=True)
class MomentumReading:
    symbol: str
    ratio: float
    sample_count: int

    @property
    def pct(self) -> float:
        return self.ratio * 100
