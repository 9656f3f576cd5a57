# --------------------------------------------------------------------
# models/trade_outcome.py
# What a swap submission and a whole trading cycle end with. Shared by the
# trader, the execution gate and the scheduler.
# --------------------------------------------------------------------
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from models.route import OpportunityDecision


@dataclass(frozen=True)
class TxReceipt:
    digest: str
    status: str = "success"
    raw: Dict[str, Any] = field(default_factory=dict)
    simulated: bool = False


class CycleStatus(Enum):
    NO_PRICES = "NO_PRICES"
    NO_OPPORTUNITY = "NO_OPPORTUNITY"
    EXECUTED = "EXECUTED"
    BUSY = "BUSY"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    ERROR = "ERROR"


@dataclass
class CycleResult:
    status: CycleStatus
    started_at: int  # epoch-ms
    finished_at: int = 0
    decision: Optional[OpportunityDecision] = None
    receipt: Optional[TxReceipt] = None
    error: Optional[BaseException] = None

    @property
    def executed(self) -> bool:
        return self.status is CycleStatus.EXECUTED
