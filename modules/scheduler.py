"""
scheduler.py
------------
Drives the trading cycle: fetch prices -> evaluate -> (maybe) execute.

One cycle runs immediately on start, then one every ``interval_ms``.
Cycle bodies are serialized, and any failure inside a cycle is logged and
reported as a CycleResult; it never stops the loop.
"""

from __future__ import annotations

import asyncio
import logging
import statistics
import time
from collections import deque
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from core.errors import BusyError, ExecutionError, FeedError
from models.price import TradingPair
from models.trade_outcome import CycleResult, CycleStatus
from modules.base import PriceFeed
from modules.execution_gate import ExecutionGate
from modules.opportunity_evaluator import OpportunityEvaluator, now_ms

DEFAULT_INTERVAL_MS = 30_000
# cycle timings kept for the rolling average in log_metrics
LATENCY_SAMPLES = 500


class SchedulerState(Enum):
    IDLE = "IDLE"
    FETCHING = "FETCHING"
    EVALUATING = "EVALUATING"
    EXECUTING = "EXECUTING"


class Scheduler:
    """Sequential cycle driver. ``run_cycle()`` can be called directly."""

    def __init__(
        self,
        price_feed: PriceFeed,
        evaluator: OpportunityEvaluator,
        gate: ExecutionGate,
        pairs: Sequence[TradingPair],
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Callable[[], int] = now_ms,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.price_feed = price_feed
        self.evaluator = evaluator
        self.gate = gate
        self.pairs: List[TradingPair] = list(pairs)
        self.interval_ms = interval_ms
        self.clock = clock

        self._state = SchedulerState.IDLE
        self._cycle_lock = asyncio.Lock()
        self._stop = asyncio.Event()
        self.last_result: Optional[CycleResult] = None

        # metrics
        self.metrics: Dict[str, object] = {
            "cycles": 0,
            "errors": 0,
            "executions": 0,
            "busy_drops": 0,
            "latencies": deque(maxlen=LATENCY_SAMPLES),
        }

    @property
    def state(self) -> SchedulerState:
        return self._state

    # -------------------------------------------------------------------- #
    async def run_cycle(self) -> CycleResult:
        """Run one full cycle and return its outcome. Never raises."""
        async with self._cycle_lock:
            t0 = time.monotonic()
            result = CycleResult(status=CycleStatus.ERROR, started_at=self.clock())
            try:
                await self._cycle_body(result)
            except Exception as exc:
                self.metrics["errors"] += 1
                result.status = CycleStatus.ERROR
                result.error = exc
                self.logger.exception("Error in trading cycle (continuing): %s", exc)
            finally:
                self._state = SchedulerState.IDLE
                result.finished_at = self.clock()
                self.metrics["cycles"] += 1
                self.metrics["latencies"].append(time.monotonic() - t0)
                self.last_result = result
            return result

    async def _cycle_body(self, result: CycleResult) -> None:
        self._state = SchedulerState.FETCHING
        try:
            prices = await self.price_feed.get_prices()
        except FeedError as exc:
            self.logger.warning("Failed to fetch token prices: %s", exc)
            result.status = CycleStatus.NO_PRICES
            result.error = exc
            return

        self._state = SchedulerState.EVALUATING
        decision = await self.evaluator.evaluate(self.pairs, prices)
        if decision is None:
            result.status = CycleStatus.NO_OPPORTUNITY
            return
        result.decision = decision

        self._state = SchedulerState.EXECUTING
        try:
            result.receipt = await self.gate.submit(decision)
        except BusyError as exc:
            self.metrics["busy_drops"] += 1
            result.status = CycleStatus.BUSY
            result.error = exc
            return
        except ExecutionError as exc:
            self.metrics["errors"] += 1
            result.status = CycleStatus.EXECUTION_FAILED
            result.error = exc
            return

        self.metrics["executions"] += 1
        result.status = CycleStatus.EXECUTED

    # -------------------------------------------------------------------- #
    def log_metrics(self) -> None:
        latencies = self.metrics["latencies"]
        avg = statistics.mean(latencies) if latencies else 0
        self.logger.info(
            "📊 Cycles: %s | Executions: %s | Busy drops: %s | Errors: %s | Avg cycle: %.3fs",
            self.metrics["cycles"],
            self.metrics["executions"],
            self.metrics["busy_drops"],
            self.metrics["errors"],
            avg,
        )

    def stop(self) -> None:
        self._stop.set()

    async def run(self, max_cycles: Optional[int] = None) -> None:
        """Immediate cycle, then one per interval until stopped or cancelled."""
        self.logger.info(
            "✅ Scheduler started – %d pairs every %.1fs",
            len(self.pairs),
            self.interval_ms / 1000,
        )
        done = 0
        try:
            while not self._stop.is_set():
                started = time.monotonic()
                await self.run_cycle()
                done += 1
                if max_cycles is not None and done >= max_cycles:
                    break
                if done % 10 == 0:
                    self.log_metrics()

                delay = max(0.0, self.interval_ms / 1000 - (time.monotonic() - started))
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
        except asyncio.CancelledError:
            self.logger.info("Trading loop cancelled – shutting down")
            raise
        finally:
            self.log_metrics()
