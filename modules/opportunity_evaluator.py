"""
opportunity_evaluator.py
------------------------
Scans the configured pairs in declaration order and returns the first one
whose momentum and projected route profit both clear their thresholds.

This is threshold-satisfying, not profit-maximizing: pairs are never
compared against each other, and the first route returned by the routing
service is taken as the best one.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Dict, Iterable, Optional

from core.errors import RouteError
from models.price import TradingPair
from models.route import OpportunityDecision, Route
from modules.base import RouteService
from modules.momentum import MomentumCalculator
from modules.price_history import PriceHistoryStore

DEFAULT_MOMENTUM_THRESHOLD = 0.02
DEFAULT_MIN_PROFIT_THRESHOLD = 0.01
DEFAULT_MAX_SLIPPAGE = 0.005
DEFAULT_SWAP_AMOUNT = 1_000_000


def now_ms() -> int:
    return int(time.time() * 1000)


def expected_profit(route: Route) -> float:
    """Net profit ratio of a route: (output - input - fees) / input."""
    if route.input_amount == 0:
        return math.nan
    return (route.output_amount - route.input_amount - route.total_fees) / route.input_amount


class OpportunityEvaluator:
    def __init__(
        self,
        store: PriceHistoryStore,
        route_service: RouteService,
        *,
        calculator: Optional[MomentumCalculator] = None,
        swap_amount: int = DEFAULT_SWAP_AMOUNT,
        momentum_threshold: float = DEFAULT_MOMENTUM_THRESHOLD,
        min_profit_threshold: float = DEFAULT_MIN_PROFIT_THRESHOLD,
        max_slippage: float = DEFAULT_MAX_SLIPPAGE,
        clock: Callable[[], int] = now_ms,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.store = store
        self.route_service = route_service
        self.calculator = calculator or MomentumCalculator()
        self.swap_amount = swap_amount
        self.momentum_threshold = momentum_threshold
        self.min_profit_threshold = min_profit_threshold
        self.max_slippage = max_slippage
        self.clock = clock

    # -------------------------------------------------------------------- #
    async def evaluate(
        self,
        pairs: Iterable[TradingPair],
        prices: Dict[str, float],
        now: Optional[int] = None,
    ) -> Optional[OpportunityDecision]:
        """First qualifying pair wins; evaluation stops as soon as one is found."""
        now = self.clock() if now is None else now
        # a symbol shared by several pairs is recorded once per cycle
        momentum_by_symbol: Dict[str, float] = {}

        for pair in pairs:
            symbol = pair.token_in
            if symbol not in momentum_by_symbol:
                if symbol not in prices:
                    self.logger.debug("No price for %s this cycle, skipping %s", symbol, pair)
                    continue
                series = self.store.record(symbol, prices[symbol], now)
                momentum = self.calculator.compute(series)
                momentum_by_symbol[symbol] = momentum
                self.logger.info("%s momentum: %.2f%%", symbol, momentum * 100)
            momentum = momentum_by_symbol[symbol]

            # written as "not >" so that NaN never counts as a signal
            if not abs(momentum) > self.momentum_threshold:
                continue

            self.logger.info("Strong momentum detected for %s: %.2f%%", symbol, momentum * 100)
            decision = await self._check_pair(pair, momentum)
            if decision is not None:
                return decision

        return None

    async def _check_pair(
        self, pair: TradingPair, momentum: float
    ) -> Optional[OpportunityDecision]:
        try:
            routes = await self.route_service.get_routes(
                pair.token_in, pair.token_out, self.swap_amount, self.max_slippage
            )
        except RouteError as exc:
            self.logger.warning("Route request failed for %s: %s", pair, exc)
            return None

        if not routes:
            self.logger.info("No routes returned for %s", pair)
            return None

        best = routes[0]
        profit = expected_profit(best)
        if not profit > self.min_profit_threshold:
            self.logger.info(
                "%s route below profit threshold: %.2f%% <= %.2f%%",
                pair, profit * 100, self.min_profit_threshold * 100,
            )
            return None

        self.logger.info("Profitable opportunity found on %s: %.2f%% profit", pair, profit * 100)
        return OpportunityDecision(
            pair=pair, momentum=momentum, route=best, expected_profit=profit
        )
