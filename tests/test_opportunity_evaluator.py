import logging
import math
from unittest.mock import AsyncMock

import pytest

from core.errors import RouteError
from models.price import TradingPair
from models.route import Route
from modules.opportunity_evaluator import OpportunityEvaluator, expected_profit
from modules.price_history import PriceHistoryStore

SUI_USDC = TradingPair("SUI", "USDC")
USDC_SUI = TradingPair("USDC", "SUI")
USDT_USDC = TradingPair("USDT", "USDC")

# ------------------------- Fixtures ------------------------- #

@pytest.fixture
def store():
    return PriceHistoryStore(window_ms=300_000)


@pytest.fixture
def route_service():
    service = AsyncMock()
    service.get_routes.return_value = [_route(1.5)]
    return service


@pytest.fixture
def evaluator(store, route_service):
    return OpportunityEvaluator(
        store,
        route_service,
        swap_amount=1_000_000,
        momentum_threshold=0.02,
        min_profit_threshold=0.01,
        max_slippage=0.005,
        clock=lambda: 100_000,
        logger=logging.getLogger("test"),
    )


def _route(profit_pct: float, fees: float = 0.0) -> Route:
    amount = 1_000_000
    return Route(
        inputAmount=amount,
        outputAmount=amount * (1 + profit_pct / 100) + fees,
        totalFees=fees,
        steps=[{"target": "0x1::pool::swap"}],
    )


def _seed(store, symbol, price, now=0):
    store.record(symbol, price, now)

# ------------------------- Tests ------------------------- #

def test_expected_profit():
    route = Route(inputAmount=1000, outputAmount=1030, totalFees=10)
    assert expected_profit(route) == pytest.approx(0.02)


def test_expected_profit_zero_input_is_nan():
    assert math.isnan(expected_profit(Route(inputAmount=0, outputAmount=10)))


@pytest.mark.asyncio
async def test_first_observation_gives_no_signal(evaluator, route_service):
    decision = await evaluator.evaluate([SUI_USDC], {"SUI": 1.0})

    assert decision is None
    route_service.get_routes.assert_not_called()


@pytest.mark.asyncio
async def test_decision_for_profitable_momentum(evaluator, store, route_service):
    _seed(store, "SUI", 1.00)

    decision = await evaluator.evaluate([SUI_USDC], {"SUI": 1.03})

    assert decision is not None
    assert decision.pair == SUI_USDC
    assert decision.momentum == pytest.approx(0.03)
    assert decision.expected_profit == pytest.approx(0.015)
    route_service.get_routes.assert_awaited_once_with("SUI", "USDC", 1_000_000, 0.005)


@pytest.mark.asyncio
async def test_downward_momentum_also_qualifies(evaluator, store):
    _seed(store, "SUI", 1.00)
    decision = await evaluator.evaluate([SUI_USDC], {"SUI": 0.95})

    assert decision is not None
    assert decision.momentum == pytest.approx(-0.05)


@pytest.mark.asyncio
async def test_momentum_equal_to_threshold_is_skipped(evaluator, store, route_service):
    _seed(store, "SUI", 100.0)
    decision = await evaluator.evaluate([SUI_USDC], {"SUI": 102.0})

    assert decision is None
    route_service.get_routes.assert_not_called()


@pytest.mark.asyncio
async def test_first_qualifying_pair_wins_and_stops(evaluator, store, route_service):
    # A = SUI below threshold, B = USDT above and profitable, C after B
    _seed(store, "SUI", 1.00)
    _seed(store, "USDT", 1.00)
    _seed(store, "USDC", 1.00)
    prices = {"SUI": 1.01, "USDT": 1.05, "USDC": 1.10}

    decision = await evaluator.evaluate([SUI_USDC, USDT_USDC, USDC_SUI], prices)

    assert decision.pair == USDT_USDC
    route_service.get_routes.assert_awaited_once()
    assert route_service.get_routes.await_args.args[:2] == ("USDT", "USDC")
    # evaluation stopped before USDC was even recorded
    assert len(store.series("USDC")) == 1


@pytest.mark.asyncio
async def test_unprofitable_route_yields_no_decision(evaluator, store, route_service):
    route_service.get_routes.return_value = [_route(0.5)]
    _seed(store, "SUI", 1.00)

    assert await evaluator.evaluate([SUI_USDC], {"SUI": 1.03}) is None


@pytest.mark.asyncio
async def test_profit_equal_to_threshold_is_not_enough(evaluator, store, route_service):
    route_service.get_routes.return_value = [
        Route(inputAmount=1000, outputAmount=1010, totalFees=0)
    ]
    _seed(store, "SUI", 1.00)

    assert await evaluator.evaluate([SUI_USDC], {"SUI": 1.03}) is None


@pytest.mark.asyncio
async def test_fees_are_deducted(evaluator, store, route_service):
    # 1.5% gross but fees eat 1% of input -> 0.5% net
    route_service.get_routes.return_value = [_route(0.5, fees=10_000)]
    _seed(store, "SUI", 1.00)

    assert await evaluator.evaluate([SUI_USDC], {"SUI": 1.03}) is None


@pytest.mark.asyncio
async def test_only_first_route_is_considered(evaluator, store, route_service):
    route_service.get_routes.return_value = [_route(0.5), _route(5.0)]
    _seed(store, "SUI", 1.00)

    assert await evaluator.evaluate([SUI_USDC], {"SUI": 1.03}) is None


@pytest.mark.asyncio
async def test_empty_routes_skip_to_next_pair(evaluator, store, route_service):
    route_service.get_routes.side_effect = [[], [_route(2.0)]]
    _seed(store, "SUI", 1.00)
    _seed(store, "USDT", 1.00)

    decision = await evaluator.evaluate([SUI_USDC, USDT_USDC], {"SUI": 1.05, "USDT": 1.05})

    assert decision.pair == USDT_USDC
    assert route_service.get_routes.await_count == 2


@pytest.mark.asyncio
async def test_route_error_skips_only_that_pair(evaluator, store, route_service, caplog):
    route_service.get_routes.side_effect = [RouteError("boom"), [_route(2.0)]]
    _seed(store, "SUI", 1.00)
    _seed(store, "USDT", 1.00)

    with caplog.at_level(logging.WARNING):
        decision = await evaluator.evaluate([SUI_USDC, USDT_USDC], {"SUI": 1.05, "USDT": 1.05})

    assert decision.pair == USDT_USDC
    assert "Route request failed" in caplog.text


@pytest.mark.asyncio
async def test_nan_price_is_no_signal(evaluator, store, route_service):
    _seed(store, "SUI", 1.00)

    assert await evaluator.evaluate([SUI_USDC], {"SUI": math.nan}) is None
    route_service.get_routes.assert_not_called()


@pytest.mark.asyncio
async def test_missing_price_skips_pair(evaluator, store, route_service):
    assert await evaluator.evaluate([SUI_USDC], {"USDC": 1.0}) is None
    assert store.series("SUI") == ()


@pytest.mark.asyncio
async def test_shared_symbol_recorded_once_per_cycle(evaluator, store, route_service):
    pairs = [USDC_SUI, TradingPair("USDC", "USDT")]

    await evaluator.evaluate(pairs, {"USDC": 1.0}, now=1_000)

    assert len(store.series("USDC")) == 1


@pytest.mark.asyncio
async def test_explicit_now_overrides_clock(evaluator, store):
    await evaluator.evaluate([SUI_USDC], {"SUI": 1.0}, now=42)
    assert store.series("SUI")[0].observed_at == 42
