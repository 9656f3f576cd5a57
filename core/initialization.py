"""
core/initialization.py
----------------------
Loads configuration from .env, parses trading parameters and pairs, and
wires all runtime components with simple dependency-injection (DI) overrides.
"""

from __future__ import annotations

import logging
import math
import os
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

from models.price import TradingPair
from modules.aggregator_client import DEFAULT_API_BASE, AggregatorClient
from modules.execution_gate import ExecutionGate
from modules.momentum import MomentumCalculator
from modules.opportunity_evaluator import (
    DEFAULT_MAX_SLIPPAGE,
    DEFAULT_MIN_PROFIT_THRESHOLD,
    DEFAULT_MOMENTUM_THRESHOLD,
    DEFAULT_SWAP_AMOUNT,
    OpportunityEvaluator,
    now_ms,
)
from modules.price_history import DEFAULT_WINDOW_MS, PriceHistoryStore
from modules.scheduler import DEFAULT_INTERVAL_MS, Scheduler
from modules.trader import DEFAULT_RPC_URL, DryRunTrader, SuiTrader, load_keypair
from utils.config_manager import DEFAULT_PAIRS, ConfigManager
from utils.config_validator import validate_config

log = logging.getLogger(__name__)

# env name -> (type, default)
_NUMERIC_SETTINGS: Dict[str, tuple] = {
    "SWAP_AMOUNT": (int, DEFAULT_SWAP_AMOUNT),
    "MOMENTUM_THRESHOLD": (float, DEFAULT_MOMENTUM_THRESHOLD),
    "PRICE_CHANGE_WINDOW": (int, DEFAULT_WINDOW_MS),
    "MIN_PROFIT_THRESHOLD": (float, DEFAULT_MIN_PROFIT_THRESHOLD),
    "MAX_SLIPPAGE": (float, DEFAULT_MAX_SLIPPAGE),
    "TRADING_INTERVAL": (int, DEFAULT_INTERVAL_MS),
}


def _env_number(name: str, cast: Callable, default, logger: Optional[logging.Logger] = None):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
        if not math.isfinite(value):
            raise ValueError(f"{raw} is not finite")
        return cast(value)
    except (ValueError, OverflowError):
        (logger or log).warning("Invalid value for %s=%r, using default %s", name, raw, default)
        return default


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def parse_pairs(raw: str, logger: Optional[logging.Logger] = None) -> List[TradingPair]:
    pairs: List[TradingPair] = []
    for item in raw.split(","):
        if not item.strip():
            continue
        try:
            pairs.append(TradingPair.parse(item))
        except ValueError as exc:
            (logger or log).warning("Ignoring trading pair: %s", exc)
    return pairs


def load_configuration(env_path: str = "config.env",
                       logger: Optional[logging.Logger] = None) -> Dict:
    """
    Load settings from an .env-style file and return a structured config dict.
    Every trading value has a default; a missing file is not an error.
    Warnings about malformed values go to ``logger`` when one is given.
    """
    load_dotenv(dotenv_path=env_path)
    logger = logger or log

    conf: Dict[str, object] = {
        name: _env_number(name, cast, default, logger)
        for name, (cast, default) in _NUMERIC_SETTINGS.items()
    }
    conf["TRADING_PAIRS"] = parse_pairs(os.getenv("TRADING_PAIRS", "").strip() or DEFAULT_PAIRS, logger)
    conf["API"] = {
        "base_url": os.getenv("API_BASE_URL", DEFAULT_API_BASE),
        "api_key": os.getenv("API_KEY"),
        "timeout": _env_number("HTTP_TIMEOUT", float, 10.0, logger),
    }
    conf["RPC_URL"] = os.getenv("RPC_URL", DEFAULT_RPC_URL)
    conf["DRY_RUN"] = _env_flag("DRY_RUN")
    conf["WALLET"] = {
        "PRIVATE_KEY": os.getenv("PRIVATE_KEY"),
        "MNEMONIC": os.getenv("MNEMONIC"),
    }

    logger.debug("Parsed TRADING_PAIRS: %s", [str(p) for p in conf["TRADING_PAIRS"]])
    return conf


def initialize_components(
    config: Dict,
    overrides: Optional[Dict[str, object]] = None,
    logger: Optional[logging.Logger] = None,
    ) -> Dict[str, object]:
    """
    Construct and wire together all runtime components (supports DI via overrides).

    Keys you can override:
    {"logger", "clock", "aggregator", "price_feed", "route_service", "signer",
     "store", "calculator", "evaluator", "gate", "scheduler"}

    Raises FatalConfigError for bad values or missing wallet material.
    """
    overrides = overrides or {}
    validate_config(config)
    cfg = ConfigManager(config)

    # 1) Logger
    logger = overrides.get("logger") or logger or logging.getLogger("MomentumBot")
    clock = overrides.get("clock") or now_ms

    # 2) Aggregator (price feed + routes)
    aggregator = overrides.get("aggregator")
    if aggregator is None:
        api = cfg.get_api()
        aggregator = AggregatorClient(
            base_url=api["base_url"],
            api_key=api["api_key"],
            timeout=api["timeout"],
            logger=logger,
        )
    price_feed = overrides.get("price_feed") or aggregator
    route_service = overrides.get("route_service") or aggregator

    # 3) Signer – the wallet is required unless swaps are simulated
    signer = overrides.get("signer")
    if signer is None:
        if cfg.is_dry_run():
            signer = DryRunTrader(logger=logger)
        else:
            keypair = load_keypair(cfg.get_wallet())
            signer = SuiTrader(keypair, builder=aggregator, rpc_url=cfg.get_rpc_url(), logger=logger)
            logger.info("✅ Wallet initialized: %s", signer.address)

    # 4) Core engine
    store = overrides.get("store") or PriceHistoryStore(window_ms=cfg.get_price_change_window())
    evaluator = overrides.get("evaluator") or OpportunityEvaluator(
        store,
        route_service,
        calculator=overrides.get("calculator") or MomentumCalculator(),
        swap_amount=cfg.get_swap_amount(),
        momentum_threshold=cfg.get_momentum_threshold(),
        min_profit_threshold=cfg.get_min_profit_threshold(),
        max_slippage=cfg.get_max_slippage(),
        clock=clock,
        logger=logger,
    )
    gate = overrides.get("gate") or ExecutionGate(signer, logger=logger)
    scheduler = overrides.get("scheduler") or Scheduler(
        price_feed,
        evaluator,
        gate,
        cfg.get_trading_pairs(),
        interval_ms=cfg.get_trading_interval(),
        clock=clock,
        logger=logger,
    )

    logger.info("✅ Momentum bot initialized (%s)", "dry run" if cfg.is_dry_run() else "live")

    return {
        "logger": logger,
        "aggregator": aggregator,
        "price_feed": price_feed,
        "route_service": route_service,
        "signer": signer,
        "store": store,
        "evaluator": evaluator,
        "gate": gate,
        "scheduler": scheduler,
    }
