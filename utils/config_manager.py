from typing import Any, Dict, List

from models.price import TradingPair
from modules.aggregator_client import DEFAULT_API_BASE
from modules.opportunity_evaluator import (
    DEFAULT_MAX_SLIPPAGE,
    DEFAULT_MIN_PROFIT_THRESHOLD,
    DEFAULT_MOMENTUM_THRESHOLD,
    DEFAULT_SWAP_AMOUNT,
)
from modules.price_history import DEFAULT_WINDOW_MS
from modules.scheduler import DEFAULT_INTERVAL_MS
from modules.trader import DEFAULT_RPC_URL

DEFAULT_PAIRS = "SUI:USDC,USDC:SUI,USDT:USDC,USDC:USDT"


class ConfigManager:
    def __init__(self, config: Dict[str, Any]):
        self.config = config

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def get_swap_amount(self) -> int:
        return int(self.config.get("SWAP_AMOUNT", DEFAULT_SWAP_AMOUNT))

    def get_momentum_threshold(self) -> float:
        return float(self.config.get("MOMENTUM_THRESHOLD", DEFAULT_MOMENTUM_THRESHOLD))

    def get_price_change_window(self) -> int:
        return int(self.config.get("PRICE_CHANGE_WINDOW", DEFAULT_WINDOW_MS))

    def get_min_profit_threshold(self) -> float:
        return float(self.config.get("MIN_PROFIT_THRESHOLD", DEFAULT_MIN_PROFIT_THRESHOLD))

    def get_max_slippage(self) -> float:
        return float(self.config.get("MAX_SLIPPAGE", DEFAULT_MAX_SLIPPAGE))

    def get_trading_interval(self) -> int:
        return int(self.config.get("TRADING_INTERVAL", DEFAULT_INTERVAL_MS))

    def get_trading_pairs(self) -> List[TradingPair]:
        pairs = self.config.get("TRADING_PAIRS")
        if pairs is None:
            return [TradingPair.parse(p) for p in DEFAULT_PAIRS.split(",")]
        return list(pairs)

    def get_api(self) -> Dict[str, Any]:
        api = self.config.get("API", {}) or {}
        return {
            "base_url": api.get("base_url") or DEFAULT_API_BASE,
            "api_key": api.get("api_key"),
            "timeout": float(api.get("timeout") or 10),
        }

    def get_rpc_url(self) -> str:
        return self.config.get("RPC_URL") or DEFAULT_RPC_URL

    def is_dry_run(self) -> bool:
        return bool(self.config.get("DRY_RUN", False))

    def get_wallet(self) -> Dict[str, str]:
        wallet = self.config.get("WALLET", {}) or {}
        return {k: v for k, v in wallet.items() if v}
