from core.errors import FatalConfigError
from utils.config_manager import ConfigManager


def validate_config(config: dict):
    """Range checks on an already-parsed config. Missing keys use defaults."""
    cfg = ConfigManager(config)

    positive = {
        "SWAP_AMOUNT": cfg.get_swap_amount(),
        "PRICE_CHANGE_WINDOW": cfg.get_price_change_window(),
        "TRADING_INTERVAL": cfg.get_trading_interval(),
    }
    bad = [k for k, v in positive.items() if v <= 0]
    if bad:
        raise FatalConfigError(f"Configuration values must be positive: {bad}")

    non_negative = {
        "MOMENTUM_THRESHOLD": cfg.get_momentum_threshold(),
        "MIN_PROFIT_THRESHOLD": cfg.get_min_profit_threshold(),
        "MAX_SLIPPAGE": cfg.get_max_slippage(),
    }
    bad = [k for k, v in non_negative.items() if not v >= 0]
    if bad:
        raise FatalConfigError(f"Configuration values must be non-negative: {bad}")

    if cfg.get_max_slippage() >= 1:
        raise FatalConfigError("MAX_SLIPPAGE is a ratio and must be below 1")

    if not cfg.get_trading_pairs():
        raise FatalConfigError("TRADING_PAIRS must contain at least one pair.")
