"""
base.py
-------
Interfaces of the external collaborators the trading core depends on.

The core only relies on these contracts; the aggregator client and the
Sui trader are the concrete implementations wired at startup.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List

from models.route import Route
from models.trade_outcome import TxReceipt


class PriceFeed(ABC):

    @abstractmethod
    async def get_prices(self) -> Dict[str, float]:
        """
        Return the latest price per token symbol.

        Raises FeedError when prices cannot be fetched.
        """
        raise NotImplementedError


class RouteService(ABC):

    @abstractmethod
    async def get_routes(
        self,
        token_in: str,
        token_out: str,
        amount: int,
        max_slippage: float,
    ) -> List[Route]:
        """
        Return candidate routes, best first as ranked by the service.

        Raises RouteError when the request fails.
        """
        raise NotImplementedError


class WalletSigner(ABC):

    @abstractmethod
    async def submit_swap(self, route: Route) -> TxReceipt:
        """Build, sign and send the swap for ``route``. Raises ExecutionError."""
        raise NotImplementedError
