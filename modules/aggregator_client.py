"""
aggregator_client.py
--------------------
aiohttp client for the 7K aggregator REST API.

Serves as the bot's PriceFeed (GET /v1/prices) and RouteService
(POST /v1/routes/momentum), and asks the aggregator to assemble the
transaction bytes for a chosen route (POST /v1/routes/build).
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from core.errors import FeedError, RouteError, SubmissionError
from models.route import Route
from modules.base import PriceFeed, RouteService

DEFAULT_API_BASE = "https://api.7k.ag"
LATENCY_SAMPLES = 500


class AggregatorClient(PriceFeed, RouteService):
    """Asynchronous 7K REST client sharing one ClientSession."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        api_key: Optional[str] = None,
        *,
        timeout: float = 10,
        session: Optional[aiohttp.ClientSession] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.base_url = base_url.rstrip("/")
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

        self.metrics = {
            "requests_sent": 0,
            "errors": 0,
            "latencies": deque(maxlen=LATENCY_SAMPLES),
        }

    # -------------------------------------------------------------------- #
    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self.headers, timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def _request(self, method: str, path: str, payload: Optional[Dict] = None) -> Any:
        session = await self._get_session()
        url = f"{self.base_url}{path}"
        kwargs: Dict[str, Any] = {"headers": self.headers}
        if payload is not None:
            kwargs["json"] = payload

        t0 = time.time()
        async with session.request(method, url, **kwargs) as resp:
            self.metrics["requests_sent"] += 1
            if resp.status != 200:
                raise aiohttp.ClientError(f"HTTP {resp.status} from {path}")
            data = await resp.json(content_type=None)
        self.metrics["latencies"].append(time.time() - t0)
        return data

    # -------------------------------------------------------------------- #
    async def get_prices(self) -> Dict[str, float]:
        try:
            data = await self._request("GET", "/v1/prices")
        except Exception as exc:
            self.metrics["errors"] += 1
            raise FeedError(f"price request failed: {exc}") from exc

        if not isinstance(data, dict):
            self.metrics["errors"] += 1
            raise FeedError(f"unexpected price payload: {type(data).__name__}")

        prices: Dict[str, float] = {}
        for symbol, raw in data.items():
            try:
                prices[symbol] = float(raw)
            except (TypeError, ValueError):
                self.logger.warning("Ignoring non-numeric price for %s: %r", symbol, raw)
                continue
            if math.isnan(prices[symbol]):
                self.logger.warning("NaN price reported for %s", symbol)
        return prices

    async def get_routes(
        self,
        token_in: str,
        token_out: str,
        amount: int,
        max_slippage: float,
    ) -> List[Route]:
        payload = {
            "tokenIn": token_in,
            "tokenOut": token_out,
            "amount": amount,
            "slippage": max_slippage,
            "enableMomentum": True,
        }
        try:
            data = await self._request("POST", "/v1/routes/momentum", payload)
        except Exception as exc:
            self.metrics["errors"] += 1
            raise RouteError(f"route request {token_in}->{token_out} failed: {exc}") from exc

        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("routes", [])
        if not isinstance(data, list):
            raise RouteError(f"unexpected route payload: {type(data).__name__}")

        try:
            return [Route.model_validate(r) for r in data]
        except ValidationError as exc:
            raise RouteError(f"malformed route for {token_in}->{token_out}: {exc}") from exc

    async def build_transaction(self, route: Route, sender: str) -> str:
        """Return the base64 transaction bytes for ``route`` sent by ``sender``."""
        payload = {"route": route.to_payload(), "sender": sender}
        try:
            data = await self._request("POST", "/v1/routes/build", payload)
        except Exception as exc:
            raise SubmissionError(f"transaction build failed: {exc}") from exc

        tx_bytes = data.get("txBytes") if isinstance(data, dict) else None
        if not isinstance(tx_bytes, str) or not tx_bytes:
            raise SubmissionError("build response missing txBytes")
        return tx_bytes
