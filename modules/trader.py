# modules/trader.py
"""Swap submission on Sui.

The aggregator assembles the transaction for a route, the trader signs it
with the wallet keypair and executes it through the fullnode JSON-RPC.
"""
from __future__ import annotations

import itertools
import logging
import os
import time
from typing import Any, Dict, Mapping, Optional

import aiohttp

from core.errors import (
    ExecutionError,
    FatalConfigError,
    SigningError,
    SubmissionError,
    TransactionRevertedError,
)
from models.route import Route
from models.trade_outcome import TxReceipt
from modules.aggregator_client import AggregatorClient
from modules.base import WalletSigner
from utils.signing import SuiKeypair, keypair_from_hex, keypair_from_mnemonic, sign_transaction

DEFAULT_RPC_URL = "https://fullnode.mainnet.sui.io:443"


def load_keypair(env: Optional[Mapping[str, str]] = None) -> SuiKeypair:
    """Resolve the wallet from PRIVATE_KEY (hex) or MNEMONIC.

    Raises FatalConfigError when neither is present or the material is bad.
    """
    env = os.environ if env is None else env
    private_key = env.get("PRIVATE_KEY")
    mnemonic = env.get("MNEMONIC")
    try:
        if private_key:
            return keypair_from_hex(private_key)
        if mnemonic:
            return keypair_from_mnemonic(mnemonic)
    except ValueError as exc:
        raise FatalConfigError(f"invalid wallet material: {exc}") from exc
    raise FatalConfigError("No private key or mnemonic provided")


class SuiTrader(WalletSigner):
    def __init__(
        self,
        keypair: SuiKeypair,
        builder: AggregatorClient,
        rpc_url: str = DEFAULT_RPC_URL,
        *,
        timeout: float = 30,
        session: Optional[aiohttp.ClientSession] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.keypair = keypair
        self.address = keypair.address
        self.builder = builder
        self.rpc_url = rpc_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._session = session
        self._ids = itertools.count(1)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def _rpc(self, method: str, params: list) -> Dict[str, Any]:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            async with self._session.post(self.rpc_url, json=body) as resp:
                if resp.status != 200:
                    raise SubmissionError(f"RPC HTTP {resp.status}")
                data = await resp.json(content_type=None)
        except ExecutionError:
            raise
        except Exception as exc:
            raise SubmissionError(f"RPC {method} failed: {exc}") from exc

        self.logger.debug("RPC %s -> %s", method, data)
        if data.get("error"):
            raise SubmissionError(f"RPC {method} error: {data['error']}")
        return data.get("result") or {}

    # -------------------------------------------------------------- #
    async def submit_swap(self, route: Route) -> TxReceipt:
        tx_bytes = await self.builder.build_transaction(route, self.address)
        try:
            signature = sign_transaction(self.keypair, tx_bytes)
        except Exception as exc:
            raise SigningError(f"could not sign transaction: {exc}") from exc

        result = await self._rpc(
            "sui_executeTransactionBlock",
            [
                tx_bytes,
                [signature],
                {"showEffects": True, "showEvents": True},
                "WaitForLocalExecution",
            ],
        )
        digest = result.get("digest", "")
        status = (result.get("effects") or {}).get("status") or {}
        if status.get("status") != "success":
            raise TransactionRevertedError(
                f"transaction {digest} failed on-chain: {status.get('error', 'unknown error')}",
                digest=digest,
            )
        return TxReceipt(digest=digest, status="success", raw=result)


class DryRunTrader(WalletSigner):
    """Logs the swap it would send and returns a simulated receipt."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.submitted: list[Route] = []

    async def submit_swap(self, route: Route) -> TxReceipt:
        self.submitted.append(route)
        self.logger.info(
            "🔵 DRY RUN: swap simulated | in %s out %s fees %s",
            route.input_amount, route.output_amount, route.total_fees,
        )
        return TxReceipt(
            digest=f"dry-run-{int(time.time() * 1000)}",
            status="simulated",
            raw=route.to_payload(),
            simulated=True,
        )
