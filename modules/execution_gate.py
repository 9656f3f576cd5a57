"""
execution_gate.py
-----------------
Turns an OpportunityDecision into at most one swap attempt at a time.

Candidates arriving while a swap is in flight are rejected with BusyError
and lost; there is no queue and no retry.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from core.errors import BusyError, ExecutionError
from models.route import OpportunityDecision
from models.trade_outcome import TxReceipt
from modules.base import WalletSigner


class ExecutionState(Enum):
    IDLE = "IDLE"
    IN_FLIGHT = "IN_FLIGHT"


class ExecutionGate:
    def __init__(self, signer: WalletSigner, logger: Optional[logging.Logger] = None) -> None:
        self.signer = signer
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._state = ExecutionState.IDLE

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is ExecutionState.IDLE

    async def submit(self, decision: OpportunityDecision) -> TxReceipt:
        """Submit the decision's route through the signer.

        Raises BusyError if another submission is in flight, ExecutionError
        if the signer fails. The gate is idle again on every exit path.
        """
        # no await between check and set: atomic on the event loop
        if self._state is ExecutionState.IN_FLIGHT:
            self.logger.warning("Execution in flight, dropping opportunity on %s", decision.pair)
            raise BusyError(f"execution already in flight, dropped {decision.pair}")
        self._state = ExecutionState.IN_FLIGHT

        try:
            self.logger.info(
                "Submitting swap %s (expected profit %.2f%%)",
                decision.pair, decision.expected_profit * 100,
            )
            try:
                receipt = await self.signer.submit_swap(decision.route)
            except ExecutionError:
                raise
            except Exception as exc:
                raise ExecutionError(f"swap submission failed: {exc}") from exc
            self.logger.info("Swap executed successfully: %s", receipt.digest)
            return receipt
        except ExecutionError as exc:
            self.logger.error("Failed to execute swap on %s (%s): %s", decision.pair, exc.kind, exc)
            raise
        finally:
            self._state = ExecutionState.IDLE
