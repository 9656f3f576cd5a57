"""
core/errors.py
--------------
Error taxonomy shared by the feed, routing, execution and startup layers.

Everything that happens inside a trading cycle is contained by the
Scheduler; only FatalConfigError is allowed to stop the process.
"""

from __future__ import annotations


class BotError(Exception):
    """Base class for every error the bot raises on purpose."""


class FeedError(BotError):
    """Price fetch failed; the cycle has nothing to evaluate."""


class RouteError(BotError):
    """Route fetch failed for one pair; that pair is skipped."""


class BusyError(BotError):
    """A swap is already in flight; the new candidate is dropped."""


class ExecutionError(BotError):
    """Swap submission failed. Never retried automatically."""

    kind = "unknown"


class SigningError(ExecutionError):
    kind = "signing"


class SubmissionError(ExecutionError):
    """Transport or RPC level failure while building or sending the tx."""

    kind = "submission"


class TransactionRevertedError(ExecutionError):
    """The transaction reached the chain but its effects report failure."""

    kind = "revert"

    def __init__(self, message: str, digest: str | None = None) -> None:
        super().__init__(message)
        self.digest = digest


class FatalConfigError(BotError):
    """Missing credentials or an unusable configuration value at startup."""
