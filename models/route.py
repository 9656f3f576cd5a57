from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.price import TradingPair


class Route(BaseModel):
    """Swap route as returned by the aggregator.

    Only the three amounts are read by the bot; ``steps`` and any other
    field are kept so the route can be handed back verbatim when the
    transaction is built.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    input_amount: float = Field(..., alias="inputAmount")
    output_amount: float = Field(..., alias="outputAmount")
    total_fees: float = Field(0.0, alias="totalFees")
    steps: List[Any] = Field(default_factory=list)

    @field_validator("total_fees", mode="before")
    @classmethod
    def missing_fees_are_zero(cls, v):
        return 0.0 if v in (None, "") else v

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class OpportunityDecision:
    """A pair whose momentum and projected profit both cleared the thresholds."""

    pair: TradingPair
    momentum: float
    route: Route
    expected_profit: float
