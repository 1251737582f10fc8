"""Trade models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from .draft import DraftSlot, FuturePick


class TradeStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class CurrentPickPiece(BaseModel):
    type: Literal["current-pick"] = "current-pick"
    overall: int

    model_config = {"frozen": True}


class FuturePickPiece(BaseModel):
    type: Literal["future-pick"] = "future-pick"
    year: int
    round: int
    original_team: Optional[str] = None

    model_config = {"frozen": True}

    def matches(self, future_pick: FuturePick) -> bool:
        return (
            self.year == future_pick.year
            and self.round == future_pick.round
            and self.original_team == future_pick.original_team
        )


TradePiece = Annotated[
    Union[CurrentPickPiece, FuturePickPiece],
    Field(discriminator="type"),
]


class Trade(BaseModel):
    id: str = ""
    draft_id: str = ""
    status: TradeStatus = TradeStatus.PENDING
    proposer_id: str
    proposer_team: str
    recipient_id: Optional[str] = None  # None = CPU counterpart
    recipient_team: str
    proposer_gives: list[TradePiece] = []
    proposer_receives: list[TradePiece] = []
    proposed_at: datetime = Field(default_factory=datetime.now)
    resolved_at: Optional[datetime] = None
    is_force_trade: bool = False

    @property
    def all_pieces(self) -> list:
        return [*self.proposer_gives, *self.proposer_receives]


class CpuTradeEvaluation(BaseModel):
    accept: bool
    reason: str
    cpu_giving_value: float
    cpu_receiving_value: float
    net_value: float
    premium: float = 0.0


class TradeExecution(BaseModel):
    pick_order: list[DraftSlot]
    future_picks: list[FuturePick]
