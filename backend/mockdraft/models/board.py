"""Board generation config models."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field

from .candidate import Position


class BoardWeights(BaseModel):
    production: float = Field(50, ge=0)
    athleticism: float = Field(25, ge=0)
    conference: float = Field(10, ge=0)
    consensus: float = Field(15, ge=0)

    @property
    def total(self) -> float:
        return self.production + self.athleticism + self.conference + self.consensus


class BoardGenerationConfig(BaseModel):
    position: Union[Position, str] = "ALL"
    weights: BoardWeights = BoardWeights()
    # stat key -> weight (50 = neutral); replaces the position headline stats
    stat_overrides: Optional[dict[str, float]] = None
