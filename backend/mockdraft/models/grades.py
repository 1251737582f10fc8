"""Draft grading and recap models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .candidate import Position


class PickLabel(str, Enum):
    GREAT_VALUE = "great-value"
    GOOD_VALUE = "good-value"
    FAIR = "fair"
    SLIGHT_REACH = "slight-reach"
    REACH = "reach"
    BIG_REACH = "big-reach"


class PickGrade(BaseModel):
    overall: int
    player_id: str
    position: Position
    consensus_rank: int
    value_delta: int  # slot minus consensus rank (positive = value)
    pick_score: int  # 0-100 composite
    label: PickLabel
    need_index: Optional[int] = None  # None = did not match a need
    had_better_alternative: bool = False
    surplus_value: float = 0.0
    positional_multiplier: float = 1.0
    board_delta: Optional[int] = None


class GradeScores(BaseModel):
    value: int = 50
    positional_value: int = 50
    surplus_value: int = 50
    needs: int = 50
    bpa_adherence: int = 50


class TeamDraftGrade(BaseModel):
    team: str
    overall_grade: int
    tier: str
    picks: list[PickGrade] = []
    scores: GradeScores = GradeScores()
    trade_net_value: float = 0.0
    needs_filled: int = 0
    total_needs: int = 0
    highlights: list[str] = []


class TradeAnalysis(BaseModel):
    trade_id: str
    proposer_team: str
    recipient_team: str
    proposer_net_value: float
    recipient_net_value: float
    winner: str  # team abbreviation or "even"


class OptimalPick(BaseModel):
    overall: int
    actual_player_id: str
    optimal_player_id: str
    actual_rank: int
    optimal_rank: int


class DraftRecap(BaseModel):
    draft_id: str
    team_grades: list[TeamDraftGrade] = []
    overall_class_grade: int = 50
    trade_analysis: list[TradeAnalysis] = []
    optimal_comparison: list[OptimalPick] = []


class SuggestedPick(BaseModel):
    player_id: str
    score: int
    reason: str
