"""Draft-eligible candidate models."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel


class Position(str, Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    OT = "OT"
    OG = "OG"
    C = "C"
    EDGE = "EDGE"
    DL = "DL"
    LB = "LB"
    CB = "CB"
    S = "S"
    K = "K"
    P = "P"
    LS = "LS"


class CandidateAttributes(BaseModel):
    conference: Optional[str] = None
    height: Optional[float] = None  # inches
    weight: Optional[float] = None
    forty_yard: Optional[float] = None
    vertical: Optional[float] = None
    bench: Optional[float] = None
    broad: Optional[float] = None
    cone: Optional[float] = None
    shuttle: Optional[float] = None
    arm_length: Optional[float] = None
    hand_size: Optional[float] = None


class Candidate(BaseModel):
    id: str
    name: str = ""
    position: Position
    school: str = ""
    consensus_rank: int  # 1 = best prospect
    year: int = 0

    attributes: Optional[CandidateAttributes] = None
    stats: dict[str, Union[float, str, None]] = {}

    model_config = {"frozen": True}
