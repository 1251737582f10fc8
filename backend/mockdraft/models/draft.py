"""Draft state models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class DraftStatus(str, Enum):
    LOBBY = "lobby"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class DraftFormat(str, Enum):
    FULL = "full"
    SINGLE_TEAM = "single-team"
    MULTI_TEAM = "multi-team"


class TeamAssignmentMode(str, Enum):
    RANDOM = "random"
    CHOICE = "choice"


class CpuSpeed(str, Enum):
    INSTANT = "instant"
    FAST = "fast"
    NORMAL = "normal"


class OverrideKind(str, Enum):
    UNSET = "unset"
    OWNED = "owned"
    CPU = "cpu"


class OwnerOverride(BaseModel):
    """Trade-set owner of a slot.

    ``unset`` means the slot was never traded and the team assignment
    applies. ``cpu`` means the slot was explicitly traded to a computer
    team. ``owned`` carries the participant that now controls it.
    """
    kind: OverrideKind = OverrideKind.UNSET
    participant_id: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def unset(cls) -> "OwnerOverride":
        return cls()

    @classmethod
    def cpu(cls) -> "OwnerOverride":
        return cls(kind=OverrideKind.CPU)

    @classmethod
    def owned(cls, participant_id: str) -> "OwnerOverride":
        return cls(kind=OverrideKind.OWNED, participant_id=participant_id)

    @classmethod
    def to(cls, participant_id: Optional[str]) -> "OwnerOverride":
        """Override for a trade counterpart (``None`` = computer-controlled)."""
        if participant_id is None:
            return cls.cpu()
        return cls.owned(participant_id)

    @property
    def is_set(self) -> bool:
        return self.kind != OverrideKind.UNSET


class DraftSlot(BaseModel):
    overall: int
    round: int
    pick: int  # pick number within the round
    team: str  # team that originally owns the slot
    owner_override: OwnerOverride = OwnerOverride()
    team_override: Optional[str] = None  # team that now controls the slot after a trade

    model_config = {"frozen": True}

    @field_validator("owner_override", mode="before")
    @classmethod
    def _parse_raw_override(cls, value: Any) -> Any:
        # Raw wire values: null / "" = traded to CPU, any other string = participant
        if value is None or value == "":
            return OwnerOverride.cpu()
        if isinstance(value, str):
            return OwnerOverride.owned(value)
        return value

    @property
    def controlling_team(self) -> str:
        return self.team_override or self.team


class FuturePickSeed(BaseModel):
    year: int
    round: int
    original_team: str


class FuturePick(BaseModel):
    year: int
    round: int
    original_team: str
    owner_team: str

    model_config = {"frozen": True}


class DraftConfig(BaseModel):
    rounds: int = 1
    seconds_per_pick: int = 0
    format: DraftFormat = DraftFormat.SINGLE_TEAM
    year: int = 2026
    team_assignment_mode: TeamAssignmentMode = TeamAssignmentMode.CHOICE
    cpu_speed: CpuSpeed = CpuSpeed.INSTANT
    trades_enabled: bool = True
    cpu_randomness: Optional[int] = None  # 0-100, maps to 0.0-1.0
    cpu_needs_weight: Optional[int] = None  # 0-100, maps to 0.0-1.0
    board_id: Optional[str] = None  # board ranking used for CPU ordering


class Draft(BaseModel):
    id: str = ""
    name: Optional[str] = None
    created_by: str = ""
    config: DraftConfig = DraftConfig()
    status: DraftStatus = DraftStatus.LOBBY
    current_pick: int = 1  # 1-based index into pick_order
    current_round: int = 1
    team_assignments: dict[str, Optional[str]] = {}  # team -> participant (None = CPU)
    participants: dict[str, str] = {}  # participant -> external identity
    pick_order: list[DraftSlot] = []
    picked_player_ids: list[str] = []
    future_picks: Optional[list[FuturePick]] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def current_slot(self) -> Optional[DraftSlot]:
        if 1 <= self.current_pick <= len(self.pick_order):
            return self.pick_order[self.current_pick - 1]
        return None

    @property
    def is_complete(self) -> bool:
        return self.current_pick > len(self.pick_order)

    def slot_for(self, overall: int) -> Optional[DraftSlot]:
        return next((s for s in self.pick_order if s.overall == overall), None)


class Pick(BaseModel):
    id: str = ""
    draft_id: str = ""
    overall: int
    round: int
    pick: int
    team: str
    user_id: Optional[str] = None  # None = CPU pick
    player_id: str
    created_at: datetime = Field(default_factory=datetime.now)


class PickAdvancement(BaseModel):
    next_pick: int
    next_round: int
    is_complete: bool


class DraftUpdates(BaseModel):
    current_pick: int
    current_round: int
    status: DraftStatus


class PreparedPick(BaseModel):
    pick: Pick
    draft_updates: DraftUpdates
    is_complete: bool
