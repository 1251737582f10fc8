"""Draft state resolution: pick control, advancement and pick order building.

Everything here is a pure function over a draft snapshot. Writing the
result back is the caller's job.
"""

from __future__ import annotations

from typing import Optional

from ..config import EngineConfig, engine_config
from ..errors import DraftCompleteError, DraftNotActiveError, PlayerAlreadyDraftedError
from ..models.draft import (
    CpuSpeed,
    Draft,
    DraftSlot,
    DraftStatus,
    DraftUpdates,
    FuturePick,
    FuturePickSeed,
    OverrideKind,
    Pick,
    PickAdvancement,
    PreparedPick,
)


def get_pick_controller(draft: Draft, slot: DraftSlot) -> Optional[str]:
    """Participant that controls a slot, or None when a CPU team does.

    Priority:
    1. The slot's owner override (set by trades)
    2. The draft's team assignment for the slot's original team
    """
    override = slot.owner_override
    if override.kind == OverrideKind.OWNED:
        return override.participant_id
    if override.kind == OverrideKind.CPU:
        return None
    return draft.team_assignments.get(slot.team)


def calculate_pick_advancement(draft: Draft) -> PickAdvancement:
    """Next pick index and round after the current pick is made."""
    next_pick = draft.current_pick + 1
    is_complete = next_pick > len(draft.pick_order)
    next_round = draft.current_round if is_complete else draft.pick_order[next_pick - 1].round
    return PickAdvancement(next_pick=next_pick, next_round=next_round, is_complete=is_complete)


def filter_and_sort_pick_order(slots: list[DraftSlot], rounds: int) -> list[DraftSlot]:
    """Restrict a season pick order to the first *rounds* rounds, sorted by overall."""
    return sorted((s for s in slots if s.round <= rounds), key=lambda s: s.overall)


def generate_pick_order(team_order: list[str], rounds: int) -> list[DraftSlot]:
    """Build a straight (non-snake) pick order: every round uses *team_order*."""
    slots = []
    overall = 1
    for round_ in range(1, rounds + 1):
        for pick, team in enumerate(team_order, start=1):
            slots.append(DraftSlot(overall=overall, round=round_, pick=pick, team=team))
            overall += 1
    return slots


def build_future_picks(
    draft_year: int,
    team_ids: list[str],
    seeded_picks_by_team: dict[str, Optional[list[FuturePickSeed]]],
    config: EngineConfig = engine_config,
) -> list[FuturePick]:
    """Future pick inventory for the two drafts after *draft_year*.

    Year+1 uses seeded ownership (the dict key owns the seeded pick) and fills
    every unseeded team/round with self-ownership. Year+2 is always
    self-owned.
    """
    rounds = range(1, config.future_pick_rounds + 1)
    year1 = draft_year + 1
    year2 = draft_year + 2

    future_picks: list[FuturePick] = []
    covered: set[tuple[str, int]] = set()

    for owner_team, seeds in seeded_picks_by_team.items():
        if not seeds:
            continue
        for seed in seeds:
            if seed.year != year1:
                continue
            future_picks.append(FuturePick(
                year=seed.year,
                round=seed.round,
                original_team=seed.original_team,
                owner_team=owner_team,
            ))
            covered.add((seed.original_team, seed.round))

    for team in team_ids:
        for round_ in rounds:
            if (team, round_) not in covered:
                future_picks.append(FuturePick(year=year1, round=round_, original_team=team, owner_team=team))

    for team in team_ids:
        for round_ in rounds:
            future_picks.append(FuturePick(year=year2, round=round_, original_team=team, owner_team=team))

    return future_picks


def prepare_pick_record(
    draft: Draft,
    player_id: str,
    user_id: Optional[str],
    pick_id: str = "",
) -> PreparedPick:
    """Validate a pick against the snapshot and compute everything to write.

    Raises DraftNotActiveError, DraftCompleteError or PlayerAlreadyDraftedError.
    """
    if draft.status != DraftStatus.ACTIVE:
        raise DraftNotActiveError()

    slot = draft.current_slot
    if slot is None:
        raise DraftCompleteError()

    if player_id in draft.picked_player_ids:
        raise PlayerAlreadyDraftedError()

    advancement = calculate_pick_advancement(draft)
    pick = Pick(
        id=pick_id,
        draft_id=draft.id,
        overall=slot.overall,
        round=slot.round,
        pick=slot.pick,
        team=slot.controlling_team,
        user_id=user_id,
        player_id=player_id,
    )
    return PreparedPick(
        pick=pick,
        draft_updates=DraftUpdates(
            current_pick=advancement.next_pick,
            current_round=advancement.next_round,
            status=DraftStatus.COMPLETE if advancement.is_complete else DraftStatus.ACTIVE,
        ),
        is_complete=advancement.is_complete,
    )


def cpu_speed_delay(speed: CpuSpeed, config: EngineConfig = engine_config) -> float:
    """Seconds to wait before each CPU pick at a given speed setting."""
    return getattr(config.cpu_speed_delay_ms, speed.value) / 1000
