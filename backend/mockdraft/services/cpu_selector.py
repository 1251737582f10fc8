"""Computer-opponent pick selection."""

from __future__ import annotations

import logging
import random
from typing import Optional

from pydantic import BaseModel

from ..config import EngineConfig, engine_config
from ..errors import NoCandidatesError
from ..models.candidate import Candidate, Position
from ..models.draft import DraftSlot

logger = logging.getLogger(__name__)

TOP_CHOICES = 5


class CpuPickOptions(BaseModel):
    randomness: float = 0.5  # 0 = always best score, 1 = full ladder
    needs_weight: float = 0.5  # 0 = ignore needs, 1 = strongest need boost
    board_rankings: Optional[list[str]] = None  # candidate ids, best first
    positional_weights: Optional[dict[str, float]] = None  # position -> value multiplier


def _need_multiplier(need_index: Optional[int], needs_weight: float, config: EngineConfig) -> float:
    if need_index is None:
        return 1.0
    floors = config.min_need_multipliers
    floor = floors[min(need_index, len(floors) - 1)]
    return 1.0 - (1.0 - floor) * needs_weight


def _positional_factor(position: Position, positional_weights: Optional[dict[str, float]]) -> float:
    if not positional_weights:
        return 1.0
    multiplier = positional_weights.get(position.value, 1.0)
    if multiplier <= 0:
        return 1.0
    # Sub-linear boost: QB at 2.5x only shaves ~20% off its score
    return 1.0 / multiplier ** 0.25


def _dominance(scored: list[tuple[float, Candidate]]) -> float:
    """How clearly the top score beats the runner-up, from 0 to 1."""
    if len(scored) < 2:
        return 1.0
    best, second = scored[0][0], scored[1][0]
    if best <= 0:
        return 0.0
    gap = (second - best) / best
    return min(gap, 2.0) / 2.0


def select_cpu_pick(
    available: list[Candidate],
    team_needs: list[Position],
    options: Optional[CpuPickOptions] = None,
    rng: Optional[random.Random] = None,
    config: EngineConfig = engine_config,
) -> Candidate:
    """Choose a candidate for a computer-controlled team.

    1. Effective rank = board index + 1 if on the board, else consensus rank
    2. Score = rank x need multiplier x positional factor (lower is better)
    3. Add symmetric jitter scaled by rank and randomness
    4. Damp randomness when the top score dominates the runner-up
    5. Walk the probability ladder over the top five scores
    """
    if not available:
        raise NoCandidatesError()

    options = options or CpuPickOptions()
    rng = rng or random.Random()
    randomness = max(0.0, min(1.0, options.randomness))
    needs_weight = max(0.0, min(1.0, options.needs_weight))

    board_index: dict[str, int] = {}
    if options.board_rankings:
        board_index = {pid: i + 1 for i, pid in enumerate(options.board_rankings)}

    scored: list[tuple[float, Candidate]] = []
    for candidate in available:
        rank = board_index.get(candidate.id, candidate.consensus_rank)
        need_index = team_needs.index(candidate.position) if candidate.position in team_needs else None
        score = (
            rank
            * _need_multiplier(need_index, needs_weight, config)
            * _positional_factor(candidate.position, options.positional_weights)
        )
        if randomness > 0:
            score += (rng.random() * 2 - 1) * rank * randomness * config.jitter_scale
        scored.append((score, candidate))

    scored.sort(key=lambda x: x[0])

    effective_randomness = randomness * (1.0 - _dominance(scored))
    if effective_randomness <= 0 or len(scored) < TOP_CHOICES:
        choice = scored[0][1]
    else:
        roll = rng.random()
        choice = scored[0][1]
        for i, step in enumerate(config.pick_ladder[:TOP_CHOICES]):
            if roll < 1.0 - (1.0 - step) * effective_randomness:
                choice = scored[i][1]
                break

    logger.debug(
        f"CPU selected {choice.id} ({choice.position.value}, rank {choice.consensus_rank}) "
        f"from {len(available)} available, randomness {effective_randomness:.2f}"
    )
    return choice


def get_effective_needs(static_needs: list[Position], drafted_positions: list[Position]) -> list[Position]:
    """Remove positions already drafted from the static needs list.

    Each drafted position removes one occurrence, so a team that needs two
    corners still needs one after drafting the first.
    """
    remaining = list(static_needs)
    for pos in drafted_positions:
        if pos in remaining:
            remaining.remove(pos)
    return remaining


def get_team_drafted_positions(
    pick_order: list[DraftSlot],
    picked_player_ids: list[str],
    team: str,
    candidates: dict[str, Candidate],
) -> list[Position]:
    """Positions a team has already drafted, in pick order."""
    positions = []
    for slot, player_id in zip(pick_order, picked_player_ids):
        if slot.controlling_team != team:
            continue
        candidate = candidates.get(player_id)
        if candidate is not None:
            positions.append(candidate.position)
    return positions


def prepare_cpu_pick(
    team: str,
    pick_order: list[DraftSlot],
    picked_player_ids: list[str],
    candidates: dict[str, Candidate],
    available: list[Candidate],
    team_needs: list[Position],
    options: Optional[CpuPickOptions] = None,
    rng: Optional[random.Random] = None,
    config: EngineConfig = engine_config,
) -> Candidate:
    """Select for a team using its needs minus what it has already drafted."""
    drafted = get_team_drafted_positions(pick_order, picked_player_ids, team, candidates)
    effective_needs = get_effective_needs(team_needs, drafted)
    return select_cpu_pick(available, effective_needs, options, rng=rng, config=config)
