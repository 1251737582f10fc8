"""Draft analytics: pick grades, team grades, trade winners and recaps.

Pick scores start from a neutral 50 and add three dimensions:
  - value (+/-20): consensus rank versus draft slot
  - positional value (+/-15): premium positions at premium slots
  - need (0 to +15): fills a remaining team need

Team grades combine five 0-100 sub-scores with fixed weights.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..config import EngineConfig, engine_config
from ..models.candidate import Candidate, Position
from ..models.draft import Draft, Pick
from ..models.grades import (
    DraftRecap,
    GradeScores,
    OptimalPick,
    PickGrade,
    PickLabel,
    SuggestedPick,
    TeamDraftGrade,
    TradeAnalysis,
)
from ..models.trade import CurrentPickPiece, FuturePickPiece, Trade, TradeStatus
from .cpu_selector import get_effective_needs
from .draft_capital import get_future_pick_value, get_pick_value

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Positional value model (1.0 = league-average position)
# ---------------------------------------------------------------------------

POSITIONAL_VALUE: dict[Position, float] = {
    Position.QB: 2.5,
    Position.EDGE: 1.3,
    Position.OT: 1.25,
    Position.WR: 1.2,
    Position.CB: 1.15,
    Position.DL: 1.05,
    Position.S: 0.85,
    Position.LB: 0.85,
    Position.TE: 0.75,
    Position.OG: 0.75,
    Position.C: 0.7,
    Position.RB: 0.55,
    Position.K: 0.2,
    Position.P: 0.2,
    Position.LS: 0.1,
}

NEED_REWARDS = (15, 12, 9, 6, 3)

GRADE_TIERS = (
    (90, "Elite"),
    (80, "Pro Bowl"),
    (70, "Starter"),
    (60, "Solid"),
    (50, "Average"),
    (40, "Below Average"),
    (30, "Practice Squad"),
    (0, "Undrafted"),
)

TEAM_GRADE_WEIGHTS = {
    "value": 0.30,
    "positional_value": 0.20,
    "surplus_value": 0.15,
    "needs": 0.20,
    "bpa_adherence": 0.15,
}

# Positional premium fades to nothing by the end of round four
SLOT_WEIGHT_HORIZON = 127


def positional_multiplier(position: Position) -> float:
    return POSITIONAL_VALUE.get(position, 1.0)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float, ndigits: int = 0):
    """Round with exact halves going up (52.5 -> 53, -2.5 -> -2)."""
    if ndigits == 0:
        return int(math.floor(value + 0.5))
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def _threshold(overall: int) -> float:
    return max(3.0, overall * 0.08)


def _slot_weight(overall: int) -> float:
    return max(0.0, 1.0 - (overall - 1) / SLOT_WEIGHT_HORIZON)


def _need_reward(need_index: Optional[int]) -> int:
    if need_index is None:
        return 0
    return NEED_REWARDS[min(need_index, len(NEED_REWARDS) - 1)]


def _need_index(position: Position, needs: list[Position]) -> Optional[int]:
    return needs.index(position) if position in needs else None


# ---------------------------------------------------------------------------
# Surplus value curve
# ---------------------------------------------------------------------------

def base_surplus_value(overall: int) -> float:
    """Surplus (on-field value minus rookie cost) by pick position.

    Rises through pick 12, where rookie pay drops faster than value,
    then decays as a power law.
    """
    if overall <= 0:
        return 0.0
    if overall <= 12:
        return 63 + 37 * (1 - ((12 - overall) / 11) ** 1.5)
    return 100 * (12 / overall) ** 0.6


def position_adjusted_surplus(overall: int, position: Position) -> float:
    return base_surplus_value(overall) * positional_multiplier(position)


# ---------------------------------------------------------------------------
# Labels and tiers
# ---------------------------------------------------------------------------

def classify_pick(value_delta: float, overall: int) -> PickLabel:
    """Bucket a pick by value delta using a slot-adaptive threshold."""
    threshold = _threshold(overall)
    if value_delta > threshold * 2:
        return PickLabel.GREAT_VALUE
    if value_delta >= threshold:
        return PickLabel.GOOD_VALUE
    if value_delta >= -threshold:
        return PickLabel.FAIR
    if value_delta >= -threshold * 2:
        return PickLabel.SLIGHT_REACH
    if value_delta >= -threshold * 3:
        return PickLabel.REACH
    return PickLabel.BIG_REACH


def get_grade_tier(grade: float) -> str:
    for minimum, label in GRADE_TIERS:
        if grade >= minimum:
            return label
    return "Undrafted"


# ---------------------------------------------------------------------------
# Pick grading
# ---------------------------------------------------------------------------

def _value_dimension(value_delta: float, overall: int, scale: float = 20.0) -> float:
    return _clamp(value_delta / (_threshold(overall) * 3) * scale, -scale, scale)


def _positional_dimension(position: Position, overall: int) -> float:
    return _clamp((positional_multiplier(position) - 1.0) * _slot_weight(overall) * 15, -15, 15)


def grade_pick(
    pick: Pick,
    player: Candidate,
    team_needs: list[Position],
    available: list[Candidate],
    board_rankings: Optional[list[str]] = None,
) -> PickGrade:
    value_delta = pick.overall - player.consensus_rank
    need_index = _need_index(player.position, team_needs)

    pick_score = _round_half_up(
        50
        + _value_dimension(value_delta, pick.overall)
        + _positional_dimension(player.position, pick.overall)
        + _need_reward(need_index)
    )
    pick_score = int(_clamp(pick_score, 0, 100))

    had_better_alternative = any(
        p.id != player.id and p.consensus_rank < player.consensus_rank for p in available
    )

    board_delta = None
    if board_rankings and player.id in board_rankings:
        board_delta = board_rankings.index(player.id) + 1 - pick.overall

    return PickGrade(
        overall=pick.overall,
        player_id=player.id,
        position=player.position,
        consensus_rank=player.consensus_rank,
        value_delta=value_delta,
        pick_score=pick_score,
        label=classify_pick(value_delta, pick.overall),
        need_index=need_index,
        had_better_alternative=had_better_alternative,
        surplus_value=position_adjusted_surplus(pick.overall, player.position),
        positional_multiplier=positional_multiplier(player.position),
        board_delta=board_delta,
    )


# ---------------------------------------------------------------------------
# Team grading
# ---------------------------------------------------------------------------

def generate_highlights(picks: list[PickGrade], needs_filled: int, total_needs: int) -> list[str]:
    highlights = []

    steals = [p for p in picks if p.label in (PickLabel.GREAT_VALUE, PickLabel.GOOD_VALUE)]
    for s in steals[:2]:
        highlights.append(f"Steal: pick #{s.overall} (ranked #{s.consensus_rank})")

    reaches = [p for p in picks if p.label in (PickLabel.BIG_REACH, PickLabel.REACH)]
    for r in reaches[:2]:
        highlights.append(f"Reach: pick #{r.overall} (ranked #{r.consensus_rank})")

    if total_needs > 0:
        highlights.append(f"Filled {needs_filled}/{total_needs} needs")

    return highlights


def grade_team_draft(
    team: str,
    team_picks: list[PickGrade],
    team_needs: list[Position],
    all_team_surpluses: list[float],
    trade_net_value: float = 0.0,
) -> TeamDraftGrade:
    if not team_picks:
        return TeamDraftGrade(
            team=team,
            overall_grade=50,
            tier=get_grade_tier(50),
            trade_net_value=trade_net_value,
            total_needs=len(team_needs),
        )

    n = len(team_picks)
    value_score = sum(p.pick_score for p in team_picks) / n

    avg_pos = sum((p.positional_multiplier - 1.0) * _slot_weight(p.overall) for p in team_picks) / n
    positional_score = _clamp(50 + avg_pos * 50, 0, 100)

    team_surplus = sum(p.surplus_value for p in team_picks)
    class_mean = sum(all_team_surpluses) / len(all_team_surpluses) if all_team_surpluses else team_surplus
    surplus_score = _clamp(team_surplus / class_mean * 50, 0, 100) if class_mean > 0 else 50

    filled_positions = {p.position for p in team_picks}
    needs_filled = sum(1 for need in team_needs if need in filled_positions)
    needs_score = needs_filled / len(team_needs) * 100 if team_needs else 50

    # Reaches are measured against a wider, round-adjusted band
    bpa_total = 0.0
    for p in team_picks:
        penalty = 0.0
        if p.value_delta < 0:
            penalty = min(1.0, abs(p.value_delta) / max(3.0, p.overall * 0.24))
        bpa_total += (1 - penalty) * 100
    bpa_score = bpa_total / n

    scores = GradeScores(
        value=_round_half_up(value_score),
        positional_value=_round_half_up(positional_score),
        surplus_value=_round_half_up(surplus_score),
        needs=_round_half_up(needs_score),
        bpa_adherence=_round_half_up(bpa_score),
    )
    overall_grade = _round_half_up(sum(getattr(scores, k) * w for k, w in TEAM_GRADE_WEIGHTS.items()))

    return TeamDraftGrade(
        team=team,
        overall_grade=overall_grade,
        tier=get_grade_tier(overall_grade),
        picks=team_picks,
        scores=scores,
        trade_net_value=trade_net_value,
        needs_filled=needs_filled,
        total_needs=len(team_needs),
        highlights=generate_highlights(team_picks, needs_filled, len(team_needs)),
    )


# ---------------------------------------------------------------------------
# Trade analysis
# ---------------------------------------------------------------------------

def _sum_piece_values(pieces: list, draft_year: int, config: EngineConfig) -> float:
    total = 0.0
    for piece in pieces:
        if isinstance(piece, CurrentPickPiece):
            total += get_pick_value(piece.overall)
        elif isinstance(piece, FuturePickPiece):
            total += get_future_pick_value(piece.round, max(1, piece.year - draft_year), config)
        else:
            raise TypeError(f"Unknown trade piece: {piece!r}")
    return total


def analyze_trades_for_team(
    team: str,
    trades: list[Trade],
    draft_year: int,
    config: EngineConfig = engine_config,
) -> float:
    """Net capital a team gained (positive) or gave away across accepted trades."""
    net = 0.0
    for trade in trades:
        if trade.status != TradeStatus.ACCEPTED:
            continue
        if team == trade.proposer_team:
            gives, receives = trade.proposer_gives, trade.proposer_receives
        elif team == trade.recipient_team:
            gives, receives = trade.proposer_receives, trade.proposer_gives
        else:
            continue
        net += _sum_piece_values(receives, draft_year, config) - _sum_piece_values(gives, draft_year, config)
    return net


def analyze_all_trades(
    trades: list[Trade],
    draft_year: int,
    config: EngineConfig = engine_config,
) -> list[TradeAnalysis]:
    analyses = []
    for trade in trades:
        if trade.status != TradeStatus.ACCEPTED:
            continue
        give_value = _sum_piece_values(trade.proposer_gives, draft_year, config)
        receive_value = _sum_piece_values(trade.proposer_receives, draft_year, config)
        proposer_net = receive_value - give_value

        # Within 5% of the bigger side counts as even
        if abs(proposer_net) <= max(give_value, receive_value) * 0.05:
            winner = "even"
        elif proposer_net > 0:
            winner = trade.proposer_team
        else:
            winner = trade.recipient_team

        analyses.append(TradeAnalysis(
            trade_id=trade.id,
            proposer_team=trade.proposer_team,
            recipient_team=trade.recipient_team,
            proposer_net_value=_round_half_up(proposer_net, 1),
            recipient_net_value=_round_half_up(-proposer_net, 1),
            winner=winner,
        ))
    return analyses


# ---------------------------------------------------------------------------
# Best-player-available baseline
# ---------------------------------------------------------------------------

def compute_optimal_baseline(picks: list[Pick], players: dict[str, Candidate]) -> list[OptimalPick]:
    """At each actual pick, the best-ranked player not yet taken by any earlier pick."""
    by_rank = sorted(players.values(), key=lambda p: p.consensus_rank)
    taken: set[str] = set()

    baseline = []
    for pick in sorted(picks, key=lambda p: p.overall):
        actual = players.get(pick.player_id)
        optimal = next((p for p in by_rank if p.id not in taken), None)
        taken.add(pick.player_id)

        baseline.append(OptimalPick(
            overall=pick.overall,
            actual_player_id=pick.player_id,
            optimal_player_id=optimal.id if optimal else pick.player_id,
            actual_rank=actual.consensus_rank if actual else pick.overall,
            optimal_rank=optimal.consensus_rank if optimal else pick.overall,
        ))
    return baseline


# ---------------------------------------------------------------------------
# Recap
# ---------------------------------------------------------------------------

def generate_draft_recap(
    draft: Draft,
    picks: list[Pick],
    players: dict[str, Candidate],
    team_needs: dict[str, list[Position]],
    trades: list[Trade],
    board_rankings: Optional[list[str]] = None,
    config: EngineConfig = engine_config,
) -> DraftRecap:
    """Grade every pick and team of a finished draft.

    Each team's needs shrink as its own picks are graded, so a second
    corner is not rewarded for a need the first already filled.
    """
    taken: set[str] = set()
    grades_by_team: dict[str, list[PickGrade]] = {}
    drafted_by_team: dict[str, list[Position]] = {}

    for pick in sorted(picks, key=lambda p: p.overall):
        player = players.get(pick.player_id)
        if player is None:
            logger.warning(f"Recap for {draft.id}: unknown player {pick.player_id} at pick #{pick.overall}")
            continue

        available = [p for p in players.values() if p.id not in taken]
        drafted = drafted_by_team.get(pick.team, [])
        effective_needs = get_effective_needs(team_needs.get(pick.team, []), drafted)

        grade = grade_pick(pick, player, effective_needs, available, board_rankings)
        grades_by_team.setdefault(pick.team, []).append(grade)
        drafted_by_team[pick.team] = [*drafted, player.position]
        taken.add(pick.player_id)

    all_surpluses = [sum(g.surplus_value for g in grades) for grades in grades_by_team.values()]
    draft_year = draft.config.year

    team_grades = [
        grade_team_draft(
            team,
            grades,
            team_needs.get(team, []),
            all_surpluses,
            analyze_trades_for_team(team, trades, draft_year, config),
        )
        for team, grades in grades_by_team.items()
    ]
    team_grades.sort(key=lambda g: g.overall_grade, reverse=True)

    class_grade = _round_half_up(sum(g.overall_grade for g in team_grades) / len(team_grades)) if team_grades else 50

    return DraftRecap(
        draft_id=draft.id,
        team_grades=team_grades,
        overall_class_grade=class_grade,
        trade_analysis=analyze_all_trades(trades, draft_year, config),
        optimal_comparison=compute_optimal_baseline(picks, players),
    )


# ---------------------------------------------------------------------------
# Live pick suggestion
# ---------------------------------------------------------------------------

def suggest_pick(
    available: list[Candidate],
    team_needs: list[Position],
    pick_overall: int,
    board_rankings: Optional[list[str]] = None,
) -> Optional[SuggestedPick]:
    """Best candidate for the slot on the advisory scale (value weighs +/-35)."""
    if not available:
        return None

    board_index = {pid: i + 1 for i, pid in enumerate(board_rankings or [])}
    slot_weight = _slot_weight(pick_overall)

    best: Optional[SuggestedPick] = None
    for player in available:
        rank = board_index.get(player.id, player.consensus_rank)
        value_score = _value_dimension(pick_overall - rank, pick_overall, scale=35.0)
        pos_score = (positional_multiplier(player.position) - 1.0) * slot_weight * 15
        need_index = _need_index(player.position, team_needs)
        need_score = _need_reward(need_index)

        total = _round_half_up(50 + value_score + pos_score + need_score)
        if best is not None and total <= best.score:
            continue

        if need_index is not None and need_score >= value_score and need_score >= pos_score:
            reason = f"Fills #{need_index + 1} need at {player.position.value}"
        elif pos_score >= value_score and pos_score > 0:
            reason = f"Premium {player.position.value} at a value slot"
        else:
            reason = f"BPA, ranked #{rank}"
        best = SuggestedPick(player_id=player.id, score=total, reason=reason)

    return best
