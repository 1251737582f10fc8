"""CPU trade evaluation.

A computer-controlled counterpart weighs a proposal with the draft capital
chart and accepts when it gets back at least ``trade_tolerance`` of what it
gives up.
"""

from __future__ import annotations

from typing import Optional

from ..config import EngineConfig, engine_config
from ..models.draft import Draft
from ..models.trade import CpuTradeEvaluation, CurrentPickPiece, FuturePickPiece, Trade
from .draft_capital import get_future_pick_value, get_pick_round, get_pick_value
from .draft_state import get_pick_controller


def piece_value(piece, draft_year: int, config: EngineConfig = engine_config) -> float:
    """Capital value of a single trade piece relative to *draft_year*."""
    if isinstance(piece, CurrentPickPiece):
        return get_pick_value(piece.overall)
    if isinstance(piece, FuturePickPiece):
        return get_future_pick_value(piece.round, piece.year - draft_year, config)
    raise TypeError(f"Unknown trade piece: {piece!r}")


def receives_new_round1(
    receiving: list[int], participant_id: Optional[str], draft: Draft, config: EngineConfig = engine_config
) -> bool:
    """True if any first-round slot in *receiving* is not already controlled by *participant_id*."""
    for overall in receiving:
        if get_pick_round(overall, config) != 1:
            continue
        slot = draft.slot_for(overall)
        if slot is None or get_pick_controller(draft, slot) != participant_id:
            return True
    return False


def is_acquiring_round1(trade: Trade, draft: Draft, config: EngineConfig = engine_config) -> bool:
    """True if the proposer receives a first-round slot it does not already control."""
    overalls = [p.overall for p in trade.proposer_receives if isinstance(p, CurrentPickPiece)]
    return receives_new_round1(overalls, trade.proposer_id, draft, config)


def evaluate_cpu_trade(trade: Trade, draft: Draft, config: EngineConfig = engine_config) -> CpuTradeEvaluation:
    # CPU gives what the proposer receives, and receives what the proposer gives
    draft_year = draft.config.year
    giving = sum(piece_value(p, draft_year, config) for p in trade.proposer_receives)
    receiving = sum(piece_value(p, draft_year, config) for p in trade.proposer_gives)

    premium = config.round1_premium if is_acquiring_round1(trade, draft, config) else 0.0
    receiving += premium

    net_value = receiving - giving
    threshold = giving * config.trade_tolerance
    accept = receiving >= threshold

    if accept:
        if net_value > 0:
            reason = f"CPU gains {net_value:.1f} points in value"
        else:
            reason = f"Trade is fair (within {round((1 - config.trade_tolerance) * 100)}% tolerance)"
    else:
        reason = f"CPU would lose {threshold - receiving:.1f} points beyond acceptable threshold"

    return CpuTradeEvaluation(
        accept=accept,
        reason=reason,
        cpu_giving_value=giving,
        cpu_receiving_value=receiving,
        net_value=net_value,
        premium=premium,
    )
