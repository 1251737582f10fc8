"""Ownership transfer for accepted trades."""

from __future__ import annotations

from ..models.draft import Draft, OwnerOverride
from ..models.trade import CurrentPickPiece, FuturePickPiece, Trade, TradeExecution


def _current_overalls(pieces: list) -> set[int]:
    overalls = set()
    for piece in pieces:
        if isinstance(piece, CurrentPickPiece):
            overalls.add(piece.overall)
        elif not isinstance(piece, FuturePickPiece):
            raise TypeError(f"Unknown trade piece: {piece!r}")
    return overalls


def _future_pieces(pieces: list) -> list[FuturePickPiece]:
    return [p for p in pieces if isinstance(p, FuturePickPiece)]


def compute_trade_execution(trade: Trade, draft: Draft) -> TradeExecution:
    """New pick order and future picks with the trade's ownership changes applied.

    Slots the proposer gives go to the recipient (explicit CPU override when
    the recipient is computer-controlled) and vice versa. Entries the trade
    does not reference are returned as-is.
    """
    given = _current_overalls(trade.proposer_gives)
    received = _current_overalls(trade.proposer_receives)

    pick_order = []
    for slot in draft.pick_order:
        if slot.overall in given:
            slot = slot.model_copy(update={
                "owner_override": OwnerOverride.to(trade.recipient_id),
                "team_override": trade.recipient_team,
            })
        elif slot.overall in received:
            slot = slot.model_copy(update={
                "owner_override": OwnerOverride.owned(trade.proposer_id),
                "team_override": trade.proposer_team,
            })
        pick_order.append(slot)

    future_given = _future_pieces(trade.proposer_gives)
    future_received = _future_pieces(trade.proposer_receives)

    future_picks = []
    for fp in draft.future_picks or []:
        if any(p.matches(fp) for p in future_given):
            fp = fp.model_copy(update={"owner_team": trade.recipient_team})
        elif any(p.matches(fp) for p in future_received):
            fp = fp.model_copy(update={"owner_team": trade.proposer_team})
        future_picks.append(fp)

    return TradeExecution(pick_order=pick_order, future_picks=future_picks)
