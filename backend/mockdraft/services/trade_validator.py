"""Trade validation and pick inventory queries."""

from __future__ import annotations

from typing import Optional

from ..errors import FuturePickNotControlledError, PickAlreadyMadeError, PickNotControlledError, PickNotFoundError
from ..models.draft import Draft, DraftSlot, FuturePick
from ..models.trade import CurrentPickPiece, FuturePickPiece, Trade
from .draft_state import get_pick_controller


def _unknown_piece(piece: object) -> TypeError:
    return TypeError(f"Unknown trade piece: {piece!r}")


def validate_picks_available(trade: Trade, draft: Draft) -> None:
    """Raise PickAlreadyMadeError if any current pick in the trade was already made.

    Future picks are always available. Run this against a fresh snapshot
    right before committing, not only when the trade is proposed.
    """
    for piece in trade.all_pieces:
        if isinstance(piece, CurrentPickPiece):
            if piece.overall < draft.current_pick:
                raise PickAlreadyMadeError(piece.overall)
        elif isinstance(piece, FuturePickPiece):
            continue
        else:
            raise _unknown_piece(piece)


def validate_ownership(participant_id: Optional[str], pieces: list, draft: Draft) -> None:
    """Raise unless *participant_id* controls every current pick in *pieces*.

    ``participant_id`` None checks CPU control. Future picks are checked by
    ``validate_future_picks_owned``.
    """
    for piece in pieces:
        if isinstance(piece, CurrentPickPiece):
            slot = draft.slot_for(piece.overall)
            if slot is None:
                raise PickNotFoundError(piece.overall)
            if get_pick_controller(draft, slot) != participant_id:
                raise PickNotControlledError(piece.overall)
        elif isinstance(piece, FuturePickPiece):
            continue
        else:
            raise _unknown_piece(piece)


def validate_future_picks_owned(team: str, pieces: list, draft: Draft) -> None:
    """Raise unless *team* currently owns every future pick in *pieces*."""
    for piece in pieces:
        if isinstance(piece, FuturePickPiece):
            owned = any(piece.matches(fp) and fp.owner_team == team for fp in draft.future_picks or [])
            if not owned:
                raise FuturePickNotControlledError(piece.year, piece.round)
        elif isinstance(piece, CurrentPickPiece):
            continue
        else:
            raise _unknown_piece(piece)


def get_picks_owned_by_team(team: str, draft: Draft) -> list[DraftSlot]:
    """Slots controlled by whoever controls *team* (including via trades)."""
    team_controller = draft.team_assignments.get(team)
    return [s for s in draft.pick_order if get_pick_controller(draft, s) == team_controller]


def get_available_current_picks(draft: Draft, participant_id: Optional[str]) -> list[DraftSlot]:
    """Unmade slots controlled by a participant."""
    return [
        s for s in draft.pick_order
        if s.overall >= draft.current_pick and get_pick_controller(draft, s) == participant_id
    ]


def get_available_future_picks(draft: Draft, participant_id: Optional[str]) -> list[FuturePick]:
    """Future picks owned by a team the participant controls."""
    return [
        fp for fp in draft.future_picks or []
        if draft.team_assignments.get(fp.owner_team) == participant_id
    ]


def get_team_future_picks(draft: Draft, team: str) -> list[FuturePick]:
    return [fp for fp in draft.future_picks or [] if fp.owner_team == team]
