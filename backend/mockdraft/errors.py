"""Draft error taxonomy.

Every error is a ``ValueError`` so callers that only care about "the request
was bad" can keep catching that. Routers use ``status_code`` and ``code`` to
tell "not your turn" apart from "trade stale" and "not found".
"""

from __future__ import annotations

from typing import Optional


class DraftError(ValueError):
    """Base class for all draft-related errors."""

    code = "DRAFT_ERROR"
    status_code = 400

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


# ---------------------------------------------------------------------------
# Input-invalid
# ---------------------------------------------------------------------------

class InvalidInputError(DraftError):
    code = "INVALID_INPUT"
    status_code = 400


class NoCandidatesError(InvalidInputError):
    code = "NO_CANDIDATES"

    def __init__(self):
        super().__init__("No available players")


# ---------------------------------------------------------------------------
# State-invalid
# ---------------------------------------------------------------------------

class StateError(DraftError):
    code = "INVALID_STATE"
    status_code = 409


class DraftNotActiveError(StateError):
    code = "DRAFT_NOT_ACTIVE"

    def __init__(self):
        super().__init__("This draft is not active.")


class DraftCompleteError(StateError):
    code = "DRAFT_COMPLETE"

    def __init__(self):
        super().__init__("No more picks in draft")


class PlayerAlreadyDraftedError(StateError):
    code = "PLAYER_ALREADY_DRAFTED"

    def __init__(self, player_name: Optional[str] = None):
        if player_name:
            super().__init__(f"{player_name} has already been drafted.")
        else:
            super().__init__("That player has already been drafted.")


class PickAlreadyMadeError(StateError):
    code = "PICK_ALREADY_MADE"

    def __init__(self, overall: int):
        super().__init__(f"Pick #{overall} has already been made")
        self.overall = overall


class TradeNotPendingError(StateError):
    code = "TRADE_NOT_PENDING"

    def __init__(self):
        super().__init__("This trade is no longer pending.")


class TradesDisabledError(StateError):
    code = "TRADES_DISABLED"

    def __init__(self):
        super().__init__("Trades are disabled for this draft.")


# ---------------------------------------------------------------------------
# Authorization-invalid
# ---------------------------------------------------------------------------

class AuthorizationError(DraftError):
    code = "UNAUTHORIZED"
    status_code = 403


class NotYourTurnError(AuthorizationError):
    code = "NOT_YOUR_TURN"

    def __init__(self):
        super().__init__("It's not your turn to pick.")


class PickNotControlledError(AuthorizationError):
    code = "PICK_NOT_CONTROLLED"

    def __init__(self, overall: int):
        super().__init__(f"You don't control pick #{overall}")
        self.overall = overall


class FuturePickNotControlledError(AuthorizationError):
    code = "FUTURE_PICK_NOT_CONTROLLED"

    def __init__(self, year: int, round_: int):
        super().__init__(f"You don't control the {year} round {round_} pick")


class TradeParticipantError(AuthorizationError):
    code = "TRADE_PARTICIPANT"

    def __init__(self, role: str, action: str):
        super().__init__(f"Only the {role} can {action} a trade")


# ---------------------------------------------------------------------------
# Not-found
# ---------------------------------------------------------------------------

class NotFoundError(DraftError):
    code = "NOT_FOUND"
    status_code = 404


class DraftNotFoundError(NotFoundError):
    code = "DRAFT_NOT_FOUND"

    def __init__(self, draft_id: str = ""):
        super().__init__(f"Draft '{draft_id}' not found" if draft_id else "Draft not found.")


class TradeNotFoundError(NotFoundError):
    code = "TRADE_NOT_FOUND"

    def __init__(self, trade_id: str = ""):
        super().__init__(f"Trade '{trade_id}' not found" if trade_id else "Trade not found.")


class PickNotFoundError(NotFoundError):
    code = "PICK_NOT_FOUND"

    def __init__(self, overall: int):
        super().__init__(f"Pick #{overall} not found")
        self.overall = overall


class CandidateNotFoundError(NotFoundError):
    code = "CANDIDATE_NOT_FOUND"

    def __init__(self, candidate_id: str):
        super().__init__(f"Player '{candidate_id}' not found")
