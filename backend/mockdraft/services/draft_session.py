"""Draft session orchestration.

Holds drafts, picks and trades in memory and applies the engine's pure
functions to them. Each draft has its own lock, so a pick, a clock expiry
and a trade acceptance for the same draft never interleave.
"""

from __future__ import annotations

import json
import logging
import random
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterator, Optional

from pydantic import BaseModel

from ..config import EngineConfig, engine_config
from ..errors import (
    AuthorizationError,
    CandidateNotFoundError,
    DraftNotActiveError,
    DraftNotFoundError,
    InvalidInputError,
    NotYourTurnError,
    StateError,
    TradeNotFoundError,
    TradeNotPendingError,
    TradeParticipantError,
    TradesDisabledError,
)
from ..models.candidate import Candidate, Position
from ..models.draft import (
    Draft,
    DraftConfig,
    DraftSlot,
    DraftStatus,
    FuturePickSeed,
    Pick,
    TeamAssignmentMode,
)
from ..models.grades import DraftRecap, SuggestedPick
from ..models.trade import CpuTradeEvaluation, Trade, TradeStatus
from ..utils.nfl_teams import ALL_TEAM_IDS
from .candidate_catalog import get_candidates
from .cpu_selector import CpuPickOptions, get_effective_needs, get_team_drafted_positions, prepare_cpu_pick
from .draft_analytics import generate_draft_recap, suggest_pick
from .draft_state import (
    build_future_picks,
    filter_and_sort_pick_order,
    generate_pick_order,
    get_pick_controller,
    prepare_pick_record,
)
from .trade_evaluator import evaluate_cpu_trade
from .trade_executor import compute_trade_execution
from .trade_validator import validate_future_picks_owned, validate_ownership, validate_picks_available

logger = logging.getLogger(__name__)


class DraftSession(BaseModel):
    """Everything stored for one draft."""
    draft: Draft
    picks: list[Pick] = []
    trades: dict[str, Trade] = {}
    team_needs: dict[str, list[Position]] = {}
    board_rankings: Optional[list[str]] = None
    positional_weights: Optional[dict[str, float]] = None


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------

_sessions: dict[str, DraftSession] = {}
_locks: dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


@contextmanager
def _draft_lock(draft_id: str) -> Iterator[None]:
    with _locks_guard:
        lock = _locks.setdefault(draft_id, threading.Lock())
    with lock:
        yield


def _get_session(draft_id: str) -> DraftSession:
    session = _sessions.get(draft_id)
    if session is None:
        raise DraftNotFoundError(draft_id)
    return session


def get_draft(draft_id: str) -> Draft:
    return _get_session(draft_id).draft


def list_drafts(status: Optional[DraftStatus] = None) -> list[Draft]:
    drafts = [s.draft for s in _sessions.values()]
    if status is not None:
        drafts = [d for d in drafts if d.status == status]
    return sorted(drafts, key=lambda d: d.created_at)


def get_picks(draft_id: str) -> list[Pick]:
    return list(_get_session(draft_id).picks)


def clear_sessions():
    _sessions.clear()
    with _locks_guard:
        _locks.clear()


def _update_draft(session: DraftSession, **updates) -> Draft:
    session.draft = session.draft.model_copy(update={**updates, "updated_at": datetime.now()})
    return session.draft


def _pool(draft: Draft) -> dict[str, Candidate]:
    return get_candidates(draft.config.year)


def _available(draft: Draft) -> list[Candidate]:
    picked = set(draft.picked_player_ids)
    return [c for c in _pool(draft).values() if c.id not in picked]


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def create_draft(
    created_by: str,
    config: Optional[DraftConfig] = None,
    name: Optional[str] = None,
    team_order: Optional[list[str]] = None,
    season_slots: Optional[list[DraftSlot]] = None,
    team_assignments: Optional[dict[str, Optional[str]]] = None,
    team_needs: Optional[dict[str, list[Position]]] = None,
    future_pick_seeds: Optional[dict[str, Optional[list[FuturePickSeed]]]] = None,
    board_rankings: Optional[list[str]] = None,
    positional_weights: Optional[dict[str, float]] = None,
    engine: EngineConfig = engine_config,
) -> Draft:
    """Create a draft in the lobby.

    The pick order comes from *season_slots* cut to the configured rounds,
    or is generated from *team_order* (default: every NFL team).
    """
    config = config or DraftConfig()
    if config.rounds < 1:
        raise InvalidInputError("A draft needs at least one round")

    if season_slots:
        pick_order = filter_and_sort_pick_order(season_slots, config.rounds)
    else:
        pick_order = generate_pick_order(team_order or ALL_TEAM_IDS, config.rounds)
    if not pick_order:
        raise InvalidInputError("The pick order is empty")

    teams = list(dict.fromkeys(s.team for s in pick_order))
    assignments: dict[str, Optional[str]] = {team: None for team in teams}
    for team, participant in (team_assignments or {}).items():
        if team not in assignments:
            raise InvalidInputError(f"Team '{team}' has no picks in this draft")
        assignments[team] = participant or None

    draft = Draft(
        id=_new_id(),
        name=name,
        created_by=created_by,
        config=config,
        team_assignments=assignments,
        participants={created_by: created_by},
        pick_order=pick_order,
        future_picks=build_future_picks(config.year, teams, future_pick_seeds or {}, engine),
    )
    _sessions[draft.id] = DraftSession(
        draft=draft,
        team_needs=team_needs or {},
        board_rankings=board_rankings,
        positional_weights=positional_weights,
    )
    logger.info(f"Created draft {draft.id}: {len(pick_order)} picks over {config.rounds} round(s)")
    return draft


def join_draft(
    draft_id: str,
    participant_id: str,
    team: Optional[str] = None,
    display_name: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Draft:
    """Add a participant and give them a team (random in random-assignment mode)."""
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        draft = session.draft
        if draft.status != DraftStatus.LOBBY:
            raise StateError("Teams can only be claimed while the draft is in the lobby.")

        if team is None:
            if draft.config.team_assignment_mode != TeamAssignmentMode.RANDOM:
                raise InvalidInputError("Choose a team to join this draft")
            open_teams = [t for t, p in draft.team_assignments.items() if p is None]
            if not open_teams:
                raise StateError("Every team has already been claimed.")
            team = (rng or random.Random()).choice(open_teams)

        if team not in draft.team_assignments:
            raise InvalidInputError(f"Team '{team}' has no picks in this draft")
        owner = draft.team_assignments[team]
        if owner is not None and owner != participant_id:
            raise StateError(f"{team} has already been claimed.")

        draft = _update_draft(
            session,
            team_assignments={**draft.team_assignments, team: participant_id},
            participants={**draft.participants, participant_id: display_name or participant_id},
        )
        logger.info(f"Participant {participant_id} joined draft {draft_id} as {team}")
        return draft


def _transition(draft_id: str, allowed: tuple[DraftStatus, ...], target: DraftStatus) -> Draft:
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        if session.draft.status not in allowed:
            raise StateError(f"Cannot move a {session.draft.status.value} draft to {target.value}.")
        draft = _update_draft(session, status=target)
        logger.info(f"Draft {draft_id} is now {target.value}")
        return draft


def start_draft(draft_id: str) -> Draft:
    draft = get_draft(draft_id)
    if not _pool(draft):
        raise InvalidInputError(f"No candidates loaded for {draft.config.year}")
    return _transition(draft_id, (DraftStatus.LOBBY,), DraftStatus.ACTIVE)


def pause_draft(draft_id: str) -> Draft:
    return _transition(draft_id, (DraftStatus.ACTIVE,), DraftStatus.PAUSED)


def resume_draft(draft_id: str) -> Draft:
    return _transition(draft_id, (DraftStatus.PAUSED,), DraftStatus.ACTIVE)


def cancel_draft(draft_id: str) -> Draft:
    return _transition(draft_id, (DraftStatus.LOBBY, DraftStatus.ACTIVE, DraftStatus.PAUSED), DraftStatus.CANCELLED)


# ---------------------------------------------------------------------------
# Picks
# ---------------------------------------------------------------------------

def _apply_pick(session: DraftSession, player_id: str, user_id: Optional[str]) -> Pick:
    """Record a pick on the session. Caller holds the draft lock."""
    draft = session.draft
    prepared = prepare_pick_record(draft, player_id, user_id, pick_id=_new_id())
    updates = prepared.draft_updates
    _update_draft(
        session,
        current_pick=updates.current_pick,
        current_round=updates.current_round,
        status=updates.status,
        picked_player_ids=[*draft.picked_player_ids, player_id],
    )
    session.picks.append(prepared.pick)
    if prepared.is_complete:
        logger.info(f"Draft {draft.id} complete after {len(session.picks)} picks")
    return prepared.pick


def current_controller(draft_id: str) -> Optional[str]:
    draft = get_draft(draft_id)
    slot = draft.current_slot
    return get_pick_controller(draft, slot) if slot else None


def record_pick(draft_id: str, participant_id: str, player_id: str) -> Pick:
    """Human pick for the slot on the clock."""
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        draft = session.draft
        if draft.status != DraftStatus.ACTIVE:
            raise DraftNotActiveError()

        slot = draft.current_slot
        if slot is not None and get_pick_controller(draft, slot) != participant_id:
            raise NotYourTurnError()
        if player_id not in _pool(draft):
            raise CandidateNotFoundError(player_id)

        return _apply_pick(session, player_id, participant_id)


def _cpu_options(session: DraftSession, config: EngineConfig) -> CpuPickOptions:
    draft_config = session.draft.config
    randomness = draft_config.cpu_randomness
    needs_weight = draft_config.cpu_needs_weight
    return CpuPickOptions(
        randomness=(config.default_cpu_randomness if randomness is None else randomness) / 100,
        needs_weight=(config.default_cpu_needs_weight if needs_weight is None else needs_weight) / 100,
        board_rankings=session.board_rankings,
        positional_weights=session.positional_weights,
    )


def _make_cpu_pick(session: DraftSession, rng: Optional[random.Random], config: EngineConfig) -> Pick:
    draft = session.draft
    slot = draft.current_slot
    team = slot.controlling_team
    choice = prepare_cpu_pick(
        team,
        draft.pick_order,
        draft.picked_player_ids,
        _pool(draft),
        _available(draft),
        session.team_needs.get(team, []),
        _cpu_options(session, config),
        rng=rng,
        config=config,
    )
    return _apply_pick(session, choice.id, None)


def _cpu_on_clock(draft: Draft) -> bool:
    slot = draft.current_slot
    return (
        draft.status == DraftStatus.ACTIVE
        and slot is not None
        and get_pick_controller(draft, slot) is None
    )


def advance_single_cpu_pick(
    draft_id: str,
    rng: Optional[random.Random] = None,
    config: EngineConfig = engine_config,
) -> Optional[Pick]:
    """Make one CPU pick if a CPU team is on the clock, else None."""
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        if not _cpu_on_clock(session.draft):
            return None
        return _make_cpu_pick(session, rng, config)


def run_cpu_cascade(
    draft_id: str,
    rng: Optional[random.Random] = None,
    config: EngineConfig = engine_config,
) -> list[Pick]:
    """Make CPU picks until a human is on the clock or the draft stops.

    Picks are made in batches under the draft lock. Between batches the lock
    is released, so a pause or cancel lands within one batch.
    """
    batch_size = max(1, config.cascade_status_check_interval)
    picks: list[Pick] = []
    while True:
        with _draft_lock(draft_id):
            session = _get_session(draft_id)
            for _ in range(batch_size):
                if not _cpu_on_clock(session.draft):
                    break
                picks.append(_make_cpu_pick(session, rng, config))
            else:
                continue
        break

    if picks:
        logger.info(f"CPU cascade in draft {draft_id}: {len(picks)} pick(s), now at #{get_draft(draft_id).current_pick}")
    return picks


def handle_clock_expired(
    draft_id: str,
    overall: int,
    rng: Optional[random.Random] = None,
    config: EngineConfig = engine_config,
) -> Optional[Pick]:
    """Auto-pick for an expired clock, unless that slot has already been filled."""
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        draft = session.draft
        slot = draft.current_slot
        if draft.status != DraftStatus.ACTIVE or slot is None or slot.overall != overall:
            logger.debug(f"Ignoring stale clock expiry for pick #{overall} in draft {draft_id}")
            return None
        logger.info(f"Clock expired on pick #{overall} in draft {draft_id}, auto-picking")
        return _make_cpu_pick(session, rng, config)


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------

def _team_of(draft: Draft, participant_id: str) -> Optional[str]:
    return next((team for team, pid in draft.team_assignments.items() if pid == participant_id), None)


def _execute_trade(session: DraftSession, trade: Trade) -> Trade:
    """Revalidate against the current snapshot and apply. Caller holds the lock."""
    draft = session.draft
    validate_picks_available(trade, draft)
    if not trade.is_force_trade:
        validate_ownership(trade.proposer_id, trade.proposer_gives, draft)
        validate_ownership(trade.recipient_id, trade.proposer_receives, draft)
    validate_future_picks_owned(trade.proposer_team, trade.proposer_gives, draft)
    validate_future_picks_owned(trade.recipient_team, trade.proposer_receives, draft)

    execution = compute_trade_execution(trade, draft)
    _update_draft(session, pick_order=execution.pick_order, future_picks=execution.future_picks)
    return _resolve_trade(session, trade, TradeStatus.ACCEPTED)


def _resolve_trade(session: DraftSession, trade: Trade, status: TradeStatus) -> Trade:
    trade = trade.model_copy(update={"status": status, "resolved_at": datetime.now()})
    session.trades[trade.id] = trade
    logger.info(f"Trade {trade.id} in draft {trade.draft_id} {status.value}")
    return trade


def propose_trade(
    draft_id: str,
    proposer_id: str,
    recipient_team: str,
    proposer_gives: list,
    proposer_receives: list,
    is_force_trade: bool = False,
    config: EngineConfig = engine_config,
) -> tuple[Trade, Optional[CpuTradeEvaluation]]:
    """Propose a trade. CPU counterparts answer immediately; force trades skip consent."""
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        draft = session.draft
        if not draft.config.trades_enabled:
            raise TradesDisabledError()
        if draft.status != DraftStatus.ACTIVE:
            raise DraftNotActiveError()
        if not proposer_gives or not proposer_receives:
            raise InvalidInputError("A trade needs at least one pick on each side")

        proposer_team = _team_of(draft, proposer_id)
        if proposer_team is None:
            raise AuthorizationError("You don't control a team in this draft.")
        if recipient_team not in draft.team_assignments:
            raise InvalidInputError(f"Team '{recipient_team}' has no picks in this draft")
        if recipient_team == proposer_team:
            raise InvalidInputError("Cannot trade with yourself")
        recipient_id = draft.team_assignments[recipient_team]
        if recipient_id == proposer_id:
            raise InvalidInputError("Cannot trade with yourself")

        trade = Trade(
            id=_new_id(),
            draft_id=draft_id,
            proposer_id=proposer_id,
            proposer_team=proposer_team,
            recipient_id=recipient_id,
            recipient_team=recipient_team,
            proposer_gives=proposer_gives,
            proposer_receives=proposer_receives,
            is_force_trade=is_force_trade,
        )

        validate_picks_available(trade, draft)
        validate_ownership(proposer_id, trade.proposer_gives, draft)
        validate_future_picks_owned(proposer_team, trade.proposer_gives, draft)
        if not is_force_trade:
            validate_ownership(recipient_id, trade.proposer_receives, draft)
        validate_future_picks_owned(recipient_team, trade.proposer_receives, draft)

        session.trades[trade.id] = trade
        logger.info(f"Trade {trade.id} proposed in draft {draft_id}: {proposer_team} -> {recipient_team}")

        if is_force_trade:
            return _execute_trade(session, trade), None

        if recipient_id is None:
            evaluation = evaluate_cpu_trade(trade, draft, config)
            logger.info(f"CPU {recipient_team} evaluated trade {trade.id}: {evaluation.reason}")
            if evaluation.accept:
                return _execute_trade(session, trade), evaluation
            return _resolve_trade(session, trade, TradeStatus.REJECTED), evaluation

        return trade, None


def _pending_trade(session: DraftSession, trade_id: str) -> Trade:
    trade = session.trades.get(trade_id)
    if trade is None:
        raise TradeNotFoundError(trade_id)
    if trade.status != TradeStatus.PENDING:
        raise TradeNotPendingError()
    return trade


def accept_trade(draft_id: str, trade_id: str, participant_id: str) -> Trade:
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        if not session.draft.config.trades_enabled:
            raise TradesDisabledError()
        if session.draft.status != DraftStatus.ACTIVE:
            raise DraftNotActiveError()
        trade = _pending_trade(session, trade_id)
        if trade.recipient_id != participant_id:
            raise TradeParticipantError("recipient", "accept")
        return _execute_trade(session, trade)


def reject_trade(draft_id: str, trade_id: str, participant_id: str) -> Trade:
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        trade = _pending_trade(session, trade_id)
        if trade.recipient_id != participant_id:
            raise TradeParticipantError("recipient", "reject")
        return _resolve_trade(session, trade, TradeStatus.REJECTED)


def cancel_trade(draft_id: str, trade_id: str, participant_id: str) -> Trade:
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        trade = _pending_trade(session, trade_id)
        if trade.proposer_id != participant_id:
            raise TradeParticipantError("proposer", "cancel")
        return _resolve_trade(session, trade, TradeStatus.CANCELLED)


def expire_trade(draft_id: str, trade_id: str) -> Trade:
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        return _resolve_trade(session, _pending_trade(session, trade_id), TradeStatus.EXPIRED)


def expire_stale_trades(
    draft_id: str,
    now: Optional[datetime] = None,
    config: EngineConfig = engine_config,
) -> list[Trade]:
    """Expire pending trades older than the trade timeout."""
    now = now or datetime.now()
    cutoff = now - timedelta(seconds=config.trade_timeout_seconds)
    with _draft_lock(draft_id):
        session = _get_session(draft_id)
        stale = [
            t for t in session.trades.values()
            if t.status == TradeStatus.PENDING and t.proposed_at <= cutoff
        ]
        return [_resolve_trade(session, t, TradeStatus.EXPIRED) for t in stale]


def list_trades(draft_id: str, status: Optional[TradeStatus] = None) -> list[Trade]:
    trades = list(_get_session(draft_id).trades.values())
    if status is not None:
        trades = [t for t in trades if t.status == status]
    return sorted(trades, key=lambda t: t.proposed_at)


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

def get_recap(
    draft_id: str,
    board_rankings: Optional[list[str]] = None,
    config: EngineConfig = engine_config,
) -> DraftRecap:
    session = _get_session(draft_id)
    draft = session.draft
    if draft.status != DraftStatus.COMPLETE:
        raise StateError("Recap is available once the draft is complete.")
    return generate_draft_recap(
        draft,
        session.picks,
        _pool(draft),
        session.team_needs,
        list(session.trades.values()),
        board_rankings if board_rankings is not None else session.board_rankings,
        config=config,
    )


def suggest_for_current_pick(draft_id: str) -> Optional[SuggestedPick]:
    """Advisory pick for whoever is on the clock."""
    session = _get_session(draft_id)
    draft = session.draft
    slot = draft.current_slot
    if draft.status != DraftStatus.ACTIVE or slot is None:
        raise DraftNotActiveError()

    team = slot.controlling_team
    drafted = get_team_drafted_positions(draft.pick_order, draft.picked_player_ids, team, _pool(draft))
    needs = get_effective_needs(session.team_needs.get(team, []), drafted)
    return suggest_pick(_available(draft), needs, slot.overall, session.board_rankings)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def save_draft(draft_id: str, config: EngineConfig = engine_config) -> str:
    """Save a draft with its picks and trades to data/drafts/<id>.json."""
    session = _get_session(draft_id)
    config.drafts_dir.mkdir(parents=True, exist_ok=True)
    filepath = config.drafts_dir / f"{draft_id}.json"

    with open(filepath, "w") as f:
        json.dump(session.model_dump(mode="json"), f, indent=2, default=str)

    logger.info(f"Saved draft {draft_id} to {filepath}")
    return str(filepath)


def load_draft(draft_id: str, config: EngineConfig = engine_config) -> Draft:
    """Load a saved draft, replacing any in-memory copy."""
    filepath = config.drafts_dir / f"{draft_id}.json"
    if not filepath.exists():
        raise DraftNotFoundError(draft_id)

    with open(filepath, "r") as f:
        data = json.load(f)

    session = DraftSession(**data)
    _sessions[session.draft.id] = session
    logger.info(f"Loaded draft {session.draft.id} at pick #{session.draft.current_pick}")
    return session.draft


def load_persisted_drafts(config: EngineConfig = engine_config) -> int:
    """Load every saved draft from disk. Called on startup."""
    config.drafts_dir.mkdir(parents=True, exist_ok=True)
    loaded = 0
    for f in sorted(config.drafts_dir.glob("*.json")):
        try:
            load_draft(f.stem, config)
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to load {f.name}: {e}")
            continue
        loaded += 1
    return loaded
