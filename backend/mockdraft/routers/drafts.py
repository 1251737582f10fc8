"""Draft session and trade endpoints with WebSocket broadcasting."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from ..config import engine_config
from ..errors import DraftError
from ..models.candidate import Position
from ..models.draft import CpuSpeed, DraftConfig, DraftSlot, DraftStatus, FuturePickSeed
from ..models.trade import TradePiece, TradeStatus
from ..services import draft_session as sessions
from ..services.draft_capital import evaluate_pick_swap, get_pick_round
from ..services.draft_state import cpu_speed_delay
from ..services.trade_evaluator import receives_new_round1
from ..services.trade_validator import get_available_current_picks, get_available_future_picks
from ..utils.nfl_teams import normalize_team

logger = logging.getLogger(__name__)

router = APIRouter()

# WebSocket connections list for broadcasting
_ws_connections: list = []


class CreateDraftRequest(BaseModel):
    created_by: str
    name: Optional[str] = None
    config: DraftConfig = DraftConfig()
    team_order: Optional[list[str]] = None
    season_slots: Optional[list[DraftSlot]] = None
    team_assignments: Optional[dict[str, Optional[str]]] = None
    team_needs: Optional[dict[str, list[Position]]] = None
    future_pick_seeds: Optional[dict[str, Optional[list[FuturePickSeed]]]] = None
    board_rankings: Optional[list[str]] = None
    positional_weights: Optional[dict[str, float]] = None


class JoinRequest(BaseModel):
    participant_id: str
    team: Optional[str] = None
    display_name: Optional[str] = None


class PickRequest(BaseModel):
    participant_id: str
    player_id: str


class ClockExpiredRequest(BaseModel):
    overall: int


class TradeProposalRequest(BaseModel):
    proposer_id: str
    recipient_team: str
    proposer_gives: list[TradePiece]
    proposer_receives: list[TradePiece]
    is_force_trade: bool = False


class TradeActionRequest(BaseModel):
    participant_id: str


class PickSwapRequest(BaseModel):
    giving_picks: list[int]
    receiving_picks: list[int]
    # With both set, picks the participant already controls carry no premium
    draft_id: Optional[str] = None
    participant_id: Optional[str] = None


def _http_error(e: DraftError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_dict())


async def _broadcast(message: dict) -> None:
    """Broadcast a message to all connected WebSocket clients."""
    for ws in _ws_connections.copy():
        try:
            await ws.send_json(message)
        except Exception:
            if ws in _ws_connections:
                _ws_connections.remove(ws)


async def _run_cpu_turns(draft_id: str, background_tasks: BackgroundTasks) -> list[dict]:
    """Run CPU picks now when the speed is instant, otherwise pace them in the background."""
    draft = sessions.get_draft(draft_id)
    if draft.config.cpu_speed == CpuSpeed.INSTANT:
        picks = [p.model_dump(mode="json") for p in sessions.run_cpu_cascade(draft_id)]
        if picks:
            await _broadcast({"type": "cpu_picks", "draft_id": draft_id, "data": picks})
        return picks
    background_tasks.add_task(_paced_cpu_turns, draft_id)
    return []


async def _paced_cpu_turns(draft_id: str) -> None:
    delay = cpu_speed_delay(sessions.get_draft(draft_id).config.cpu_speed)
    while True:
        await asyncio.sleep(delay)
        try:
            pick = sessions.advance_single_cpu_pick(draft_id)
        except DraftError as e:
            logger.warning(f"Paced CPU pick stopped in draft {draft_id}: {e.message}")
            return
        if pick is None:
            return
        await _broadcast({"type": "pick", "draft_id": draft_id, "data": pick.model_dump(mode="json")})


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------

@router.post("")
async def create_draft(req: CreateDraftRequest):
    """Create a draft in the lobby."""
    team_order = [normalize_team(t) or t.upper() for t in req.team_order] if req.team_order else None
    try:
        draft = sessions.create_draft(
            req.created_by,
            config=req.config,
            name=req.name,
            team_order=team_order,
            season_slots=req.season_slots,
            team_assignments=req.team_assignments,
            team_needs=req.team_needs,
            future_pick_seeds=req.future_pick_seeds,
            board_rankings=req.board_rankings,
            positional_weights=req.positional_weights,
        )
    except DraftError as e:
        raise _http_error(e)
    return draft.model_dump(mode="json")


@router.get("")
async def list_drafts(status: Optional[DraftStatus] = None):
    drafts = sessions.list_drafts(status)
    return {"drafts": [d.model_dump(mode="json") for d in drafts], "count": len(drafts)}


@router.post("/trade-value")
async def trade_value(req: PickSwapRequest):
    """Quick capital comparison of a pick-for-pick swap, optionally against a live draft."""
    if req.draft_id and req.participant_id:
        try:
            draft = sessions.get_draft(req.draft_id)
        except DraftError as e:
            raise _http_error(e)
        acquiring_round1 = receives_new_round1(req.receiving_picks, req.participant_id, draft)
    else:
        acquiring_round1 = any(get_pick_round(p) == 1 for p in req.receiving_picks)
    return evaluate_pick_swap(req.giving_picks, req.receiving_picks, acquiring_round1=acquiring_round1)


@router.get("/{draft_id}")
async def get_draft(draft_id: str):
    try:
        draft = sessions.get_draft(draft_id)
    except DraftError as e:
        raise _http_error(e)
    return {
        "draft": draft.model_dump(mode="json"),
        "picks": [p.model_dump(mode="json") for p in sessions.get_picks(draft_id)],
        "on_the_clock": draft.current_slot.model_dump(mode="json") if draft.current_slot else None,
    }


@router.post("/{draft_id}/join")
async def join_draft(draft_id: str, req: JoinRequest):
    team = (normalize_team(req.team) or req.team.upper()) if req.team else None
    try:
        draft = sessions.join_draft(draft_id, req.participant_id, team=team, display_name=req.display_name)
    except DraftError as e:
        raise _http_error(e)
    await _broadcast({"type": "draft_status", "draft_id": draft_id, "data": draft.model_dump(mode="json")})
    return draft.model_dump(mode="json")


@router.post("/{draft_id}/start")
async def start_draft(draft_id: str, background_tasks: BackgroundTasks):
    """Start the draft and run any CPU picks at the top of the order."""
    try:
        draft = sessions.start_draft(draft_id)
        cpu_picks = await _run_cpu_turns(draft_id, background_tasks)
    except DraftError as e:
        raise _http_error(e)
    await _broadcast({"type": "draft_status", "draft_id": draft_id, "data": {"status": draft.status.value}})
    return {"draft": sessions.get_draft(draft_id).model_dump(mode="json"), "cpu_picks": cpu_picks}


async def _set_status(draft_id: str, action) -> dict:
    try:
        draft = action(draft_id)
    except DraftError as e:
        raise _http_error(e)
    await _broadcast({"type": "draft_status", "draft_id": draft_id, "data": {"status": draft.status.value}})
    return draft.model_dump(mode="json")


@router.post("/{draft_id}/pause")
async def pause_draft(draft_id: str):
    return await _set_status(draft_id, sessions.pause_draft)


@router.post("/{draft_id}/resume")
async def resume_draft(draft_id: str, background_tasks: BackgroundTasks):
    draft = await _set_status(draft_id, sessions.resume_draft)
    cpu_picks = await _run_cpu_turns(draft_id, background_tasks)
    return {"draft": draft, "cpu_picks": cpu_picks}


@router.post("/{draft_id}/cancel")
async def cancel_draft(draft_id: str):
    return await _set_status(draft_id, sessions.cancel_draft)


# ---------------------------------------------------------------------------
# Picks
# ---------------------------------------------------------------------------

@router.get("/{draft_id}/picks")
async def list_picks(draft_id: str):
    try:
        picks = sessions.get_picks(draft_id)
    except DraftError as e:
        raise _http_error(e)
    return [p.model_dump(mode="json") for p in picks]


@router.post("/{draft_id}/picks")
async def make_pick(draft_id: str, req: PickRequest, background_tasks: BackgroundTasks):
    """Record a human pick, broadcast it, then let CPU teams pick."""
    try:
        pick = sessions.record_pick(draft_id, req.participant_id, req.player_id)
    except DraftError as e:
        raise _http_error(e)

    pick_data = pick.model_dump(mode="json")
    await _broadcast({"type": "pick", "draft_id": draft_id, "data": pick_data})

    try:
        cpu_picks = await _run_cpu_turns(draft_id, background_tasks)
    except DraftError as e:
        raise _http_error(e)
    return {"pick": pick_data, "cpu_picks": cpu_picks, "draft": sessions.get_draft(draft_id).model_dump(mode="json")}


@router.post("/{draft_id}/cpu-advance")
async def cpu_advance(draft_id: str):
    """Make a single CPU pick if a CPU team is on the clock."""
    try:
        pick = sessions.advance_single_cpu_pick(draft_id)
    except DraftError as e:
        raise _http_error(e)
    if pick is None:
        return {"pick": None}
    pick_data = pick.model_dump(mode="json")
    await _broadcast({"type": "pick", "draft_id": draft_id, "data": pick_data})
    return {"pick": pick_data}


@router.post("/{draft_id}/clock-expired")
async def clock_expired(draft_id: str, req: ClockExpiredRequest, background_tasks: BackgroundTasks):
    """Auto-pick for an expired clock. Stale expiries return no pick."""
    try:
        pick = sessions.handle_clock_expired(draft_id, req.overall)
    except DraftError as e:
        raise _http_error(e)
    if pick is None:
        return {"pick": None, "stale": True, "cpu_picks": []}

    pick_data = pick.model_dump(mode="json")
    await _broadcast({"type": "pick", "draft_id": draft_id, "data": pick_data})
    cpu_picks = await _run_cpu_turns(draft_id, background_tasks)
    return {"pick": pick_data, "stale": False, "cpu_picks": cpu_picks}


@router.get("/{draft_id}/suggestion")
async def get_suggestion(draft_id: str):
    try:
        suggestion = sessions.suggest_for_current_pick(draft_id)
    except DraftError as e:
        raise _http_error(e)
    return suggestion.model_dump(mode="json") if suggestion else None


@router.get("/{draft_id}/recap")
async def get_recap(draft_id: str):
    try:
        recap = sessions.get_recap(draft_id)
    except DraftError as e:
        raise _http_error(e)
    return recap.model_dump(mode="json")


@router.post("/{draft_id}/save")
async def save_draft(draft_id: str):
    try:
        filepath = sessions.save_draft(draft_id)
    except DraftError as e:
        raise _http_error(e)
    return {"status": "saved", "filepath": filepath}


@router.post("/{draft_id}/load")
async def load_draft(draft_id: str):
    try:
        draft = sessions.load_draft(draft_id)
    except DraftError as e:
        raise _http_error(e)
    return draft.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------

@router.get("/{draft_id}/tradeable-picks")
async def tradeable_picks(draft_id: str, participant_id: Optional[str] = Query(None, description="Omit for CPU-controlled picks")):
    try:
        draft = sessions.get_draft(draft_id)
    except DraftError as e:
        raise _http_error(e)
    return {
        "current": [s.model_dump(mode="json") for s in get_available_current_picks(draft, participant_id)],
        "future": [fp.model_dump(mode="json") for fp in get_available_future_picks(draft, participant_id)],
    }


@router.post("/{draft_id}/trades")
async def propose_trade(draft_id: str, req: TradeProposalRequest):
    """Propose a trade. CPU teams answer immediately."""
    try:
        trade, evaluation = sessions.propose_trade(
            draft_id,
            req.proposer_id,
            normalize_team(req.recipient_team) or req.recipient_team.upper(),
            req.proposer_gives,
            req.proposer_receives,
            is_force_trade=req.is_force_trade,
        )
    except DraftError as e:
        raise _http_error(e)

    trade_data = trade.model_dump(mode="json")
    await _broadcast({"type": "trade", "draft_id": draft_id, "data": trade_data})
    return {
        "trade": trade_data,
        "evaluation": evaluation.model_dump(mode="json") if evaluation else None,
    }


@router.get("/{draft_id}/trades")
async def list_trades(draft_id: str, status: Optional[TradeStatus] = None):
    try:
        trades = sessions.list_trades(draft_id, status)
    except DraftError as e:
        raise _http_error(e)
    return [t.model_dump(mode="json") for t in trades]


async def _trade_action(draft_id: str, action, trade_id: str, participant_id: str) -> dict:
    try:
        trade = action(draft_id, trade_id, participant_id)
    except DraftError as e:
        raise _http_error(e)
    trade_data = trade.model_dump(mode="json")
    await _broadcast({"type": "trade", "draft_id": draft_id, "data": trade_data})
    return trade_data


@router.post("/{draft_id}/trades/{trade_id}/accept")
async def accept_trade(draft_id: str, trade_id: str, req: TradeActionRequest):
    return await _trade_action(draft_id, sessions.accept_trade, trade_id, req.participant_id)


@router.post("/{draft_id}/trades/{trade_id}/reject")
async def reject_trade(draft_id: str, trade_id: str, req: TradeActionRequest):
    return await _trade_action(draft_id, sessions.reject_trade, trade_id, req.participant_id)


@router.post("/{draft_id}/trades/{trade_id}/cancel")
async def cancel_trade(draft_id: str, trade_id: str, req: TradeActionRequest):
    return await _trade_action(draft_id, sessions.cancel_trade, trade_id, req.participant_id)


@router.post("/{draft_id}/trades/expire-stale")
async def expire_stale_trades(draft_id: str):
    """Expire pending trades older than the configured timeout."""
    try:
        expired = sessions.expire_stale_trades(draft_id, config=engine_config)
    except DraftError as e:
        raise _http_error(e)
    for trade in expired:
        await _broadcast({"type": "trade", "draft_id": draft_id, "data": trade.model_dump(mode="json")})
    return {"expired": [t.id for t in expired]}


async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint for real-time draft updates."""
    await websocket.accept()
    _ws_connections.append(websocket)
    try:
        while True:
            await websocket.receive_text()  # Keep alive
    except WebSocketDisconnect:
        if websocket in _ws_connections:
            _ws_connections.remove(websocket)
