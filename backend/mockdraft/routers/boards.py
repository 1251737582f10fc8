"""Board generation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from ..models.board import BoardGenerationConfig
from ..services.board_generator import generate_board_rankings
from ..services.candidate_catalog import get_candidates

router = APIRouter()


class BoardRequest(BoardGenerationConfig):
    year: int


@router.post("/generate")
async def generate_board(req: BoardRequest):
    """Rank a year's prospects by weighted production, athleticism, conference and consensus."""
    pool = list(get_candidates(req.year).values())
    if not pool:
        raise HTTPException(status_code=400, detail=f"No prospects loaded for {req.year}")

    rankings = generate_board_rankings(pool, req)
    return {"year": req.year, "rankings": rankings, "count": len(rankings)}
