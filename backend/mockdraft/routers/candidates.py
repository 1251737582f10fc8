"""Candidate upload and listing endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from ..services.candidate_catalog import (
    clear_candidates,
    get_candidate,
    get_candidates,
    list_saved_files,
    list_years,
    load_candidates_csv,
    merge_stats_csv,
)
from ..utils.positions import POSITION_GROUPS, parse_position

router = APIRouter()


@router.post("/upload")
async def upload_candidates(
    file: UploadFile = File(...),
    year: int = Query(..., description="Draft year the prospects belong to"),
):
    """Upload a prospect big-board CSV. Saved to disk for persistence."""
    content = await file.read()
    try:
        candidates = load_candidates_csv(content, year, _filename=file.filename or "upload.csv")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "message": f"Loaded {len(candidates)} prospects for {year} from {file.filename}",
        "candidate_count": len(candidates),
        "total_in_pool": len(get_candidates(year)),
    }


@router.post("/stats")
async def upload_stats(
    file: UploadFile = File(...),
    year: int = Query(...),
):
    """Upload a college stats CSV to merge into the year's prospects."""
    if not get_candidates(year):
        raise HTTPException(status_code=400, detail="Upload prospects first before adding stats")
    content = await file.read()
    try:
        result = merge_stats_csv(content, year)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "message": f"Matched {result['matched']} prospects, {result['unmatched']} unmatched",
        **result,
    }


@router.get("/files")
async def list_candidate_files():
    files = list_saved_files()
    return {"files": files, "count": len(files)}


@router.delete("/clear")
async def clear_all_candidates(delete_files: bool = Query(True)):
    clear_candidates(delete_files=delete_files)
    return {"message": "All prospects cleared", "files_deleted": delete_files}


@router.get("")
async def list_candidates(
    year: Optional[int] = None,
    position: Optional[str] = Query(None, description="A position (e.g. EDGE, DE) or a group (OL, DEF, WR_TE)"),
    school: Optional[str] = None,
):
    """List prospects for a year, best consensus rank first."""
    if year is None:
        years = list_years()
        if not years:
            return {"candidates": [], "count": 0}
        year = years[-1]

    candidates = list(get_candidates(year).values())
    if position:
        group = POSITION_GROUPS.get(position.upper())
        if group is None:
            parsed = parse_position(position)
            if parsed is None:
                raise HTTPException(status_code=400, detail=f"Unknown position '{position}'")
            group = [parsed]
        candidates = [c for c in candidates if c.position in group]
    if school:
        candidates = [c for c in candidates if c.school.lower() == school.lower()]

    candidates.sort(key=lambda c: c.consensus_rank)
    return {
        "year": year,
        "candidates": [c.model_dump(mode="json") for c in candidates],
        "count": len(candidates),
    }


@router.get("/{candidate_id}")
async def get_candidate_detail(candidate_id: str, year: Optional[int] = None):
    candidate = get_candidate(candidate_id, year)
    if candidate is None:
        raise HTTPException(status_code=404, detail=f"Player '{candidate_id}' not found")
    return candidate.model_dump(mode="json")
