"""Export endpoints for draft results."""

from __future__ import annotations

import io

import pandas as pd
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from ..errors import DraftError
from ..models.draft import DraftStatus
from ..services import draft_session as sessions
from ..services.candidate_catalog import get_candidates

router = APIRouter()


@router.get("/{draft_id}")
async def export_draft(
    draft_id: str,
    format: str = Query("csv", description="Export format: 'csv' or 'xlsx'"),
):
    """Export every pick in overall order.

    Columns: Overall, Round, Pick, Team, Player, Position, School,
    Consensus Rank, Value Delta, plus Grade and Label once the draft is complete.
    """
    try:
        draft = sessions.get_draft(draft_id)
        picks = sessions.get_picks(draft_id)
        recap = sessions.get_recap(draft_id) if draft.status == DraftStatus.COMPLETE else None
    except DraftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())

    if not picks:
        raise HTTPException(status_code=400, detail="No picks have been made in this draft")

    grades = {}
    if recap is not None:
        for team_grade in recap.team_grades:
            for g in team_grade.picks:
                grades[g.overall] = g

    pool = get_candidates(draft.config.year)
    rows = []
    for pick in sorted(picks, key=lambda p: p.overall):
        player = pool.get(pick.player_id)
        grade = grades.get(pick.overall)
        rows.append({
            "Overall": pick.overall,
            "Round": pick.round,
            "Pick": pick.pick,
            "Team": pick.team,
            "Player": player.name if player else pick.player_id,
            "Position": player.position.value if player else None,
            "School": player.school if player else None,
            "Consensus Rank": player.consensus_rank if player else None,
            "Value Delta": pick.overall - player.consensus_rank if player else None,
            "Grade": grade.pick_score if grade else None,
            "Label": grade.label.value if grade else None,
        })

    df = pd.DataFrame(rows)
    filename = f"draft_{draft_id}"

    if format.lower() == "xlsx":
        buf = io.BytesIO()
        with pd.ExcelWriter(buf, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Picks")
            if recap is not None:
                summary = pd.DataFrame([
                    {
                        "Team": t.team,
                        "Grade": t.overall_grade,
                        "Tier": t.tier,
                        "Trade Net Value": round(t.trade_net_value, 1),
                        "Needs Filled": f"{t.needs_filled}/{t.total_needs}",
                    }
                    for t in recap.team_grades
                ])
                summary.to_excel(writer, index=False, sheet_name="Team Grades")
        buf.seek(0)
        return StreamingResponse(
            buf,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={filename}.xlsx"},
        )
    else:
        buf = io.StringIO()
        df.to_csv(buf, index=False)
        buf.seek(0)
        return StreamingResponse(
            buf,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}.csv"},
        )
