"""Position parsing and grouping."""

from __future__ import annotations

from typing import Optional

from ..models.candidate import Position

# Alternate labels found in prospect rankings and combine results
POSITION_ALIASES: dict[str, Position] = {
    "T": Position.OT,
    "LT": Position.OT,
    "RT": Position.OT,
    "G": Position.OG,
    "IOL": Position.OG,
    "OL": Position.OG,
    "OC": Position.C,
    "DE": Position.EDGE,
    "OLB": Position.EDGE,
    "ED": Position.EDGE,
    "DT": Position.DL,
    "IDL": Position.DL,
    "NT": Position.DL,
    "ILB": Position.LB,
    "MLB": Position.LB,
    "DB": Position.CB,
    "FS": Position.S,
    "SS": Position.S,
    "SAF": Position.S,
    "HB": Position.RB,
    "FB": Position.RB,
    "PK": Position.K,
}

POSITION_GROUPS: dict[str, list[Position]] = {
    "QB": [Position.QB],
    "WR_TE": [Position.WR, Position.TE],
    "RB": [Position.RB],
    "OL": [Position.OT, Position.OG, Position.C],
    "DEF": [Position.EDGE, Position.DL, Position.LB, Position.CB, Position.S],
}


def parse_position(pos_str: str) -> Optional[Position]:
    """Parse a position label like 'EDGE', 'DT' or 'OT/OG' (first listed wins)."""
    if not pos_str:
        return None
    for sep in ["/", ",", "|"]:
        if sep in pos_str:
            pos_str = pos_str.split(sep)[0]
            break
    label = pos_str.strip().upper()
    if label in Position.__members__:
        return Position(label)
    return POSITION_ALIASES.get(label)
