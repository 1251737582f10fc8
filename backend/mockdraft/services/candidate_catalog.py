"""Prospect CSV import, stats merging and the in-memory candidate catalog."""

from __future__ import annotations

import io
import logging
import re
from typing import Optional

import pandas as pd
from thefuzz import fuzz, process

from ..config import EngineConfig, engine_config
from ..models.candidate import Candidate, CandidateAttributes
from ..utils.positions import parse_position

logger = logging.getLogger(__name__)

# Column name mappings for common big-board and combine CSV exports
CANDIDATE_COLUMN_MAP = {
    "\ufeffName": "name",  # BOM-prefixed
    "Name": "name",
    "Player": "name",
    "ID": "id",
    "Id": "id",
    "id": "id",
    "Pos": "position",
    "POS": "position",
    "Position": "position",
    "School": "school",
    "College": "school",
    "Rank": "consensus_rank",
    "RK": "consensus_rank",
    "Consensus": "consensus_rank",
    "Consensus Rank": "consensus_rank",
    "Conference": "conference",
    "Conf": "conference",
    "Ht": "height",
    "Height": "height",
    "Wt": "weight",
    "Weight": "weight",
    "40": "forty_yard",
    "40yd": "forty_yard",
    "40 Yard": "forty_yard",
    "Forty": "forty_yard",
    "Vertical": "vertical",
    "Vert": "vertical",
    "Bench": "bench",
    "Bench Press": "bench",
    "Broad": "broad",
    "Broad Jump": "broad",
    "3Cone": "cone",
    "3 Cone": "cone",
    "Cone": "cone",
    "Shuttle": "shuttle",
    "Arm": "arm_length",
    "Arm Length": "arm_length",
    "Hand": "hand_size",
    "Hand Size": "hand_size",
}

STATS_COLUMN_MAP = {
    "\ufeffName": "name",
    "Name": "name",
    "Player": "name",
    "player": "name",
    "School": "school",
    "College": "school",
    "Team": "school",
    "team_name": "school",
}

MEASUREMENT_FIELDS = ("weight", "forty_yard", "vertical", "bench", "broad", "cone", "shuttle")
FRACTION_FIELDS = ("arm_length", "hand_size")
CORE_FIELDS = {"id", "name", "position", "school", "consensus_rank", "conference", "height"}

SCHOOL_NORMALIZE = {
    "MISS STATE": "MISSISSIPPI STATE",
    "MISS ST": "MISSISSIPPI STATE",
    "MISSISSIPPI ST": "MISSISSIPPI STATE",
    "MISSISSIPPI": "OLE MISS",
    "MIAMI FL": "MIAMI",
    "MIAMI (FL)": "MIAMI",
    "S CAROLINA": "SOUTH CAROLINA",
    "BC": "BOSTON COLLEGE",
    "VA TECH": "VIRGINIA TECH",
    "KANSAS ST": "KANSAS STATE",
    "IOWA ST": "IOWA STATE",
    "PITT": "PITTSBURGH",
    "N CAROLINA": "NORTH CAROLINA",
    "UNC": "NORTH CAROLINA",
    "FLORIDA ST": "FLORIDA STATE",
    "W VIRGINIA": "WEST VIRGINIA",
    "ARIZONA ST": "ARIZONA STATE",
    "S MISSISSIPPI": "SOUTHERN MISS",
    "TEXAS ST": "TEXAS STATE",
    "SAN DIEGO ST": "SAN DIEGO STATE",
    "N TEXAS": "NORTH TEXAS",
    "MICHIGAN ST": "MICHIGAN STATE",
    "BOISE ST": "BOISE STATE",
    "NDSU": "NORTH DAKOTA STATE",
    "CAL": "CALIFORNIA",
    "USF": "SOUTH FLORIDA",
}

# In-memory catalog: draft year -> candidate id -> candidate
_catalog: dict[int, dict[str, Candidate]] = {}


# ---------------------------------------------------------------------------
# Catalog access
# ---------------------------------------------------------------------------

def get_candidates(year: int) -> dict[str, Candidate]:
    return _catalog.get(year, {})


def get_candidate(candidate_id: str, year: Optional[int] = None) -> Optional[Candidate]:
    if year is not None:
        return _catalog.get(year, {}).get(candidate_id)
    for candidates in _catalog.values():
        if candidate_id in candidates:
            return candidates[candidate_id]
    return None


def list_years() -> list[int]:
    return sorted(_catalog)


def add_candidates(candidates: list[Candidate]) -> None:
    for c in candidates:
        _catalog.setdefault(c.year, {})[c.id] = c


def clear_candidates(delete_files: bool = False, config: EngineConfig = engine_config):
    _catalog.clear()
    if delete_files:
        config.candidates_dir.mkdir(parents=True, exist_ok=True)
        for f in config.candidates_dir.glob("*.csv"):
            f.unlink()


# ---------------------------------------------------------------------------
# Measurement parsing
# ---------------------------------------------------------------------------

def parse_height(raw) -> Optional[float]:
    """Inches from combine format (6020 = 6'2\" and 0/8) or plain inches."""
    try:
        num = int(float(str(raw).strip()))
    except (TypeError, ValueError):
        return None
    if num >= 4000:
        feet = num // 1000
        inches = (num % 1000) // 10
        eighths = num % 10
        return feet * 12 + inches + eighths / 8
    if 48 <= num < 100:
        return float(raw)
    return None


def parse_fraction(raw) -> Optional[float]:
    """Inches from combine fraction format (3038 = 30 3/8) or plain decimals."""
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    if value >= 100:
        num = int(value)
        return num // 100 + ((num % 100) // 10) / 8
    if value > 0:
        return value
    return None


def parse_stat_value(raw) -> Optional[float | str]:
    """Numbers stay numbers, percentages become floats, blanks become None."""
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return None
    if text.endswith("%"):
        text = text[:-1].strip()
    try:
        return float(text)
    except ValueError:
        return text


def _float_or_none(raw) -> Optional[float]:
    if raw is None or pd.isna(raw):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Name and school normalization
# ---------------------------------------------------------------------------

def normalize_school(raw: str) -> str:
    upper = str(raw or "").strip().upper()
    return SCHOOL_NORMALIZE.get(upper, upper)


def normalize_name(name: str) -> str:
    """Lowercase, drop punctuation and generational suffixes."""
    name = str(name).lower().strip()
    name = re.sub(r"[.']", "", name)
    name = re.sub(r"\s+(jr|sr|ii|iii|iv|v)$", "", name)
    name = re.sub(r"\s+", " ", name).strip()
    return name


def match_key(name: str, school: str) -> str:
    return f"{normalize_name(name)}|{normalize_school(school)}"


def _make_id(name: str, school: str, year: int) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", f"{normalize_name(name)} {normalize_school(school).lower()}").strip("-")
    return f"{year}-{slug}"


def _normalize_columns(df: pd.DataFrame, col_map: dict) -> pd.DataFrame:
    rename = {orig: target for orig, target in col_map.items() if orig in df.columns}
    return df.rename(columns=rename)


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def _save_csv_to_disk(csv_content: bytes, year: int, original_filename: str, config: EngineConfig) -> str:
    """Persist raw CSV to data/candidates/ for reload on restart."""
    config.candidates_dir.mkdir(parents=True, exist_ok=True)
    safe_name = "".join(c for c in original_filename if c.isalnum() or c in ".-_ ").strip() or "upload"
    save_name = f"{year}_{safe_name}"
    if not save_name.endswith(".csv"):
        save_name += ".csv"
    (config.candidates_dir / save_name).write_bytes(csv_content)
    return save_name


def load_candidates_csv(
    csv_content: bytes,
    year: int,
    _persist: bool = True,
    _filename: str = "upload.csv",
    config: EngineConfig = engine_config,
) -> list[Candidate]:
    """Parse a prospect CSV into candidates for a draft year.

    Requires name, position and rank columns. Rows with an unknown
    position or rank are skipped. Unmapped columns are kept as stats.
    """
    df = pd.read_csv(io.BytesIO(csv_content))
    df = _normalize_columns(df, CANDIDATE_COLUMN_MAP)

    missing = {"name", "position", "consensus_rank"} - set(df.columns)
    if missing:
        raise ValueError(f"CSV must contain name, position and rank columns (missing: {', '.join(sorted(missing))})")

    if _persist:
        _save_csv_to_disk(csv_content, year, _filename, config)

    stat_columns = [c for c in df.columns if c not in CORE_FIELDS and c not in MEASUREMENT_FIELDS and c not in FRACTION_FIELDS]

    candidates = []
    skipped = 0
    for _, row in df.iterrows():
        name = str(row["name"]).strip() if pd.notna(row["name"]) else ""
        position = parse_position(str(row["position"])) if pd.notna(row["position"]) else None
        rank = _float_or_none(row["consensus_rank"])
        if not name or position is None or rank is None:
            skipped += 1
            continue

        school = str(row["school"]).strip() if "school" in row.index and pd.notna(row["school"]) else ""
        attributes = CandidateAttributes(
            conference=str(row["conference"]).strip() if "conference" in row.index and pd.notna(row["conference"]) else None,
            height=parse_height(row["height"]) if "height" in row.index and pd.notna(row["height"]) else None,
            **{f: _float_or_none(row[f]) for f in MEASUREMENT_FIELDS if f in row.index},
            **{f: parse_fraction(row[f]) for f in FRACTION_FIELDS if f in row.index and pd.notna(row[f])},
        )
        stats = {}
        for col in stat_columns:
            value = parse_stat_value(row[col])
            if value is not None:
                stats[str(col)] = value

        candidate_id = str(row["id"]) if "id" in row.index and pd.notna(row["id"]) else _make_id(name, school, year)
        candidates.append(Candidate(
            id=candidate_id,
            name=name,
            position=position,
            school=school,
            consensus_rank=int(rank),
            year=year,
            attributes=attributes,
            stats=stats,
        ))

    if skipped:
        logger.warning(f"Skipped {skipped} rows without a name, known position or rank")

    add_candidates(candidates)
    return candidates


def load_persisted_candidates(config: EngineConfig = engine_config) -> int:
    """Load all saved candidate CSVs from disk. Called on startup."""
    config.candidates_dir.mkdir(parents=True, exist_ok=True)
    loaded = 0
    for f in sorted(config.candidates_dir.glob("*.csv")):
        prefix = f.stem.split("_", 1)[0]
        if not prefix.isdigit():
            logger.warning(f"Skipping {f.name}: filename does not start with a draft year")
            continue
        try:
            candidates = load_candidates_csv(f.read_bytes(), int(prefix), _persist=False, config=config)
        except (ValueError, pd.errors.ParserError, OSError) as e:
            logger.warning(f"Failed to load {f.name}: {e}")
            continue
        loaded += len(candidates)
        logger.info(f"Loaded {len(candidates)} candidates from {f.name}")
    return loaded


def list_saved_files(config: EngineConfig = engine_config) -> list[dict]:
    config.candidates_dir.mkdir(parents=True, exist_ok=True)
    files = []
    for f in sorted(config.candidates_dir.glob("*.csv")):
        parts = f.stem.split("_", 1)
        files.append({
            "filename": f.name,
            "year": int(parts[0]) if parts[0].isdigit() else None,
            "original_name": parts[1] if len(parts) > 1 else f.stem,
            "size_kb": round(f.stat().st_size / 1024, 1),
        })
    return files


# ---------------------------------------------------------------------------
# Stats merge
# ---------------------------------------------------------------------------

def _fuzzy_match(name: str, choices: dict[str, str], threshold: int = 80) -> Optional[str]:
    """Best matching candidate id for *name*, or None. ``choices`` maps id -> name."""
    if not choices:
        return None
    result = process.extractOne(name, choices, scorer=fuzz.token_sort_ratio, score_cutoff=threshold)
    if result is None:
        return None
    _matched_name, _score, candidate_id = result
    return candidate_id


def merge_stats_csv(csv_content: bytes, year: int) -> dict:
    """Merge a college stats CSV into the year's candidates.

    Rows match on normalized name + school first, then by fuzzy name among
    candidates from the same school, then by fuzzy name across the class.
    """
    candidates = _catalog.get(year)
    if not candidates:
        raise ValueError(f"No candidates loaded for {year}")

    df = _normalize_columns(pd.read_csv(io.BytesIO(csv_content)), STATS_COLUMN_MAP)
    if "name" not in df.columns:
        raise ValueError("CSV must contain a 'Name' column")

    by_key = {match_key(c.name, c.school): c.id for c in candidates.values()}
    stat_columns = [c for c in df.columns if c not in ("name", "school")]

    matched = 0
    unmatched_names = []
    for _, row in df.iterrows():
        csv_name = str(row["name"]) if pd.notna(row["name"]) else ""
        if not csv_name:
            continue
        school = str(row["school"]) if "school" in row.index and pd.notna(row["school"]) else ""

        candidate_id = by_key.get(match_key(csv_name, school))
        if candidate_id is None and school:
            same_school = {
                cid: c.name for cid, c in candidates.items()
                if normalize_school(c.school) == normalize_school(school)
            }
            candidate_id = _fuzzy_match(csv_name, same_school)
        if candidate_id is None:
            candidate_id = _fuzzy_match(csv_name, {cid: c.name for cid, c in candidates.items()}, threshold=90)
        if candidate_id is None:
            unmatched_names.append(csv_name)
            continue

        stats = dict(candidates[candidate_id].stats)
        for col in stat_columns:
            value = parse_stat_value(row[col])
            if value is not None:
                stats[str(col)] = value
        candidates[candidate_id] = candidates[candidate_id].model_copy(update={"stats": stats})
        matched += 1

    logger.info(f"Merged stats for {matched} candidates ({len(unmatched_names)} unmatched) in {year}")
    return {
        "matched": matched,
        "unmatched": len(unmatched_names),
        "unmatched_names": unmatched_names[:20],
        "total_in_pool": len(candidates),
    }
