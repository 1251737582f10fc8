"""Board ranking generation from production, athleticism, conference and consensus."""

from __future__ import annotations

from typing import Optional

from ..models.board import BoardGenerationConfig
from ..models.candidate import Candidate, CandidateAttributes, Position

# ---------------------------------------------------------------------------
# Conference tiers (unknown non-empty conference = FCS)
# ---------------------------------------------------------------------------

CONFERENCE_TIERS: dict[str, float] = {
    "SEC": 1.0,
    "BIG TEN": 1.0,
    "BIG 12": 0.9,
    "ACC": 0.9,
    "AAC": 0.8,
    "MOUNTAIN WEST": 0.8,
    "SUN BELT": 0.8,
    "CONFERENCE USA": 0.8,
    "C-USA": 0.8,
    "MAC": 0.8,
    "INDEPENDENT": 0.8,
}

FCS_TIER = 0.6
DEFAULT_CONFERENCE_TIER = 0.7

HEADLINE_STATS: dict[Position, list[str]] = {
    Position.QB: ["pass_grd", "epa_play", "btt_pct", "twp_pct", "pass_rtg"],
    Position.RB: ["rush_grd", "rush_ypc", "mtf_att", "rush_ybc_att", "stuff_rate"],
    Position.WR: ["rec_grd", "yprr", "rec_ctc_pct", "rec_adot", "mtf_rec"],
    Position.TE: ["rec_grd", "pblk_grd", "yprr", "rec_ctc_pct"],
    Position.OT: ["pblk_grd", "pblk_pr_pct", "pblk_kd_pct"],
    Position.OG: ["pblk_grd", "pblk_pr_pct", "pblk_kd_pct"],
    Position.C: ["pblk_grd", "pblk_pr_pct", "pblk_kd_pct"],
    Position.EDGE: ["prsh_grd", "prsh_win_pct", "rund_grd", "prsh_sk"],
    Position.DL: ["rund_grd", "prsh_grd", "rund_stop", "rund_tfl"],
    Position.LB: ["rund_grd", "cov_grd", "rund_stop", "cov_comp_pct"],
    Position.CB: ["cov_grd", "cov_comp_pct", "cov_yds_ctgt", "cov_rtg"],
    Position.S: ["cov_grd", "rund_grd", "cov_comp_pct", "cov_int"],
}

MEASUREMENT_KEYS = ("forty_yard", "vertical", "broad", "bench", "cone", "shuttle")

# Lower is better
INVERTED_MEASUREMENTS = {"forty_yard", "cone", "shuttle"}

# Override weights are expressed around this neutral value
NEUTRAL_STAT_WEIGHT = 50.0

_NO_ATTRIBUTES = CandidateAttributes()


def get_conference_tier(conference: Optional[str]) -> float:
    if not conference:
        return DEFAULT_CONFERENCE_TIER
    return CONFERENCE_TIERS.get(conference.strip().upper(), FCS_TIER)


def get_headline_stats(position: Position) -> list[str]:
    return HEADLINE_STATS.get(position, [])


def percentile_rank(value: float, all_values: list[float]) -> float:
    """Fraction of *all_values* below *value*, ties counted as half. 0.5 for no data."""
    if not all_values:
        return 0.5
    count = 0.0
    for v in all_values:
        if v < value:
            count += 1
        elif v == value:
            count += 0.5
    return count / len(all_values)


def _numeric(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def generate_board_rankings(candidates: list[Candidate], config: BoardGenerationConfig) -> list[str]:
    """Candidate ids ordered by weighted composite score, best first."""
    position = config.position.value if isinstance(config.position, Position) else str(config.position)
    if position.upper() == "ALL":
        pool = list(candidates)
    else:
        pool = [c for c in candidates if c.position.value == position]
    if not pool:
        return []

    overrides = config.stat_overrides or {}

    def stat_keys(pos: Position) -> list[str]:
        return list(overrides) if overrides else get_headline_stats(pos)

    # Distributions over the filtered pool
    stat_dist: dict[str, list[float]] = {}
    measure_dist: dict[str, list[float]] = {}
    for c in pool:
        for key in stat_keys(c.position):
            val = _numeric(c.stats.get(key))
            if val is not None:
                stat_dist.setdefault(key, []).append(val)
        for key in MEASUREMENT_KEYS:
            val = _numeric(getattr(c.attributes or _NO_ATTRIBUTES, key))
            if val is not None:
                measure_dist.setdefault(key, []).append(val)

    weights = config.weights
    total_weight = weights.total
    pool_size = len(pool)

    scored: list[tuple[float, str]] = []
    for c in pool:
        if total_weight == 0:
            scored.append((0.0, c.id))
            continue

        prod_sum, prod_count = 0.0, 0
        for key in stat_keys(c.position):
            val = _numeric(c.stats.get(key))
            if val is None or not stat_dist.get(key):
                continue
            weight = overrides.get(key, NEUTRAL_STAT_WEIGHT)
            prod_sum += percentile_rank(val, stat_dist[key]) * (weight / NEUTRAL_STAT_WEIGHT)
            prod_count += 1
        production = prod_sum / prod_count if prod_count else 0.5

        ath_sum, ath_count = 0.0, 0
        for key in MEASUREMENT_KEYS:
            val = _numeric(getattr(c.attributes or _NO_ATTRIBUTES, key))
            if val is None or not measure_dist.get(key):
                continue
            pct = percentile_rank(val, measure_dist[key])
            if key in INVERTED_MEASUREMENTS:
                pct = 1 - pct
            ath_sum += pct
            ath_count += 1
        athleticism = ath_sum / ath_count if ath_count else 0.5

        conference = get_conference_tier((c.attributes or _NO_ATTRIBUTES).conference)
        consensus = max(0.0, 1 - (c.consensus_rank - 1) / pool_size)

        composite = (
            weights.production * production
            + weights.athleticism * athleticism
            + weights.conference * conference
            + weights.consensus * consensus
        ) / total_weight
        scored.append((composite, c.id))

    # Stable sort keeps input order for equal scores
    scored.sort(key=lambda x: x[0], reverse=True)
    return [cid for _, cid in scored]
