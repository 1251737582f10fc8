"""Unit tests for CPU pick selection."""

import random

import pytest

from mockdraft.errors import NoCandidatesError
from mockdraft.models.candidate import Candidate, Position
from mockdraft.models.draft import DraftSlot
from mockdraft.services.cpu_selector import (
    CpuPickOptions,
    get_effective_needs,
    get_team_drafted_positions,
    prepare_cpu_pick,
    select_cpu_pick,
)


def _candidate(cid: str, position: Position, rank: int) -> Candidate:
    return Candidate(id=cid, name=cid, position=position, consensus_rank=rank, year=2026)


@pytest.fixture
def pool():
    positions = [Position.QB, Position.WR, Position.CB, Position.EDGE, Position.OT]
    return [_candidate(f"p{i}", positions[i % 5], i) for i in range(1, 21)]


DETERMINISTIC = CpuPickOptions(randomness=0.0, needs_weight=0.0)


class TestSelectCpuPick:
    def test_empty_pool_raises(self):
        with pytest.raises(NoCandidatesError):
            select_cpu_pick([], [])

    def test_no_randomness_takes_best_rank(self, pool):
        choice = select_cpu_pick(pool, [], DETERMINISTIC)
        assert choice.id == "p1"

    def test_needs_ignored_at_zero_weight(self):
        wr = _candidate("wr", Position.WR, 10)
        cb = _candidate("cb", Position.CB, 11)
        choice = select_cpu_pick([cb, wr], [Position.CB], DETERMINISTIC)
        assert choice.id == "wr"

    def test_top_need_wins_at_full_weight(self):
        wr = _candidate("wr", Position.WR, 10)
        cb = _candidate("cb", Position.CB, 11)
        options = CpuPickOptions(randomness=0.0, needs_weight=1.0)
        # 11 x 0.70 beats 10
        assert select_cpu_pick([wr, cb], [Position.CB], options).id == "cb"

    def test_board_rankings_override_consensus(self, pool):
        options = CpuPickOptions(randomness=0.0, needs_weight=0.0, board_rankings=["p15", "p1"])
        assert select_cpu_pick(pool, [], options).id == "p15"

    def test_positional_weights_boost_premium_positions(self):
        qb = _candidate("qb", Position.QB, 10)
        wr = _candidate("wr", Position.WR, 9)
        options = CpuPickOptions(randomness=0.0, needs_weight=0.0, positional_weights={"QB": 2.5})
        assert select_cpu_pick([wr, qb], [], options).id == "qb"

    def test_small_pool_takes_top_candidate(self):
        pool = [_candidate("a", Position.QB, 1), _candidate("b", Position.WR, 50), _candidate("c", Position.CB, 100)]
        options = CpuPickOptions(randomness=1.0, needs_weight=0.0)
        for seed in range(20):
            assert select_cpu_pick(pool, [], options, rng=random.Random(seed)).id == "a"

    def test_randomness_stays_near_the_top(self, pool):
        options = CpuPickOptions(randomness=1.0, needs_weight=0.0)
        for seed in range(50):
            choice = select_cpu_pick(pool, [], options, rng=random.Random(seed))
            assert choice.consensus_rank <= 7

    def test_clearly_best_candidate_is_never_skipped(self):
        star = _candidate("star", Position.QB, 1)
        rest = [_candidate(f"r{i}", Position.WR, 100 + i) for i in range(5)]
        options = CpuPickOptions(randomness=1.0, needs_weight=0.0)
        for seed in range(200):
            assert select_cpu_pick([*rest, star], [], options, rng=random.Random(seed)).id == "star"

    def test_close_scores_keep_randomness(self):
        pool = [_candidate(f"c{rank}", Position.WR, rank) for rank in range(10, 15)]
        options = CpuPickOptions(randomness=1.0, needs_weight=0.0)
        choices = [select_cpu_pick(pool, [], options, rng=random.Random(seed)).id for seed in range(200)]
        assert "c10" in choices
        assert any(c != "c10" for c in choices)

    def test_same_seed_same_choice(self, pool):
        options = CpuPickOptions(randomness=0.8, needs_weight=0.5)
        first = select_cpu_pick(pool, [Position.CB], options, rng=random.Random(42))
        second = select_cpu_pick(pool, [Position.CB], options, rng=random.Random(42))
        assert first.id == second.id

    def test_randomness_varies_choices(self, pool):
        options = CpuPickOptions(randomness=1.0, needs_weight=0.0)
        choices = {select_cpu_pick(pool, [], options, rng=random.Random(seed)).id for seed in range(100)}
        assert len(choices) > 1


class TestEffectiveNeeds:
    def test_removes_one_occurrence_per_pick(self):
        needs = [Position.CB, Position.WR, Position.CB]
        assert get_effective_needs(needs, [Position.CB]) == [Position.WR, Position.CB]

    def test_duplicate_need_keeps_one(self):
        needs = [Position.CB, Position.CB, Position.WR]
        assert get_effective_needs(needs, [Position.CB]) == [Position.CB, Position.WR]

    def test_unrelated_picks_leave_needs(self):
        assert get_effective_needs([Position.QB], [Position.RB, Position.K]) == [Position.QB]

    def test_does_not_mutate_input(self):
        needs = [Position.QB]
        get_effective_needs(needs, [Position.QB])
        assert needs == [Position.QB]


class TestDraftedPositions:
    def test_uses_controlling_team(self):
        candidates = {
            "a": _candidate("a", Position.QB, 1),
            "b": _candidate("b", Position.WR, 2),
            "c": _candidate("c", Position.CB, 3),
        }
        order = [
            DraftSlot(overall=1, round=1, pick=1, team="NYG"),
            DraftSlot(overall=2, round=1, pick=2, team="DAL", team_override="NYG"),
            DraftSlot(overall=3, round=1, pick=3, team="NYG", team_override="PHI"),
        ]
        assert get_team_drafted_positions(order, ["a", "b", "c"], "NYG", candidates) == [Position.QB, Position.WR]
        assert get_team_drafted_positions(order, ["a", "b", "c"], "PHI", candidates) == [Position.CB]

    def test_prepare_cpu_pick_skips_filled_need(self):
        candidates = {
            "qb1": _candidate("qb1", Position.QB, 1),
            "qb2": _candidate("qb2", Position.QB, 9),
            "cb": _candidate("cb", Position.CB, 10),
        }
        order = [
            DraftSlot(overall=1, round=1, pick=1, team="NYG"),
            DraftSlot(overall=2, round=2, pick=1, team="NYG"),
        ]
        available = [candidates["qb2"], candidates["cb"]]
        options = CpuPickOptions(randomness=0.0, needs_weight=1.0)
        # QB need already filled by qb1, CB is still open
        choice = prepare_cpu_pick("NYG", order, ["qb1"], candidates, available, [Position.QB, Position.CB], options)
        assert choice.id == "cb"
