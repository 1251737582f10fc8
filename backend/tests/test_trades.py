"""Unit tests for trade validation, execution and CPU evaluation."""

import pytest

from mockdraft.config import EngineConfig
from mockdraft.errors import (
    FuturePickNotControlledError,
    PickAlreadyMadeError,
    PickNotControlledError,
    PickNotFoundError,
)
from mockdraft.models.draft import Draft, DraftStatus, OverrideKind
from mockdraft.models.trade import CurrentPickPiece, FuturePickPiece, Trade
from mockdraft.services.draft_capital import get_future_pick_value, get_pick_value
from mockdraft.services.draft_state import build_future_picks, generate_pick_order, get_pick_controller
from mockdraft.services.trade_evaluator import evaluate_cpu_trade, is_acquiring_round1, piece_value, receives_new_round1
from mockdraft.services.trade_executor import compute_trade_execution
from mockdraft.services.trade_validator import (
    get_available_current_picks,
    get_available_future_picks,
    get_picks_owned_by_team,
    get_team_future_picks,
    validate_future_picks_owned,
    validate_ownership,
    validate_picks_available,
)

TEAMS = ["NYG", "DAL", "PHI"]


@pytest.fixture
def draft():
    # NYG = u1, DAL = CPU, PHI = u2; picks 1-3 in round 1, 4-6 in round 2
    return Draft(
        id="d1",
        status=DraftStatus.ACTIVE,
        config={"rounds": 2, "year": 2026},
        pick_order=generate_pick_order(TEAMS, 2),
        team_assignments={"NYG": "u1", "DAL": None, "PHI": "u2"},
        future_picks=build_future_picks(2026, TEAMS, {}),
    )


def _trade(gives, receives, recipient_team="DAL", recipient_id=None, **kwargs) -> Trade:
    return Trade(
        id="t1",
        draft_id="d1",
        proposer_id="u1",
        proposer_team="NYG",
        recipient_id=recipient_id,
        recipient_team=recipient_team,
        proposer_gives=gives,
        proposer_receives=receives,
        **kwargs,
    )


class TestTradeExecution:
    def test_swaps_current_picks(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=2)])
        execution = compute_trade_execution(trade, draft)
        slots = {s.overall: s for s in execution.pick_order}

        assert slots[2].owner_override.kind == OverrideKind.OWNED
        assert slots[2].owner_override.participant_id == "u1"
        assert slots[2].team_override == "NYG"
        assert slots[4].owner_override.kind == OverrideKind.CPU
        assert slots[4].team_override == "DAL"

        updated = draft.model_copy(update={"pick_order": execution.pick_order})
        assert get_pick_controller(updated, slots[2]) == "u1"
        assert get_pick_controller(updated, slots[4]) is None

    def test_untouched_slots_are_unchanged(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=2)])
        execution = compute_trade_execution(trade, draft)
        for before, after in zip(draft.pick_order, execution.pick_order):
            if before.overall not in (2, 4):
                assert before == after

    def test_human_recipient_gets_owned_override(self, draft):
        trade = _trade([CurrentPickPiece(overall=1)], [CurrentPickPiece(overall=3)], recipient_team="PHI", recipient_id="u2")
        slots = {s.overall: s for s in compute_trade_execution(trade, draft).pick_order}
        assert slots[1].owner_override.participant_id == "u2"
        assert slots[1].team_override == "PHI"

    def test_moves_future_picks(self, draft):
        trade = _trade(
            [FuturePickPiece(year=2027, round=1, original_team="NYG")],
            [FuturePickPiece(year=2027, round=2, original_team="DAL")],
        )
        execution = compute_trade_execution(trade, draft)
        owners = {(fp.year, fp.round, fp.original_team): fp.owner_team for fp in execution.future_picks}
        assert owners[(2027, 1, "NYG")] == "DAL"
        assert owners[(2027, 2, "DAL")] == "NYG"
        assert owners[(2028, 1, "NYG")] == "NYG"
        assert len(execution.future_picks) == len(draft.future_picks)


class TestValidation:
    def test_made_pick_is_unavailable(self, draft):
        draft = draft.model_copy(update={"current_pick": 3})
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=2)])
        with pytest.raises(PickAlreadyMadeError):
            validate_picks_available(trade, draft)

    def test_future_picks_always_available(self, draft):
        draft = draft.model_copy(update={"current_pick": 6})
        trade = _trade([FuturePickPiece(year=2027, round=1, original_team="NYG")], [CurrentPickPiece(overall=6)])
        validate_picks_available(trade, draft)

    def test_ownership(self, draft):
        validate_ownership("u1", [CurrentPickPiece(overall=1), CurrentPickPiece(overall=4)], draft)
        validate_ownership(None, [CurrentPickPiece(overall=2)], draft)
        with pytest.raises(PickNotControlledError):
            validate_ownership("u1", [CurrentPickPiece(overall=2)], draft)

    def test_unknown_slot(self, draft):
        with pytest.raises(PickNotFoundError):
            validate_ownership("u1", [CurrentPickPiece(overall=99)], draft)

    def test_future_pick_ownership(self, draft):
        validate_future_picks_owned("NYG", [FuturePickPiece(year=2027, round=1, original_team="NYG")], draft)
        with pytest.raises(FuturePickNotControlledError):
            validate_future_picks_owned("NYG", [FuturePickPiece(year=2027, round=1, original_team="DAL")], draft)


class TestInventory:
    def test_available_current_picks(self, draft):
        assert [s.overall for s in get_available_current_picks(draft, "u1")] == [1, 4]
        draft = draft.model_copy(update={"current_pick": 2})
        assert [s.overall for s in get_available_current_picks(draft, "u1")] == [4]
        assert [s.overall for s in get_available_current_picks(draft, None)] == [2, 5]

    def test_picks_owned_by_team(self, draft):
        assert [s.overall for s in get_picks_owned_by_team("PHI", draft)] == [3, 6]

    def test_future_pick_inventory(self, draft):
        assert len(get_available_future_picks(draft, "u1")) == 6
        assert all(fp.owner_team == "DAL" for fp in get_team_future_picks(draft, "DAL"))


class TestCpuEvaluation:
    def test_accepts_value_gain(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=5)])
        result = evaluate_cpu_trade(trade, draft)
        assert result.accept is True
        assert result.premium == 45.0
        assert result.cpu_giving_value == pytest.approx(467.81)
        assert result.cpu_receiving_value == pytest.approx(490.52 + 45.0)
        assert result.reason.startswith("CPU gains")

    def test_rejects_lopsided_trade(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=2)])
        result = evaluate_cpu_trade(trade, draft)
        assert result.accept is False
        assert result.reason.startswith("CPU would lose")

    def test_accepts_within_tolerance(self, draft):
        config = EngineConfig(round1_premium=0)
        # 490.52 >= 0.95 * 514.33
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=3)])
        result = evaluate_cpu_trade(trade, draft, config)
        assert result.accept is True
        assert result.net_value < 0
        assert result.reason == "Trade is fair (within 5% tolerance)"

    def test_future_pieces_valued_by_years_out(self, draft):
        piece = FuturePickPiece(year=2027, round=1, original_team="NYG")
        assert piece_value(piece, 2026) == get_future_pick_value(1, 1)
        assert piece_value(CurrentPickPiece(overall=3), 2026) == get_pick_value(3)


class TestRound1Premium:
    def test_acquiring_uncontrolled_first(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=2)])
        assert is_acquiring_round1(trade, draft) is True

    def test_no_premium_for_controlled_slot(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=1)])
        assert is_acquiring_round1(trade, draft) is False

    def test_no_premium_for_later_rounds(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [CurrentPickPiece(overall=40)])
        assert is_acquiring_round1(trade, draft) is False

    def test_no_premium_for_future_picks(self, draft):
        trade = _trade([CurrentPickPiece(overall=4)], [FuturePickPiece(year=2027, round=1, original_team="DAL")])
        assert is_acquiring_round1(trade, draft) is False

    def test_receiving_picks_checked_against_participant(self, draft):
        assert receives_new_round1([1, 40], "u1", draft) is False
        assert receives_new_round1([1, 3], "u1", draft) is True
        assert receives_new_round1([3], "u2", draft) is False
        assert receives_new_round1([2], None, draft) is False
