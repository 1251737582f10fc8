"""Unit tests for the draft capital chart and pick swap evaluation."""

import pytest

from mockdraft.config import EngineConfig
from mockdraft.services.draft_capital import (
    PICK_VALUES,
    evaluate_pick_swap,
    get_future_pick_value,
    get_pick_round,
    get_pick_value,
)


class TestPickValues:
    def test_chart_covers_eight_rounds(self):
        assert len(PICK_VALUES) == 256

    def test_chart_is_strictly_decreasing(self):
        assert all(a > b for a, b in zip(PICK_VALUES, PICK_VALUES[1:]))

    def test_known_values(self):
        assert get_pick_value(1) == 1000.0
        assert get_pick_value(32) == 184.3
        assert get_pick_value(33) == 179.54
        assert get_pick_value(256) == 1.12

    def test_out_of_range_is_zero(self):
        assert get_pick_value(0) == 0.0
        assert get_pick_value(-5) == 0.0
        assert get_pick_value(257) == 0.0

    def test_pick_round(self):
        assert get_pick_round(1) == 1
        assert get_pick_round(32) == 1
        assert get_pick_round(33) == 2
        assert get_pick_round(256) == 8


class TestFuturePickValue:
    def test_next_year_first_rounder_is_mid_second(self):
        # Mid round 1 (pick 16) pushed back one round
        assert get_future_pick_value(1, 1) == get_pick_value(48)

    def test_current_year_is_mid_round(self):
        assert get_future_pick_value(1, 0) == get_pick_value(16)
        assert get_future_pick_value(3, 0) == get_pick_value(80)

    def test_two_years_out_is_mid_third(self):
        assert get_future_pick_value(1, 2) == get_pick_value(80)

    def test_later_years_are_worth_less(self):
        assert get_future_pick_value(1, 2) < get_future_pick_value(1, 1)

    def test_capped_at_last_pick(self):
        assert get_future_pick_value(8, 2) == get_pick_value(256)

    def test_uses_configured_round_size(self):
        config = EngineConfig(teams_per_round=10)
        assert get_future_pick_value(2, 1, config) == get_pick_value(25)


class TestPickSwap:
    def test_receiving_more_is_fair(self):
        result = evaluate_pick_swap([10], [1])
        assert result["giving_total"] == pytest.approx(369.09)
        assert result["receiving_total"] == pytest.approx(1000.0)
        assert result["is_fair"] is True

    def test_trading_down_for_less_is_not_fair(self):
        result = evaluate_pick_swap([1], [32])
        assert result["is_fair"] is False
        assert result["net"] == pytest.approx(184.3 - 1000.0)

    def test_equal_values_are_fair(self):
        assert evaluate_pick_swap([10], [10])["is_fair"] is True

    def test_round1_premium_added_to_giving_side(self):
        result = evaluate_pick_swap([5], [6], acquiring_round1=True)
        assert result["premium"] == 45.0
        assert result["net"] == pytest.approx(446.15 - (467.81 + 45.0))

    def test_within_tolerance_is_fair(self):
        # 446.15 >= 0.95 * 467.81
        assert evaluate_pick_swap([5], [6])["is_fair"] is True
