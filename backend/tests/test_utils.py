"""Unit tests for team and position helpers."""

from mockdraft.models.candidate import Position
from mockdraft.utils.nfl_teams import ALL_TEAM_IDS, normalize_team
from mockdraft.utils.positions import parse_position


class TestTeams:
    def test_thirty_two_teams(self):
        assert len(ALL_TEAM_IDS) == 32

    def test_normalize(self):
        assert normalize_team("nyg") == "NYG"
        assert normalize_team(" JAC ") == "JAX"
        assert normalize_team("OAK") == "LV"
        assert normalize_team("XYZ") is None


class TestPositions:
    def test_canonical(self):
        assert parse_position("EDGE") == Position.EDGE
        assert parse_position("qb") == Position.QB

    def test_aliases(self):
        assert parse_position("DE") == Position.EDGE
        assert parse_position("IDL") == Position.DL
        assert parse_position("FS") == Position.S
        assert parse_position("LT") == Position.OT

    def test_multi_position_takes_first(self):
        assert parse_position("OT/OG") == Position.OT
        assert parse_position("CB, S") == Position.CB

    def test_unknown(self):
        assert parse_position("") is None
        assert parse_position("XX") is None
