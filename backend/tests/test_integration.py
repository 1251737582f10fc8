"""Integration tests: full workflow from prospect upload through recap and export."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from mockdraft.config import engine_config
from mockdraft.main import app
from mockdraft.services.candidate_catalog import clear_candidates
from mockdraft.services.draft_session import clear_sessions


@pytest.fixture(autouse=True)
def clean_state(tmp_path, monkeypatch):
    """Reset all state between tests and keep saved files out of the repo."""
    monkeypatch.setattr(engine_config, "data_dir", tmp_path)
    clear_candidates()
    clear_sessions()
    yield
    clear_candidates()
    clear_sessions()


client = TestClient(app)


def _upload_prospects(year: int = 2026, count: int = 40):
    rows = ["Name,Pos,School,Rank,Conference,40,rec_grd"]
    positions = ["QB", "WR", "CB", "DE", "OT", "DT", "S", "RB"]
    conferences = ["SEC", "Big Ten", "ACC", "Big 12", "MAC"]
    for i in range(1, count + 1):
        rows.append(f"Prospect {i},{positions[i % 8]},School {i % 10},{i},{conferences[i % 5]},{4.4 + i * 0.01:.2f},{90 - i}")
    resp = client.post(
        "/api/candidates/upload",
        files={"file": ("board.csv", "\n".join(rows).encode(), "text/csv")},
        params={"year": year},
    )
    assert resp.status_code == 200
    return resp.json()


def _create_draft(rounds: int = 1, **overrides) -> dict:
    body = {
        "created_by": "u1",
        "config": {"rounds": rounds, "year": 2026},
        "team_order": ["NYG", "DAL", "PHI", "WAS"],
        "team_assignments": {"DAL": "u1"},
        "team_needs": {"NYG": ["QB"], "PHI": ["CB", "WR"]},
    }
    body.update(overrides)
    resp = client.post("/api/drafts", json=body)
    assert resp.status_code == 200
    return resp.json()


class TestHealth:
    def test_health(self):
        assert client.get("/api/health").json() == {"status": "ok"}


class TestCandidates:
    def test_upload_and_list(self):
        result = _upload_prospects()
        assert result["candidate_count"] == 40

        resp = client.get("/api/candidates", params={"year": 2026})
        data = resp.json()
        assert data["count"] == 40
        assert data["candidates"][0]["consensus_rank"] == 1

    def test_upload_is_saved(self):
        _upload_prospects()
        files = client.get("/api/candidates/files").json()
        assert files["count"] == 1
        assert files["files"][0]["year"] == 2026

    def test_position_group_filter(self):
        _upload_prospects()
        data = client.get("/api/candidates", params={"position": "OL"}).json()
        assert data["count"] == 5
        assert all(c["position"] == "OT" for c in data["candidates"])

        edge = client.get("/api/candidates", params={"position": "DE"}).json()
        assert all(c["position"] == "EDGE" for c in edge["candidates"])

    def test_unknown_position(self):
        _upload_prospects()
        assert client.get("/api/candidates", params={"position": "XYZ"}).status_code == 400

    def test_bad_csv(self):
        resp = client.post(
            "/api/candidates/upload",
            files={"file": ("bad.csv", b"Foo,Bar\n1,2\n", "text/csv")},
            params={"year": 2026},
        )
        assert resp.status_code == 400

    def test_stats_merge(self):
        _upload_prospects()
        stats = "Player,School,yprr\nProspect 1,School 1,2.5\nUnknown Guy,Nowhere,1.0\n"
        resp = client.post(
            "/api/candidates/stats",
            files={"file": ("stats.csv", stats.encode(), "text/csv")},
            params={"year": 2026},
        )
        assert resp.status_code == 200
        assert resp.json()["matched"] == 1

    def test_stats_before_prospects(self):
        resp = client.post(
            "/api/candidates/stats",
            files={"file": ("stats.csv", b"Name,yprr\nA,1\n", "text/csv")},
            params={"year": 2026},
        )
        assert resp.status_code == 400

    def test_clear(self):
        _upload_prospects()
        client.delete("/api/candidates/clear")
        assert client.get("/api/candidates", params={"year": 2026}).json()["count"] == 0


class TestBoards:
    def test_generate(self):
        _upload_prospects()
        resp = client.post("/api/boards/generate", json={"year": 2026, "position": "QB"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 5

    def test_generate_without_prospects(self):
        assert client.post("/api/boards/generate", json={"year": 2026}).status_code == 400


class TestFullDraft:
    def test_draft_to_recap_and_export(self):
        _upload_prospects()
        draft = _create_draft()
        draft_id = draft["id"]
        assert draft["status"] == "lobby"

        resp = client.post(f"/api/drafts/{draft_id}/start")
        assert resp.status_code == 200
        started = resp.json()
        assert len(started["cpu_picks"]) == 1
        assert started["draft"]["current_pick"] == 2

        state = client.get(f"/api/drafts/{draft_id}").json()
        assert state["on_the_clock"]["team"] == "DAL"

        suggestion = client.get(f"/api/drafts/{draft_id}/suggestion").json()
        taken = {p["player_id"] for p in state["picks"]}
        assert suggestion["player_id"] not in taken

        resp = client.post(f"/api/drafts/{draft_id}/picks", json={"participant_id": "u1", "player_id": suggestion["player_id"]})
        assert resp.status_code == 200
        result = resp.json()
        assert result["pick"]["team"] == "DAL"
        assert len(result["cpu_picks"]) == 2
        assert result["draft"]["status"] == "complete"

        recap = client.get(f"/api/drafts/{draft_id}/recap").json()
        assert len(recap["team_grades"]) == 4
        assert 0 <= recap["overall_class_grade"] <= 100

        resp = client.get(f"/api/export/{draft_id}", params={"format": "csv"})
        assert resp.status_code == 200
        lines = resp.text.strip().splitlines()
        assert lines[0].startswith("Overall,Round,Pick,Team,Player")
        assert len(lines) == 5

        resp = client.get(f"/api/export/{draft_id}", params={"format": "xlsx"})
        assert resp.status_code == 200
        assert resp.content[:2] == b"PK"

    def test_wrong_participant(self):
        _upload_prospects()
        draft_id = _create_draft(team_assignments={"NYG": "u1"})["id"]
        client.post(f"/api/drafts/{draft_id}/start")
        resp = client.post(f"/api/drafts/{draft_id}/picks", json={"participant_id": "u2", "player_id": "2026-prospect-1-school-1"})
        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "NOT_YOUR_TURN"

    def test_start_without_prospects(self):
        draft_id = _create_draft()["id"]
        resp = client.post(f"/api/drafts/{draft_id}/start")
        assert resp.status_code == 400

    def test_recap_before_complete(self):
        _upload_prospects()
        draft_id = _create_draft()["id"]
        resp = client.get(f"/api/drafts/{draft_id}/recap")
        assert resp.status_code == 409

    def test_unknown_draft(self):
        resp = client.get("/api/drafts/missing")
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "DRAFT_NOT_FOUND"

    def test_clock_expired(self):
        _upload_prospects()
        draft_id = _create_draft(team_assignments={"NYG": "u1"})["id"]
        client.post(f"/api/drafts/{draft_id}/start")

        stale = client.post(f"/api/drafts/{draft_id}/clock-expired", json={"overall": 3}).json()
        assert stale["stale"] is True

        result = client.post(f"/api/drafts/{draft_id}/clock-expired", json={"overall": 1}).json()
        assert result["pick"]["overall"] == 1
        assert len(result["cpu_picks"]) == 3

    def test_save_and_load(self):
        _upload_prospects()
        draft_id = _create_draft()["id"]
        assert client.post(f"/api/drafts/{draft_id}/save").json()["status"] == "saved"
        clear_sessions()
        assert client.post(f"/api/drafts/{draft_id}/load").json()["id"] == draft_id


class TestTrades:
    def test_trade_with_cpu(self):
        _upload_prospects()
        draft_id = _create_draft(rounds=2)["id"]
        client.post(f"/api/drafts/{draft_id}/start")

        resp = client.post(f"/api/drafts/{draft_id}/trades", json={
            "proposer_id": "u1",
            "recipient_team": "NYG",
            "proposer_gives": [{"type": "current-pick", "overall": 2}],
            "proposer_receives": [{"type": "current-pick", "overall": 5}],
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["evaluation"]["accept"] is True
        assert data["trade"]["status"] == "accepted"

        picks = client.get(f"/api/drafts/{draft_id}/tradeable-picks", params={"participant_id": "u1"}).json()
        assert [s["overall"] for s in picks["current"]] == [5, 6]
        assert len(picks["future"]) == 6

        trades = client.get(f"/api/drafts/{draft_id}/trades", params={"status": "accepted"}).json()
        assert len(trades) == 1

    def test_trade_with_future_pick(self):
        _upload_prospects()
        draft_id = _create_draft(rounds=2)["id"]
        client.post(f"/api/drafts/{draft_id}/start")

        resp = client.post(f"/api/drafts/{draft_id}/trades", json={
            "proposer_id": "u1",
            "recipient_team": "WAS",
            "proposer_gives": [
                {"type": "current-pick", "overall": 6},
                {"type": "future-pick", "year": 2027, "round": 1, "original_team": "DAL"},
            ],
            "proposer_receives": [{"type": "current-pick", "overall": 4}],
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["evaluation"]["accept"] is True

        draft = client.get(f"/api/drafts/{draft_id}").json()["draft"]
        owners = {(fp["year"], fp["round"], fp["original_team"]): fp["owner_team"] for fp in draft["future_picks"]}
        assert owners[(2027, 1, "DAL")] == "WAS"

    def test_pending_trade_between_humans(self):
        _upload_prospects()
        draft_id = _create_draft(rounds=2, team_assignments={"DAL": "u1", "PHI": "u2"})["id"]
        client.post(f"/api/drafts/{draft_id}/start")

        trade = client.post(f"/api/drafts/{draft_id}/trades", json={
            "proposer_id": "u1",
            "recipient_team": "PHI",
            "proposer_gives": [{"type": "current-pick", "overall": 6}],
            "proposer_receives": [{"type": "current-pick", "overall": 7}],
        }).json()["trade"]
        assert trade["status"] == "pending"

        resp = client.post(f"/api/drafts/{draft_id}/trades/{trade['id']}/accept", json={"participant_id": "u1"})
        assert resp.status_code == 403

        resp = client.post(f"/api/drafts/{draft_id}/trades/{trade['id']}/reject", json={"participant_id": "u2"})
        assert resp.json()["status"] == "rejected"

    def test_trade_value_calculator(self):
        resp = client.post("/api/drafts/trade-value", json={"giving_picks": [10, 40], "receiving_picks": [5]})
        data = resp.json()
        assert data["premium"] == 45.0
        assert data["is_fair"] is False

    def test_trade_value_skips_premium_for_own_pick(self):
        draft_id = _create_draft()["id"]
        # u1 already controls DAL's pick 2
        body = {"giving_picks": [3], "receiving_picks": [2], "draft_id": draft_id, "participant_id": "u1"}
        assert client.post("/api/drafts/trade-value", json=body).json()["premium"] == 0
        body["receiving_picks"] = [1]
        assert client.post("/api/drafts/trade-value", json=body).json()["premium"] == 45.0

        body["draft_id"] = "missing"
        assert client.post("/api/drafts/trade-value", json=body).status_code == 404


class TestDraftList:
    def test_list_by_status(self):
        _upload_prospects()
        first = _create_draft()["id"]
        _create_draft()
        client.post(f"/api/drafts/{first}/start")
        assert client.get("/api/drafts").json()["count"] == 2
        active = client.get("/api/drafts", params={"status": "active"}).json()
        assert [d["id"] for d in active["drafts"]] == [first]
