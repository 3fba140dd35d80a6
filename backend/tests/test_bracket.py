"""
Tests for knockout generation and automatic bracket progression.

Uses the ten_players fixture: P01 tops the league, P10 is last.
"""
from fastapi.testclient import TestClient
from sqlmodel import Session

from ttleague.models.match import PHASE_FINAL, PHASE_KNOCKOUT_R1, PHASE_KNOCKOUT_R2, PHASE_SEMIFINAL
from tests.conftest import add_player

P1_WINS = {"set1_p1": 11, "set1_p2": 5, "set2_p1": 11, "set2_p2": 7}
P2_WINS = {"set1_p1": 5, "set1_p2": 11, "set2_p1": 7, "set2_p2": 11}


def _round(client: TestClient, phase: str) -> list[dict]:
    matches = client.get(f"/api/matches?phase={phase}").json()
    return sorted(matches, key=lambda m: (m["knockout_position"] is None, m["knockout_position"] or 0))


def _names(matches: list[dict]) -> list[tuple[str, str]]:
    return [(m["player1"]["name"], m["player2"]["name"]) for m in matches]


def _play_round(client: TestClient, phase: str) -> list[dict]:
    """Player 1 wins every match of the round. Returns the last result response."""
    responses = []
    for match in _round(client, phase):
        response = client.put(f"/api/matches/{match['id']}/result", json=P1_WINS)
        assert response.status_code == 200
        responses.append(response.json())
    return responses


def test_generate_round1_from_standings(client: TestClient, ten_players):
    response = client.post("/api/bracket/generate")

    assert response.status_code == 201
    matches = response.json()
    assert [m["knockout_position"] for m in matches] == [1, 2, 3, 4]
    assert _names(matches) == [("P03", "P10"), ("P04", "P09"), ("P05", "P08"), ("P06", "P07")]
    assert all(m["phase"] == PHASE_KNOCKOUT_R1 for m in matches)


def test_generate_twice_conflicts(client: TestClient, ten_players):
    client.post("/api/bracket/generate")
    response = client.post("/api/bracket/generate")

    assert response.status_code == 409
    assert "already exist" in response.json()["detail"]


def test_generate_needs_ten_players(client: TestClient, session: Session):
    for i in range(9):
        add_player(session, f"Solo{i}")

    response = client.post("/api/bracket/generate")
    assert response.status_code == 422
    assert "at least 10 players" in response.json()["detail"]


def test_round2_created_when_round1_complete(client: TestClient, ten_players):
    client.post("/api/bracket/generate")

    results = _play_round(client, PHASE_KNOCKOUT_R1)

    assert [r["bracket_inserted"] for r in results] == [0, 0, 0, 2]
    assert _names(_round(client, PHASE_KNOCKOUT_R2)) == [("P03", "P04"), ("P05", "P06")]


def test_edited_round1_result_replaces_round2_match(client: TestClient, ten_players):
    client.post("/api/bracket/generate")
    _play_round(client, PHASE_KNOCKOUT_R1)
    first_r1 = _round(client, PHASE_KNOCKOUT_R1)[0]

    response = client.put(f"/api/matches/{first_r1['id']}/result", json=P2_WINS)

    assert response.status_code == 200
    data = response.json()
    assert data["match"]["winner_id"] == first_r1["player2_id"]
    assert data["bracket_deleted"] == 1
    assert data["bracket_inserted"] == 1
    assert sorted(_names(_round(client, PHASE_KNOCKOUT_R2))) == [("P05", "P06"), ("P10", "P04")]


def test_completed_round2_match_survives_edit(client: TestClient, ten_players):
    client.post("/api/bracket/generate")
    _play_round(client, PHASE_KNOCKOUT_R1)
    first_r2 = _round(client, PHASE_KNOCKOUT_R2)[0]
    client.put(f"/api/matches/{first_r2['id']}/result", json=P1_WINS)

    first_r1 = _round(client, PHASE_KNOCKOUT_R1)[0]
    data = client.put(f"/api/matches/{first_r1['id']}/result", json=P2_WINS).json()

    assert data["bracket_deleted"] == 0
    assert client.get(f"/api/matches/{first_r2['id']}").status_code == 200


def test_full_knockout_to_champion(client: TestClient, ten_players):
    client.post("/api/bracket/generate")
    _play_round(client, PHASE_KNOCKOUT_R1)
    _play_round(client, PHASE_KNOCKOUT_R2)

    assert _names(_round(client, PHASE_SEMIFINAL)) == [("P01", "P03"), ("P02", "P05")]

    _play_round(client, PHASE_SEMIFINAL)
    assert _names(_round(client, PHASE_FINAL)) == [("P01", "P02")]

    _play_round(client, PHASE_FINAL)
    bracket = client.get("/api/bracket").json()
    champion = [p for p in ten_players if p.name == "P01"][0]
    assert bracket["champion_id"] == champion.id
    assert [len(bracket["rounds"][phase]) for phase in (PHASE_KNOCKOUT_R1, PHASE_KNOCKOUT_R2, PHASE_SEMIFINAL, PHASE_FINAL)] == [4, 2, 2, 1]


def test_bracket_view_before_generation(client: TestClient, ten_players):
    bracket = client.get("/api/bracket").json()

    assert bracket["can_generate"] is True
    assert bracket["league_in_progress"] is False
    assert [s["player"]["name"] for s in bracket["byes"]] == ["P01", "P02"]
    assert len(bracket["qualified"]) == 10
    assert all(matches == [] for matches in bracket["rounds"].values())
    assert bracket["champion_id"] is None


def test_progress_endpoint_is_idempotent(client: TestClient, ten_players):
    client.post("/api/bracket/generate")
    for match in _round(client, PHASE_KNOCKOUT_R1):
        client.put(f"/api/matches/{match['id']}/result", json=P1_WINS)

    response = client.post("/api/bracket/progress")
    assert response.status_code == 200
    assert response.json() == {"inserted": [], "deleted_ids": []}
    assert len(_round(client, PHASE_KNOCKOUT_R2)) == 2


def test_progress_endpoint_repairs_missing_round(client: TestClient, ten_players):
    """Deleting next-round matches by hand is undone by a progress call"""
    client.post("/api/bracket/generate")
    _play_round(client, PHASE_KNOCKOUT_R1)
    for match in _round(client, PHASE_KNOCKOUT_R2):
        client.delete(f"/api/matches/{match['id']}")

    response = client.post("/api/bracket/progress")

    assert len(response.json()["inserted"]) == 2
    assert _names(_round(client, PHASE_KNOCKOUT_R2)) == [("P03", "P04"), ("P05", "P06")]


def test_late_league_result_never_pairs_a_player_with_themselves(client: TestClient, ten_players):
    """P03 overtakes the byes after round 1 is drawn, then wins round 2"""
    client.post("/api/bracket/generate")
    _play_round(client, PHASE_KNOCKOUT_R1)

    by_name = {p.name: p.id for p in ten_players}
    for league_match in client.get("/api/matches?phase=league").json():
        names = {league_match["player1"]["name"], league_match["player2"]["name"]}
        if names in ({"P01", "P03"}, {"P02", "P03"}):
            assert client.delete(f"/api/matches/{league_match['id']}").status_code == 204
    for rival in ("P01", "P02"):
        response = client.post(
            "/api/matches/league",
            json={"player1_id": by_name["P03"], "player2_id": by_name[rival], **P1_WINS},
        )
        assert response.status_code == 201
    assert client.get("/api/standings?limit=1").json()[0]["player"]["name"] == "P03"

    _play_round(client, PHASE_KNOCKOUT_R2)

    assert _round(client, PHASE_SEMIFINAL) == []
    for match in client.get("/api/matches").json():
        assert match["player1_id"] != match["player2_id"]
