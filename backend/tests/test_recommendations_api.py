"""
Tests for weekly recommendation endpoints.
"""
from fastapi.testclient import TestClient
from sqlmodel import Session

from tests.conftest import add_league_result, add_player


def test_generate_and_fetch_week(client: TestClient, session: Session):
    alice = add_player(session, "Alice")
    bob = add_player(session, "Bob")
    carol = add_player(session, "Carol")
    add_league_result(session, alice, bob)

    response = client.post(
        "/api/recommendations",
        json={"week_date": "2026-03-02", "player_ids": [alice.id, bob.id, carol.id], "created_by": "admin"},
    )

    assert response.status_code == 201
    recs = response.json()
    assert [(r["player1_id"], r["player2_id"], r["is_extra_match"]) for r in recs] == [
        (alice.id, carol.id, False),
        (bob.id, carol.id, True),
    ]
    assert all(r["created_by"] == "admin" for r in recs)

    fetched = client.get("/api/recommendations").json()
    assert [r["id"] for r in fetched] == [r["id"] for r in recs]


def test_new_week_replaces_old(client: TestClient, session: Session):
    alice = add_player(session, "Alice")
    bob = add_player(session, "Bob")
    ids = [alice.id, bob.id]

    client.post("/api/recommendations", json={"week_date": "2026-03-02", "player_ids": ids})
    client.post("/api/recommendations", json={"week_date": "2026-03-09", "player_ids": ids})

    fetched = client.get("/api/recommendations").json()
    assert len(fetched) == 1
    assert fetched[0]["week_date"] == "2026-03-09"


def test_needs_two_distinct_players(client: TestClient, session: Session):
    alice = add_player(session, "Alice")

    response = client.post(
        "/api/recommendations", json={"week_date": "2026-03-02", "player_ids": [alice.id, alice.id]}
    )
    assert response.status_code == 422


def test_unknown_player(client: TestClient, session: Session):
    alice = add_player(session, "Alice")

    response = client.post("/api/recommendations", json={"week_date": "2026-03-02", "player_ids": [alice.id, 77]})
    assert response.status_code == 404


def test_empty_before_first_week(client: TestClient):
    assert client.get("/api/recommendations").json() == []
