import os

# Keep app startup (init_db) off the on-disk league database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from ttleague.database import build_engine, get_session, init_db  # noqa: E402
from ttleague.main import app  # noqa: E402
from ttleague.models.match import PHASE_LEAGUE, STATUS_COMPLETED, Match  # noqa: E402
from ttleague.models.player import Player  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. build_engine adds check_same_thread=False for TestClient/threaded access
# 3. init_db registers every model before create_all (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables dropped after every test so ids restart at 1
test_engine = build_engine(TEST_DATABASE_URL, poolclass=StaticPool)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    init_db(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place
    for the entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Row builders
# ============================================================================


def add_player(session: Session, name: str, tier: int = 4, department: str = None) -> Player:
    player = Player(name=name, tier=tier, department=department)
    session.add(player)
    session.commit()
    session.refresh(player)
    return player


def add_league_result(session: Session, winner: Player, loser: Player, sets=((11, 5), (11, 5))) -> Match:
    """Completed league match with winner as player1."""
    padded = list(sets) + [(None, None)] * (3 - len(sets))
    match = Match(
        player1_id=winner.id,
        player2_id=loser.id,
        phase=PHASE_LEAGUE,
        status=STATUS_COMPLETED,
        winner_id=winner.id,
        set1_p1=padded[0][0],
        set1_p2=padded[0][1],
        set2_p1=padded[1][0],
        set2_p2=padded[1][1],
        set3_p1=padded[2][0],
        set3_p2=padded[2][1],
    )
    session.add(match)
    session.commit()
    session.refresh(match)
    return match


@pytest.fixture(name="ten_players")
def ten_players_fixture(session: Session):
    """Ten tier-4 players P01..P10 where a lower number beat every higher one.

    Standings order is therefore P01 first through P10 last.
    """
    players = [add_player(session, f"P{i:02d}") for i in range(1, 11)]
    for i, winner in enumerate(players):
        for loser in players[i + 1:]:
            add_league_result(session, winner, loser)
    return players
