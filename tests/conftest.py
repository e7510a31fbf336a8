import os
from datetime import date

# Keep app startup (init_db) off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from padel_manager.database import create_db_engine, get_session, register_models  # noqa: E402
from padel_manager.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. create_db_engine sets check_same_thread=False for TestClient/threaded access
# 3. register_models() MUST run before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables dropped after every test so each test starts empty
test_engine = create_db_engine(TEST_DATABASE_URL, poolclass=StaticPool)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on freshly created tables"""
    register_models()
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the entire
    duration, so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def padel_setup(session: Session):
    """
    Club with two courts, an active tournament, one pool-format category with a
    pool, and four confirmed teams (two players each). Returns the IDs.
    """
    from padel_manager.models.category import TournamentCategory
    from padel_manager.models.club import Club
    from padel_manager.models.court import Court
    from padel_manager.models.player import Player
    from padel_manager.models.pool import Pool
    from padel_manager.models.team import Team
    from padel_manager.models.tournament import Tournament

    club = Club(name="Padel Club", location="Madrid", number_of_courts=2)
    session.add(club)
    session.commit()
    session.refresh(club)

    court1 = Court(club_id=club.id, name="Court 1", status="available")
    court2 = Court(club_id=club.id, name="Court 2", status="available")
    session.add(court1)
    session.add(court2)

    tournament = Tournament(
        club_id=club.id,
        name="Spring Open",
        start_date=date(2099, 5, 1),
        end_date=date(2099, 5, 3),
        registration_deadline=date(2099, 4, 20),
        status="active",
    )
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    category = TournamentCategory(
        tournament_id=tournament.id,
        name="Men's Advanced",
        gender="male",
        skill_level="advanced",
        format="pool",
    )
    session.add(category)
    session.commit()
    session.refresh(category)

    pool = Pool(category_id=category.id, name="Pool A", standings={})
    session.add(pool)

    players = [Player(name=f"Player {i}") for i in range(1, 9)]
    for p in players:
        session.add(p)
    session.commit()
    for p in players:
        session.refresh(p)

    teams = []
    for i in range(4):
        team = Team(
            tournament_id=tournament.id,
            category_id=category.id,
            player1_id=players[2 * i].id,
            player2_id=players[2 * i + 1].id,
            status="confirmed",
        )
        session.add(team)
        teams.append(team)
    session.commit()
    for t in teams:
        session.refresh(t)
    session.refresh(court1)
    session.refresh(court2)
    session.refresh(pool)

    return {
        "club_id": club.id,
        "court_ids": [court1.id, court2.id],
        "tournament_id": tournament.id,
        "category_id": category.id,
        "pool_id": pool.id,
        "team_ids": [t.id for t in teams],
        "player_ids": [p.id for p in players],
    }
