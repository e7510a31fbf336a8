"""Tournament CRUD, date validation and cascading delete."""

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from padel_manager.models.match import Match
from padel_manager.models.pool import Pool
from padel_manager.models.team import Team
from padel_manager.models.tournament import Tournament


def _club(client: TestClient) -> int:
    return client.post("/api/clubs", json={"name": "Club Norte", "location": "Bilbao"}).json()["id"]


def _payload(club_id, **overrides):
    data = {
        "club_id": club_id,
        "name": "Summer Cup",
        "start_date": "2099-07-10",
        "end_date": "2099-07-12",
        "registration_deadline": "2099-07-01",
    }
    data.update(overrides)
    return data


def test_create_tournament(client: TestClient, session: Session):
    response = client.post("/api/tournaments", json=_payload(_club(client)))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "draft"
    assert data["start_date"] == "2099-07-10"


def test_create_tournament_end_before_start(client: TestClient, session: Session):
    response = client.post("/api/tournaments", json=_payload(_club(client), end_date="2099-07-09"))
    assert response.status_code == 422


def test_create_tournament_deadline_after_start(client: TestClient, session: Session):
    response = client.post("/api/tournaments", json=_payload(_club(client), registration_deadline="2099-07-11"))
    assert response.status_code == 422


def test_single_day_tournament_allowed(client: TestClient, session: Session):
    response = client.post(
        "/api/tournaments",
        json=_payload(_club(client), end_date="2099-07-10", registration_deadline="2099-07-10"),
    )
    assert response.status_code == 201


def test_create_tournament_unknown_club(client: TestClient, session: Session):
    assert client.post("/api/tournaments", json=_payload(9999)).status_code == 400


def test_list_tournaments_newest_first_with_meta(client: TestClient, session: Session):
    club_id = _club(client)
    client.post("/api/tournaments", json=_payload(club_id, name="Early"))
    client.post(
        "/api/tournaments",
        json=_payload(
            club_id,
            name="Late",
            start_date="2099-09-01",
            end_date="2099-09-02",
            registration_deadline="2099-08-20",
            status="active",
        ),
    )

    body = client.get("/api/tournaments").json()
    assert [t["name"] for t in body["data"]] == ["Late", "Early"]
    assert body["meta"] == {"total": 2, "limit": 50, "offset": 0}

    active = client.get("/api/tournaments", params={"status": "active"}).json()
    assert [t["name"] for t in active["data"]] == ["Late"]
    assert active["meta"]["total"] == 1

    paged = client.get("/api/tournaments", params={"limit": 1, "offset": 1}).json()
    assert [t["name"] for t in paged["data"]] == ["Early"]


def test_get_tournament_includes_categories(client: TestClient, padel_setup):
    response = client.get(f"/api/tournaments/{padel_setup['tournament_id']}")
    assert response.status_code == 200
    assert [c["name"] for c in response.json()["categories"]] == ["Men's Advanced"]


def test_get_missing_tournament(client: TestClient, session: Session):
    assert client.get("/api/tournaments/9999").status_code == 404


def test_update_tournament(client: TestClient, padel_setup):
    tid = padel_setup["tournament_id"]
    response = client.patch(f"/api/tournaments/{tid}", json={"name": "Spring Open 2099"})
    assert response.status_code == 200
    assert response.json()["name"] == "Spring Open 2099"

    bad = client.patch(f"/api/tournaments/{tid}", json={"end_date": "2099-04-30"})
    assert bad.status_code == 400


def test_completed_tournament_is_read_only(client: TestClient, padel_setup):
    tid = padel_setup["tournament_id"]
    assert client.patch(f"/api/tournaments/{tid}", json={"status": "completed"}).status_code == 200

    assert client.patch(f"/api/tournaments/{tid}", json={"name": "Renamed"}).status_code == 400
    assert client.delete(f"/api/tournaments/{tid}").status_code == 400


def test_delete_tournament_removes_children(client: TestClient, session: Session, padel_setup):
    tid = padel_setup["tournament_id"]
    client.post(
        f"/api/tournaments/{tid}/matches",
        json={
            "team1_id": padel_setup["team_ids"][0],
            "team2_id": padel_setup["team_ids"][1],
            "scheduled_time": "2099-05-01T10:00:00",
            "duration_minutes": 60,
            "pool_id": padel_setup["pool_id"],
        },
    )

    response = client.delete(f"/api/tournaments/{tid}")

    assert response.status_code == 204
    session.expire_all()
    assert session.exec(select(Tournament).where(Tournament.id == tid)).first() is None
    assert session.exec(select(Team).where(Team.tournament_id == tid)).all() == []
    assert session.exec(select(Match).where(Match.tournament_id == tid)).all() == []
    assert session.exec(select(Pool).where(Pool.id == padel_setup["pool_id"])).first() is None
