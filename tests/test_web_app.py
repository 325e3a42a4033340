"""Tests for the Flask JSON API."""

import pytest

from scrumsync.ui import create_app


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "AUTO_TICK": False})
    with app.test_client() as client:
        yield client
    app.extensions["scrumsync"].sessions.close_all()


@pytest.fixture
def live_match(client):
    """A match with shirts 9 and 10 on the field and one player on the bench."""
    team = client.post("/api/teams", json={"name": "Under 16s", "age_group": "U16"}).get_json()
    players = [
        client.post("/api/players", json={"name": name, "team_id": team["id"]}).get_json()
        for name in ("Alex Carter", "Ben Hughes", "Callum Reid")
    ]
    match = client.post(
        "/api/matches", json={"team_id": team["id"], "opponent": "Harlequins", "location": "Home Ground"}
    ).get_json()
    response = client.post(
        f"/api/matches/{match['id']}/lineup",
        json={"players": [
            {"player_id": players[0]["id"], "shirt_number": 9, "position_label": "Scrum-half"},
            {"player_id": players[1]["id"], "shirt_number": 10, "position_label": "Fly-half"},
        ]},
    )
    assert response.status_code == 201
    return match, players


def test_club_crud(client):
    response = client.post("/api/teams", json={"name": "", "age_group": "U16"})
    assert response.status_code == 400
    assert response.get_json()["success"] is False

    team = client.post("/api/teams", json={"name": "Seniors", "age_group": "Open"}).get_json()
    updated = client.put(f"/api/teams/{team['id']}", json={"description": "First XV"}).get_json()
    assert updated["description"] == "First XV"

    player = client.post("/api/players", json={"name": "Alex Carter", "team_id": team["id"], "number": 9})
    assert player.status_code == 201
    assert len(client.get(f"/api/teams/{team['id']}/players").get_json()) == 1

    assert client.get("/api/players/999").status_code == 404
    assert client.delete(f"/api/players/{player.get_json()['id']}").status_code == 204


def test_fixture_becomes_match(client):
    team = client.post("/api/teams", json={"name": "Seniors", "age_group": "Open"}).get_json()
    fixture = client.post("/api/fixtures", json={
        "team_id": team["id"], "opponent": "Bath", "date": "2025-10-04T15:00:00", "location": "Rec",
        "is_home": False,
    }).get_json()

    response = client.post(f"/api/fixtures/{fixture['id']}/match", json={"number_of_periods": 4, "period_length_min": 15})
    assert response.status_code == 201
    match = response.get_json()
    assert match["fixture_id"] == fixture["id"]
    assert match["number_of_periods"] == 4


def test_unknown_match_is_404(client):
    assert client.get("/api/matches/42").status_code == 404
    assert client.post("/api/matches/42/clock/start").status_code == 404


def test_live_match_flow(client, live_match):
    match, players = live_match
    base = f"/api/matches/{match['id']}"

    assert client.post(f"{base}/clock/start").get_json()["clock"]["is_running"] is True
    for _ in range(3):
        client.post(f"{base}/clock/tick")

    response = client.post(f"{base}/stats", json={"player_id": players[0]["id"], "stat_type_name": "Try"})
    assert response.status_code == 201
    assert response.get_json()["event"]["elapsed_seconds"] == 3

    sub = client.post(f"{base}/substitutions", json={
        "out_player_id": players[0]["id"], "in_player_id": players[2]["id"],
    }).get_json()
    assert sub["entry"]["shirt_number"] == 9

    rejected = client.post(f"{base}/stats", json={"player_id": players[0]["id"], "stat_type_name": "Tackles"})
    assert rejected.status_code == 400
    assert rejected.get_json()["error_type"] == "PlayerNotActive"

    client.post(f"{base}/stats", json={"player_id": players[2]["id"], "stat_type_name": "Tackles", "value": 3})

    totals = client.get(f"{base}/totals").get_json()
    assert totals["team_totals"] == {"Try": 1, "Tackles": 3}
    assert totals["score"] == 5
    assert {"stat_type_name": "Tackles", "player_id": players[2]["id"], "name": "Callum Reid", "value": 3} in totals["leaders"]

    player_totals = client.get(f"{base}/players/{players[2]['id']}/totals").get_json()
    assert player_totals["totals"] == {"Tackles": 3}

    roster = client.get(f"{base}/roster").get_json()
    assert [entry["player_id"] for entry in roster["active"]] == [players[2]["id"], players[1]["id"]]

    events = client.get(f"{base}/stats").get_json()
    assert [e["stat_type_name"] for e in events] == ["Try", "Tackles"]


def test_stat_validation_errors(client, live_match):
    match, players = live_match
    base = f"/api/matches/{match['id']}"

    assert client.post(f"{base}/stats", json={}).status_code == 400
    bad_value = client.post(f"{base}/stats", json={"player_id": players[0]["id"], "stat_type_name": "Try", "value": 0})
    assert bad_value.get_json()["error_type"] == "InvalidStatValue"
    unknown = client.post(f"{base}/stats", json={"player_id": players[0]["id"], "stat_type_name": "Haka"})
    assert unknown.get_json()["error_type"] == "UnknownStatType"

    duplicate = client.post(f"{base}/lineup", json={"players": [
        {"player_id": players[2]["id"], "shirt_number": 9, "position_label": "Wing"},
    ]})
    assert duplicate.get_json()["error_type"] == "DuplicateShirtNumber"


def test_clock_advance_and_unknown_action(client, live_match):
    match, _ = live_match
    base = f"/api/matches/{match['id']}"

    assert client.post(f"{base}/clock/advance").get_json()["signal"] == "period_advanced"
    assert client.post(f"{base}/clock/advance").get_json()["signal"] == "match_complete"
    assert client.post(f"{base}/clock/rewind").status_code == 404


def test_report_csv_and_completion(client, live_match):
    match, players = live_match
    base = f"/api/matches/{match['id']}"
    client.post(f"{base}/stats", json={"player_id": players[1]["id"], "stat_type_name": "Field Goal"})

    report = client.get(f"{base}/report").get_json()["report"]
    assert report["club_score"] == 1
    lines = {line["player_id"]: line for line in report["players"]}
    assert lines[players[1]["id"]]["totals"] == {"Field Goal": 1}
    assert lines[players[1]["id"]]["shirt_number"] == 10
    assert report["leaders"] == [{"stat_type_name": "Field Goal", "player_id": players[1]["id"], "name": "Ben Hughes", "value": 1}]

    csv_response = client.get(f"{base}/report.csv")
    assert csv_response.mimetype == "text/csv"
    assert csv_response.get_data(as_text=True).startswith("Player,Shirt,Position")

    completed = client.post(f"{base}/complete", json={"opponent_score": 7}).get_json()
    assert completed["match"]["home_score"] == 1
    assert completed["match"]["away_score"] == 7
    assert client.post(f"{base}/clock/start").status_code == 400


def test_save_and_load(client, live_match):
    match, _ = live_match
    saved = client.post("/api/save").get_json()["data"]

    client.delete(f"/api/matches/{match['id']}")
    assert client.get(f"/api/matches/{match['id']}").status_code == 404

    assert client.post("/api/load", json={"data": saved}).get_json()["success"] is True
    assert client.get(f"/api/matches/{match['id']}").status_code == 200
    assert client.post("/api/load", json={}).status_code == 400


def test_stat_types(client):
    created = client.post("/api/stat-types", json={"name": "Lineouts Won"})
    assert created.status_code == 201
    renamed = client.put(f"/api/stat-types/{created.get_json()['id']}", json={"name": "Lineouts"})
    assert renamed.status_code == 400
    names = [s["name"] for s in client.get("/api/stat-types").get_json()]
    assert "Lineouts Won" in names and "Try" in names


def test_season_summary(client, live_match):
    match, players = live_match
    base = f"/api/matches/{match['id']}"
    client.post(f"{base}/stats", json={"player_id": players[0]["id"], "stat_type_name": "Try"})
    client.post(f"{base}/stats", json={"player_id": players[0]["id"], "stat_type_name": "Carries", "value": 6})
    client.post(f"{base}/complete", json={"opponent_score": 5})

    season = client.get(f"/api/analytics/season?team_id={match['team_id']}").get_json()["season"]
    assert season["match_count"] == 1
    assert season["record"] == {
        "played": 1, "wins": 0, "losses": 0, "draws": 1, "points_for": 5, "points_against": 5,
    }
    assert season["team_totals"] == {"Try": 1, "Carries": 6}
    assert season["player_totals"] == {str(players[0]["id"]): {"Try": 1, "Carries": 6}}
    assert client.get("/api/analytics/season").get_json()["season"]["team_id"] is None
    assert client.get("/api/analytics/season?team_id=999").status_code == 404


def test_player_with_match_records_cannot_be_deleted(client, live_match):
    _, players = live_match
    response = client.delete(f"/api/players/{players[0]['id']}")
    assert response.status_code == 400
    assert response.get_json()["error_type"] == "EntityValidationError"
    assert client.delete(f"/api/players/{players[2]['id']}").status_code == 204


def test_abandon_resets_clock_and_roster(client, live_match):
    match, players = live_match
    base = f"/api/matches/{match['id']}"
    client.post(f"{base}/clock/start")
    client.post(f"{base}/clock/tick")
    client.post(f"{base}/stats", json={"player_id": players[0]["id"], "stat_type_name": "Tackles"})

    clock = client.post(f"{base}/clock/abandon").get_json()["clock"]
    assert clock["elapsed_seconds"] == 0
    assert clock["is_running"] is False
    assert client.get(f"{base}/roster").get_json()["active"] == []
    assert client.get(f"{base}/stats").get_json() == []


def test_completed_match_is_autosaved(tmp_path):
    app = create_app({"TESTING": True, "AUTO_TICK": False, "AUTOSAVE_DIR": str(tmp_path)})
    client = app.test_client()
    team = client.post("/api/teams", json={"name": "Under 16s", "age_group": "U16"}).get_json()
    match = client.post(
        "/api/matches", json={"team_id": team["id"], "opponent": "Harlequins", "location": "Home Ground"}
    ).get_json()
    assert client.get("/api/saves").get_json()["saves"] == []

    completed = client.post(f"/api/matches/{match['id']}/complete", json={"opponent_score": 3}).get_json()
    filename = completed["autosave"]
    assert (tmp_path / filename).exists()
    assert [save["filename"] for save in client.get("/api/saves").get_json()["saves"]] == [filename]

    client.delete(f"/api/matches/{match['id']}")
    assert client.post(f"/api/saves/{filename}/load").get_json()["success"] is True
    restored = client.get(f"/api/matches/{match['id']}").get_json()
    assert restored["is_completed"] is True
    assert restored["away_score"] == 3
    assert client.post("/api/saves/missing.json/load").status_code == 404
    app.extensions["scrumsync"].sessions.close_all()


def test_saves_without_autosave_dir(client):
    assert client.get("/api/saves").get_json()["saves"] == []
    assert client.post("/api/saves/anything.json/load").status_code == 404
