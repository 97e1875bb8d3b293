from wcpool.extensions import db
from wcpool.models.form import Form, MatchPick, TopScorerPick
from wcpool.models.league import League
from wcpool.models.match import Match
from wcpool.models.settings import TournamentSettings
from wcpool.models.team import Team
from wcpool.seeds.cli import create_tournament


# ── Helpers ──────────────────────────────────────────────────────────────────

def _match(number):
    return Match.query.filter_by(match_number=number).one()


def _id(fifa_code):
    return Team.query.filter_by(fifa_code=fifa_code).one().id


def _league_with_form():
    league = League(name="Pub", join_code="PUB")
    form = Form(owner_id="zoe", nickname="Zoe")
    db.session.add_all([league, form])
    db.session.flush()
    db.session.add(MatchPick(form_id=form.id, match_id=_match(1).id, pred_score1=2, pred_score2=1))
    db.session.add(TopScorerPick(form_id=form.id, player_name="Harry Kane"))
    league.forms.append(form)
    db.session.commit()
    return league, form


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


# ── Matches ──────────────────────────────────────────────────────────────────

def test_list_matches(client, tournament):
    resp = client.get("/api/matches")
    assert resp.status_code == 200
    matches = resp.get_json()["matches"]
    assert len(matches) == 104
    assert matches[0]["match_number"] == 1
    assert matches[0]["stage"] == "GROUP"
    assert matches[0]["team1"]["fifa_code"] == "MEX"


def test_list_matches_by_stage(client, tournament):
    resp = client.get("/api/matches?stage=r16")
    assert resp.status_code == 200
    assert [m["match_number"] for m in resp.get_json()["matches"]] == list(range(89, 97))


def test_list_matches_unknown_stage(client, tournament):
    resp = client.get("/api/matches?stage=playoff")
    assert resp.status_code == 400


def test_get_match(client, tournament):
    resp = client.get("/api/matches/103")
    assert resp.status_code == 200
    match = resp.get_json()["match"]
    assert match["stage"] == "SF"
    assert match["is_third_place"] is True
    assert match["team1_code"] == "L101"


def test_get_match_not_found(client, tournament):
    resp = client.get("/api/matches/999")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_submit_result(client, tournament):
    resp = client.post("/api/matches/1/result", json={"team1_score": 1, "team2_score": 0})
    assert resp.status_code == 200
    match = resp.get_json()["match"]
    assert match["is_finished"] is True
    assert match["winner_id"] == _id("MEX")


def test_submit_result_twice(client, tournament):
    client.post("/api/matches/1/result", json={"team1_score": 1, "team2_score": 0})
    resp = client.post("/api/matches/1/result", json={"team1_score": 2, "team2_score": 0})
    assert resp.status_code == 409
    assert resp.get_json()["type"] == "AlreadyFinished"


def test_submit_result_validation(client, tournament):
    resp = client.post("/api/matches/1/result", json={"team1_score": -1, "team2_score": 0})
    assert resp.status_code == 400
    assert "team1_score" in resp.get_json()["messages"]

    resp = client.post("/api/matches/1/result", json={"team1_score": 1})
    assert resp.status_code == 400


def test_submit_knockout_draw_without_winner(client, tournament):
    m = _match(73)
    m.team1_id, m.team2_id = _id("RSA"), _id("EPA")
    db.session.commit()

    resp = client.post("/api/matches/73/result", json={"team1_score": 1, "team2_score": 1})
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "InvalidResult"

    resp = client.post(
        "/api/matches/73/result",
        json={"team1_score": 1, "team2_score": 1, "winner_id": _id("EPA")},
    )
    assert resp.status_code == 200
    assert _match(90).team1_id == _id("EPA")


# ── Standings ────────────────────────────────────────────────────────────────

def test_standings(client, tournament):
    client.post("/api/matches/1/result", json={"team1_score": 0, "team2_score": 2})

    resp = client.get("/api/standings?group=a")
    assert resp.status_code == 200
    table = resp.get_json()["standings"]
    assert [row["team"]["fifa_code"] for row in table] == ["RSA", "KOR", "EPD", "MEX"]

    resp = client.get("/api/standings")
    assert sorted(resp.get_json()["standings"]) == list("ABCDEFGHIJKL")


def test_standings_unknown_group(client, tournament):
    resp = client.get("/api/standings?group=Z")
    assert resp.status_code == 404


def test_third_place_standings(client, tournament):
    resp = client.get("/api/standings/third-place")
    assert resp.status_code == 200
    rows = resp.get_json()["third_place"]
    assert len(rows) == 12
    assert all(r["rank"] is None for r in rows)


def test_group_stage_status(client, tournament):
    client.post("/api/matches/1/result", json={"team1_score": 0, "team2_score": 0})
    resp = client.get("/api/group-stage/status")
    assert resp.get_json() == {"total": 72, "finished": 1, "remaining": 71, "complete": False}


# ── Bracket ──────────────────────────────────────────────────────────────────

def test_bracket(client, tournament):
    resp = client.get("/api/bracket")
    assert resp.status_code == 200
    bracket = resp.get_json()["bracket"]
    assert len(bracket["R32"]) == 16
    assert bracket["F"][0]["team1_code"] == "W101"


def test_third_place_lookup(client):
    resp = client.get("/api/third-place/LKJIHGFE")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["combination"] == "EFGHIJKL"
    assert body["assignments"]["74"] == "F"


def test_third_place_lookup_malformed(client):
    resp = client.get("/api/third-place/ABC")
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "MalformedCode"


def test_bracket_preview(client, tournament):
    resp = client.post("/api/bracket/preview", json={
        "results": [{"match_number": 1, "team1_score": 1, "team2_score": 0}],
    })
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["complete"] is False
    assert len(body["r32_matches"]) == 16
    assert _match(1).is_finished is False


# ── Scoring ──────────────────────────────────────────────────────────────────

def test_form_score_defaults_to_stored_top_scorer(client, tournament):
    _, form = _league_with_form()
    client.post("/api/matches/1/result", json={"team1_score": 2, "team2_score": 1})

    resp = client.get(f"/api/forms/{form.id}/score")
    assert resp.get_json()["total"] == 4

    resp = client.put("/api/settings/top-scorer", json={"player_name": "  Harry Kane "})
    assert resp.get_json()["player_name"] == "Harry Kane"

    resp = client.get(f"/api/forms/{form.id}/score")
    assert resp.get_json()["total"] == 12

    resp = client.get(f"/api/forms/{form.id}/score?top_scorer=Someone Else")
    assert resp.get_json()["total"] == 4


def test_form_tiebreakers(client, tournament):
    _, form = _league_with_form()
    client.post("/api/matches/1/result", json={"team1_score": 2, "team2_score": 1})
    resp = client.get(f"/api/forms/{form.id}/tiebreakers")
    assert resp.status_code == 200
    assert resp.get_json()["tiebreakers"]["exact_results"] == 1


def test_form_score_not_found(client, tournament):
    resp = client.get("/api/forms/999/score")
    assert resp.status_code == 404


def test_update_scores(client, tournament):
    league, form = _league_with_form()
    client.post("/api/matches/1/result", json={"team1_score": 2, "team2_score": 1})

    resp = client.post("/api/scores/update", json={"league_id": league.id})
    assert resp.get_json() == {"updated": 1}
    assert db.session.get(Form, form.id).total_points == 4

    resp = client.post("/api/scores/update", json={"form_id": form.id, "actual_top_scorer": "Harry Kane"})
    assert resp.get_json()["total"] == 12


def test_leaderboard_and_simulation(client, tournament):
    league, form = _league_with_form()

    resp = client.get(f"/api/leagues/{league.id}/leaderboard")
    assert resp.status_code == 200
    assert resp.get_json()["leaderboard"][0]["total_points"] == 0

    resp = client.post(f"/api/leagues/{league.id}/simulate", json={
        "results": [{"match_number": 1, "team1_score": 2, "team2_score": 1}],
        "actual_top_scorer": "harry kane",
    })
    assert resp.status_code == 200
    entry = resp.get_json()["leaderboard"][0]
    assert entry["form_id"] == form.id
    assert entry["total_points"] == 12
    assert _match(1).is_finished is False


def test_simulation_validation(client, tournament):
    league, _ = _league_with_form()
    resp = client.post(f"/api/leagues/{league.id}/simulate", json={
        "results": [{"match_number": 1, "team1_score": "two", "team2_score": 1}],
    })
    assert resp.status_code == 400

    resp = client.post("/api/leagues/999/simulate", json={"results": []})
    assert resp.status_code == 404


def test_top_scorer_settings(client):
    assert client.get("/api/settings/top-scorer").get_json() == {"player_name": None}
    client.put("/api/settings/top-scorer", json={"player_name": "Kylian Mbappé"})
    assert client.get("/api/settings/top-scorer").get_json() == {"player_name": "Kylian Mbappé"}
    client.put("/api/settings/top-scorer", json={"player_name": None})
    assert client.get("/api/settings/top-scorer").get_json() == {"player_name": None}


def test_blank_top_scorer_falls_back_to_stored(client, tournament):
    _, form = _league_with_form()
    client.put("/api/settings/top-scorer", json={"player_name": "Harry Kane"})

    for blank in ("", "%20%20"):
        resp = client.get(f"/api/forms/{form.id}/score?top_scorer={blank}")
        assert resp.get_json()["total"] == 8

    resp = client.post("/api/scores/update", json={"form_id": form.id, "actual_top_scorer": " "})
    assert resp.get_json()["total"] == 8


def test_reading_settings_does_not_write(client):
    assert client.get("/api/settings/top-scorer").status_code == 200
    assert TournamentSettings.query.count() == 0


def test_tournament_seed_creates_settings_row(client, tournament):
    create_tournament()
    assert TournamentSettings.query.count() == 1
    assert client.get("/api/settings/top-scorer").get_json() == {"player_name": None}


def test_saved_simulation_routes(client, tournament):
    league, form = _league_with_form()

    resp = client.get(f"/api/forms/{form.id}/simulation")
    assert resp.get_json() == {"form_id": form.id, "simulation": None}

    resp = client.put(f"/api/forms/{form.id}/simulation", json={
        "results": [{"match_number": 1, "team1_score": 2, "team2_score": 1}],
        "top_scorer": "Harry Kane",
    })
    assert resp.status_code == 200
    saved = resp.get_json()["simulation"]
    assert saved["form_id"] == form.id
    assert saved["top_scorer"] == "Harry Kane"
    assert saved["results"][0]["match_number"] == 1

    resp = client.get(f"/api/forms/{form.id}/simulation")
    assert resp.get_json()["simulation"]["results"] == saved["results"]

    resp = client.post(f"/api/leagues/{league.id}/simulate", json={"form_id": form.id})
    assert resp.status_code == 200
    assert resp.get_json()["leaderboard"][0]["total_points"] == 12
    assert _match(1).is_finished is False


def test_saved_simulation_validation(client, tournament):
    league, form = _league_with_form()

    resp = client.put(f"/api/forms/{form.id}/simulation", json={
        "results": [{"match_number": 1, "team1_score": -2, "team2_score": 1}],
    })
    assert resp.status_code == 400

    resp = client.put("/api/forms/999/simulation", json={"results": []})
    assert resp.status_code == 404

    resp = client.post(f"/api/leagues/{league.id}/simulate", json={
        "form_id": form.id,
        "results": [{"match_number": 1, "team1_score": 2, "team2_score": 1}],
    })
    assert resp.status_code == 400

    resp = client.post(f"/api/leagues/{league.id}/simulate", json={"form_id": form.id})
    assert resp.status_code == 404
