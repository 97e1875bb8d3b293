import queue as _queue

from flask import Blueprint, request, jsonify, Response

from wcpool.errors import NotFound
from wcpool.events import event_bus, format_sse
from wcpool.extensions import limiter
from wcpool.models.match import Match, Stage
from wcpool.models.standing import ThirdPlaceRanking

from wcpool.schemas import (
    MatchSchema,
    SubmitResultSchema,
    BracketPreviewSchema,
    GroupStandingSchema,
    ThirdPlaceRankingSchema,
    ScoreQuerySchema,
    ScoreUpdateSchema,
    SimulationSchema,
    SaveSimulationSchema,
    SavedSimulationSchema,
    TopScorerSchema,
)

from wcpool.services.bracket import get_bracket
from wcpool.services.match_service import apply_match_result, get_match
from wcpool.services.scoring import (
    compute_score,
    compute_tiebreakers,
    league_leaderboard,
    update_all_scores,
    update_form_score,
)
from wcpool.services.settings_service import get_actual_top_scorer, set_actual_top_scorer
from wcpool.services.simulation import (
    get_simulation,
    preview_knockout_bracket,
    save_simulation,
    simulate,
    simulate_saved,
)
from wcpool.services.standings import get_all_groups, get_group_stage_status, get_group_table
from wcpool.services.third_place import combination_key, resolve_third_place_assignments

api_bp = Blueprint("api", __name__)

# ── Schema instances ─────────────────────────────────────────────────────────
match_schema = MatchSchema()
matches_schema = MatchSchema(many=True)
submit_result_schema = SubmitResultSchema()
bracket_preview_schema = BracketPreviewSchema()

standings_schema = GroupStandingSchema(many=True)
third_place_schema = ThirdPlaceRankingSchema(many=True)

score_query_schema = ScoreQuerySchema()
score_update_schema = ScoreUpdateSchema()
simulation_schema = SimulationSchema()
save_simulation_schema = SaveSimulationSchema()
saved_simulation_schema = SavedSimulationSchema()
top_scorer_schema = TopScorerSchema()


def _top_scorer(explicit):
    """A non-blank explicit top scorer wins; otherwise use the stored one."""
    if explicit and explicit.strip():
        return explicit
    return get_actual_top_scorer()


def _str_keys(mapping):
    return {str(k): v for k, v in mapping.items()}


# ─── Matches ──────────────────────────────────────────────────────────────────

@api_bp.route("/matches", methods=["GET"])
def get_matches():
    stage = request.args.get("stage")

    query = Match.query
    if stage:
        try:
            query = query.filter_by(stage=Stage(stage.upper()))
        except ValueError:
            return jsonify({"error": f"Unknown stage: {stage}"}), 400

    matches = query.order_by(Match.match_number).all()
    return jsonify({"matches": matches_schema.dump(matches)}), 200


@api_bp.route("/matches/<int:match_number>", methods=["GET"])
def get_match_route(match_number):
    match = get_match(match_number)
    return jsonify({"match": match_schema.dump(match)}), 200


@api_bp.route("/matches/<int:match_number>/result", methods=["POST"])
@limiter.limit("30 per minute")
def submit_match_result(match_number):
    data = submit_result_schema.load(request.get_json() or {})
    match = apply_match_result(
        match_number, data["team1_score"], data["team2_score"], data["winner_id"]
    )
    return jsonify({"match": match_schema.dump(match)}), 200


# ─── Standings ────────────────────────────────────────────────────────────────

@api_bp.route("/standings", methods=["GET"])
def get_standings():
    group = request.args.get("group")

    if group:
        table = get_group_table(group.upper())
        if not table:
            raise NotFound(f"Group {group} not found")
        return jsonify({"group": group.upper(), "standings": standings_schema.dump(table)}), 200

    groups = get_all_groups()
    return jsonify({
        "standings": {letter: standings_schema.dump(rows) for letter, rows in groups.items()}
    }), 200


@api_bp.route("/standings/third-place", methods=["GET"])
def get_third_place_standings():
    rows = ThirdPlaceRanking.query.order_by(
        ThirdPlaceRanking.rank.is_(None),
        ThirdPlaceRanking.rank,
        ThirdPlaceRanking.group_letter,
    ).all()
    return jsonify({"third_place": third_place_schema.dump(rows)}), 200


@api_bp.route("/group-stage/status", methods=["GET"])
def group_stage_status():
    return jsonify(get_group_stage_status()), 200


# ─── Bracket ──────────────────────────────────────────────────────────────────

@api_bp.route("/bracket", methods=["GET"])
def get_bracket_route():
    bracket = get_bracket()
    return jsonify({
        "bracket": {stage: matches_schema.dump(matches) for stage, matches in bracket.items()}
    }), 200


@api_bp.route("/third-place/<string:letters>", methods=["GET"])
def get_third_place_assignment(letters):
    key = combination_key(list(letters))
    assignments = resolve_third_place_assignments(list(key))
    return jsonify({"combination": key, "assignments": _str_keys(assignments)}), 200


@api_bp.route("/bracket/preview", methods=["POST"])
def preview_bracket():
    data = bracket_preview_schema.load(request.get_json() or {})
    preview = preview_knockout_bracket(data["results"])
    preview["third_place_assignments"] = _str_keys(preview["third_place_assignments"])
    return jsonify(preview), 200


# ─── Scoring ──────────────────────────────────────────────────────────────────

@api_bp.route("/forms/<int:form_id>/score", methods=["GET"])
def get_form_score(form_id):
    args = score_query_schema.load(request.args)
    return jsonify(compute_score(form_id, _top_scorer(args["top_scorer"]))), 200


@api_bp.route("/forms/<int:form_id>/tiebreakers", methods=["GET"])
def get_form_tiebreakers(form_id):
    args = score_query_schema.load(request.args)
    tiebreakers = compute_tiebreakers(form_id, _top_scorer(args["top_scorer"]))
    return jsonify({"form_id": form_id, "tiebreakers": tiebreakers}), 200


@api_bp.route("/scores/update", methods=["POST"])
def update_scores():
    data = score_update_schema.load(request.get_json() or {})
    top_scorer = _top_scorer(data["actual_top_scorer"])

    if data["form_id"] is not None:
        run = update_form_score(data["form_id"], top_scorer)
        return jsonify({"updated": 1, "form_id": run.form_id, "total": run.delta}), 200

    count = update_all_scores(top_scorer, league_id=data["league_id"])
    return jsonify({"updated": count}), 200


@api_bp.route("/leagues/<int:league_id>/leaderboard", methods=["GET"])
def get_leaderboard(league_id):
    args = score_query_schema.load(request.args)
    entries = league_leaderboard(league_id, _top_scorer(args["top_scorer"]))
    return jsonify({"league_id": league_id, "leaderboard": entries}), 200


@api_bp.route("/leagues/<int:league_id>/simulate", methods=["POST"])
@limiter.limit("30 per minute")
def simulate_league(league_id):
    data = simulation_schema.load(request.get_json() or {})
    if data["form_id"] is not None:
        entries = simulate_saved(league_id, data["form_id"])
    else:
        entries = simulate(league_id, data["results"], data["actual_top_scorer"])
    return jsonify({"league_id": league_id, "leaderboard": entries}), 200


@api_bp.route("/forms/<int:form_id>/simulation", methods=["GET"])
def get_saved_simulation(form_id):
    sim = get_simulation(form_id)
    return jsonify({
        "form_id": form_id,
        "simulation": saved_simulation_schema.dump(sim) if sim else None,
    }), 200


@api_bp.route("/forms/<int:form_id>/simulation", methods=["PUT"])
@limiter.limit("30 per minute")
def put_saved_simulation(form_id):
    data = save_simulation_schema.load(request.get_json() or {})
    sim = save_simulation(form_id, data["results"], data["top_scorer"])
    return jsonify({
        "form_id": form_id,
        "simulation": saved_simulation_schema.dump(sim),
    }), 200


# ─── Settings ─────────────────────────────────────────────────────────────────

@api_bp.route("/settings/top-scorer", methods=["GET"])
def get_top_scorer():
    return jsonify({"player_name": get_actual_top_scorer()}), 200


@api_bp.route("/settings/top-scorer", methods=["PUT"])
def put_top_scorer():
    data = top_scorer_schema.load(request.get_json() or {})
    settings = set_actual_top_scorer(data["player_name"])
    return jsonify({"player_name": settings.actual_top_scorer}), 200


# ─── Real-time events (SSE) ──────────────────────────────────────────────────

@api_bp.route("/events/stream", methods=["GET"])
def event_stream():
    types = request.args.get("types")
    wanted = [t.strip() for t in types.split(",") if t.strip()] if types else None

    def generate():
        q = event_bus.subscribe(wanted)
        try:
            while True:
                try:
                    msg = q.get(timeout=30)
                    yield format_sse(msg)
                except _queue.Empty:
                    yield ": keepalive\n\n"
        except GeneratorExit:
            pass
        finally:
            event_bus.unsubscribe(q)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
