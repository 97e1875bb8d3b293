"""What-if scoring and bracket previews.

Simulations never write tournament state: committed matches are only read
to learn stages and participants, and every hypothetical number lives in
local structures. The one thing stored is a form owner's saved scenario.

Known limitation: simulated leaderboards score match picks, the top
scorer and the champion tiebreak, but not advance picks. Scoring those
would need the whole hypothetical bracket rebuilt from the overrides, so
advance points and advance tiebreaks are always 0 here.
"""
import logging

from wcpool.errors import InvalidResult, NotFound
from wcpool.extensions import db
from wcpool.models.form import Form
from wcpool.models.match import Match, Stage, FINAL_MATCH
from wcpool.models.simulation import SavedSimulation
from wcpool.models.team import Team
from wcpool.services.match_service import validate_scores
from wcpool.services.scoring import (
    ResultSnapshot,
    evaluate_form,
    get_league,
    get_scoring_matrix,
    get_top_scorer_points,
    rank_leaderboard,
)
from wcpool.services.standings import StandingRow, rank_rows, record_result
from wcpool.services.team_codes import POSITION, THIRD_PLACE, parse_team_code
from wcpool.services.third_place import (
    rank_third_place_teams,
    resolve_third_place_assignments,
)
from wcpool.tournament import GROUP_MATCH_COUNT, QUALIFYING_THIRD_PLACES, ROUND_OF_32

logger = logging.getLogger(__name__)


def _load_matches(numbers):
    matches = Match.query.filter(Match.match_number.in_(numbers)).all() if numbers else []
    by_number = {m.match_number: m for m in matches}
    missing = sorted(set(numbers) - by_number.keys())
    if missing:
        raise NotFound(f"Invalid match numbers: {', '.join(str(n) for n in missing)}")
    return by_number


def build_simulated_snapshot(overrides):
    """Snapshot of hypothetical results keyed like committed ones."""
    numbers = [o["match_number"] for o in overrides]
    if len(set(numbers)) != len(numbers):
        raise InvalidResult("Each match may only be overridden once")
    matches = _load_matches(numbers)

    results = {}
    champion_id = None
    for o in overrides:
        match = matches[o["match_number"]]
        score1, score2 = o["team1_score"], o["team2_score"]
        validate_scores(score1, score2)
        winner_id = o.get("winner_id")

        participants = (match.team1_id, match.team2_id)
        if winner_id is not None and None not in participants and winner_id not in participants:
            raise InvalidResult(
                f"winner_id must be one of the two teams in match {match.match_number}"
            )

        results[match.id] = (match.stage, score1, score2)

        if match.match_number == FINAL_MATCH:
            if score1 != score2:
                champion_id = match.team1_id if score1 > score2 else match.team2_id
            else:
                champion_id = winner_id

    return ResultSnapshot(results=results, participants={}, champion_id=champion_id)


def simulate(league_id, overrides, actual_top_scorer=None):
    """Ranked leaderboard for a league under hypothetical results.

    `overrides` is a list of {"match_number", "team1_score", "team2_score",
    "winner_id"?}. Matches without an override are treated as undecided.
    """
    league = get_league(league_id)
    snapshot = build_simulated_snapshot(overrides)
    matrix = get_scoring_matrix()
    points = get_top_scorer_points()

    evaluated = [
        (form, evaluate_form(form, snapshot, actual_top_scorer, matrix, points))
        for form in league.forms.order_by(Form.id).all()
    ]
    leaderboard = rank_leaderboard(evaluated)

    logger.info(
        "Simulated league %d with %d overrides (%d entries)",
        league.id, len(overrides), len(leaderboard),
    )
    return leaderboard


# ── Saved scenarios ──────────────────────────────────────────────────────────

def _get_form(form_id):
    form = db.session.get(Form, form_id)
    if not form:
        raise NotFound(f"Form {form_id} not found")
    return form


def get_simulation(form_id):
    """The form's saved scenario, or None if it never saved one."""
    form = _get_form(form_id)
    return SavedSimulation.query.filter_by(form_id=form.id).first()


def save_simulation(form_id, overrides, top_scorer=None):
    """Store (or replace) the form's scenario after validating every override."""
    form = _get_form(form_id)
    build_simulated_snapshot(overrides)

    sim = SavedSimulation.query.filter_by(form_id=form.id).first()
    if not sim:
        sim = SavedSimulation(form_id=form.id)
        db.session.add(sim)
    sim.results = [
        {
            "match_number": o["match_number"],
            "team1_score": o["team1_score"],
            "team2_score": o["team2_score"],
            "winner_id": o.get("winner_id"),
        }
        for o in overrides
    ]
    sim.top_scorer = top_scorer.strip() if top_scorer and top_scorer.strip() else None
    db.session.commit()

    logger.info("Saved simulation for form %d with %d overrides", form.id, len(overrides))
    return sim


def simulate_saved(league_id, form_id):
    """Leaderboard for a league under the form's saved scenario."""
    sim = get_simulation(form_id)
    if sim is None:
        raise NotFound(f"Form {form_id} has no saved simulation")
    return simulate(league_id, sim.results, sim.top_scorer)


# ── Bracket preview ──────────────────────────────────────────────────────────

def preview_knockout_bracket(results):
    """Group tables, third-place qualifiers and R32 pairings for hypothetical
    group results, given as {"match_number", "team1_score", "team2_score"}.
    """
    numbers = [r["match_number"] for r in results]
    if len(set(numbers)) != len(numbers):
        raise InvalidResult("Each match may only appear once")
    matches = _load_matches(numbers)

    groups = {}
    rows = {}
    teams = Team.query.filter(Team.group_letter.isnot(None)).order_by(
        Team.group_letter, Team.group_position
    ).all()
    for team in teams:
        row = StandingRow(group_letter=team.group_letter, team_id=team.id)
        groups.setdefault(team.group_letter, []).append(row)
        rows[team.id] = row

    for r in results:
        match = matches[r["match_number"]]
        if match.stage != Stage.GROUP:
            raise InvalidResult(f"Match {match.match_number} is not a group stage match")
        validate_scores(r["team1_score"], r["team2_score"])
        row1, row2 = rows.get(match.team1_id), rows.get(match.team2_id)
        if row1 is None or row2 is None:
            raise InvalidResult(f"Match {match.match_number} has no group teams assigned")
        record_result(row1, row2, r["team1_score"], r["team2_score"])

    for letter in groups:
        groups[letter] = rank_rows(groups[letter])
        for i, row in enumerate(groups[letter], 1):
            row.position = i

    thirds = [table[2] for _, table in sorted(groups.items()) if len(table) >= 3]
    qualified = rank_third_place_teams(thirds)[:QUALIFYING_THIRD_PLACES]
    ranked_letters = [row.group_letter for row in qualified]
    assignments = (
        resolve_third_place_assignments(ranked_letters)
        if len(ranked_letters) == QUALIFYING_THIRD_PLACES
        else {}
    )

    def resolve(code, match_number):
        kind, payload = parse_team_code(code)
        if kind == POSITION:
            position, letter = payload
            table = groups.get(letter, [])
            return table[position - 1].team_id if len(table) >= position else None
        if kind == THIRD_PLACE:
            letter = assignments.get(match_number)
            table = groups.get(letter, [])
            return table[2].team_id if len(table) >= 3 else None
        return None

    r32 = [
        {
            "match_number": number,
            "team1_code": code1,
            "team2_code": code2,
            "team1_id": resolve(code1, number),
            "team2_id": resolve(code2, number),
        }
        for number, (code1, code2) in sorted(ROUND_OF_32.items())
    ]

    logger.info("Previewed knockout bracket from %d group results", len(results))
    return {
        "complete": len(results) == GROUP_MATCH_COUNT,
        "group_standings": {
            letter: [vars(row).copy() for row in table]
            for letter, table in sorted(groups.items())
        },
        "third_place_ranking": ranked_letters,
        "third_place_assignments": assignments,
        "r32_matches": r32,
    }
