"""Prediction scoring and leaderboard ordering.

A form is always scored against a ResultSnapshot: the official one is read
from committed matches in a single query, the simulated one is built from
caller overrides. Both go through evaluate_form, so the two paths cannot
drift apart.
"""
import logging
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from flask import current_app

from wcpool.errors import NotFound
from wcpool.events import SCORES_UPDATED, event_bus
from wcpool.extensions import db
from wcpool.models.form import Form, ScoringRun
from wcpool.models.league import League
from wcpool.models.match import Match, Stage, STAGE_ORDER, KNOCKOUT_STAGES, FINAL_MATCH

logger = logging.getLogger(__name__)


class StageScoring(NamedTuple):
    decision: int
    exact_result: int
    advance: int  # per team correctly sent on to the next stage


DEFAULT_SCORING_MATRIX = {
    Stage.GROUP: StageScoring(decision=1, exact_result=3, advance=2),
    Stage.R32: StageScoring(decision=3, exact_result=3, advance=2),
    Stage.R16: StageScoring(decision=3, exact_result=3, advance=4),
    Stage.QF: StageScoring(decision=5, exact_result=3, advance=6),
    Stage.SF: StageScoring(decision=7, exact_result=3, advance=8),
    Stage.F: StageScoring(decision=9, exact_result=3, advance=0),
}

DEFAULT_TOP_SCORER_POINTS = 8

# Tiebreak priority for correct advances, most valuable first.
TIEBREAK_ADVANCE_STAGES = [Stage.F, Stage.SF, Stage.QF, Stage.R16]


def build_scoring_matrix(overrides=None):
    """Default matrix with per-stage overrides such as {"F": {"decision": 10}}."""
    matrix = dict(DEFAULT_SCORING_MATRIX)
    for stage_name, values in (overrides or {}).items():
        stage = Stage(stage_name)
        matrix[stage] = matrix[stage]._replace(**values)
    return matrix


def get_scoring_matrix():
    return build_scoring_matrix(current_app.config.get("SCORING_MATRIX"))


def get_top_scorer_points():
    return current_app.config.get("TOP_SCORER_POINTS", DEFAULT_TOP_SCORER_POINTS)


# ── Pure rules ───────────────────────────────────────────────────────────────

def determine_outcome(score1, score2):
    if score1 > score2:
        return "W"
    if score1 < score2:
        return "L"
    return "D"


def score_match(scoring, actual, predicted):
    """(points, decision_hit, exact_hit) for one prediction.

    The exact bonus is only paid on top of a correct decision.
    """
    decision_hit = determine_outcome(*actual) == determine_outcome(*predicted)
    if not decision_hit:
        return 0, False, False
    exact_hit = tuple(actual) == tuple(predicted)
    points = scoring.decision + (scoring.exact_result if exact_hit else 0)
    return points, True, exact_hit


def previous_stage(stage):
    index = STAGE_ORDER.index(stage)
    return STAGE_ORDER[index - 1] if index > 0 else None


def top_scorer_matches(predicted, actual):
    if not actual or not predicted:
        return False
    return predicted.strip().lower() == actual.strip().lower()


# ── Snapshots ────────────────────────────────────────────────────────────────

@dataclass
class ResultSnapshot:
    results: dict  # match id -> (stage, score1, score2), decided matches only
    participants: dict = field(default_factory=dict)  # knockout stage -> {team ids}
    champion_id: Optional[int] = None


def official_snapshot():
    """Committed results, read with one query so they come from one instant."""
    results = {}
    participants = {stage: set() for stage in KNOCKOUT_STAGES}
    champion_id = None
    for m in Match.query.all():
        if m.is_finished and m.team1_score is not None and m.team2_score is not None:
            results[m.id] = (m.stage, m.team1_score, m.team2_score)
        if m.stage != Stage.GROUP:
            participants[m.stage].update(t for t in (m.team1_id, m.team2_id) if t)
        if m.match_number == FINAL_MATCH and m.is_finished:
            champion_id = m.winner_id
    return ResultSnapshot(results=results, participants=participants, champion_id=champion_id)


# ── Evaluation ───────────────────────────────────────────────────────────────

@dataclass
class FormEvaluation:
    form_id: int
    match_points: int = 0
    advance_points: int = 0
    top_scorer_points: int = 0
    by_stage: dict = field(default_factory=lambda: {s.value: 0 for s in STAGE_ORDER})
    advances_by_stage: dict = field(default_factory=lambda: {s.value: 0 for s in KNOCKOUT_STAGES})
    exact_results: int = 0
    correct_decisions: int = 0
    correct_champion: bool = False
    correct_top_scorer: bool = False
    correct_advances: dict = field(
        default_factory=lambda: {s.value: 0 for s in TIEBREAK_ADVANCE_STAGES}
    )

    @property
    def total(self):
        return self.match_points + self.advance_points + self.top_scorer_points

    def breakdown(self):
        return {
            "match_points": self.match_points,
            "advance_points": self.advance_points,
            "top_scorer_points": self.top_scorer_points,
        }

    def tiebreakers(self):
        return {
            "exact_results": self.exact_results,
            "correct_decisions": self.correct_decisions,
            "correct_champion": self.correct_champion,
            "correct_top_scorer": self.correct_top_scorer,
            "correct_advances": dict(self.correct_advances),
        }


def evaluate_form(form, snapshot, actual_top_scorer=None, matrix=None, top_scorer_points=None):
    if matrix is None:
        matrix = DEFAULT_SCORING_MATRIX
    if top_scorer_points is None:
        top_scorer_points = DEFAULT_TOP_SCORER_POINTS

    ev = FormEvaluation(form_id=form.id)

    for pick in form.match_picks:
        result = snapshot.results.get(pick.match_id)
        if result is None:
            continue
        stage, score1, score2 = result
        points, decision_hit, exact_hit = score_match(
            matrix[stage], (score1, score2), (pick.pred_score1, pick.pred_score2)
        )
        ev.match_points += points
        ev.by_stage[stage.value] += points
        ev.correct_decisions += decision_hit
        ev.exact_results += exact_hit

    picks_by_stage = {}
    for pick in form.advance_picks:
        picks_by_stage.setdefault(pick.stage, set()).add(pick.team_id)

    for stage in KNOCKOUT_STAGES:
        actual = snapshot.participants.get(stage, set())
        correct = len(picks_by_stage.get(stage, set()) & actual)
        points = correct * matrix[previous_stage(stage)].advance
        ev.advance_points += points
        ev.advances_by_stage[stage.value] = points
        if stage in TIEBREAK_ADVANCE_STAGES:
            ev.correct_advances[stage.value] = correct

    if snapshot.champion_id is not None:
        ev.correct_champion = snapshot.champion_id in picks_by_stage.get(Stage.F, set())

    pick = form.top_scorer_pick
    ev.correct_top_scorer = top_scorer_matches(pick.player_name if pick else None, actual_top_scorer)
    ev.top_scorer_points = top_scorer_points if ev.correct_top_scorer else 0
    return ev


def _get_form(form_id):
    form = db.session.get(Form, form_id)
    if not form:
        raise NotFound(f"Form {form_id} not found")
    return form


def _evaluate_official(form_id, actual_top_scorer):
    form = _get_form(form_id)
    return evaluate_form(
        form,
        official_snapshot(),
        actual_top_scorer,
        matrix=get_scoring_matrix(),
        top_scorer_points=get_top_scorer_points(),
    )


def compute_score(form_id, actual_top_scorer=None):
    ev = _evaluate_official(form_id, actual_top_scorer)
    return {
        "form_id": form_id,
        "total": ev.total,
        "breakdown": ev.breakdown(),
        "by_stage": ev.by_stage,
        "advances_by_stage": ev.advances_by_stage,
    }


def compute_tiebreakers(form_id, actual_top_scorer=None):
    return _evaluate_official(form_id, actual_top_scorer).tiebreakers()


# ── Leaderboards ─────────────────────────────────────────────────────────────

def leaderboard_sort_key(form, ev):
    """Total, exact hits, decisions, champion, top scorer, advances F..R16.

    Forms still level after that are ordered by creation time, then id.
    """
    return (
        -ev.total,
        -ev.exact_results,
        -ev.correct_decisions,
        not ev.correct_champion,
        not ev.correct_top_scorer,
        *(-ev.correct_advances[s.value] for s in TIEBREAK_ADVANCE_STAGES),
        form.created_at.replace(tzinfo=None),
        form.id,
    )


def rank_leaderboard(evaluated):
    """Rank (form, evaluation) pairs into leaderboard entries."""
    ordered = sorted(evaluated, key=lambda pair: leaderboard_sort_key(*pair))
    return [
        {
            "rank": rank,
            "form_id": form.id,
            "owner_id": form.owner_id,
            "nickname": form.nickname,
            "total_points": ev.total,
            "breakdown": ev.breakdown(),
            "tiebreakers": ev.tiebreakers(),
        }
        for rank, (form, ev) in enumerate(ordered, 1)
    ]


def get_league(league_id):
    league = db.session.get(League, league_id)
    if not league:
        raise NotFound(f"League {league_id} not found")
    return league


def league_leaderboard(league_id, actual_top_scorer=None):
    league = get_league(league_id)
    snapshot = official_snapshot()
    matrix = get_scoring_matrix()
    points = get_top_scorer_points()
    evaluated = [
        (form, evaluate_form(form, snapshot, actual_top_scorer, matrix, points))
        for form in league.forms.order_by(Form.id).all()
    ]
    return rank_leaderboard(evaluated)


# ── Persisted scores ─────────────────────────────────────────────────────────

def _persist(form, ev):
    form.total_points = ev.total
    run = ScoringRun(
        form_id=form.id,
        delta=ev.total,
        details={
            "breakdown": ev.breakdown(),
            "by_stage": ev.by_stage,
            "advances_by_stage": ev.advances_by_stage,
        },
    )
    db.session.add(run)
    return run


def update_form_score(form_id, actual_top_scorer=None):
    """Store the form's current total and append a ScoringRun."""
    form = _get_form(form_id)
    ev = evaluate_form(
        form, official_snapshot(), actual_top_scorer,
        get_scoring_matrix(), get_top_scorer_points(),
    )
    run = _persist(form, ev)
    db.session.commit()
    logger.info("Scored form %d: %d points", form.id, ev.total)
    return run


def update_all_scores(actual_top_scorer=None, league_id=None):
    """Rescore every form, or every form in a league. Returns the count."""
    if league_id is not None:
        forms = get_league(league_id).forms.order_by(Form.id).all()
    else:
        forms = Form.query.order_by(Form.id).all()

    snapshot = official_snapshot()
    matrix = get_scoring_matrix()
    points = get_top_scorer_points()
    for form in forms:
        _persist(form, evaluate_form(form, snapshot, actual_top_scorer, matrix, points))
    db.session.commit()

    logger.info("Rescored %d forms (league=%s)", len(forms), league_id)
    event_bus.publish(SCORES_UPDATED, {"league_id": league_id, "forms": len(forms)})
    return len(forms)
