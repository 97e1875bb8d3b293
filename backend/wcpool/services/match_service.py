import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from wcpool.errors import AlreadyFinished, EngineError, InvalidResult, NotFound
from wcpool.events import (
    BRACKET_UPDATED,
    GROUP_STAGE_COMPLETE,
    MATCH_RESULT_RECORDED,
    STANDINGS_UPDATED,
    event_bus,
)
from wcpool.extensions import db
from wcpool.models.match import Match, Stage
from wcpool.services.bracket import determine_winner, fill_round_of_32, propagate_result
from wcpool.services.standings import apply_group_result, is_group_stage_complete
from wcpool.services.third_place import (
    third_place_rows_for_update,
    update_third_place_rankings,
)

logger = logging.getLogger(__name__)

MAX_GOALS = 20


def validate_scores(team1_score, team2_score):
    for score in (team1_score, team2_score):
        if not isinstance(score, int) or isinstance(score, bool):
            raise InvalidResult(f"Scores must be whole numbers, got {score!r}")
        if score < 0:
            raise InvalidResult(f"Scores cannot be negative, got {score}")
        if score > MAX_GOALS:
            raise InvalidResult(f"Score {score} is not plausible (max {MAX_GOALS})")


def get_match(match_number):
    match = Match.query.filter_by(match_number=match_number).first()
    if not match:
        raise NotFound(f"Match {match_number} not found")
    return match


def apply_match_result(match_number, team1_score, team2_score, winner_id=None):
    """Record a result and run every cascading update as one transaction.

    Group matches update both standings and re-sort the group; the last
    group match also ranks the third places and fills the round of 32.
    Knockout matches push the winner (and a semi-final loser) forward.
    Events are published only after the commit.
    """
    events = []
    try:
        match = Match.query.filter_by(
            match_number=match_number
        ).with_for_update().first()
        if not match:
            raise NotFound(f"Match {match_number} not found")
        if match.is_finished:
            raise AlreadyFinished(f"Match {match_number} is already finished")

        validate_scores(team1_score, team2_score)
        if match.team1_id is None or match.team2_id is None:
            raise InvalidResult(f"Match {match_number} participants are not yet determined")

        match.winner_id = determine_winner(match, team1_score, team2_score, winner_id)
        match.team1_score = team1_score
        match.team2_score = team2_score
        match.is_finished = True
        match.played_at = datetime.now(timezone.utc)

        events.append((MATCH_RESULT_RECORDED, {
            "match_number": match.match_number,
            "stage": match.stage.value,
            "team1_id": match.team1_id,
            "team2_id": match.team2_id,
            "team1_score": team1_score,
            "team2_score": team2_score,
            "winner_id": match.winner_id,
        }))

        if match.stage == Stage.GROUP:
            letter = apply_group_result(
                match.team1_id, match.team2_id, team1_score, team2_score
            )
            events.append((STANDINGS_UPDATED, {"group_letter": letter}))
            if complete_group_stage():
                events.append((GROUP_STAGE_COMPLETE, {}))
                events.append((BRACKET_UPDATED, {"stage": Stage.R32.value}))
        else:
            touched = propagate_result(match)
            if touched:
                events.append((BRACKET_UPDATED, {
                    "match_number": match.match_number,
                    "updated_matches": touched,
                }))

        db.session.commit()
    except (EngineError, SQLAlchemyError):
        db.session.rollback()
        raise

    logger.info(
        "Match %d result recorded: %d-%d", match.match_number, team1_score, team2_score
    )
    for event_type, data in events:
        event_bus.publish(event_type, data)
    return match


def complete_group_stage():
    """Rank third places and fill the R32 once every group match is finished.

    Returns True when the work was done now; False if the group stage is
    still running or was already resolved. Caller commits.

    The ranking rows are locked before anything is counted, so concurrent
    last results see each other once they get the lock.
    """
    rows = third_place_rows_for_update().all()
    if not is_group_stage_complete():
        return False
    if any(row.rank is not None for row in rows):
        return False

    logger.info("Group stage complete, resolving third places")
    update_third_place_rankings()
    fill_round_of_32()
    return True
