import logging

from wcpool.errors import InvalidResult
from wcpool.models.match import Match, Stage
from wcpool.services.team_codes import resolve_team
from wcpool.tournament import ADVANCEMENT

logger = logging.getLogger(__name__)


# ── Winner ───────────────────────────────────────────────────────────────────

def determine_winner(match, score1, score2, winner_id=None):
    """Winner team id for a result on `match`, or None for a group draw.

    A knockout draw needs the shoot-out winner designated by the caller,
    and that team must be one of the two participants.
    """
    if not match.is_knockout:
        if score1 > score2:
            return match.team1_id
        if score2 > score1:
            return match.team2_id
        return None

    participants = (match.team1_id, match.team2_id)
    if winner_id is not None and winner_id not in participants:
        raise InvalidResult(
            f"winner_id must be one of the two teams in match {match.match_number}"
        )

    if score1 == score2:
        if winner_id is None:
            raise InvalidResult(
                f"Knockout match {match.match_number} ended in a draw, specify winner_id"
            )
        return winner_id

    score_winner = match.team1_id if score1 > score2 else match.team2_id
    if winner_id is not None and winner_id != score_winner:
        raise InvalidResult("winner_id contradicts the score")
    return score_winner


# ── Propagation ──────────────────────────────────────────────────────────────

def propagate_result(match):
    """Write the winner (and for semi-finals the loser) into later matches.

    A target slot is only written when its own code names this match, so a
    corrected re-application lands in the same slot and nothing else.
    Returns the match numbers that were touched. Caller commits.
    """
    targets = ADVANCEMENT.get(match.match_number, [])
    if not targets or match.winner_id is None:
        return []

    touched = []
    for target_number, slot, role in targets:
        team_id = match.winner_id if role == "W" else match.loser_id
        target = Match.query.filter_by(match_number=target_number).first()
        if target is None:
            continue
        if _fill_slot(target, slot, f"{role}{match.match_number}", team_id):
            touched.append(target_number)
            logger.info(
                "Assigned %s of match %d to match %d",
                "winner" if role == "W" else "loser",
                match.match_number,
                target_number,
            )
    return touched


def _fill_slot(target, slot, source_code, team_id):
    if getattr(target, f"team{slot}_code") != source_code:
        return False
    if getattr(target, f"team{slot}_id") == team_id:
        return False
    setattr(target, f"team{slot}_id", team_id)
    return True


def fill_round_of_32():
    """Resolve every R32 slot from final group tables and third-place ranks.

    Returns the number of slots written. Caller commits.
    """
    written = 0
    for match in Match.query.filter_by(stage=Stage.R32).order_by(Match.match_number).all():
        for slot in (1, 2):
            code = getattr(match, f"team{slot}_code")
            team = resolve_team(code, match.match_number)
            if team is None:
                continue
            if _fill_slot(match, slot, code, team.id):
                written += 1
    logger.info("Filled %d round of 32 slots", written)
    return written


def get_bracket():
    """Knockout matches grouped by stage, in match-number order."""
    matches = Match.query.filter(Match.stage != Stage.GROUP).order_by(Match.match_number).all()
    bracket = {}
    for m in matches:
        bracket.setdefault(m.stage.value, []).append(m)
    return bracket
