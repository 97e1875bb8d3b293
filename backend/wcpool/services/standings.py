import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from wcpool.errors import InconsistentGroupState
from wcpool.extensions import db
from wcpool.models.match import Match, Stage
from wcpool.models.standing import GroupStanding

logger = logging.getLogger(__name__)


@dataclass
class StandingRow:
    """Detached standing used for hypothetical tables."""

    group_letter: str
    team_id: int
    position: int = 0
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_diff: int = 0
    points: int = 0


def standing_sort_key(row):
    """Points DESC, goal difference DESC, goals for DESC."""
    return (-row.points, -row.goal_diff, -row.goals_for)


def rank_rows(rows):
    """Order rows by standing_sort_key.

    Team-less slots go last. The sort is stable, so rows tied on all three
    keys keep the order they came in with.
    """
    bound = sorted((r for r in rows if r.team_id is not None), key=standing_sort_key)
    unbound = [r for r in rows if r.team_id is None]
    return bound + unbound


def record_result(standing1, standing2, score1, score2):
    """Apply one match to both teams' rows (ORM or StandingRow)."""
    for own, other, scored, conceded in (
        (standing1, standing2, score1, score2),
        (standing2, standing1, score2, score1),
    ):
        own.played += 1
        own.goals_for += scored
        own.goals_against += conceded
        own.goal_diff = own.goals_for - own.goals_against

    if score1 > score2:
        standing1.wins += 1
        standing1.points += 3
        standing2.losses += 1
    elif score1 < score2:
        standing2.wins += 1
        standing2.points += 3
        standing1.losses += 1
    else:
        standing1.draws += 1
        standing1.points += 1
        standing2.draws += 1
        standing2.points += 1


def standings_for_update(team_ids):
    """Every standing row of the teams' groups, locked in id order.

    The re-sort rewrites every position of the group, so the lock covers
    all of its rows, not just the two teams.
    """
    letters = db.select(GroupStanding.group_letter).where(
        GroupStanding.team_id.in_(team_ids)
    )
    return GroupStanding.query.filter(
        GroupStanding.group_letter.in_(letters)
    ).order_by(GroupStanding.id).with_for_update().populate_existing()


def apply_group_result(team1_id, team2_id, score1, score2):
    """Add a group match to both teams' standings and re-sort their group.

    Runs inside the caller's transaction; nothing is committed here.
    Returns the group letter.
    """
    rows = standings_for_update([team1_id, team2_id]).all()
    by_team = {r.team_id: r for r in rows}
    standing1 = by_team.get(team1_id)
    standing2 = by_team.get(team2_id)

    if team1_id == team2_id or not standing1 or not standing2:
        raise InconsistentGroupState("Group standings not found for teams")
    if standing1.group_letter != standing2.group_letter:
        raise InconsistentGroupState(
            f"Teams are in different groups "
            f"({standing1.group_letter} and {standing2.group_letter})"
        )

    record_result(standing1, standing2, score1, score2)
    now = datetime.now(timezone.utc)
    standing1.updated_at = now
    standing2.updated_at = now
    db.session.flush()

    sort_group(standing1.group_letter)
    return standing1.group_letter


def sort_group(group_letter):
    """Renumber positions 1..n in standing order.

    (group_letter, position) is unique, and the UPDATEs of one flush run in
    primary-key order, so a single pass can collide with a row that still
    holds its old position. Every row is moved to a negative position and
    flushed first, then to its final one.
    """
    rows = GroupStanding.query.filter_by(
        group_letter=group_letter
    ).order_by(GroupStanding.position).all()
    if not rows:
        raise InconsistentGroupState(f"No standings for group {group_letter}")

    ordered = rank_rows(rows)
    if [r.position for r in ordered] == list(range(1, len(ordered) + 1)):
        return ordered

    for i, row in enumerate(ordered, 1):
        row.position = -i
    db.session.flush()

    for i, row in enumerate(ordered, 1):
        row.position = i
    db.session.flush()

    logger.debug("Sorted group %s standings", group_letter)
    return ordered


def get_group_table(group_letter):
    return GroupStanding.query.filter_by(
        group_letter=group_letter
    ).order_by(GroupStanding.position).all()


def get_all_groups():
    """{group_letter: [standing, ...]} ordered by letter and position."""
    rows = GroupStanding.query.order_by(
        GroupStanding.group_letter, GroupStanding.position
    ).all()
    groups = {}
    for row in rows:
        groups.setdefault(row.group_letter, []).append(row)
    return groups


def get_group_stage_status():
    total = Match.query.filter_by(stage=Stage.GROUP).count()
    finished = Match.query.filter_by(stage=Stage.GROUP, is_finished=True).count()
    return {
        "total": total,
        "finished": finished,
        "remaining": total - finished,
        "complete": total > 0 and finished == total,
    }


def is_group_stage_complete():
    return get_group_stage_status()["complete"]
