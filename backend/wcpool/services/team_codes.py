"""Resolve symbolic slot codes ("2B", "3-ABCDF", "W73", ...) to teams."""
import re

from wcpool.errors import (
    MalformedCode,
    NoAssignmentForCombination,
    NotFound,
    NotYetComputed,
    UnresolvedDependency,
)
from wcpool.extensions import db
from wcpool.models.match import Match
from wcpool.models.standing import GroupStanding
from wcpool.models.team import Team
from wcpool.services.third_place import get_ranked_groups, resolve_third_place_assignments

POSITION = "position"
SEED = "seed"
THIRD_PLACE = "third_place"
WINNER = "winner"
LOSER = "loser"

_POSITION_RE = re.compile(r"^([1-4])([A-L])$")
_SEED_RE = re.compile(r"^([A-L])([1-4])$")
_THIRD_PLACE_RE = re.compile(r"^3-([A-L]+)$")
_RESULT_RE = re.compile(r"^([WL])([1-9]\d*)$")


def parse_team_code(code):
    """Split a code into (kind, payload).

    payload is (position, group_letter) for POSITION and SEED, the eligible
    letters for THIRD_PLACE and the source match number for WINNER/LOSER.
    """
    if not isinstance(code, str):
        raise MalformedCode(f"Unknown team code format: {code!r}")

    m = _POSITION_RE.match(code)
    if m:
        return POSITION, (int(m.group(1)), m.group(2))
    m = _SEED_RE.match(code)
    if m:
        return SEED, (int(m.group(2)), m.group(1))
    m = _THIRD_PLACE_RE.match(code)
    if m:
        letters = m.group(1)
        if len(set(letters)) != len(letters) or "".join(sorted(letters)) != letters:
            raise MalformedCode(f"Third place code letters must be sorted and distinct: {code}")
        return THIRD_PLACE, letters
    m = _RESULT_RE.match(code)
    if m:
        return (WINNER if m.group(1) == "W" else LOSER), int(m.group(2))

    raise MalformedCode(f"Unknown team code format: {code!r}")


def resolve_team(code, match_number=None):
    """Return the Team currently behind a slot code, or None if not known yet.

    None is a normal transient state (group not played, match not decided).
    Third-place codes need the match number they sit in.
    """
    kind, payload = parse_team_code(code)

    if kind == POSITION:
        position, letter = payload
        standing = GroupStanding.query.filter_by(
            group_letter=letter, position=position
        ).first()
        return standing.team if standing else None

    if kind == SEED:
        position, letter = payload
        return Team.query.filter_by(group_letter=letter, group_position=position).first()

    if kind == THIRD_PLACE:
        letter = third_place_group_for(code, match_number, payload)
        standing = GroupStanding.query.filter_by(group_letter=letter, position=3).first()
        return standing.team if standing else None

    source = Match.query.filter_by(match_number=payload).first()
    if not source:
        raise NotFound(f"Match {payload} not found")
    if not source.is_finished or source.winner_id is None:
        return None
    team_id = source.winner_id if kind == WINNER else source.loser_id
    return db.session.get(Team, team_id) if team_id else None


def third_place_group_for(code, match_number, eligible):
    """Group letter whose third-placed team fills `code` in `match_number`."""
    if match_number is None:
        raise UnresolvedDependency(f"Code {code} needs a match number to resolve")

    ranked = get_ranked_groups()
    if not ranked:
        raise NotYetComputed("Third place qualification has not been computed yet")

    try:
        assignments = resolve_third_place_assignments(ranked)
    except NoAssignmentForCombination as e:
        raise UnresolvedDependency(
            f"No assignment for qualifiers {''.join(sorted(ranked))}: {e}"
        ) from e

    letter = assignments.get(match_number)
    if letter is None or letter not in eligible:
        raise UnresolvedDependency(
            f"No third place assignment for match {match_number} with code {code}"
        )
    return letter
