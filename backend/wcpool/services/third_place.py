"""Third-place qualification.

Once every group is finished, the best 8 of the 12 third-placed teams go
through to the round of 32. Which R32 match each of them plays depends on
the exact combination of qualifying groups, so the mapping comes from a
static table keyed by the 8 sorted group letters (C(12, 8) = 495 keys).
The packaged table is generated, not FIFA's official one; see
wcpool.seeds.third_place_table.
"""
import json
import logging
from itertools import combinations
from pathlib import Path

from flask import current_app

from wcpool.config import GENERATED_THIRD_PLACE_TABLE
from wcpool.errors import MalformedCode, NoAssignmentForCombination
from wcpool.extensions import db
from wcpool.models.standing import GroupStanding, ThirdPlaceRanking
from wcpool.tournament import GROUP_LETTERS, QUALIFYING_THIRD_PLACES, THIRD_PLACE_SLOTS

logger = logging.getLogger(__name__)

EXPECTED_COMBINATIONS = 495


# ── Static table ─────────────────────────────────────────────────────────────

def load_assignment_table(path):
    """Read and validate the combination table.

    Returns {combination: {match_number: group_letter}}. Any defect raises
    NoAssignmentForCombination, since the engine cannot run without it.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as e:
        raise NoAssignmentForCombination(
            f"Cannot read third place assignment table at {path}: {e}"
        ) from e

    table = {
        combination: {int(number): letter for number, letter in entry.items()}
        for combination, entry in raw.items()
    }
    validate_assignment_table(table)
    return table


def validate_assignment_table(table):
    expected_keys = {"".join(c) for c in combinations(GROUP_LETTERS, QUALIFYING_THIRD_PLACES)}
    missing = expected_keys - table.keys()
    extra = table.keys() - expected_keys
    if missing or extra or len(table) != EXPECTED_COMBINATIONS:
        raise NoAssignmentForCombination(
            f"Third place table must cover all {EXPECTED_COMBINATIONS} combinations "
            f"(missing {len(missing)}, unexpected {len(extra)})"
        )

    slots = set(THIRD_PLACE_SLOTS)
    for combination, entry in table.items():
        if set(entry) != slots:
            raise NoAssignmentForCombination(
                f"Combination {combination} does not cover matches {sorted(slots)}"
            )
        letters = list(entry.values())
        if sorted(letters) != list(combination):
            raise NoAssignmentForCombination(
                f"Combination {combination} must place each qualifying group exactly once"
            )
        for number, letter in entry.items():
            if letter not in THIRD_PLACE_SLOTS[number]:
                raise NoAssignmentForCombination(
                    f"Combination {combination}: group {letter} is not eligible for match {number}"
                )


def init_app(app):
    """Load the table once per process; app creation fails if it is broken."""
    path = app.config["THIRD_PLACE_TABLE_PATH"]
    table = load_assignment_table(path)
    app.extensions["third_place_table"] = table
    app.logger.info("Loaded %d third place combinations from %s", len(table), path)
    if Path(path).resolve() == GENERATED_THIRD_PLACE_TABLE.resolve():
        app.logger.warning(
            "Using the generated third place table, not the official FIFA one. "
            "Set THIRD_PLACE_TABLE_PATH to the official table."
        )


def get_assignment_table():
    return current_app.extensions["third_place_table"]


# ── Pure resolution ──────────────────────────────────────────────────────────

def combination_key(group_letters):
    letters = [letter.upper() for letter in group_letters]
    if (
        len(letters) != QUALIFYING_THIRD_PLACES
        or len(set(letters)) != QUALIFYING_THIRD_PLACES
        or any(letter not in GROUP_LETTERS for letter in letters)
    ):
        raise MalformedCode(
            f"Expected {QUALIFYING_THIRD_PLACES} distinct group letters A-L, "
            f"got {''.join(group_letters)!r}"
        )
    return "".join(sorted(letters))


def resolve_third_place_assignments(ranked_group_letters, table=None):
    """Map each third-place R32 slot to the group whose third team fills it.

    The input order is irrelevant: ['E', 'F', ..., 'L'] and any permutation
    resolve the same key "EFGHIJKL".
    """
    key = combination_key(ranked_group_letters)
    if table is None:
        table = get_assignment_table()
    assignment = table.get(key)
    if assignment is None:
        raise NoAssignmentForCombination(
            f"No third place assignment found for combination: {key}"
        )
    return dict(assignment)


def third_place_sort_key(row):
    return (-row.points, -row.goal_diff, -row.goals_for)


def rank_third_place_teams(rows):
    """Best-first ordering of third-placed rows; ties keep input order."""
    return sorted(rows, key=third_place_sort_key)


# ── Persisted qualification ──────────────────────────────────────────────────

def third_place_rows_for_update():
    """All ranking rows, locked in id order."""
    return ThirdPlaceRanking.query.order_by(
        ThirdPlaceRanking.id
    ).with_for_update().populate_existing()


def get_ranked_groups():
    """Group letters of the qualified third places, best first, or None."""
    ranked = ThirdPlaceRanking.query.filter(
        ThirdPlaceRanking.rank.isnot(None)
    ).order_by(ThirdPlaceRanking.rank).all()
    if not ranked:
        return None
    return [r.group_letter for r in ranked]


def update_third_place_rankings():
    """Rank the 12 third-placed teams and mark the top 8.

    Every ranking row gets its group's current third-place stats; only the
    qualifiers get a rank. Running it twice on the same standings writes the
    same values. Caller commits.
    """
    thirds = GroupStanding.query.filter(
        GroupStanding.position == 3,
        GroupStanding.team_id.isnot(None),
    ).order_by(GroupStanding.group_letter).all()

    ranked = rank_third_place_teams(thirds)
    ranks = {s.group_letter: i for i, s in enumerate(ranked[:QUALIFYING_THIRD_PLACES], 1)}

    rows = {r.group_letter: r for r in ThirdPlaceRanking.query.all()}
    for standing in thirds:
        row = rows.get(standing.group_letter)
        if row is None:
            row = ThirdPlaceRanking(group_letter=standing.group_letter)
            db.session.add(row)
        row.team_id = standing.team_id
        row.points = standing.points
        row.goal_diff = standing.goal_diff
        row.goals_for = standing.goals_for
        row.rank = ranks.get(standing.group_letter)
    db.session.flush()

    qualified = [s.group_letter for s in ranked[:QUALIFYING_THIRD_PLACES]]
    logger.info("Third place qualifiers (best first): %s", ", ".join(qualified))
    return qualified
