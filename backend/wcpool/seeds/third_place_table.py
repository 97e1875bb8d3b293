"""Generated third-place allocation table.

This is NOT the official FIFA allocation table. For every 8-of-12
combination of qualifying groups it picks the first matching (slots in
match order, letters alphabetically) that puts each qualifier into a round
of 32 slot whose code lists its group. Every entry is a valid allocation,
but it can differ from the official one.

Point THIRD_PLACE_TABLE_PATH at the official table to replace it; the app
validates whichever file it is given.
"""
from itertools import combinations

from wcpool.errors import NoAssignmentForCombination
from wcpool.tournament import GROUP_LETTERS, QUALIFYING_THIRD_PLACES, THIRD_PLACE_SLOTS

SLOTS = sorted(THIRD_PLACE_SLOTS)


def assign(qualifiers, slot_index=0, used=()):
    """First slot-by-slot matching of the qualifiers, or None."""
    if slot_index == len(SLOTS):
        return {}
    number = SLOTS[slot_index]
    for letter in sorted(qualifiers):
        if letter in used or letter not in THIRD_PLACE_SLOTS[number]:
            continue
        rest = assign(qualifiers, slot_index + 1, used + (letter,))
        if rest is not None:
            return {str(number): letter, **rest}
    return None


def build_table():
    """{combination: {match_number: letter}} with string keys, as stored in JSON."""
    table = {}
    for combo in combinations(GROUP_LETTERS, QUALIFYING_THIRD_PLACES):
        key = "".join(combo)
        entry = assign(combo)
        if entry is None:
            raise NoAssignmentForCombination(f"No valid assignment for {key}")
        table[key] = entry
    return table
