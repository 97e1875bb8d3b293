"""Static shape of the 48-team, 104-match tournament.

The knockout topology never changes at runtime, so everything here is a
module-level constant. Slot codes:

    "1A".."4L"     final group position (digit) in a group (letter)
    "A1".."L4"     team seeded at a position of a group (group stage only)
    "3-<letters>"  one of the best third-placed teams from the listed groups
    "W<n>"/"L<n>"  winner / loser of match n
"""
from wcpool.models.match import Stage, THIRD_PLACE_MATCH, FINAL_MATCH

GROUP_LETTERS = "ABCDEFGHIJKL"
TEAMS_PER_GROUP = 4
QUALIFYING_THIRD_PLACES = 8

GROUP_MATCH_COUNT = 72

# Seed positions meeting on each matchday of a four-team group.
GROUP_MATCHDAY_PAIRINGS = [
    [(1, 2), (3, 4)],
    [(1, 3), (4, 2)],
    [(4, 1), (2, 3)],
]

ROUND_OF_32 = {
    73: ("2A", "2B"),
    74: ("1E", "3-ABCDF"),
    75: ("1F", "2C"),
    76: ("1C", "2F"),
    77: ("1I", "3-CDFGH"),
    78: ("2E", "2I"),
    79: ("1A", "3-CEFHI"),
    80: ("1L", "3-EHIJK"),
    81: ("1D", "3-BEFIJ"),
    82: ("1G", "3-AEHIJ"),
    83: ("2K", "2L"),
    84: ("1H", "2J"),
    85: ("1B", "3-EFGIJ"),
    86: ("1J", "2H"),
    87: ("1K", "3-DEIJL"),
    88: ("2D", "2G"),
}

LATER_ROUNDS = {
    89: ("W74", "W77"),
    90: ("W73", "W75"),
    91: ("W76", "W78"),
    92: ("W79", "W80"),
    93: ("W83", "W84"),
    94: ("W81", "W82"),
    95: ("W86", "W88"),
    96: ("W85", "W87"),
    97: ("W89", "W90"),
    98: ("W93", "W94"),
    99: ("W91", "W92"),
    100: ("W95", "W96"),
    101: ("W97", "W98"),
    102: ("W99", "W100"),
    THIRD_PLACE_MATCH: ("L101", "L102"),
    FINAL_MATCH: ("W101", "W102"),
}

KNOCKOUT_FIXTURES = {**ROUND_OF_32, **LATER_ROUNDS}

# R32 match number -> group letters eligible for its third-place slot.
THIRD_PLACE_SLOTS = {
    number: code[2:]
    for number, codes in ROUND_OF_32.items()
    for code in codes
    if code.startswith("3-")
}


def stage_for_match(match_number):
    if 1 <= match_number <= GROUP_MATCH_COUNT:
        return Stage.GROUP
    if match_number <= 88:
        return Stage.R32
    if match_number <= 96:
        return Stage.R16
    if match_number <= 100:
        return Stage.QF
    if match_number <= THIRD_PLACE_MATCH:
        return Stage.SF
    if match_number == FINAL_MATCH:
        return Stage.F
    raise ValueError(f"Match number {match_number} is outside the tournament")


def _build_advancement():
    """source match -> [(target match, slot 1|2, "W"|"L"), ...]"""
    advancement = {}
    for target, codes in LATER_ROUNDS.items():
        for slot, code in enumerate(codes, 1):
            role, source = code[0], int(code[1:])
            advancement.setdefault(source, []).append((target, slot, role))
    return advancement


ADVANCEMENT = _build_advancement()
