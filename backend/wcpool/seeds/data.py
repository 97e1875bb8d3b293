from datetime import datetime, timedelta

from wcpool.models.match import THIRD_PLACE_MATCH, FINAL_MATCH
from wcpool.tournament import (
    GROUP_LETTERS,
    GROUP_MATCHDAY_PAIRINGS,
    KNOCKOUT_FIXTURES,
    stage_for_match,
)

# ---------------------------------------------------------------------------
# Teams: (group letter, seed position, name, FIFA code), as drawn in Dec 2025
# ---------------------------------------------------------------------------

TEAMS = [
    ("A", 1, "Mexico", "MEX"),
    ("A", 2, "South Africa", "RSA"),
    ("A", 3, "Korea Republic", "KOR"),
    ("A", 4, "UEFA Play-off D Winner", "EPD"),
    ("B", 1, "Canada", "CAN"),
    ("B", 2, "UEFA Play-off A Winner", "EPA"),
    ("B", 3, "Qatar", "QAT"),
    ("B", 4, "Switzerland", "SUI"),
    ("C", 1, "Brazil", "BRA"),
    ("C", 2, "Morocco", "MAR"),
    ("C", 3, "Haiti", "HAI"),
    ("C", 4, "Scotland", "SCO"),
    ("D", 1, "USA", "USA"),
    ("D", 2, "Paraguay", "PAR"),
    ("D", 3, "Australia", "AUS"),
    ("D", 4, "UEFA Play-off C Winner", "EPC"),
    ("E", 1, "Germany", "GER"),
    ("E", 2, "Curaçao", "CUW"),
    ("E", 3, "Côte d'Ivoire", "CIV"),
    ("E", 4, "Ecuador", "ECU"),
    ("F", 1, "Netherlands", "NED"),
    ("F", 2, "Japan", "JPN"),
    ("F", 3, "UEFA Play-off B Winner", "EPB"),
    ("F", 4, "Tunisia", "TUN"),
    ("G", 1, "Belgium", "BEL"),
    ("G", 2, "Egypt", "EGY"),
    ("G", 3, "IR Iran", "IRN"),
    ("G", 4, "New Zealand", "NZL"),
    ("H", 1, "Spain", "ESP"),
    ("H", 2, "Cabo Verde", "CPV"),
    ("H", 3, "Saudi Arabia", "KSA"),
    ("H", 4, "Uruguay", "URU"),
    ("I", 1, "France", "FRA"),
    ("I", 2, "Senegal", "SEN"),
    ("I", 3, "Intercontinental Play-off 2 Winner", "IP2"),
    ("I", 4, "Norway", "NOR"),
    ("J", 1, "Argentina", "ARG"),
    ("J", 2, "Algeria", "ALG"),
    ("J", 3, "Austria", "AUT"),
    ("J", 4, "Jordan", "JOR"),
    ("K", 1, "Portugal", "POR"),
    ("K", 2, "Intercontinental Play-off 1 Winner", "IP1"),
    ("K", 3, "Uzbekistan", "UZB"),
    ("K", 4, "Colombia", "COL"),
    ("L", 1, "England", "ENG"),
    ("L", 2, "Croatia", "CRO"),
    ("L", 3, "Ghana", "GHA"),
    ("L", 4, "Panama", "PAN"),
]

# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------

OPENING_DAY = datetime(2026, 6, 11, 19, 0)

# First day of each knockout round, relative to the opening day.
KNOCKOUT_DAY_OFFSETS = {
    "R32": 17,
    "R16": 23,
    "QF": 28,
    "SF": 33,
}
THIRD_PLACE_DAY = 37
FINAL_DAY = 38

MATCHES_PER_DAY = 4

VENUES = [
    "Estadio Azteca, Mexico City",
    "MetLife Stadium, New York New Jersey",
    "AT&T Stadium, Dallas",
    "SoFi Stadium, Los Angeles",
    "Arrowhead Stadium, Kansas City",
    "NRG Stadium, Houston",
    "Mercedes-Benz Stadium, Atlanta",
    "Lincoln Financial Field, Philadelphia",
    "Lumen Field, Seattle",
    "Levi's Stadium, San Francisco Bay Area",
    "Gillette Stadium, Boston",
    "Hard Rock Stadium, Miami",
    "BMO Field, Toronto",
    "BC Place, Vancouver",
    "Estadio BBVA, Monterrey",
    "Estadio Akron, Guadalajara",
]


def build_group_fixtures():
    """Matches 1-72: matchday by matchday, groups A-L in order.

    Returns [(match_number, team1_code, team2_code, matchday), ...] with seed
    codes such as "A1".
    """
    fixtures = []
    number = 1
    for matchday, pairings in enumerate(GROUP_MATCHDAY_PAIRINGS):
        for letter in GROUP_LETTERS:
            for seed1, seed2 in pairings:
                fixtures.append((number, f"{letter}{seed1}", f"{letter}{seed2}", matchday))
                number += 1
    return fixtures


def _kickoff(day, slot):
    return OPENING_DAY + timedelta(days=day, hours=3 * (slot % MATCHES_PER_DAY))


def build_schedule():
    """All 104 fixtures as dicts ready for Match(**fixture)."""
    schedule = []
    for number, code1, code2, matchday in build_group_fixtures():
        index = number - 1 - matchday * 24
        schedule.append({
            "match_number": number,
            "stage": stage_for_match(number),
            "team1_code": code1,
            "team2_code": code2,
            "scheduled_at": _kickoff(matchday * 6 + index // MATCHES_PER_DAY, index),
            "venue": VENUES[(number - 1) % len(VENUES)],
        })

    for number, (code1, code2) in sorted(KNOCKOUT_FIXTURES.items()):
        stage = stage_for_match(number)
        if number == THIRD_PLACE_MATCH:
            kickoff = _kickoff(THIRD_PLACE_DAY, 1)
        elif number == FINAL_MATCH:
            kickoff = _kickoff(FINAL_DAY, 1)
        else:
            first = min(n for n in KNOCKOUT_FIXTURES if stage_for_match(n) == stage)
            index = number - first
            kickoff = _kickoff(KNOCKOUT_DAY_OFFSETS[stage.value] + index // MATCHES_PER_DAY, index)
        schedule.append({
            "match_number": number,
            "stage": stage,
            "team1_code": code1,
            "team2_code": code2,
            "scheduled_at": kickoff,
            "venue": VENUES[(number - 1) % len(VENUES)],
        })
    return schedule


# ---------------------------------------------------------------------------
# Demo forms
# ---------------------------------------------------------------------------

DEMO_LEAGUE = {"name": "General", "join_code": "GENERAL"}

DEMO_NICKNAMES = [
    "Tiki Taka", "Catenaccio", "Total Football", "Gegenpress", "Joga Bonito",
    "Route One", "False Nine", "Park the Bus", "Box to Box", "Sweeper Keeper",
]

TOP_SCORER_CANDIDATES = [
    "Kylian Mbappé", "Erling Haaland", "Harry Kane", "Lautaro Martínez",
    "Vinícius Júnior", "Lamine Yamal", "Julián Álvarez", "Cody Gakpo",
]

# Number of teams a form sends into each knockout stage.
ADVANCE_PICK_COUNTS = {"R32": 32, "R16": 16, "QF": 8, "SF": 4, "F": 2}
