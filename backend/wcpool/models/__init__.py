from wcpool.models.team import Team
from wcpool.models.match import Match, Stage
from wcpool.models.standing import GroupStanding, ThirdPlaceRanking
from wcpool.models.form import Form, MatchPick, AdvancePick, TopScorerPick, ScoringRun
from wcpool.models.league import League, league_members
from wcpool.models.settings import TournamentSettings
from wcpool.models.simulation import SavedSimulation

__all__ = [
    "Team",
    "Match",
    "Stage",
    "GroupStanding",
    "ThirdPlaceRanking",
    "Form",
    "MatchPick",
    "AdvancePick",
    "TopScorerPick",
    "ScoringRun",
    "League",
    "league_members",
    "TournamentSettings",
    "SavedSimulation",
]
