from wcpool.schemas.team import TeamSchema
from wcpool.schemas.match import (
    MatchSchema,
    SubmitResultSchema,
    GroupResultSchema,
    BracketPreviewSchema,
)
from wcpool.schemas.standing import GroupStandingSchema, ThirdPlaceRankingSchema
from wcpool.schemas.scoring import (
    ScoreQuerySchema,
    ScoreUpdateSchema,
    SimulatedResultSchema,
    SimulationSchema,
    SaveSimulationSchema,
    SavedSimulationSchema,
    TopScorerSchema,
)

__all__ = [
    "TeamSchema",
    "MatchSchema",
    "SubmitResultSchema",
    "GroupResultSchema",
    "BracketPreviewSchema",
    "GroupStandingSchema",
    "ThirdPlaceRankingSchema",
    "ScoreQuerySchema",
    "ScoreUpdateSchema",
    "SimulatedResultSchema",
    "SimulationSchema",
    "SaveSimulationSchema",
    "SavedSimulationSchema",
    "TopScorerSchema",
]
