from wcpool.extensions import db
from datetime import datetime, timezone
import enum


class Stage(enum.Enum):
    GROUP = "GROUP"
    R32 = "R32"
    R16 = "R16"
    QF = "QF"
    SF = "SF"
    F = "F"


STAGE_ORDER = [Stage.GROUP, Stage.R32, Stage.R16, Stage.QF, Stage.SF, Stage.F]
KNOCKOUT_STAGES = STAGE_ORDER[1:]

# Played in parallel with the final, logically part of the semi-final round.
THIRD_PLACE_MATCH = 103
FINAL_MATCH = 104


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    match_number = db.Column(db.Integer, nullable=False, unique=True)
    stage = db.Column(db.Enum(Stage), nullable=False)
    team1_code = db.Column(db.String(16), nullable=False)
    team2_code = db.Column(db.String(16), nullable=False)
    team1_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    team2_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    team1_score = db.Column(db.Integer, nullable=True)
    team2_score = db.Column(db.Integer, nullable=True)
    winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    is_finished = db.Column(db.Boolean, nullable=False, default=False)
    scheduled_at = db.Column(db.DateTime, nullable=True)
    venue = db.Column(db.String(200), nullable=True)
    played_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    team1 = db.relationship("Team", foreign_keys=[team1_id])
    team2 = db.relationship("Team", foreign_keys=[team2_id])
    winner = db.relationship("Team", foreign_keys=[winner_id])

    @property
    def is_knockout(self):
        return self.stage != Stage.GROUP

    @property
    def is_third_place(self):
        return self.match_number == THIRD_PLACE_MATCH

    @property
    def loser_id(self):
        if not self.is_finished or self.winner_id is None:
            return None
        return self.team2_id if self.winner_id == self.team1_id else self.team1_id

    def __repr__(self):
        return f"<Match {self.match_number} {self.team1_code} vs {self.team2_code}>"
