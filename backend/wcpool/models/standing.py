from wcpool.extensions import db
from datetime import datetime, timezone


class GroupStanding(db.Model):
    __tablename__ = "group_standings"

    id = db.Column(db.Integer, primary_key=True)
    group_letter = db.Column(db.String(1), nullable=False)
    position = db.Column(db.Integer, nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    played = db.Column(db.Integer, nullable=False, default=0)
    wins = db.Column(db.Integer, nullable=False, default=0)
    draws = db.Column(db.Integer, nullable=False, default=0)
    losses = db.Column(db.Integer, nullable=False, default=0)
    goals_for = db.Column(db.Integer, nullable=False, default=0)
    goals_against = db.Column(db.Integer, nullable=False, default=0)
    goal_diff = db.Column(db.Integer, nullable=False, default=0)
    points = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    team = db.relationship("Team")

    __table_args__ = (
        db.UniqueConstraint("group_letter", "position",
                            name="uq_group_standing_position"),
    )

    def __repr__(self):
        return f"<GroupStanding {self.group_letter}{self.position} {self.points}pts>"


class ThirdPlaceRanking(db.Model):
    __tablename__ = "third_place_rankings"

    id = db.Column(db.Integer, primary_key=True)
    group_letter = db.Column(db.String(1), nullable=False, unique=True)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    rank = db.Column(db.Integer, nullable=True)
    points = db.Column(db.Integer, nullable=False, default=0)
    goal_diff = db.Column(db.Integer, nullable=False, default=0)
    goals_for = db.Column(db.Integer, nullable=False, default=0)

    team = db.relationship("Team")

    def __repr__(self):
        return f"<ThirdPlaceRanking {self.group_letter} rank={self.rank}>"
