from wcpool.extensions import db
from datetime import datetime, timezone


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    fifa_code = db.Column(db.String(3), nullable=False, unique=True)
    group_letter = db.Column(db.String(1), nullable=True)
    group_position = db.Column(db.Integer, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<Team {self.fifa_code}>"
