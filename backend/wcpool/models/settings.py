from wcpool.extensions import db
from datetime import datetime, timezone

SETTINGS_ID = "tournament_2026"


class TournamentSettings(db.Model):
    __tablename__ = "tournament_settings"

    id = db.Column(db.String(32), primary_key=True, default=SETTINGS_ID)
    actual_top_scorer = db.Column(db.String(120), nullable=True)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
