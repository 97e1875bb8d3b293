from wcpool.extensions import db
from datetime import datetime, timezone


league_members = db.Table(
    "league_members",
    db.Column(
        "league_id",
        db.Integer,
        db.ForeignKey("leagues.id"),
        primary_key=True,
    ),
    db.Column(
        "form_id", db.Integer, db.ForeignKey("forms.id"), primary_key=True
    ),
)


class League(db.Model):
    __tablename__ = "leagues"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    join_code = db.Column(db.String(16), nullable=False, unique=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    forms = db.relationship(
        "Form", secondary=league_members, backref="leagues", lazy="dynamic"
    )

    def __repr__(self):
        return f"<League {self.name}>"
