from wcpool.extensions import db
from wcpool.models.match import Stage
from datetime import datetime, timezone


class Form(db.Model):
    __tablename__ = "forms"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.String(64), nullable=False, unique=True)
    nickname = db.Column(db.String(100), nullable=False)
    is_final = db.Column(db.Boolean, nullable=False, default=False)
    submitted_at = db.Column(db.DateTime, nullable=True)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    match_picks = db.relationship("MatchPick", backref="form", lazy="dynamic")
    advance_picks = db.relationship("AdvancePick", backref="form", lazy="dynamic")
    top_scorer_pick = db.relationship("TopScorerPick", backref="form", uselist=False)
    scoring_runs = db.relationship("ScoringRun", backref="form", lazy="dynamic")

    def __repr__(self):
        return f"<Form {self.nickname}>"


class MatchPick(db.Model):
    __tablename__ = "match_picks"

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(db.Integer, db.ForeignKey("forms.id"), nullable=False)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id"), nullable=False)
    pred_score1 = db.Column(db.Integer, nullable=False)
    pred_score2 = db.Column(db.Integer, nullable=False)

    match = db.relationship("Match")

    __table_args__ = (
        db.UniqueConstraint("form_id", "match_id", name="uq_match_pick_form_match"),
    )


class AdvancePick(db.Model):
    __tablename__ = "advance_picks"

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(db.Integer, db.ForeignKey("forms.id"), nullable=False)
    stage = db.Column(db.Enum(Stage), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("form_id", "stage", "team_id",
                            name="uq_advance_pick_form_stage_team"),
    )


class TopScorerPick(db.Model):
    __tablename__ = "top_scorer_picks"

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(db.Integer, db.ForeignKey("forms.id"), nullable=False, unique=True)
    player_name = db.Column(db.String(120), nullable=False)


class ScoringRun(db.Model):
    """Append-only audit of a persisted score computation."""

    __tablename__ = "scoring_runs"

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(db.Integer, db.ForeignKey("forms.id"), nullable=False)
    delta = db.Column(db.Integer, nullable=False)
    details = db.Column(db.JSON, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
