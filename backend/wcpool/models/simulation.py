from wcpool.extensions import db
from datetime import datetime, timezone


class SavedSimulation(db.Model):
    """A form owner's stored what-if scenario: result overrides plus a top scorer."""

    __tablename__ = "saved_simulations"

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(db.Integer, db.ForeignKey("forms.id"), nullable=False, unique=True)
    results = db.Column(db.JSON, nullable=False, default=list)
    top_scorer = db.Column(db.String(120), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    form = db.relationship("Form", backref=db.backref("saved_simulation", uselist=False))

    def __repr__(self):
        return f"<SavedSimulation form={self.form_id} overrides={len(self.results or [])}>"
