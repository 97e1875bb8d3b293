from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from wcpool.extensions import ma
from wcpool.models.simulation import SavedSimulation
from wcpool.schemas.match import GroupResultSchema


class ScoreQuerySchema(Schema):
    top_scorer = fields.String(load_default=None)


class ScoreUpdateSchema(Schema):
    actual_top_scorer = fields.String(load_default=None, allow_none=True)
    league_id = fields.Integer(load_default=None, allow_none=True, strict=True)
    form_id = fields.Integer(load_default=None, allow_none=True, strict=True)


class SimulatedResultSchema(GroupResultSchema):
    winner_id = fields.Integer(load_default=None, allow_none=True, strict=True)


class SimulationSchema(Schema):
    results = fields.List(fields.Nested(SimulatedResultSchema), load_default=list)
    actual_top_scorer = fields.String(load_default=None, allow_none=True)
    form_id = fields.Integer(load_default=None, allow_none=True, strict=True)

    @validates_schema
    def validate_source(self, data, **kwargs):
        saved = data.get("form_id") is not None
        if saved and (data.get("results") or data.get("actual_top_scorer")):
            raise ValidationError("Send either results or a saved form_id, not both.")


class SaveSimulationSchema(Schema):
    results = fields.List(fields.Nested(SimulatedResultSchema), required=True)
    top_scorer = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=120)
    )


class SavedSimulationSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = SavedSimulation
        load_instance = True
        include_fk = True


class TopScorerSchema(Schema):
    player_name = fields.String(
        required=True, allow_none=True, validate=validate.Length(max=120)
    )
