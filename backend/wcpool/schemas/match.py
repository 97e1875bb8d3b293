from wcpool.extensions import ma
from wcpool.models.match import Match
from marshmallow import Schema, fields, validate

from wcpool.services.match_service import MAX_GOALS

_score = dict(required=True, strict=True, validate=validate.Range(min=0, max=MAX_GOALS))


class MatchSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Match
        load_instance = True
        include_fk = True

    stage = fields.Function(lambda obj: obj.stage.value if obj.stage else None)
    is_third_place = fields.Boolean(dump_only=True)
    team1 = ma.Nested("TeamSchema", only=("id", "name", "fifa_code"), dump_only=True)
    team2 = ma.Nested("TeamSchema", only=("id", "name", "fifa_code"), dump_only=True)
    winner = ma.Nested("TeamSchema", only=("id", "name", "fifa_code"), dump_only=True)


class SubmitResultSchema(Schema):
    team1_score = fields.Integer(**_score)
    team2_score = fields.Integer(**_score)
    winner_id = fields.Integer(load_default=None, allow_none=True, strict=True)


class GroupResultSchema(Schema):
    match_number = fields.Integer(required=True, strict=True)
    team1_score = fields.Integer(**_score)
    team2_score = fields.Integer(**_score)


class BracketPreviewSchema(Schema):
    results = fields.List(fields.Nested(GroupResultSchema), required=True)
