from wcpool.extensions import ma
from wcpool.models.team import Team


class TeamSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Team
        load_instance = True
