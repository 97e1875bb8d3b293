from wcpool.extensions import ma
from wcpool.models.standing import GroupStanding, ThirdPlaceRanking


class GroupStandingSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = GroupStanding
        load_instance = True
        include_fk = True

    team = ma.Nested("TeamSchema", only=("id", "name", "fifa_code"), dump_only=True)


class ThirdPlaceRankingSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = ThirdPlaceRanking
        load_instance = True
        include_fk = True

    team = ma.Nested("TeamSchema", only=("id", "name", "fifa_code"), dump_only=True)
