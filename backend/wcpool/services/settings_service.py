from wcpool.extensions import db
from wcpool.models.settings import SETTINGS_ID, TournamentSettings


def get_settings():
    """Return the tournament settings row, or an unsaved default if it is missing."""
    return db.session.get(TournamentSettings, SETTINGS_ID) or TournamentSettings(id=SETTINGS_ID)


def get_actual_top_scorer():
    return get_settings().actual_top_scorer


def set_actual_top_scorer(player_name):
    settings = db.session.get(TournamentSettings, SETTINGS_ID)
    if not settings:
        settings = TournamentSettings(id=SETTINGS_ID)
        db.session.add(settings)
    settings.actual_top_scorer = player_name.strip() if player_name else None
    db.session.commit()
    return settings
