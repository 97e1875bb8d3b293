import os
import pytest

os.environ["FLASK_ENV"] = "testing"

from wcpool import create_app
from wcpool.events import event_bus
from wcpool.extensions import db as _db
from wcpool.seeds.cli import create_tournament


@pytest.fixture(scope="session")
def app():
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def tables(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(autouse=True)
def _clean_bus():
    event_bus.clear()
    yield
    event_bus.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tournament(app):
    """48 teams, 48 standings, 12 third-place rows and all 104 matches."""
    return create_tournament()

