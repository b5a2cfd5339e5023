import os
import sys
from datetime import datetime, timedelta

import pytest
from flask import g

# Ensure the backend root (containing the `geogame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from geogame import create_app, db
from geogame.geo import latitude_inside, latitude_outside
from geogame.services.game import init_game
from geogame.services.spatial_store import SpatialStore

# Search origin used throughout the suite
P_LAT = 55.77
P_LON = 12.48
DISTANCE_TO_SEARCH = 100


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    POSITION_EXPIRES_AFTER_SEC = 30
    POST_REACHED_DISTANCE_M = 15
    MAX_SEARCH_DISTANCE_M = 0
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = []


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import geogame.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    # Test requests share the fixture's app context, and with it `g`. Drop the
    # Flask-Login user cached there so every request authenticates on its own.
    @flask_app.before_request
    def _forget_cached_user():
        g.pop('_login_user', None)

    return flask_app.test_client()


@pytest.fixture()
def clock():
    return FakeClock(datetime(2026, 10, 1, 12, 0, 0))


@pytest.fixture()
def store(flask_app, clock):
    return SpatialStore(db.session, expires_after=flask_app.config['POSITION_EXPIRES_AFTER_SEC'], clock=clock)


@pytest.fixture()
def identity(flask_app):
    return flask_app.extensions['identity_store']


@pytest.fixture()
def game(flask_app, store, identity):
    # Rebinds the app's components, so HTTP calls see the fake clock too
    return init_game(flask_app, store, identity)


@pytest.fixture()
def seeded(game, store, identity):
    """Three teams around P plus an admin and one post, as the game is usually set up."""
    for n in (1, 2, 3):
        identity.add_user(f'Team{n}', f't{n}', 'secret', role='team')
    identity.add_user('Admin', 'admin', 'secret', role='admin')

    store.upsert_position('t1', 'Team1', P_LAT, P_LON)
    store.upsert_position('t2', 'Team2', latitude_inside(P_LAT, DISTANCE_TO_SEARCH), P_LON)
    store.upsert_position('t3', 'Team3', latitude_outside(P_LAT, DISTANCE_TO_SEARCH), P_LON)

    store.add_post('Post1', '1+1', False, '2', P_LAT, 12.49)
    return game
