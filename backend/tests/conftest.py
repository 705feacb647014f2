import os
import sys
import pytest

# Ensure the backend root (containing the `pixelboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from pixelboard import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    CANVAS_WIDTH = 200
    CANVAS_HEIGHT = 200
    PLACEMENT_COOLDOWN_SEC = 30
    CRON_SECRET = 'test-cron-secret'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    @application.teardown_request
    def _reset_login_cache(exc=None):
        # The app context below stays open for the whole test, so flask.g is
        # shared across test-client requests; drop Flask-Login's cached user.
        from flask import g
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import pixelboard.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_user_client(flask_app):
    """Returns a factory producing test clients logged in as a fresh user."""
    def _make(username, password='password'):
        user_client = flask_app.test_client()
        res = user_client.post('/register', json={'username': username, 'password': password})
        assert res.status_code == 201
        user_client.user = res.get_json()['user']
        return user_client
    return _make


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
