import os
import sys
import pytest

# Ensure the backend root (containing the `herd` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from herd import create_app, db, socketio
from herd.models import Question, Room
from herd.services.session.dispatcher import NAMESPACE
from herd.services.session.presence import presence
from herd.services.session.rotation import registry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = '*'
    QUESTION_ROTATION = 'shuffle'
    LOG_LEVEL = 'DEBUG'


@pytest.fixture(autouse=True)
def clean_live_state():
    presence.clear()
    registry.clear()
    yield
    presence.clear()
    registry.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def room(flask_app):
    """Open room ABCD with a two-question catalog."""
    db.session.add_all([
        Question(id=1, prompt='Prompt A', sort_number=1),
        Question(id=2, prompt='Prompt B', sort_number=2),
        Room(code='abcd'),
    ])
    db.session.commit()
    return 'ABCD'


@pytest.fixture()
def make_client(flask_app):
    """Factory for Socket.IO test clients connected to /ws."""
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        if test_client.is_connected(NAMESPACE):
            test_client.disconnect(namespace=NAMESPACE)


def drain(test_client):
    return test_client.get_received(NAMESPACE)


def payloads(packets, name):
    """Payloads of every packet with the given event name, in order."""
    return [p['args'][0] if p['args'] else None for p in packets if p['name'] == name]


def fresh():
    """Forget cached rows so reads see commits made by socket handlers."""
    db.session.expire_all()
