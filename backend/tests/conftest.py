import json
import logging
import os
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `quizroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizroom import create_app, socketio
from quizroom.services.catalog import QuestionCatalog
from quizroom.services.rooms.gateway import BroadcastGateway
from quizroom.services.rooms.registry import RoomRegistry
from quizroom.services.rooms.scheduler import QuestionFlowScheduler
from quizroom.services.rooms.state_machine import RoomStateMachine

QUESTIONS = [
    {'question': 'Q1', 'choices': ['a', 'b', 'c'], 'correct': 1, 'points': 100},
    {'question': 'Q2', 'choices': ['a', 'b', 'c'], 'correct': 0, 'points': 200},
]


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    QUESTIONS_PATH = ''
    DEFAULT_QUESTION_TIMER_SEC = 5
    MAX_NAME_LENGTH = 40
    ROOM_CODE_LENGTH = 4
    EMPTY_ROOM_TTL_SEC = 0
    TIMER_HEARTBEAT_SEC = 0
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'


class RecordingGateway(BroadcastGateway):
    """Keeps every outbound event in memory instead of sending it."""

    def __init__(self):
        self.events = []
        self.members = defaultdict(set)

    def join(self, sid, code):
        self.members[code].add(sid)

    def to_room(self, code, event, payload=None):
        self.events.append(('room', code, event, payload))

    def to_caller(self, sid, event, payload=None):
        self.events.append(('caller', sid, event, payload))

    def names(self):
        return [e[2] for e in self.events]

    def payloads(self, event):
        return [e[3] for e in self.events if e[2] == event]

    def clear(self):
        self.events = []


class CapturedTasks:
    """Stands in for ``socketio.start_background_task``; tasks run on demand."""

    def __init__(self):
        self.calls = []

    def __call__(self, fn, *args):
        self.calls.append((fn, args))

    def run_all(self):
        calls, self.calls = self.calls, []
        for fn, args in calls:
            fn(*args)


@pytest.fixture()
def questions_file(tmp_path):
    path = tmp_path / 'questions.json'
    path.write_text(json.dumps({'questions': QUESTIONS}), encoding='utf-8')
    return path


@pytest.fixture()
def flask_app(questions_file):
    class _Config(TestConfig):
        QUESTIONS_PATH = str(questions_file)

    application = create_app(_Config)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()


@pytest.fixture()
def gateway():
    return RecordingGateway()


@pytest.fixture()
def tasks():
    return CapturedTasks()


@pytest.fixture()
def catalog():
    return QuestionCatalog(QUESTIONS, source='memory')


@pytest.fixture()
def logger():
    return logging.getLogger('quizroom.tests')


@pytest.fixture()
def registry(logger):
    return RoomRegistry(code_length=4, default_timer=5, logger=logger)


@pytest.fixture()
def scheduler(registry, catalog, gateway, logger, tasks):
    return QuestionFlowScheduler(registry, catalog, gateway, logger, start_task=tasks, sleep=lambda seconds: None)


@pytest.fixture()
def machine(registry, scheduler, gateway, catalog, logger):
    return RoomStateMachine(registry, scheduler, gateway, catalog, logger, max_name_length=40, empty_room_ttl=0)
