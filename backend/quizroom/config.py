import os

BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def _origins(raw):
    if not raw or raw.strip() == '*':
        return '*'
    return [o.strip() for o in raw.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Question catalog, read once at startup
    QUESTIONS_PATH = os.environ.get('QUESTIONS_PATH') or os.path.join(BACKEND_ROOT, 'public', 'questions.json')
    # Seconds between automatic question advances for new rooms
    DEFAULT_QUESTION_TIMER_SEC = float(os.environ.get('DEFAULT_QUESTION_TIMER_SEC', '5'))
    # Upper bound accepted for a host-set question timer
    MAX_QUESTION_TIMER_SEC = float(os.environ.get('MAX_QUESTION_TIMER_SEC', '3600'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '40'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    # Grace period before a room with no host and no players is removed. 0 removes immediately.
    EMPTY_ROOM_TTL_SEC = float(os.environ.get('EMPTY_ROOM_TTL_SEC', '60'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
