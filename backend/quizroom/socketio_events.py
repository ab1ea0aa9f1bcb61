from flask import current_app, request

from quizroom import get_rooms, socketio
from quizroom.services.rooms.errors import NotHost, RoomError


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _dispatch(action: str, *args):
    """Run a state machine transition for the calling socket.

    Rejections go back to the caller only; host-only actions from anyone
    else are dropped without a reply.
    """
    machine = get_rooms()
    sid = _get_sid()
    try:
        return getattr(machine, action)(sid, *args)
    except NotHost as exc:
        current_app.logger.debug(f"[ignored] {action}: {exc}")
    except RoomError as exc:
        current_app.logger.info(f"[rejected] {action} sid={sid}: {exc}")
        if exc.signal:
            machine.gateway.to_caller(sid, exc.signal)
    return None


def _payload(data) -> dict:
    # Anything but an object carries no usable fields
    return data if isinstance(data, dict) else {}


def handle_connect():
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.debug(f"[disconnect] sid={sid} reason={reason}")
    get_rooms().disconnect(sid)


def handle_create_room(data=None):
    _dispatch('create_room')


def handle_host_join(data=None):
    _dispatch('host_join', _payload(data).get('code'))


def handle_player_join(data=None):
    data = _payload(data)
    _dispatch('player_join', data.get('code'), data.get('name'), data.get('avatar'))


def handle_start_quiz(data=None):
    _dispatch('start_quiz', _payload(data).get('code'))


def handle_submit_answer(data=None):
    data = _payload(data)
    _dispatch('submit_answer', data.get('code'), data.get('answer'))


def handle_next_question(data=None):
    _dispatch('next_question', _payload(data).get('code'))


def handle_show_leaderboard(data=None):
    _dispatch('show_leaderboard', _payload(data).get('code'))


def handle_host_set_prefs(data=None):
    data = _payload(data)
    _dispatch('host_set_prefs', data.get('code'), data.get('timer'), data.get('autoLeaderboard'))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('hostJoin', handle_host_join, namespace=namespace)
    socketio.on_event('playerJoin', handle_player_join, namespace=namespace)
    socketio.on_event('startQuiz', handle_start_quiz, namespace=namespace)
    socketio.on_event('submitAnswer', handle_submit_answer, namespace=namespace)
    socketio.on_event('nextQuestion', handle_next_question, namespace=namespace)
    socketio.on_event('showLeaderboard', handle_show_leaderboard, namespace=namespace)
    socketio.on_event('hostSetPrefs', handle_host_set_prefs, namespace=namespace)
