from typing import Any, Optional


class BroadcastGateway:
    """Outbound side of the transport as seen by the room services."""

    def join(self, sid: str, code: str) -> None:
        raise NotImplementedError

    def to_room(self, code: str, event: str, payload: Optional[Any] = None) -> None:
        raise NotImplementedError

    def to_caller(self, sid: str, event: str, payload: Optional[Any] = None) -> None:
        raise NotImplementedError


class SocketIOGateway(BroadcastGateway):
    """Delivers events through Flask-SocketIO.

    Uses ``socketio.emit`` rather than the request-bound ``emit`` so the
    scheduler can broadcast from a background task.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def join(self, sid, code):
        self.socketio.server.enter_room(sid, code, namespace=self.namespace)

    def _emit(self, event, payload, to):
        if payload is None:
            self.socketio.emit(event, to=to, namespace=self.namespace)
        else:
            self.socketio.emit(event, payload, to=to, namespace=self.namespace)

    def to_room(self, code, event, payload=None):
        self._emit(event, payload, code)

    def to_caller(self, sid, event, payload=None):
        self._emit(event, payload, sid)
