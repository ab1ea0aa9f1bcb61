from typing import Optional


class RoomError(Exception):
    """Base class for rejected room actions.

    ``signal`` is the event sent back to the caller only, or None when the
    action is ignored without telling anyone.
    """

    signal: Optional[str] = None

    def __init__(self, message: str = '', signal: Optional[str] = None):
        super().__init__(message)
        if signal is not None:
            self.signal = signal


class UnknownRoom(RoomError):
    signal = 'errorRoom'

    def __init__(self, code, signal: Optional[str] = None):
        super().__init__(f"room {code!r} not found", signal)
        self.code = code


class NotHost(RoomError):
    signal = None


class RoundNotActive(RoomError):
    signal = 'answerRejected'


class NotInRoom(RoomError):
    signal = 'answerRejected'


class InvalidPreference(RoomError):
    signal = None
