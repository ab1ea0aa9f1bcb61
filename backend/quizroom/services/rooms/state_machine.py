import math
import threading
import time
from typing import Any, Dict, Optional

from quizroom.models import DEFAULT_PLAYER_NAME, Player, Room
from .errors import InvalidPreference, NotHost, NotInRoom, RoundNotActive, UnknownRoom


def _positive_timer(value: Any, maximum: float) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds) or seconds <= 0 or seconds > maximum:
        return None
    return int(seconds) if seconds.is_integer() else seconds


class RoomStateMachine:
    """Host and player transitions for every room.

    Each public method takes the caller's socket id first. Rejections are
    raised as ``RoomError`` subclasses; the transport decides what, if
    anything, the caller is told.
    """

    def __init__(self, registry, scheduler, gateway, catalog, logger,
                 max_name_length: int = 40, empty_room_ttl: float = 60,
                 max_question_timer: float = 3600):
        self.registry = registry
        self.scheduler = scheduler
        self.gateway = gateway
        self.catalog = catalog
        self.logger = logger
        self.max_name_length = max_name_length
        self.empty_room_ttl = empty_room_ttl
        self.max_question_timer = max_question_timer
        self._cleanup_deadlines: Dict[str, float] = {}
        self._cleanup_lock = threading.Lock()

    def _room(self, code, signal: Optional[str] = None) -> Room:
        room = self.registry.get(code)
        if room is None:
            raise UnknownRoom(code, signal)
        return room

    def _require_host(self, room: Room, sid: str, action: str) -> None:
        if not room.is_host(sid):
            raise NotHost(f"{action} from non-host {sid} in room {room.code}")

    def _broadcast_state(self, room: Room) -> None:
        self.gateway.to_room(room.code, 'state', room.to_dict())

    def create_room(self, sid: str) -> str:
        room = self.registry.create_room()
        with room.lock:
            room.host_id = sid
            self.gateway.join(sid, room.code)
            self.gateway.to_caller(sid, 'roomCreated', {'code': room.code})
            self._broadcast_state(room)
        return room.code

    def host_join(self, sid: str, code) -> Room:
        room = self._room(code)
        with room.lock:
            self._cancel_cleanup(room.code)
            self.gateway.join(sid, room.code)
            room.host_id = sid
            self.gateway.to_caller(sid, 'hostAccepted', {'code': room.code})
            self._broadcast_state(room)
        return room

    def player_join(self, sid: str, code, name=None, avatar=None) -> Player:
        room = self._room(code, signal='joinRejected')
        display = str(name).strip() if name is not None else ''
        player = Player(sid, (display or DEFAULT_PLAYER_NAME)[:self.max_name_length], avatar or None)
        with room.lock:
            self._cancel_cleanup(room.code)
            self.gateway.join(sid, room.code)
            room.players[sid] = player
            self._broadcast_state(room)
            self.gateway.to_caller(sid, 'joinedAck', {'id': sid, 'code': room.code})
            self.gateway.to_room(room.code, 'playSound', {'name': 'join'})
        return player

    def start_quiz(self, sid: str, code) -> bool:
        room = self._room(code)
        with room.lock:
            self._require_host(room, sid, 'startQuiz')
            if room.round_active or room.current_question_index >= 0:
                self.logger.info(f"[ignored] room={room.code} startQuiz outside lobby status={room.status}")
                return False
            room.current_question_index = 0
            room.round_active = True
            room.answers.clear()
            self.logger.info(f"[round-start] room={room.code} players={len(room.players)} questions={len(self.catalog)}")
            self.gateway.to_room(room.code, 'roundStarted', {'idx': room.current_question_index})
            self._broadcast_state(room)
            self.scheduler.start(room.code)
        return True

    def submit_answer(self, sid: str, code, answer) -> None:
        room = self._room(code)
        with room.lock:
            if not room.round_active:
                raise RoundNotActive(f"answer from {sid} while room {room.code} is {room.status}")
            player = room.players.get(sid)
            if player is None:
                raise NotInRoom(f"answer from {sid} who is not a player of room {room.code}")
            room.answers[sid] = answer
            self.gateway.to_room(room.code, 'playerAnsweredLive', {'playerId': sid, 'name': player.name})

    def next_question(self, sid: str, code) -> bool:
        room = self._room(code)
        with room.lock:
            self._require_host(room, sid, 'nextQuestion')
            return self.scheduler.advance(room.code)

    def show_leaderboard(self, sid: str, code) -> None:
        room = self._room(code)
        with room.lock:
            self.gateway.to_room(room.code, 'leaderboard', {'leaderboard': room.leaderboard()})

    def host_set_prefs(self, sid: str, code, timer=None, auto_leaderboard=None) -> Room:
        room = self._room(code)
        with room.lock:
            self._require_host(room, sid, 'hostSetPrefs')
            # Each field is applied on its own; a bad one does not block the other
            if timer is not None:
                seconds = _positive_timer(timer, self.max_question_timer)
                if seconds is None:
                    self._log_invalid(InvalidPreference(f"timer={timer!r} in room {room.code}"))
                else:
                    room.auto_question_timer = seconds
            if auto_leaderboard is not None:
                if isinstance(auto_leaderboard, bool):
                    room.auto_leaderboard = auto_leaderboard
                else:
                    self._log_invalid(InvalidPreference(f"autoLeaderboard={auto_leaderboard!r} in room {room.code}"))
            self._broadcast_state(room)
        return room

    def disconnect(self, sid: str) -> None:
        for room in self.registry.rooms():
            with room.lock:
                touched = False
                if sid in room.players:
                    del room.players[sid]
                    touched = True
                    self._broadcast_state(room)
                if room.host_id == sid:
                    room.host_id = None
                    touched = True
                    self.logger.info(f"[host-left] room={room.code} round_active={room.round_active}")
                    self.gateway.to_room(room.code, 'hostLeft')
                if touched and room.is_empty() and self.registry.get(room.code) is room:
                    self._schedule_cleanup(room)

    def _log_invalid(self, exc: InvalidPreference) -> None:
        self.logger.info(f"[ignored] invalid preference: {exc}")

    def _schedule_cleanup(self, room: Room) -> None:
        if self.empty_room_ttl <= 0:
            self._remove_room(room.code)
            return
        deadline = time.time() + self.empty_room_ttl
        with self._cleanup_lock:
            self._cleanup_deadlines[room.code] = deadline
        self.scheduler.call_later(self.empty_room_ttl, self._remove_if_still_empty, room.code, deadline)

    def _cancel_cleanup(self, code: str) -> None:
        with self._cleanup_lock:
            self._cleanup_deadlines.pop(code, None)

    def _remove_if_still_empty(self, code: str, deadline: float) -> None:
        room = self.registry.get(code)
        if room is None:
            return
        with room.lock:
            with self._cleanup_lock:
                if self._cleanup_deadlines.get(code) != deadline:
                    return
            if room.is_empty():
                self._remove_room(code)

    def _remove_room(self, code: str) -> None:
        self._cancel_cleanup(code)
        self.scheduler.cancel(code)
        self.registry.remove(code)
