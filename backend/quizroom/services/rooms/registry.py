import random
import threading
from typing import Dict, List, Optional

from quizroom.models import Room

# No I, L or O: they are easy to misread on a shared screen
ROOM_CODE_ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ'


def generate_room_code(length: int = 4) -> str:
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))


class RoomRegistry:
    """Owns every live Room, keyed by its code."""

    def __init__(self, code_length: int = 4, default_timer: float = 5, logger=None):
        self.code_length = code_length
        self.default_timer = default_timer
        self.logger = logger
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def create_room(self) -> Room:
        with self._lock:
            while True:
                code = generate_room_code(self.code_length)
                if code not in self._rooms:
                    break
            room = Room(code, question_timer=self.default_timer)
            self._rooms[code] = room
        if self.logger:
            self.logger.info(f"[room-create] room={code} live_rooms={len(self._rooms)}")
        return room

    def get(self, code) -> Optional[Room]:
        if not code or not isinstance(code, str):
            return None
        return self._rooms.get(code.upper())

    def remove(self, code: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.pop(code, None)
        if room is not None and self.logger:
            self.logger.info(f"[room-remove] room={code} live_rooms={len(self._rooms)}")
        return room

    def rooms(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def __contains__(self, code) -> bool:
        return self.get(code) is not None

    def __len__(self) -> int:
        return len(self._rooms)
