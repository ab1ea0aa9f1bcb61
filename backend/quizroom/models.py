import threading
from typing import Any, Dict, List, Optional

DEFAULT_PLAYER_NAME = 'Player'


class Player:
    def __init__(self, sid: str, name: str, avatar: Any = None):
        self.id = sid
        self.name = name
        self.avatar = avatar
        self.score = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'score': self.score,
        }

    def leaderboard_entry(self):
        return {
            'name': self.name,
            'score': self.score,
            'avatar': self.avatar,
        }


class Room:
    """A live trivia room.

    Mutations happen under ``lock``. The scheduler and the socket handlers
    may run on different threads, and the lock is re-entrant so the advance
    procedure can be called from inside another locked transition.
    """

    def __init__(self, code: str, question_timer: float = 5):
        self.code = code
        self.host_id: Optional[str] = None
        self.players: Dict[str, Player] = {}
        self.current_question_index = -1
        self.round_active = False
        self.answers: Dict[str, Any] = {}
        self.auto_leaderboard = False
        self.auto_question_timer = question_timer
        self.question_deadline: Optional[float] = None
        self.lock = threading.RLock()

    @property
    def status(self) -> str:
        if self.round_active:
            return 'in_progress'
        if self.current_question_index < 0:
            return 'lobby'
        return 'finished'

    def is_host(self, sid: str) -> bool:
        return self.host_id is not None and self.host_id == sid

    def is_empty(self) -> bool:
        return not self.players and self.host_id is None

    def leaderboard(self) -> List[Dict[str, Any]]:
        return [p.leaderboard_entry() for p in self.players.values()]

    def to_dict(self):
        return {
            'code': self.code,
            'hostId': self.host_id,
            'players': {sid: p.to_dict() for sid, p in self.players.items()},
            'currentQuestionIndex': self.current_question_index,
            'roundActive': self.round_active,
            'answers': dict(self.answers),
            'autoLeaderboard': self.auto_leaderboard,
            'autoQuestionTimer': self.auto_question_timer,
            'questionDeadline': self.question_deadline,
            'status': self.status,
        }
