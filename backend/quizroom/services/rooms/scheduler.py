import itertools
import threading
import time
from typing import Dict, Optional

from quizroom.models import Room
from .scoring import evaluate_answers


class PendingAdvance:
    """An armed automatic advance for one question of one room."""

    def __init__(self, token: int, code: str, question_index: int, delay: float):
        self.token = token
        self.code = code
        self.question_index = question_index
        self.delay = delay
        self.deadline = time.time() + delay

    def __repr__(self):
        return f"PendingAdvance(token={self.token}, room={self.code}, idx={self.question_index}, delay={self.delay})"


class QuestionFlowScheduler:
    """Moves rooms through the question catalog on a per-room timer.

    - At most one pending advance per room; arming replaces the previous one
    - The host's manual advance and a timer firing both go through
      ``advance`` under the room lock, so each question is evaluated once
    - With no ``start_task`` (TESTING) advances are armed but never fire on
      their own; call ``fire`` to simulate the timer
    """

    def __init__(self, registry, catalog, gateway, logger, start_task=None, sleep=None, heartbeat_sec: int = 0):
        self.registry = registry
        self.catalog = catalog
        self.gateway = gateway
        self.logger = logger
        self._start_task = start_task
        self._sleep = sleep or time.sleep
        self.heartbeat_sec = heartbeat_sec
        self._pending: Dict[str, PendingAdvance] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    def start(self, code: str) -> None:
        """Show the first question of a freshly started round and arm the timer."""
        room = self.registry.get(code)
        if room is None:
            return
        with room.lock:
            if not room.round_active:
                return
            if not len(self.catalog):
                self.logger.warning(f"[timer-skip] room={room.code} catalog is empty, no question to show")
                return
            self.gateway.to_room(room.code, 'questionShown', self._question_payload(room))
            self._arm(room)

    def pending(self, code: str) -> Optional[PendingAdvance]:
        return self._pending.get(code)

    def cancel(self, code: str) -> Optional[PendingAdvance]:
        with self._lock:
            pending = self._pending.pop(code, None)
        if pending is not None:
            self.logger.debug(f"[timer-cancel] room={code} idx={pending.question_index} token={pending.token}")
        return pending

    def fire(self, code: str, token: int) -> bool:
        """Timer entry point: advance if ``token`` is still the armed advance."""
        pending = self._pending.get(code)
        self.logger.info(
            f"[timer-fire] room={code} token={token} armed={pending.token if pending else None}"
        )
        if pending is None or pending.token != token:
            self.logger.info(f"[timer-abort] room={code} token={token} no longer armed")
            return False
        return self.advance(code, expected_index=pending.question_index, token=token)

    def advance(self, code: str, expected_index: Optional[int] = None, token: Optional[int] = None) -> bool:
        """Close the current question and move on or end the round.

        Returns False without touching the room if it is gone, the round is
        not active, or the question has already moved past
        ``expected_index``/``token``.
        """
        room = self.registry.get(code)
        if room is None:
            self.logger.info(f"[timer-abort] room={code} no longer exists")
            return False
        with room.lock:
            if self.registry.get(room.code) is not room:
                self.logger.info(f"[timer-abort] room={room.code} removed")
                return False
            if not room.round_active:
                self.logger.info(f"[timer-abort] room={room.code} round not active")
                return False
            if expected_index is not None and room.current_question_index != expected_index:
                self.logger.info(
                    f"[timer-abort] room={room.code} expected_idx={expected_index} actual_idx={room.current_question_index}"
                )
                return False
            if token is not None:
                armed = self._pending.get(room.code)
                if armed is None or armed.token != token:
                    self.logger.info(f"[timer-abort] room={room.code} token={token} superseded")
                    return False

            self.cancel(room.code)
            room.question_deadline = None
            self._close_question(room)

            if room.current_question_index < len(self.catalog) - 1:
                room.current_question_index += 1
                room.answers.clear()
                self.logger.info(f"[advance] room={room.code} idx={room.current_question_index}")
                self.gateway.to_room(room.code, 'questionChanged', self._question_payload(room))
                self._arm(room)
            else:
                room.round_active = False
                self.logger.info(f"[round-end] room={room.code} idx={room.current_question_index}")
                self.gateway.to_room(room.code, 'roundEnded')
            self.gateway.to_room(room.code, 'state', room.to_dict())
        return True

    def call_later(self, delay: float, fn, *args) -> bool:
        """Run ``fn(*args)`` after ``delay`` seconds in a background task."""
        if self._start_task is None:
            return False
        self._start_task(self._delayed, delay, fn, args)
        return True

    def _delayed(self, delay, fn, args):
        self._sleep(delay)
        fn(*args)

    def _close_question(self, room: Room) -> None:
        question = self.catalog.get(room.current_question_index)
        per_player = evaluate_answers(room, question)
        self.gateway.to_room(room.code, 'answerResults', {'perPlayer': per_player})
        self.gateway.to_room(
            room.code, 'scoresUpdated', {'players': [p.to_dict() for p in room.players.values()]}
        )
        if room.auto_leaderboard:
            self.gateway.to_room(room.code, 'leaderboard', {'leaderboard': room.leaderboard()})

    def _question_payload(self, room: Room):
        return {
            'idx': room.current_question_index,
            'question': self.catalog.get(room.current_question_index),
            'timer': room.auto_question_timer,
        }

    def _arm(self, room: Room) -> PendingAdvance:
        pending = PendingAdvance(next(self._tokens), room.code, room.current_question_index, room.auto_question_timer)
        with self._lock:
            self._pending[room.code] = pending
        room.question_deadline = pending.deadline
        self.logger.info(
            f"[timer-set] room={room.code} idx={pending.question_index} duration={pending.delay}s deadline={pending.deadline}"
        )
        if self._start_task is not None:
            self._start_task(self._worker, pending)
        return pending

    def _worker(self, pending: PendingAdvance) -> None:
        hb = self.heartbeat_sec
        if hb and hb > 0:
            slept = 0
            while slept < pending.delay:
                if self._pending.get(pending.code) is not pending:
                    self.logger.info(f"[timer-abort] room={pending.code} token={pending.token} cancelled while waiting")
                    return
                step = min(hb, pending.delay - slept)
                self._sleep(step)
                slept += step
                self.logger.info(
                    f"[timer-heartbeat] room={pending.code} idx={pending.question_index} remaining={max(0, pending.delay - slept)}s"
                )
        else:
            self._sleep(pending.delay)
        self.fire(pending.code, pending.token)
