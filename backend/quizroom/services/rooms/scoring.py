import math
from typing import Any, Dict, Optional

from quizroom.models import Room

DEFAULT_POINTS = 100


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass; a raw True/False is not a choice index
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def question_points(question: Optional[Dict[str, Any]]):
    """Points awarded for a correct answer; 100 unless a positive number is set."""
    points = _as_number((question or {}).get('points'))
    if points is None or points <= 0:
        return DEFAULT_POINTS
    return int(points) if points.is_integer() else points


def evaluate_answers(room: Room, question: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Score the answers collected for ``question`` and clear them.

    Each player who answered and is still in the room gets a result entry;
    correct answers add the question's points to the player's score.
    Players who did not answer get no entry and no points.
    """
    per_player: Dict[str, Dict[str, Any]] = {}
    if not question:
        room.answers.clear()
        return per_player

    correct = _as_number(question.get('correct'))
    points = question_points(question)
    for sid, answer in room.answers.items():
        player = room.players.get(sid)
        if not player:
            continue
        chosen = _as_number(answer)
        got = correct is not None and chosen is not None and chosen == correct
        per_player[sid] = {
            'id': sid,
            'name': player.name,
            'avatar': player.avatar,
            'correct': got,
        }
        if got:
            player.score += points
    room.answers.clear()
    return per_player
