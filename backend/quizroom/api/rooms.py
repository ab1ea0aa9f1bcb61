from flask import Blueprint, jsonify

from quizroom import get_rooms

rooms = Blueprint('rooms', __name__)


@rooms.route('/rooms/<string:code>/state', methods=['GET'])
def get_room_state(code):
    room = get_rooms().registry.get(code)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    with room.lock:
        payload = room.to_dict()
    pending = get_rooms().scheduler.pending(room.code)
    payload['pendingAdvance'] = pending.question_index if pending else None
    return jsonify(payload)
