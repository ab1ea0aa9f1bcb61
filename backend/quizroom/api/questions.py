from flask import Blueprint, jsonify

from quizroom import get_rooms

questions = Blueprint('questions', __name__)


@questions.route('/questions', methods=['GET'])
def list_questions():
    """Returns the whole question catalog; clients read it independently of any room."""
    return jsonify(get_rooms().catalog.to_list())
