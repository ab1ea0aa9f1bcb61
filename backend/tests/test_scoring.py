from quizroom.models import Player, Room
from quizroom.services.rooms.scoring import DEFAULT_POINTS, evaluate_answers, question_points


def _room_with(*names):
    room = Room('ABCD')
    for idx, name in enumerate(names):
        sid = f'sid-{idx}'
        room.players[sid] = Player(sid, name)
    return room


def test_correct_answer_adds_question_points():
    room = _room_with('Amy', 'Ben')
    room.answers = {'sid-0': 2, 'sid-1': 0}
    results = evaluate_answers(room, {'correct': 2, 'points': 250})
    assert results['sid-0'] == {'id': 'sid-0', 'name': 'Amy', 'avatar': None, 'correct': True}
    assert results['sid-1']['correct'] is False
    assert room.players['sid-0'].score == 250
    assert room.players['sid-1'].score == 0


def test_string_and_number_choices_compare_equal():
    room = _room_with('Amy', 'Ben')
    room.answers = {'sid-0': '1', 'sid-1': 1.0}
    results = evaluate_answers(room, {'correct': '1'})
    assert results['sid-0']['correct'] is True
    assert results['sid-1']['correct'] is True


def test_players_without_answers_get_no_entry():
    room = _room_with('Amy', 'Ben')
    room.answers = {'sid-0': 1}
    results = evaluate_answers(room, {'correct': 1})
    assert set(results) == {'sid-0'}
    assert room.players['sid-1'].score == 0


def test_answers_cleared_after_evaluation():
    room = _room_with('Amy', 'Ben', 'Cara')
    room.answers = {'sid-0': 1, 'sid-1': 2, 'sid-2': 'x'}
    evaluate_answers(room, {'correct': 1})
    assert room.answers == {}


def test_answers_from_departed_players_are_skipped():
    room = _room_with('Amy')
    room.answers = {'sid-0': 1, 'gone': 1}
    results = evaluate_answers(room, {'correct': 1})
    assert 'gone' not in results
    assert room.answers == {}


def test_missing_question_scores_nothing_but_clears():
    room = _room_with('Amy')
    room.answers = {'sid-0': 1}
    assert evaluate_answers(room, None) == {}
    assert room.answers == {}
    assert room.players['sid-0'].score == 0


def test_unparseable_answers_never_match():
    room = _room_with('Amy', 'Ben', 'Cara')
    room.answers = {'sid-0': 'one', 'sid-1': None, 'sid-2': True}
    results = evaluate_answers(room, {'correct': 1})
    assert not any(r['correct'] for r in results.values())


def test_question_points_defaults():
    assert question_points({}) == DEFAULT_POINTS
    assert question_points({'points': 'lots'}) == DEFAULT_POINTS
    assert question_points({'points': 0}) == DEFAULT_POINTS
    assert question_points({'points': -50}) == DEFAULT_POINTS
    assert question_points({'points': '300'}) == 300
    assert question_points({'points': 12.5}) == 12.5
    assert question_points(None) == DEFAULT_POINTS


def test_scores_accumulate_across_questions():
    room = _room_with('Amy')
    room.answers = {'sid-0': 1}
    evaluate_answers(room, {'correct': 1, 'points': 100})
    room.answers = {'sid-0': 0}
    evaluate_answers(room, {'correct': 0, 'points': 200})
    assert room.players['sid-0'].score == 300
