from flask import Blueprint, jsonify, request, current_app
from patchwork_helper.services.patchwork import NotFoundError, PersistenceError, ValidationError
from patchwork_helper.services.patchwork.records import PLAYERS
from patchwork_helper.services.patchwork.scoring import final_scores


pieces = Blueprint('pieces', __name__)


def _service():
    return current_app.extensions['patchwork']


def _int_arg(name, default):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f'{name} must be an integer') from None


def _descending():
    order = (request.args.get('order') or '').lower()
    if not order:
        return bool(current_app.config.get('DEFAULT_SORT_DESCENDING', False))
    if order not in ('asc', 'desc'):
        raise ValidationError("order must be 'asc' or 'desc'")
    return order == 'desc'


@pieces.errorhandler(ValidationError)
def handle_validation_error(exc):
    return jsonify({'error': str(exc)}), 400


@pieces.errorhandler(NotFoundError)
def handle_not_found(exc):
    return jsonify({'error': str(exc)}), 404


@pieces.errorhandler(PersistenceError)
def handle_persistence_error(exc):
    current_app.logger.error(f"[persistence] {exc}")
    return jsonify({'error': 'Could not read or write the game state'}), 500


@pieces.route('/state', methods=['GET'])
def get_state():
    state = _service().get_state()
    payload = state.to_dict()
    payload['scores'] = final_scores(state)
    return jsonify(payload)


@pieces.route('/pieces/available', methods=['GET'])
def list_available():
    age = _int_arg('age', 1)
    rows = _service().get_available(age, request.args.get('sort') or None, _descending())
    return jsonify({'age': age, 'pieces': rows})


@pieces.route('/pieces/purchased', methods=['GET'])
def list_purchased():
    rows = _service().get_purchased(
        request.args.get('sort') or None,
        _descending(),
        request.args.get('player') or None,
    )
    return jsonify({'pieces': rows})


@pieces.route('/pieces', methods=['POST'])
def create_piece():
    data = request.get_json(silent=True) or {}
    piece = _service().create_piece(
        data.get('shape'),
        buttons=data.get('buttons', 0),
        cost=data.get('cost', 0),
        time=data.get('time', 0),
        color=data.get('color'),
    )
    return jsonify(piece.to_dict()), 201


@pieces.route('/pieces/<int:piece_id>', methods=['PATCH'])
def update_piece(piece_id):
    data = request.get_json(silent=True) or {}
    if not data:
        return jsonify({'error': 'No fields to update'}), 400
    piece = _service().update_piece(piece_id, data)
    return jsonify(piece.to_dict())


@pieces.route('/pieces/<int:piece_id>', methods=['DELETE'])
def delete_piece(piece_id):
    _service().delete_piece(piece_id)
    return jsonify({'deleted': piece_id})


@pieces.route('/pieces/<int:piece_id>/purchase', methods=['POST'])
def purchase_piece(piece_id):
    data = request.get_json(silent=True) or {}
    player = data.get('player')
    age = data.get('age')
    if player is None or age is None:
        return jsonify({'error': 'Player and age are required'}), 400
    record = _service().purchase(piece_id, player, age)
    return jsonify(record.to_dict()), 201


@pieces.route('/pieces/<int:piece_id>/return', methods=['POST'])
def return_piece(piece_id):
    record = _service().return_to_pool(piece_id)
    return jsonify({'returned': record.to_dict()})


@pieces.route('/buttons/<string:player>', methods=['PUT'])
def set_buttons(player):
    if player not in PLAYERS:
        return jsonify({'error': f'Unknown player {player}'}), 404
    data = request.get_json(silent=True) or {}
    if 'buttons' not in data:
        return jsonify({'error': 'buttons is required'}), 400
    service = _service()
    setter = service.set_yellow_buttons if player == 'yellow' else service.set_green_buttons
    return jsonify({'player': player, 'buttons': setter(data['buttons'])})


@pieces.route('/bonus', methods=['PUT'])
def set_bonus():
    data = request.get_json(silent=True) or {}
    winner = data.get('winner')
    if not winner:
        return jsonify({'error': 'winner is required'}), 400
    return jsonify({'bonusWinner': _service().set_bonus_winner(winner)})


@pieces.route('/scores', methods=['GET'])
def get_scores():
    return jsonify(_service().get_scores())


@pieces.route('/new-game', methods=['POST'])
def new_game():
    state = _service().new_game()
    return jsonify(state.to_dict())
