from flask import Blueprint, jsonify, request, current_app

from herd.exceptions import JoinRejected, StoreFailure
from herd.models import normalize_room_code
from herd.services.session import engine

players = Blueprint('players', __name__)


@players.route('/player/join', methods=['POST'])
def join_room_http():
    """
    Registers a player in a room before the live connection is opened.
    """
    data = request.get_json(silent=True) or {}
    room_code = normalize_room_code(data.get('roomCode'))
    name = (data.get('name') or '').strip()
    if not all([room_code, name]):
        return jsonify({'error': 'Room code and player name are required'}), 400

    try:
        player = engine.register_player(room_code, name)
    except JoinRejected as exc:
        return jsonify({'error': exc.reason}), exc.status_code
    except StoreFailure as exc:
        current_app.logger.warning(f"[register] abandoned: {exc}")
        return jsonify({'error': 'Please try again'}), 503

    return jsonify({'success': True, 'roomCode': room_code, 'name': player.name}), 200


@players.route('/rooms/<string:room_code>/state', methods=['GET'])
def get_room_state(room_code):
    """
    Returns the room record merged with its live player list.
    """
    try:
        snapshot = engine.room_snapshot(room_code)
    except JoinRejected as exc:
        return jsonify({'error': exc.reason}), exc.status_code
    return jsonify(snapshot), 200
