from flask import Blueprint, current_app, jsonify
from ludo_server import rooms

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({
        'message': 'Ludo multiplayer server is running',
        'status': 'running',
        'version': current_app.config.get('SERVER_VERSION'),
        'rooms': len(rooms),
    })


@main.route('/stats')
def stats():
    return jsonify(rooms.stats())


@main.route('/rooms/<string:room_code>')
def room_state(room_code):
    """Snapshot of one room: status, seats, turn and board."""
    room = rooms.find(room_code.strip().upper())
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    with room.lock:
        return jsonify(room.to_dict())


@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
