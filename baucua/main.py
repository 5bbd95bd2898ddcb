from flask import Blueprint, jsonify
from baucua import registry
from baucua.errors import RoomNotFound

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Bau Cua game server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'healthy', 'rooms': len(registry)})

@main.route('/api/rooms/<string:code>', methods=['GET'])
def get_room_state(code):
    """
    Returns the full state snapshot of a room.
    """
    try:
        room = registry.find_room(code)
    except RoomNotFound as exc:
        return jsonify({'error': str(exc)}), 404
    with room.lock:
        return jsonify(room.to_dict()), 200
