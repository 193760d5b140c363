from flask import Blueprint, current_app, jsonify
from buzzer import socketio, get_registry
from buzzer.errors import RoomNotFound
from buzzer.services.channel import SocketIOChannel

rooms = Blueprint('rooms', __name__)


@rooms.errorhandler(RoomNotFound)
def room_not_found(exc):
    return jsonify({'error': str(exc)}), 404


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Lists every active room with its player count and round state.
    """
    return jsonify(get_registry().list_rooms()), 200


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room(room_code):
    room = get_registry().get_room(room_code)
    if room is None:
        raise RoomNotFound(room_code)
    with room.lock:
        return jsonify(room.to_dict()), 200


@rooms.route('/<string:room_code>', methods=['DELETE'])
def delete_room(room_code):
    """
    Deletes a room. Remaining subscribers are told the room is closed and
    dropped from its broadcast group.
    """
    room = get_registry().delete_room(room_code)
    channel = SocketIOChannel(socketio, namespace=current_app.config.get('SOCKETIO_NAMESPACE', '/'))
    with room.lock:
        channel.emit_to_room(room.code, 'room_closed', {'roomCode': room.code})
        channel.close_room(room.code)
    current_app.logger.info(f"[room_deleted] room={room.code} players={len(room.players)}")
    return jsonify({'message': f'Room {room.code} deleted'}), 200
