from flask import current_app, request
from flask_socketio import emit
from buzzer import socketio, get_registry
from buzzer.errors import BuzzerError
from buzzer.services.channel import SocketIOChannel
from buzzer.services.session import (
    LEDGER,
    Message,
    MessageKind,
    SessionContext,
    dispatch,
)


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _context() -> SessionContext:
    channel = SocketIOChannel(socketio, namespace=request.namespace)
    return SessionContext(
        registry=get_registry(),
        deliver=channel.deliver,
        buzz_broadcast=current_app.config.get('BUZZ_BROADCAST', LEDGER),
    )


def _handle(kind: MessageKind, data=None):
    return dispatch(_context(), Message(kind, _get_sid(), data))


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(*args):
    # Newer python-socketio passes a disconnect reason; it is only logged
    reason = args[0] if args else None
    current_app.logger.info(f"[disconnect] sid={_get_sid()} reason={reason}")
    _handle(MessageKind.DISCONNECT)


def handle_create_room(data=None):
    try:
        _handle(MessageKind.CREATE, data)
    except BuzzerError as exc:
        current_app.logger.error(f"[create_error] sid={_get_sid()} {exc}")
        emit('error', str(exc))


def handle_join_room(data=None):
    _handle(MessageKind.JOIN, data)


def handle_start_game(data=None):
    _handle(MessageKind.START, data)


def handle_buzz(data=None):
    _handle(MessageKind.BUZZ, data)


def handle_next_round(data=None):
    _handle(MessageKind.NEXT_ROUND, data)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(MessageKind.CREATE.value, handle_create_room, namespace=namespace)
    socketio.on_event(MessageKind.JOIN.value, handle_join_room, namespace=namespace)
    socketio.on_event(MessageKind.START.value, handle_start_game, namespace=namespace)
    socketio.on_event(MessageKind.BUZZ.value, handle_buzz, namespace=namespace)
    socketio.on_event(MessageKind.NEXT_ROUND.value, handle_next_round, namespace=namespace)
