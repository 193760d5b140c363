from abc import ABC, abstractmethod
from typing import Iterable

from buzzer.services.session import CONNECTION, Effect, Emit, Subscribe, Unsubscribe


class EventChannel(ABC):
    """Delivery side of the room engine.

    Sends to one connection or to every subscriber of a room, and manages
    which connections are subscribed to which room.
    """

    @abstractmethod
    def emit_to_connection(self, connection_id: str, event: str, payload=None) -> None:
        ...

    @abstractmethod
    def emit_to_room(self, room_code: str, event: str, payload=None) -> None:
        ...

    @abstractmethod
    def subscribe(self, connection_id: str, room_code: str) -> None:
        ...

    @abstractmethod
    def unsubscribe(self, connection_id: str, room_code: str) -> None:
        ...

    @abstractmethod
    def close_room(self, room_code: str) -> None:
        ...

    def deliver(self, effects: Iterable[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, Subscribe):
                self.subscribe(effect.connection_id, effect.room_code)
            elif isinstance(effect, Unsubscribe):
                self.unsubscribe(effect.connection_id, effect.room_code)
            elif isinstance(effect, Emit):
                if effect.scope == CONNECTION:
                    self.emit_to_connection(effect.target, effect.event, effect.payload)
                else:
                    self.emit_to_room(effect.target, effect.event, effect.payload)
            else:
                raise TypeError(f"Cannot deliver {effect!r}")


class SocketIOChannel(EventChannel):
    """Event channel backed by a Flask-SocketIO server.

    Socket.IO gives every connection a private room named after its sid, so
    single-connection and room delivery both go through ``emit(to=...)``.
    """

    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def _emit(self, event, payload, to):
        if payload is None:
            self.socketio.emit(event, to=to, namespace=self.namespace)
        else:
            self.socketio.emit(event, payload, to=to, namespace=self.namespace)

    def emit_to_connection(self, connection_id, event, payload=None):
        self._emit(event, payload, connection_id)

    def emit_to_room(self, room_code, event, payload=None):
        self._emit(event, payload, room_code)

    def subscribe(self, connection_id, room_code):
        self.socketio.server.enter_room(connection_id, room_code, namespace=self.namespace)

    def unsubscribe(self, connection_id, room_code):
        self.socketio.server.leave_room(connection_id, room_code, namespace=self.namespace)

    def close_room(self, room_code):
        self.socketio.close_room(room_code, namespace=self.namespace)
