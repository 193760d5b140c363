"""Room session state machine.

Each inbound client action arrives as a :class:`Message` and is routed by
:func:`dispatch` to a handler. A handler looks up its room, takes the room
lock, checks preconditions, mutates the room and returns the outbound
effects. Effects are handed to ``SessionContext.deliver`` before the lock is
released, so broadcasts for one room leave the process in the order the room
saw its events. That order is what decides who buzzed first.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from buzzer.errors import UnknownMessageKind
from buzzer.models import BuzzEntry, Player
from buzzer.registry import RoomRegistry

logger = logging.getLogger(__name__)

CONNECTION = 'connection'
ROOM = 'room'

# Buzz broadcast styles
LEDGER = 'ledger'
FIRST = 'first'

ROOM_NOT_FOUND_MESSAGE = 'Room does not exist'


class MessageKind(str, Enum):
    CREATE = 'create_room'
    JOIN = 'join_room'
    START = 'start_game'
    BUZZ = 'buzz'
    NEXT_ROUND = 'next_round'
    DISCONNECT = 'disconnect'


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    connection_id: str
    payload: Any = None

    def get(self, name, default=None):
        if isinstance(self.payload, dict):
            return self.payload.get(name, default)
        return default


@dataclass(frozen=True)
class Emit:
    scope: str
    target: str
    event: str
    payload: Any = None

    @classmethod
    def to_connection(cls, connection_id, event, payload=None):
        return cls(CONNECTION, connection_id, event, payload)

    @classmethod
    def to_room(cls, code, event, payload=None):
        return cls(ROOM, code, event, payload)


@dataclass(frozen=True)
class Subscribe:
    connection_id: str
    room_code: str


@dataclass(frozen=True)
class Unsubscribe:
    connection_id: str
    room_code: str


Effect = Union[Emit, Subscribe, Unsubscribe]


def _discard(effects):
    pass


@dataclass
class SessionContext:
    registry: RoomRegistry
    deliver: Callable[[List[Effect]], None] = _discard
    buzz_broadcast: str = LEDGER

    def commit(self, effects: List[Effect]) -> List[Effect]:
        if effects:
            self.deliver(effects)
        return effects


def lobby_update(room) -> Emit:
    return Emit.to_room(room.code, 'lobby_update', {'players': room.player_names()})


def buzz_update(room) -> Emit:
    return Emit.to_room(room.code, 'buzz_update', {'buzzOrder': [b.to_dict() for b in room.buzz_order]})


def first_buzz_update(room) -> Emit:
    first = room.first_buzz
    return Emit.to_room(room.code, 'first_buzz', {'player': first.name if first else None})


def _deleted(ctx, room):
    """True if the room left the registry while we waited on its lock."""
    return ctx.registry.get_room(room.code) is not room


def handle_create_room(ctx: SessionContext, message: Message) -> List[Effect]:
    code = ctx.registry.create_room()
    room = ctx.registry.get_room(code)
    with room.lock:
        logger.info(f"[room_created] room={code} by={message.connection_id}")
        return ctx.commit([
            Subscribe(message.connection_id, code),
            Emit.to_connection(message.connection_id, 'room_created', {'roomCode': code}),
        ])


def handle_join_room(ctx: SessionContext, message: Message) -> List[Effect]:
    code = message.get('roomCode')
    player_name = message.get('playerName')
    room = ctx.registry.get_room(code)
    if room is None:
        logger.info(f"[join_error] player={player_name} ({message.connection_id}) room={code} not found")
        return ctx.commit([Emit.to_connection(message.connection_id, 'error', ROOM_NOT_FOUND_MESSAGE)])
    with room.lock:
        if _deleted(ctx, room):
            return ctx.commit([Emit.to_connection(message.connection_id, 'error', ROOM_NOT_FOUND_MESSAGE)])
        # Duplicate joins from one connection are allowed and produce two entries
        room.players.append(Player(message.connection_id, player_name))
        logger.info(f"[join_room] player={player_name} ({message.connection_id}) room={code} players={room.player_names()}")
        return ctx.commit([Subscribe(message.connection_id, code), lobby_update(room)])


def handle_start_game(ctx: SessionContext, message: Message) -> List[Effect]:
    code = message.get('roomCode')
    room = ctx.registry.get_room(code)
    if room is None:
        return []
    with room.lock:
        if _deleted(ctx, room):
            return []
        room.game_started = True
        room.buzz_order = []
        logger.info(f"[game_started] room={code}")
        return ctx.commit([Emit.to_room(code, 'game_started')])


def handle_buzz(ctx: SessionContext, message: Message) -> List[Effect]:
    code = message.get('roomCode')
    room = ctx.registry.get_room(code)
    if room is None:
        return []
    with room.lock:
        if _deleted(ctx, room) or not room.game_started:
            return []
        player = room.find_player(message.connection_id)
        if player is None or room.has_buzzed(message.connection_id):
            return []
        room.buzz_order.append(BuzzEntry(player.connection_id, player.name))
        position = len(room.buzz_order)
        logger.info(f"[buzz] room={code} player={player.name} position={position}")

        if ctx.buzz_broadcast == FIRST:
            if position > 1:
                return []
            return ctx.commit([first_buzz_update(room)])
        return ctx.commit([buzz_update(room)])


def handle_next_round(ctx: SessionContext, message: Message) -> List[Effect]:
    code = message.get('roomCode')
    room = ctx.registry.get_room(code)
    if room is None:
        return []
    with room.lock:
        if _deleted(ctx, room):
            return []
        room.buzz_order = []
        logger.info(f"[round_reset] room={code}")
        return ctx.commit([Emit.to_room(code, 'round_reset')])


def handle_disconnect(ctx: SessionContext, message: Message) -> List[Effect]:
    """Remove the connection from every room that lists it.

    There is no reverse index from connection to room, so every live room is
    scanned. Rooms the connection never joined get no broadcast.
    """
    effects: List[Effect] = []
    for room in ctx.registry.rooms():
        with room.lock:
            if _deleted(ctx, room):
                continue
            previous_first = room.first_buzz
            removed, left_ledger = room.remove_connection(message.connection_id)
            if not removed:
                continue
            for p in removed:
                logger.info(f"[player_left] player={p.name} ({p.connection_id}) room={room.code}")
            room_effects = [Unsubscribe(message.connection_id, room.code), lobby_update(room)]
            if left_ledger:
                if ctx.buzz_broadcast != FIRST:
                    room_effects.append(buzz_update(room))
                elif room.first_buzz != previous_first:
                    # The single slot moved to the next buzzer, or emptied
                    room_effects.append(first_buzz_update(room))
            effects.extend(ctx.commit(room_effects))
    return effects


HANDLERS: Dict[MessageKind, Callable[[SessionContext, Message], List[Effect]]] = {
    MessageKind.CREATE: handle_create_room,
    MessageKind.JOIN: handle_join_room,
    MessageKind.START: handle_start_game,
    MessageKind.BUZZ: handle_buzz,
    MessageKind.NEXT_ROUND: handle_next_round,
    MessageKind.DISCONNECT: handle_disconnect,
}


def dispatch(ctx: SessionContext, message: Message) -> List[Effect]:
    try:
        kind = MessageKind(message.kind)
    except ValueError:
        raise UnknownMessageKind(message.kind) from None
    return HANDLERS[kind](ctx, message)


def handle(registry: RoomRegistry, kind, connection_id: str, payload: Optional[dict] = None,
           deliver: Callable[[List[Effect]], None] = _discard, buzz_broadcast: str = LEDGER) -> List[Effect]:
    """Convenience wrapper: build the context and message, then dispatch."""
    ctx = SessionContext(registry=registry, deliver=deliver, buzz_broadcast=buzz_broadcast)
    return dispatch(ctx, Message(kind, connection_id, payload))
