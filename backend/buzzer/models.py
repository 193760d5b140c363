import random
import string
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_CODE_LENGTH = 6


def generate_room_code(length=DEFAULT_CODE_LENGTH, alphabet=DEFAULT_CODE_ALPHABET, rng=None):
    """Generate a short room code. Uniqueness is the registry's job."""
    rng = rng or random
    return ''.join(rng.choices(alphabet, k=length))


@dataclass
class Player:
    connection_id: str
    name: str


@dataclass
class BuzzEntry:
    connection_id: str
    name: str

    def to_dict(self):
        return {'name': self.name}


@dataclass
class Room:
    code: str
    players: List[Player] = field(default_factory=list)
    game_started: bool = False
    buzz_order: List[BuzzEntry] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)
    # Serializes every handler touching this room, including its broadcasts
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def first_buzz(self) -> Optional[BuzzEntry]:
        return self.buzz_order[0] if self.buzz_order else None

    def player_names(self):
        return [p.name for p in self.players]

    def find_player(self, connection_id):
        for p in self.players:
            if p.connection_id == connection_id:
                return p
        return None

    def has_buzzed(self, connection_id):
        return any(b.connection_id == connection_id for b in self.buzz_order)

    def remove_connection(self, connection_id):
        """Drop a connection from the roster and the buzz ledger.

        Returns (removed_players, left_ledger).
        """
        removed = [p for p in self.players if p.connection_id == connection_id]
        if removed:
            self.players = [p for p in self.players if p.connection_id != connection_id]
        left_ledger = self.has_buzzed(connection_id)
        if left_ledger:
            self.buzz_order = [b for b in self.buzz_order if b.connection_id != connection_id]
        return removed, left_ledger

    def summary(self):
        return {
            'code': self.code,
            'playerCount': len(self.players),
            'gameStarted': self.game_started,
            'createdAt': self.created_at,
        }

    def to_dict(self):
        return {
            'code': self.code,
            'players': self.player_names(),
            'gameStarted': self.game_started,
            'buzzOrder': [b.to_dict() for b in self.buzz_order],
            'createdAt': self.created_at,
        }
