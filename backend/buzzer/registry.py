"""In-memory room registry.

The registry owns the ``code -> Room`` table for the lifetime of the app and
is the only place room codes are allocated or released.
"""
import logging
import threading
from typing import Dict, List, Optional

from buzzer.errors import RoomCodeSpaceExhausted, RoomNotFound
from buzzer.models import DEFAULT_CODE_ALPHABET, DEFAULT_CODE_LENGTH, Room, generate_room_code

logger = logging.getLogger(__name__)


class RoomRegistry:

    def __init__(self, code_length=DEFAULT_CODE_LENGTH, alphabet=None, rng=None):
        self.code_length = int(code_length)
        self.alphabet = alphabet or DEFAULT_CODE_ALPHABET
        self._rng = rng
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, code):
        return code in self._rooms

    def create_room(self) -> str:
        """Allocate a fresh code, insert an empty room and return the code."""
        with self._lock:
            capacity = len(self.alphabet) ** self.code_length
            if len(self._rooms) >= capacity:
                raise RoomCodeSpaceExhausted(self.alphabet, self.code_length)
            while True:
                code = generate_room_code(self.code_length, self.alphabet, self._rng)
                if code not in self._rooms:
                    break
                logger.debug(f"[code-collision] {code} already in use, regenerating")
            self._rooms[code] = Room(code=code)
        return code

    def get_room(self, code) -> Optional[Room]:
        if not isinstance(code, str):
            return None
        return self._rooms.get(code)

    def delete_room(self, code) -> Room:
        with self._lock:
            room = self._rooms.pop(code, None) if isinstance(code, str) else None
        if room is None:
            raise RoomNotFound(code)
        return room

    def rooms(self) -> List[Room]:
        """Snapshot of live rooms in creation order."""
        with self._lock:
            return list(self._rooms.values())

    def list_rooms(self):
        return [room.summary() for room in self.rooms()]
