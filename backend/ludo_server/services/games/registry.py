import random
import string
import threading
from typing import Dict, Optional, Tuple

from ludo_server.models import Color
from .errors import RoomExistsError, RoomNotFoundError
from .room import GameRoom


class RoomRegistry:
    """Process-wide directory of live rooms, keyed by room code."""

    def __init__(self):
        self._rooms: Dict[str, GameRoom] = {}
        self._lock = threading.RLock()

    def init_app(self, app) -> None:
        self.clear()
        app.extensions['ludo_rooms'] = self

    def create(self, room_code: str, mode: str, creator_id: Optional[str] = None) -> GameRoom:
        """Register a new room. The creator, if given, is seated before anyone can see the room."""
        with self._lock:
            if room_code in self._rooms:
                raise RoomExistsError(f"Room {room_code} already exists")
            room = GameRoom(room_code, mode, on_empty=self.delete)
            if creator_id is not None:
                room.add_player(creator_id)
            self._rooms[room_code] = room
            return room

    def get(self, room_code: str) -> GameRoom:
        room = self.find(room_code)
        if room is None:
            raise RoomNotFoundError(f"Room {room_code} not found")
        return room

    def find(self, room_code: str) -> Optional[GameRoom]:
        with self._lock:
            return self._rooms.get(room_code)

    def delete(self, room_code: str) -> Optional[GameRoom]:
        with self._lock:
            return self._rooms.pop(room_code, None)

    def new_code(self, length: int = 4) -> str:
        """Generate a unique, short room code."""
        alphabet = string.ascii_uppercase + string.digits
        with self._lock:
            while True:
                code = ''.join(random.choices(alphabet, k=length))
                if code not in self._rooms:
                    return code

    def stats(self):
        with self._lock:
            rooms = list(self._rooms.values())
        return {
            'rooms': len(rooms),
            'details': [room.summary() for room in rooms],
        }

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_code: str) -> bool:
        with self._lock:
            return room_code in self._rooms


class SessionMap:
    """Which room and seat each live connection occupies."""

    def __init__(self):
        self._seats: Dict[str, Tuple[str, Color]] = {}
        self._lock = threading.Lock()

    def init_app(self, app) -> None:
        self.clear()
        app.extensions['ludo_sessions'] = self

    def bind(self, connection_id: str, room_code: str, color: Color) -> None:
        with self._lock:
            self._seats[connection_id] = (room_code, color)

    def get(self, connection_id: str) -> Optional[Tuple[str, Color]]:
        with self._lock:
            return self._seats.get(connection_id)

    def pop(self, connection_id: str) -> Optional[Tuple[str, Color]]:
        with self._lock:
            return self._seats.pop(connection_id, None)

    def clear(self) -> None:
        with self._lock:
            self._seats.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._seats)
