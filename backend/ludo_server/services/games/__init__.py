"""Game domain services: board rules, rooms and the room directory.

This package contains pure(ish) domain logic that is imported by the HTTP
routes and socket handlers, keeping transport concerns separated from core
game mechanics.
"""

from .errors import GameError
from .registry import RoomRegistry, SessionMap
from .room import GameRoom

__all__ = ['GameError', 'GameRoom', 'RoomRegistry', 'SessionMap']
