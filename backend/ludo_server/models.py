from dataclasses import dataclass
from enum import StrEnum


class Color(StrEnum):
    RED = 'red'
    GREEN = 'green'
    YELLOW = 'yellow'
    BLUE = 'blue'


# Seating and turn order deliberately differ: seats go red, green, blue, yellow
# while play goes clockwise red, green, yellow, blue.
TURN_ORDER = (Color.RED, Color.GREEN, Color.YELLOW, Color.BLUE)
JOIN_ORDER = (Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW)

MAX_PLAYERS = 4
TOKENS_PER_COLOR = 4

HOME = -1
HOME_STRETCH_START = 52
FINISH = 57

START_OFFSETS = {
    Color.RED: 0,
    Color.GREEN: 13,
    Color.YELLOW: 26,
    Color.BLUE: 39,
}

# One star on each start cell plus one more per quadrant
STAR_POSITIONS = frozenset({0, 8, 13, 21, 26, 34, 39, 47})


class RoomState(StrEnum):
    WAITING = 'waiting'
    ACTIVE = 'active'
    FINISHED = 'finished'


@dataclass(frozen=True)
class ColorState:
    """Token layout and counters for one color. Never mutated in place."""

    tokens: tuple[int, ...] = (HOME,) * TOKENS_PER_COLOR
    score: int = 0
    kills: int = 0
    finished: frozenset[int] = frozenset()
    six_count: int = 0

    def count_at(self, position: int) -> int:
        return sum(1 for p in self.tokens if p == position)

    def to_dict(self):
        return {
            'tokens': list(self.tokens),
            'score': self.score,
            'kills': self.kills,
            'finished': sorted(self.finished),
            'sixCount': self.six_count,
        }


Board = dict[Color, ColorState]


@dataclass
class Player:
    id: str
    color: Color

    def to_dict(self):
        return {
            'id': self.id,
            'color': self.color.value,
        }


@dataclass(frozen=True)
class Capture:
    color: Color
    token_index: int

    def to_dict(self):
        return {
            'color': self.color.value,
            'tokenIndex': self.token_index,
        }


@dataclass(frozen=True)
class MoveResult:
    """Outcome of applying one move to a board."""

    board: Board
    new_position: int
    captured: Capture | None = None
    reached_finish: bool = False


@dataclass(frozen=True)
class RollOutcome:
    color: Color
    value: int
    six_count: int
    movable_tokens: tuple[int, ...] = ()
    skipped: bool = False
    reason: str | None = None
    next_turn: Color | None = None


@dataclass(frozen=True)
class MoveOutcome:
    color: Color
    token_index: int
    dice: int
    new_position: int
    positions: tuple[int, ...]
    message: str
    captured: Capture | None = None
    next_turn: Color | None = None
    winner: Color | None = None

    @property
    def game_over(self) -> bool:
        return self.winner is not None
