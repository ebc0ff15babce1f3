import threading
from dataclasses import replace
from typing import Callable, Optional

from ludo_server.models import (
    JOIN_ORDER,
    MAX_PLAYERS,
    Board,
    Color,
    ColorState,
    MoveOutcome,
    Player,
    RollOutcome,
    RoomState,
)
from . import rules
from .errors import (
    GameOverError,
    InvalidMoveError,
    NoColorAvailableError,
    NotYourTurnError,
    RoomFullError,
    RoomNotFoundError,
)

MIN_PLAYERS_TO_START = 2
MAX_CONSECUTIVE_SIXES = 3

SKIP_THREE_SIXES = 'threeSixes'
SKIP_NO_LEGAL_MOVE = 'noLegalMove'


class GameRoom:
    """One game: its seats, turn pointer and board.

    Callers hold `lock` around every operation so that events for the same
    room never interleave. Each operation validates fully before it assigns
    anything, so a raised GameError leaves the room untouched.
    """

    def __init__(self, code: str, mode: str, on_empty: Optional[Callable[[str], None]] = None):
        self.code = code
        self.mode = mode
        self.players: list[Player] = []
        self.current_turn: Optional[Color] = None
        self.started = False
        self.last_dice: Optional[int] = None
        self.winner: Optional[Color] = None
        self.board: Board = rules.new_board()
        self.closed = False
        self.lock = threading.RLock()
        self._on_empty = on_empty

    @property
    def state(self) -> RoomState:
        if self.winner is not None:
            return RoomState.FINISHED
        if self.started:
            return RoomState.ACTIVE
        return RoomState.WAITING

    @property
    def active_colors(self) -> frozenset[Color]:
        return frozenset(p.color for p in self.players)

    def player_for(self, connection_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == connection_id), None)

    def ensure_open(self) -> None:
        if self.closed:
            raise RoomNotFoundError(f"Room {self.code} not found")

    # ---- seats ----

    def add_player(self, connection_id: str) -> Player:
        self.ensure_open()
        if self.winner is not None:
            raise GameOverError(f"Game in room {self.code} is already over")
        if len(self.players) >= MAX_PLAYERS:
            raise RoomFullError(f"Room {self.code} is full")

        if not self.players:
            color = Color.RED
        else:
            taken = self.active_colors
            color = next((c for c in JOIN_ORDER if c not in taken), None)
            if color is None:
                raise NoColorAvailableError(f"No color left in room {self.code}")

        player = Player(id=connection_id, color=color)
        self.players.append(player)
        if not self.started and len(self.players) >= MIN_PLAYERS_TO_START:
            self.started = True
            self.current_turn = Color.RED
        return player

    def remove_player(self, connection_id: str) -> Optional[Player]:
        player = self.player_for(connection_id)
        if player is None:
            return None

        self.players.remove(player)
        board = dict(self.board)
        board[player.color] = ColorState()
        self.board = board

        if not self.players:
            self.closed = True
            if self._on_empty is not None:
                self._on_empty(self.code)
            return player

        if self.current_turn == player.color:
            self.current_turn = self.next_player(player.color)
            self.last_dice = None
            self._reset_sixes(self.current_turn)
        return player

    def next_player(self, current: Color) -> Color:
        return rules.next_player(current, self.active_colors)

    # ---- turns ----

    def _check_turn(self, color: Color) -> None:
        self.ensure_open()
        if self.winner is not None:
            raise GameOverError(f"{self.winner.value} has already won")
        if not self.started or color != self.current_turn:
            raise NotYourTurnError(f"It is not {color.value}'s turn")

    def _reset_sixes(self, color: Color) -> None:
        board = dict(self.board)
        board[color] = replace(board[color], six_count=0)
        self.board = board

    def roll_dice(self, color: Color, value: int) -> RollOutcome:
        self._check_turn(color)
        state = rules.record_roll(self.board[color], value)

        if state.six_count >= MAX_CONSECUTIVE_SIXES:
            board = dict(self.board)
            board[color] = replace(state, six_count=0)
            self.board = board
            self.last_dice = None
            self.current_turn = self.next_player(color)
            self._reset_sixes(self.current_turn)
            return RollOutcome(
                color=color,
                value=value,
                six_count=MAX_CONSECUTIVE_SIXES,
                skipped=True,
                reason=SKIP_THREE_SIXES,
                next_turn=self.current_turn,
            )

        board = dict(self.board)
        board[color] = state
        movable = rules.movable_tokens(board, color, value)
        self.board = board

        if not movable:
            self.last_dice = None
            self._reset_sixes(color)
            self.current_turn = self.next_player(color)
            self._reset_sixes(self.current_turn)
            return RollOutcome(
                color=color,
                value=value,
                six_count=state.six_count,
                skipped=True,
                reason=SKIP_NO_LEGAL_MOVE,
                next_turn=self.current_turn,
            )

        self.last_dice = value
        return RollOutcome(
            color=color,
            value=value,
            six_count=state.six_count,
            movable_tokens=movable,
            next_turn=color,
        )

    def move_token(self, color: Color, token_index: int, dice: int) -> MoveOutcome:
        self._check_turn(color)
        if self.last_dice is None:
            raise InvalidMoveError(f"{color.value} must roll before moving")
        if dice != self.last_dice:
            raise InvalidMoveError(f"Dice value {dice} does not match the roll {self.last_dice}")
        if not rules.can_move(self.board, color, token_index, dice):
            raise InvalidMoveError(f"{color.value} token {token_index} cannot move {dice}")

        result = rules.apply_move(self.board, color, token_index, dice)
        self.board = result.board
        self.last_dice = None

        winner = rules.check_winner(self.board)
        if winner is not None:
            self.winner = winner
        elif dice != 6:
            self.current_turn = self.next_player(color)
            self._reset_sixes(self.current_turn)

        return MoveOutcome(
            color=color,
            token_index=token_index,
            dice=dice,
            new_position=result.new_position,
            positions=self.board[color].tokens,
            message=_describe_move(color, token_index, result, winner),
            captured=result.captured,
            next_turn=self.current_turn,
            winner=winner,
        )

    # ---- views ----

    def players_list(self):
        return [p.to_dict() for p in self.players]

    def summary(self):
        return {
            'roomCode': self.code,
            'players': len(self.players),
            'mode': self.mode,
            'started': self.started,
        }

    def to_dict(self):
        return {
            'roomCode': self.code,
            'mode': self.mode,
            'status': self.state.value,
            'started': self.started,
            'players': self.players_list(),
            'currentTurn': self.current_turn.value if self.current_turn else None,
            'lastDice': self.last_dice,
            'winner': self.winner.value if self.winner else None,
            'board': {color.value: self.board[color].to_dict() for color in Color},
        }


def _describe_move(color: Color, token_index: int, result, winner: Optional[Color]) -> str:
    name = color.value.upper()
    if winner is not None:
        return f"{winner.value.upper()} wins the game!"
    if result.captured is not None:
        return f"{name} captured {result.captured.color.value.upper()}'s token {result.captured.token_index}!"
    if result.reached_finish:
        return f"{name} token {token_index} reached home!"
    return f"{name} moved token {token_index} to {result.new_position}"
