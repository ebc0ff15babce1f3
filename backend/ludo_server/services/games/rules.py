"""Board rules: movement, capture, safety and winner detection.

Every function here is pure. A board is never modified in place; functions
that change something return a new board and leave the one passed in intact.
"""

from dataclasses import replace
from typing import Optional

from ludo_server.models import (
    FINISH,
    HOME,
    HOME_STRETCH_START,
    START_OFFSETS,
    STAR_POSITIONS,
    TOKENS_PER_COLOR,
    TURN_ORDER,
    Board,
    Capture,
    Color,
    ColorState,
    MoveResult,
)
from .errors import InvalidMoveError


def new_board() -> Board:
    return {color: ColorState() for color in Color}


def _check_token_index(token_index: int) -> None:
    if not 0 <= token_index < TOKENS_PER_COLOR:
        raise ValueError(f"token index out of range: {token_index}")


def _check_dice(dice: int) -> None:
    if not 1 <= dice <= 6:
        raise ValueError(f"dice value out of range: {dice}")


def can_move(board: Board, color: Color, token_index: int, dice: int) -> bool:
    _check_token_index(token_index)
    _check_dice(dice)
    state = board[color]
    position = state.tokens[token_index]
    if position == HOME:
        return dice == 6
    if token_index in state.finished or position >= FINISH:
        return False
    # Home entry needs an exact count
    return position + dice <= FINISH


def movable_tokens(board: Board, color: Color, dice: int) -> tuple[int, ...]:
    return tuple(i for i in range(TOKENS_PER_COLOR) if can_move(board, color, i, dice))


def is_globally_safe(position: int) -> bool:
    """Star cells and the home stretch protect every token regardless of stacking."""
    return position in STAR_POSITIONS or HOME_STRETCH_START <= position <= FINISH


def is_safe(board: Board, position: int, color: Color) -> bool:
    if is_globally_safe(position):
        return True
    return board[color].count_at(position) >= 2


def check_capture(board: Board, attacker: Color, destination: int) -> tuple[Board, Optional[Capture]]:
    """Send a lone opposing token on `destination` home.

    Returns the (possibly new) board and the captured token, if any. Two or
    more tokens of one color on a cell form a safe stack, so a non-safe cell
    can hold at most one capturable token.
    """
    if is_safe(board, destination, attacker):
        return board, None

    for color in TURN_ORDER:
        if color == attacker:
            continue
        defender = board[color]
        if defender.count_at(destination) != 1:
            continue
        token_index = defender.tokens.index(destination)
        tokens = list(defender.tokens)
        tokens[token_index] = HOME
        updated = dict(board)
        updated[color] = replace(defender, tokens=tuple(tokens))
        updated[attacker] = replace(board[attacker], kills=board[attacker].kills + 1)
        return updated, Capture(color=color, token_index=token_index)

    return board, None


def apply_move(board: Board, color: Color, token_index: int, dice: int) -> MoveResult:
    if not can_move(board, color, token_index, dice):
        raise InvalidMoveError(f"{color} token {token_index} cannot move {dice}")

    state = board[color]
    position = state.tokens[token_index]
    captured = None
    reached_finish = False

    if position == HOME:
        new_position = START_OFFSETS[color]
    else:
        new_position = position + dice

    if new_position == FINISH:
        reached_finish = True
        state = replace(
            state,
            score=state.score + 1,
            finished=state.finished | {token_index},
        )
    elif position != HOME:
        board, captured = check_capture(board, color, new_position)
        state = board[color]

    tokens = list(state.tokens)
    tokens[token_index] = new_position
    updated = dict(board)
    updated[color] = replace(state, tokens=tuple(tokens))
    return MoveResult(
        board=updated,
        new_position=new_position,
        captured=captured,
        reached_finish=reached_finish,
    )


def check_winner(board: Board) -> Optional[Color]:
    for color in Color:
        if board[color].score == TOKENS_PER_COLOR:
            return color
    return None


def next_player(current: Color, active: set[Color] | frozenset[Color]) -> Color:
    """First color after `current` in turn order that has a seated player."""
    start = TURN_ORDER.index(current)
    for step in range(1, len(TURN_ORDER)):
        candidate = TURN_ORDER[(start + step) % len(TURN_ORDER)]
        if candidate in active:
            return candidate
    return current


def record_roll(state: ColorState, dice: int) -> ColorState:
    _check_dice(dice)
    if dice == 6:
        return replace(state, six_count=state.six_count + 1)
    return replace(state, six_count=0)
