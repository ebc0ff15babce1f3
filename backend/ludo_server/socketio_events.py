from functools import wraps

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from ludo_server import rooms, sessions, socketio
from ludo_server.models import TOKENS_PER_COLOR, Color
from ludo_server.services.games.errors import (
    GameError,
    InvalidRequestError,
    NotYourTurnError,
    RoomExistsError,
)
from ludo_server.services.games.room import SKIP_THREE_SIXES


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _reports_errors(handler):
    """Send GameErrors back to the caller only; never to the room."""
    @wraps(handler)
    def wrapper(data=None):
        try:
            return handler(data if isinstance(data, dict) else {})
        except GameError as exc:
            current_app.logger.info(f"[reject] sid={_get_sid()} event={handler.__name__} code={exc.code} reason={exc}")
            emit('error', exc.to_dict())
    return wrapper


# ---- payload parsing ----

def _room_code(data) -> str:
    code = data.get('roomCode')
    if not isinstance(code, str) or not code.strip():
        raise InvalidRequestError('roomCode is required')
    return code.strip().upper()


def _int_field(data, key: str, low: int, high: int) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidRequestError(f"{key} must be an integer between {low} and {high}")
    return value


def _color_field(data) -> Color:
    value = data.get('color')
    try:
        return Color(str(value).lower())
    except ValueError:
        raise InvalidRequestError(f"Unknown color: {value!r}") from None


def _own_seat(room, color: Color) -> Color:
    player = room.player_for(_get_sid())
    if player is None or player.color != color:
        raise NotYourTurnError(f"You are not playing {color.value} in room {room.code}")
    return player.color


# ---- seat lifecycle ----

def _leave(sid: str, room_code: str, *, disconnecting: bool = False) -> None:
    """Free the seat held by `sid`; deletes the room if it empties."""
    sessions.pop(sid)
    room = rooms.find(room_code)
    if room is None:
        return
    with room.lock:
        player = room.remove_player(sid)
        if player is None:
            return
        closed = room.closed
        payload = {
            'roomCode': room.code,
            'player': player.to_dict(),
            'players': room.players_list(),
            'count': len(room.players),
            'currentTurn': room.current_turn.value if room.current_turn else None,
            'state': room.to_dict(),
        }
    if not disconnecting:
        leave_room(room_code)
    current_app.logger.info(f"[room-leave] room={room_code} sid={sid} color={player.color.value} remaining={payload['count']}")
    if closed:
        current_app.logger.info(f"[room-delete] room={room_code} last player gone")
        return
    emit('playerLeft', payload, to=room_code)


# ---- handlers ----

def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'id': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    seat = sessions.get(sid)
    if seat:
        _leave(sid, seat[0], disconnecting=True)


@_reports_errors
def handle_create_room(data):
    sid = _get_sid()
    mode = data.get('mode') or current_app.config.get('DEFAULT_GAME_MODE', 'multiplayer')
    if data.get('roomCode'):
        room_code = _room_code(data)
        if room_code in rooms:
            raise RoomExistsError(f"Room {room_code} already exists")
    else:
        room_code = rooms.new_code(current_app.config.get('ROOM_CODE_LENGTH', 4))

    previous = sessions.get(sid)
    room = rooms.create(room_code, str(mode), creator_id=sid)
    if previous:
        _leave(sid, previous[0])
    with room.lock:
        player = room.player_for(sid)
        sessions.bind(sid, room.code, player.color)
        reply = {
            'roomCode': room.code,
            'color': player.color.value,
            'players': room.players_list(),
            'state': room.to_dict(),
        }
    join_room(room.code)
    current_app.logger.info(f"[room-create] room={room.code} mode={room.mode} sid={sid}")
    emit('roomCreated', reply)


@_reports_errors
def handle_join_room(data):
    sid = _get_sid()
    room_code = _room_code(data)
    room = rooms.get(room_code)
    previous = sessions.get(sid)
    if previous and previous[0] == room_code:
        raise InvalidRequestError(f"Already seated in room {room_code}")

    with room.lock:
        was_started = room.started
        player = room.add_player(sid)
        just_started = room.started and not was_started
        players = room.players_list()
        state = room.to_dict()
        current_turn = room.current_turn

    if previous:
        _leave(sid, previous[0])
    sessions.bind(sid, room_code, player.color)
    join_room(room_code)
    current_app.logger.info(f"[room-join] room={room_code} sid={sid} color={player.color.value} count={len(players)}")

    emit('roomJoined', {
        'roomCode': room_code,
        'color': player.color.value,
        'players': players,
        'state': state,
    })
    emit('playerJoined', {
        'roomCode': room_code,
        'players': players,
        'player': player.to_dict(),
        'count': len(players),
    }, to=room_code)
    if just_started:
        current_app.logger.info(f"[game-start] room={room_code} first_turn={current_turn.value}")
        emit('gameStarted', {
            'roomCode': room_code,
            'currentTurn': current_turn.value,
            'players': players,
            'state': state,
        }, to=room_code)


@_reports_errors
def handle_roll_dice(data):
    room_code = _room_code(data)
    value = _int_field(data, 'diceValue', 1, 6)
    color = _color_field(data)
    room = rooms.get(room_code)
    with room.lock:
        room.ensure_open()
        color = _own_seat(room, color)
        outcome = room.roll_dice(color, value)
        state = room.to_dict()

    current_app.logger.info(f"[dice] room={room_code} color={color.value} value={value} sixes={outcome.six_count}")
    skipped = {
        'roomCode': room_code,
        'color': color.value,
        'reason': outcome.reason,
        'diceValue': value,
        'nextTurn': outcome.next_turn.value if outcome.next_turn else None,
        'state': state,
    }
    if outcome.skipped and outcome.reason == SKIP_THREE_SIXES:
        current_app.logger.info(f"[skip] room={room_code} color={color.value} reason={outcome.reason}")
        emit('turnSkipped', skipped, to=room_code)
        return

    emit('diceRolled', {
        'roomCode': room_code,
        'diceValue': value,
        'color': color.value,
        'sixCount': outcome.six_count,
        'movableTokens': list(outcome.movable_tokens),
        'state': state,
    }, to=room_code)
    if outcome.skipped:
        current_app.logger.info(f"[skip] room={room_code} color={color.value} reason={outcome.reason}")
        emit('turnSkipped', skipped, to=room_code)


@_reports_errors
def handle_move_token(data):
    room_code = _room_code(data)
    color = _color_field(data)
    token_index = _int_field(data, 'tokenIndex', 0, TOKENS_PER_COLOR - 1)
    dice = _int_field(data, 'diceValue', 1, 6)
    room = rooms.get(room_code)
    with room.lock:
        room.ensure_open()
        color = _own_seat(room, color)
        outcome = room.move_token(color, token_index, dice)
        state = room.to_dict()

    current_app.logger.info(
        f"[move] room={room_code} color={color.value} token={token_index} dice={dice} to={outcome.new_position}"
    )
    if outcome.captured:
        current_app.logger.info(
            f"[capture] room={room_code} by={color.value} victim={outcome.captured.color.value}:{outcome.captured.token_index}"
        )
    if outcome.game_over:
        current_app.logger.info(f"[winner] room={room_code} color={outcome.winner.value}")

    emit('tokenMoved', {
        'roomCode': room_code,
        'color': color.value,
        'tokenIndex': token_index,
        'diceValue': dice,
        'newPosition': outcome.new_position,
        'positions': list(outcome.positions),
        'state': state,
        'message': outcome.message,
        'captured': outcome.captured.to_dict() if outcome.captured else None,
        'nextTurn': outcome.next_turn.value if outcome.next_turn else None,
        'gameOver': outcome.game_over,
        'winner': outcome.winner.value if outcome.winner else None,
    }, to=room_code)


@_reports_errors
def handle_leave_room(data):
    sid = _get_sid()
    room_code = _room_code(data)
    seat = sessions.get(sid)
    if not seat or seat[0] != room_code:
        # Unknown room or not seated there: nothing to clean up
        return
    _leave(sid, room_code)
    emit('roomLeft', {'roomCode': room_code})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('rollDice', handle_roll_dice, namespace=namespace)
    socketio.on_event('moveToken', handle_move_token, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
