import string

import pytest

from ludo_server.models import Color
from ludo_server.services.games import RoomRegistry, SessionMap
from ludo_server.services.games.errors import RoomExistsError, RoomNotFoundError


def test_create_and_get():
    registry = RoomRegistry()
    room = registry.create('ABCD', 'classic')
    assert registry.get('ABCD') is room
    assert room.mode == 'classic'
    assert room.players == []
    assert len(registry) == 1


def test_duplicate_code_is_rejected():
    registry = RoomRegistry()
    registry.create('ABCD', 'classic', creator_id='a')
    with pytest.raises(RoomExistsError):
        registry.create('ABCD', 'classic', creator_id='b')
    # The existing room is untouched
    assert [p.id for p in registry.get('ABCD').players] == ['a']


def test_missing_room():
    registry = RoomRegistry()
    with pytest.raises(RoomNotFoundError):
        registry.get('NOPE')
    assert registry.find('NOPE') is None
    assert registry.delete('NOPE') is None


def test_delete():
    registry = RoomRegistry()
    room = registry.create('ABCD', 'classic')
    assert registry.delete('ABCD') is room
    assert 'ABCD' not in registry


def test_creator_is_seated_red():
    registry = RoomRegistry()
    room = registry.create('ABCD', 'classic', creator_id='host')
    assert room.player_for('host').color == Color.RED


def test_stats_summarise_rooms():
    registry = RoomRegistry()
    registry.create('ABCD', 'classic', creator_id='a')
    room = registry.create('WXYZ', 'quick', creator_id='b')
    room.add_player('c')

    stats = registry.stats()
    assert stats['rooms'] == 2
    details = {d['roomCode']: d for d in stats['details']}
    assert details['ABCD'] == {'roomCode': 'ABCD', 'players': 1, 'mode': 'classic', 'started': False}
    assert details['WXYZ'] == {'roomCode': 'WXYZ', 'players': 2, 'mode': 'quick', 'started': True}


def test_new_code_is_unused():
    registry = RoomRegistry()
    registry.create('AAAA', 'classic')
    code = registry.new_code(6)
    assert len(code) == 6
    assert set(code) <= set(string.ascii_uppercase + string.digits)
    assert code not in registry


def test_session_map():
    seats = SessionMap()
    seats.bind('sid-1', 'ABCD', Color.GREEN)
    assert seats.get('sid-1') == ('ABCD', Color.GREEN)
    assert len(seats) == 1
    assert seats.pop('sid-1') == ('ABCD', Color.GREEN)
    assert seats.get('sid-1') is None
    assert seats.pop('sid-1') is None
