"""Recoverable game errors.

Each error is reported back to the connection that caused it and never
broadcast. The `code` is what clients see on the wire.
"""


class GameError(Exception):
    code = 'GameError'

    def to_dict(self):
        return {'code': self.code, 'message': str(self)}


class RoomExistsError(GameError):
    code = 'RoomExists'


class RoomNotFoundError(GameError):
    code = 'RoomNotFound'


class RoomFullError(GameError):
    code = 'RoomFull'


class NoColorAvailableError(GameError):
    code = 'NoColorAvailable'


class NotYourTurnError(GameError):
    code = 'NotYourTurn'


class InvalidMoveError(GameError):
    code = 'InvalidMove'


class GameOverError(GameError):
    code = 'GameOver'


class InvalidRequestError(GameError):
    code = 'InvalidRequest'
