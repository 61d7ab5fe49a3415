"""Exceptions raised outside of the replay engine (the engine itself never raises on log input)."""


class ReversiError(Exception):
    """Base class for all errors in this package."""


class RepositoryError(ReversiError):
    """A persisted blob could not be read back, or the store failed."""


class InvalidRecordError(ReversiError):
    """Outgoing record metadata failed validation before it could be posted."""


class GameStateError(ReversiError):
    """The requested action does not fit the current state of the game (finished, not joined, ...)."""


class NotYourTurnError(GameStateError):
    pass


class IllegalMoveError(GameStateError):
    pass
