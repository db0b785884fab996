"""
Custom exceptions shared by all layers.

Everything derives from GameError, so the service (and whatever sits on top of it) can catch a single type.
NOTE: none of these are fatal. A rejected move leaves the game untouched, with one exception: see InvalidContinuationError.
"""


class GameError(Exception):
    """Top-level exception for anything that went wrong while playing a game."""


class InvalidRequestError(GameError):
    """Request could not be interpreted (raised by the request models)."""


class InvalidCoordinateError(GameError):
    """A cell outside of the 8x8 board."""


class RepositoryError(GameError):
    """Game could not be found / stored."""


class GameStateError(GameError):
    """Operation not allowed in the current state of the game (ex. game is over)."""


# --- MOVE ERRORS ---
class MoveError(GameError):
    """A move attempt was rejected."""


class NoPieceAtOriginError(MoveError):
    """Origin square is empty."""


class NotYourTurnError(MoveError):
    """Piece on the origin square belongs to the player that is not on turn."""


class IllegalMoveError(MoveError):
    """Destination is not among the moves that piece can make."""


class SelfCheckError(IllegalMoveError):
    """The move would leave your own king under threat."""


class CaptureInProgressError(MoveError):
    """Checkers: a capture chain is pending, only the active piece may move (or skip)."""


class InvalidContinuationError(MoveError):
    """
    Checkers: the continuation square is not one of the mandatory jump destinations.

    NOTE: raised AFTER the turn has been ended. The jumps already made in this chain stand.
    """


# --- HISTORY ERRORS ---
class HistoryError(GameError):
    """Undo could not be performed."""


class InsufficientHistoryError(HistoryError):
    """More steps requested than there are recorded."""
