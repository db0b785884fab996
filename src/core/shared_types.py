"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceKind(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
    CHECKER = "checker"


class Variant(StrEnum):
    CHESS = "chess"
    CHECKERS = "checkers"


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECK = "check"
    CHECKMATE = "checkmate"


class OutcomeKind(StrEnum):
    """What happened after a move was accepted."""

    APPLIED = "applied"
    APPLIED_WITH_CHECK = "applied with check"
    APPLIED_CHECKMATE = "applied checkmate"
    APPLIED_PROMOTION = "applied promotion"
    APPLIED_EN_PASSANT = "applied en passant"
    MUST_CONTINUE_CAPTURE = "must continue capture"
    TURN_COMPLETE = "turn complete"
