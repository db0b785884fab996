"""Defines the pieces of both variants"""

from dataclasses import dataclass
from typing import Self

from src.core.shared_types import Color, PieceKind

FEN_TO_PIECE: dict[str, PieceKind] = {
    "p": PieceKind.PAWN,
    "n": PieceKind.KNIGHT,
    "b": PieceKind.BISHOP,
    "r": PieceKind.ROOK,
    "q": PieceKind.QUEEN,
    "k": PieceKind.KING,
    "c": PieceKind.CHECKER,
}

PIECE_TO_FEN: dict[PieceKind, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# A crowned checker ("dame") gets its own letter, as 'k' is taken by the chess King.
CROWNED_CHECKER_FEN = "d"

# Row a color's pieces move towards (promotion row).
FARTHEST_ROW: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 7}

# White moves UP the board (towards row 0), Black moves DOWN
FORWARD: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}


@dataclass
class Piece:
    kind: PieceKind
    color: Color
    has_moved: bool = False
    # checkers only
    is_king: bool = False

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        if character.lower() == CROWNED_CHECKER_FEN:
            return cls(PieceKind.CHECKER, color, is_king=True)
        return cls(FEN_TO_PIECE[character.lower()], color)

    def to_fen(self) -> str:
        character = (
            CROWNED_CHECKER_FEN
            if self.kind == PieceKind.CHECKER and self.is_king
            else PIECE_TO_FEN[self.kind]
        )
        return character.upper() if self.color == Color.WHITE else character

    def forward(self) -> int:
        return FORWARD[self.color]

    def reached_farthest_row(self, row: int) -> bool:
        return row == FARTHEST_ROW[self.color]
