"""The Board only stores pieces. All rules live in moves.py / threats.py and the game classes."""

from copy import deepcopy
from dataclasses import dataclass
from typing import Iterator, Optional, Self

from src.core.shared_types import Color, PieceKind
from src.engine.pieces import FARTHEST_ROW, Piece
from src.engine.square import BOARD_DIMENSIONS, Square

CHESS_STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
CHECKERS_STARTING_FEN = "1c1c1c1c/c1c1c1c1/1c1c1c1c/8/8/C1C1C1C1/1C1C1C1C/C1C1C1C1"
EMPTY_FEN = "/".join(["8"] * BOARD_DIMENSIONS[0])

# Row pawns start on. Pawn placed anywhere else by from_fen() already lost its double step.
PAWN_STARTING_ROW: dict[Color, int] = {
    Color.WHITE: FARTHEST_ROW[Color.BLACK] - 1,
    Color.BLACK: FARTHEST_ROW[Color.WHITE] + 1,
}

Grid = list[list[Optional[Piece]]]


def empty_grid() -> Grid:
    return [[None] * BOARD_DIMENSIONS[1] for _ in range(BOARD_DIMENSIONS[0])]


@dataclass
class Board:
    grid: Grid

    @classmethod
    def empty(cls) -> Self:
        return cls(empty_grid())

    @classmethod
    def chess_start(cls) -> Self:
        return cls.from_fen(CHESS_STARTING_FEN)

    @classmethod
    def checkers_start(cls) -> Self:
        """Checkers pieces on the dark squares ((row + col) odd) of the first and last three rows"""
        return cls.from_fen(CHECKERS_STARTING_FEN)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board from a FEN-like placement string.

        Ranks are separated by slashes, the first one is row 0 (Black's back rank).
        ex. the chess starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        * a letter directly denotes a piece (upper case: White)
        * a number denotes that many consecutive empty squares
        * 'c' is a checker, 'd' is a crowned checker
        """
        grid = empty_grid()
        for row, fen_one_rank in enumerate(fen_str.split("/")):
            col = 0
            for character in fen_one_rank:
                if character.isalpha():
                    piece = Piece.from_fen(character)
                    if piece.kind == PieceKind.PAWN:
                        piece.has_moved = row != PAWN_STARTING_ROW[piece.color]
                    grid[row][col] = piece
                    col += 1
                else:
                    col += int(character)
        return cls(grid)

    def to_fen(self) -> str:
        """Ranks are separated by slashes."""
        return "/".join(self._row_to_fen(row) for row in range(BOARD_DIMENSIONS[0]))

    def _row_to_fen(self, row: int) -> str:
        """FEN string of a single row"""
        fen_characters: list[str] = []
        empty_count = 0
        for piece in self.grid[row]:
            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire row is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def piece(self, square: Square) -> Optional[Piece]:
        return self.grid[square.row][square.col]

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.grid[square.row][square.col] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        piece = self.piece(square)
        self.grid[square.row][square.col] = None
        return piece

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Update the position on the board. Returns whatever stood on the target square."""
        piece_that_moved = self.remove_piece(from_square)
        captured = self.piece(to_square)
        self.grid[to_square.row][to_square.col] = piece_that_moved
        return captured

    def squares(self) -> Iterator[tuple[Square, Piece]]:
        """All occupied squares (row by row)"""
        for row, pieces in enumerate(self.grid):
            for col, piece in enumerate(pieces):
                if piece is not None:
                    yield Square(row, col), piece

    def locate_color(self, color: Color) -> list[Square]:
        return [square for square, piece in self.squares() if piece.color == color]

    def locate_king(self, color: Color) -> Optional[Square]:
        """Chess King of the given color (None if it is not on the board)"""
        return next(
            (
                square
                for square, piece in self.squares()
                if piece.kind == PieceKind.KING and piece.color == color
            ),
            None,
        )

    def copy(self) -> Self:
        """Snapshot: the pieces are copied as well, so flags changed later on the live board do not leak in."""
        return deepcopy(self)
