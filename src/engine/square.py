"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import InvalidCoordinateError

# Both variants are played on an 8x8 board (rows, columns)
BOARD_DIMENSIONS = (8, 8)
FILES = "abcdefgh"
RANKS = "12345678"


@dataclass(frozen=True, order=True)
class Square:
    """
    Row 0 is Black's back rank, row 7 is White's.
    Column 0 is the a-file.
    """

    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' - 'h1' get converted to (0,0) - (7,7)"""
        sq = sq.strip().lower()
        if len(sq) != 2 or sq[0] not in FILES or sq[1] not in RANKS:
            raise InvalidCoordinateError(f"Cannot interpret {sq!r} as a square on the board.")
        return cls(BOARD_DIMENSIONS[0] - int(sq[1]), FILES.index(sq[0]))

    def to_algebraic(self) -> str:
        return f"{FILES[self.col]}{BOARD_DIMENSIONS[0] - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def offset(self, d_row: int, d_col: int) -> Square:
        """Square displaced by the given vector (may land off the board)"""
        return Square(self.row + d_row, self.col + d_col)
