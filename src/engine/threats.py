"""
Threat detection (chess)

A square is under threat for a color if any piece of the other color could move onto it on its next turn.
Uses the same movement rules the pieces move with, so it is a full scan of the board: fine for an 8x8 board.
"""

from src.core.shared_types import Color
from src.engine.board import Board
from src.engine.moves import generate_moves
from src.engine.square import Square


def is_under_threat(board: Board, square: Square, color: Color) -> bool:
    """Could a piece of the opponent of `color` reach `square` on the current board?"""
    return any(
        square in generate_moves(board, attacker_square)
        for attacker_square in board.locate_color(color.opponent)
    )


def threatened_pieces(board: Board) -> set[Square]:
    """All occupied squares whose piece is under threat by the other color (used to mark pieces for display)."""
    return {
        square
        for square, piece in board.squares()
        if is_under_threat(board, square, piece.color)
    }
