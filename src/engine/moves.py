"""
Geometry/Base movement rules

Key idea: Use strategy pattern to define the move sets for each piece kind.

Every strategy only answers "where can this piece go in one ply?".
Legality beyond that (whose turn it is, en passant, self-check, capture chains) is checked later by the game classes.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.core.shared_types import PieceKind
from src.engine.pieces import Piece
from src.engine.square import Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]

ORTHOGONALS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = ORTHOGONALS + DIAGONALS


@dataclass(frozen=True)
class Move:
    """A move that has been applied, with what happened along the way."""

    from_square: Square
    to_square: Square
    is_capture: bool = False
    is_double_step: bool = False
    is_en_passant: bool = False
    is_jump: bool = False
    promote_to: Optional[PieceKind] = None
    # where the captured piece stood (differs from to_square for en passant and checkers jumps)
    captured_square: Optional[Square] = None

    def to_algebraic(self) -> str:
        """ex. 'e2e4'"""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"


def is_opponent(piece: Optional[Piece], of: Piece) -> bool:
    return piece is not None and piece.color != of.color


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> set[Square]:
    """
    Raycasting algorithm
    -----

    We define move directions and move along them until we hit another piece or
    the edge of the board. The first occupied square is only added if it holds an opponent's piece.
    """
    piece = board.piece(square)
    assert piece is not None

    moves: set[Square] = set()
    for d_row, d_col in directions:
        target_square = square.offset(d_row, d_col)
        while target_square.is_within_bounds():
            if not board.is_empty(target_square):
                if is_opponent(board.piece(target_square), piece):
                    moves.add(target_square)
                break
            moves.add(target_square)
            target_square = target_square.offset(d_row, d_col)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> set[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just jump to a fixed offset"""
    piece = board.piece(square)
    assert piece is not None

    moves: set[Square] = set()
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue
        target_piece = board.piece(target_square)
        if target_piece is None or target_piece.color != piece.color:
            moves.add(target_square)
    return moves


def candidate_pawn_moves(square: Square, board: Board) -> set[Square]:
    """
    A pawn:
    - moves by a single square forward.
    - It can move by two in its first move
    - takes diagonally

    NOTE: En passant is taken care of in the game class
    """
    pawn = board.piece(square)
    assert pawn is not None
    forward = pawn.forward()

    moves: set[Square] = set()
    one_step = square.offset(forward, 0)
    if one_step.is_within_bounds() and board.is_empty(one_step):
        moves.add(one_step)
        two_steps = square.offset(2 * forward, 0)
        if (
            not pawn.has_moved
            and two_steps.is_within_bounds()
            and board.is_empty(two_steps)
        ):
            moves.add(two_steps)

    for d_col in [-1, 1]:
        target_square = square.offset(forward, d_col)
        if target_square.is_within_bounds() and is_opponent(
            board.piece(target_square), pawn
        ):
            moves.add(target_square)
    return moves


def candidate_knight_moves(square: Square, board: Board) -> set[Square]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> set[Square]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> set[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, ORTHOGONALS)


def candidate_queen_moves(square: Square, board: Board) -> set[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_rook_moves(square, board) | candidate_bishop_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> set[Square]:
    """
    The king can move by a single square at the time.

    NOTE: no castling.
    """
    return single_step_move(square, board, KING_DELTAS)


def checker_directions(checker: Piece) -> list[Vector]:
    """Men only move forward, a crowned checker moves along all four diagonals"""
    if checker.is_king:
        return DIAGONALS
    forward = checker.forward()
    return [(forward, 1), (forward, -1)]


def candidate_checker_moves(square: Square, board: Board) -> set[Square]:
    """
    Per diagonal direction:
    - a plain step onto an empty adjacent square
    - a jump over an adjacent opponent's piece onto the empty square right behind it

    Callers tell the two apart with `is_jump()`.
    """
    checker = board.piece(square)
    assert checker is not None

    moves: set[Square] = set()
    for d_row, d_col in checker_directions(checker):
        adjacent = square.offset(d_row, d_col)
        if not adjacent.is_within_bounds():
            continue
        if board.is_empty(adjacent):
            moves.add(adjacent)
            continue

        landing = square.offset(2 * d_row, 2 * d_col)
        if (
            landing.is_within_bounds()
            and is_opponent(board.piece(adjacent), checker)
            and board.is_empty(landing)
        ):
            moves.add(landing)
    return moves


def is_jump(from_square: Square, to_square: Square) -> bool:
    return abs(to_square.row - from_square.row) == 2


def jumped_square(from_square: Square, to_square: Square) -> Square:
    """The midpoint of a checkers jump: where the captured piece stands"""
    return Square(
        (from_square.row + to_square.row) // 2, (from_square.col + to_square.col) // 2
    )


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], set[Square]]
MOVEMENT_RULES: dict[PieceKind, CandidateMovesFn] = {
    PieceKind.PAWN: candidate_pawn_moves,
    PieceKind.KNIGHT: candidate_knight_moves,
    PieceKind.BISHOP: candidate_bishop_moves,
    PieceKind.ROOK: candidate_rook_moves,
    PieceKind.QUEEN: candidate_queen_moves,
    PieceKind.KING: candidate_king_moves,
    PieceKind.CHECKER: candidate_checker_moves,
}


def generate_moves(board: Board, square: Square) -> set[Square]:
    """Squares the piece on `square` can reach in one ply. Empty square: no moves."""
    piece = board.piece(square)
    if piece is None:
        return set()
    movement_rule = MOVEMENT_RULES[piece.kind]
    return movement_rule(square, board)


def jump_moves(board: Board, square: Square) -> set[Square]:
    """Only the capturing moves of a checker"""
    return {target for target in generate_moves(board, square) if is_jump(square, target)}
