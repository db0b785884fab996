"""
The ChessGame class is the entrypoint into the domain layer for chess.
It is responsible for orchestrating all the rules required to play a turn:
validate -> apply -> resolve special moves -> switch turn -> evaluate check/checkmate.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.config import EngineSettings
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    InvalidCoordinateError,
    NoPieceAtOriginError,
    NotYourTurnError,
    SelfCheckError,
)
from src.core.shared_types import Color, OutcomeKind, PieceKind, Status
from src.engine.board import Board
from src.engine.history import HistoryStack
from src.engine.moves import Move, generate_moves
from src.engine.pieces import Piece
from src.engine.square import Square
from src.engine.threats import is_under_threat, threatened_pieces
from src.games.outcomes import MoveOutcome

logger = logging.getLogger(__name__)


@dataclass
class ChessPosition:
    """Everything undo needs to restore"""

    board: Board
    turn: Color
    en_passant_target: Optional[Square]
    status: Status


@dataclass
class ChessGame:
    board: Board
    turn: Color = Color.WHITE
    # set right after a pawn double step, valid for the next ply only
    en_passant_target: Optional[Square] = None
    status: Status = Status.IN_PROGRESS
    settings: EngineSettings = field(default_factory=EngineSettings)
    history: HistoryStack[ChessPosition] = field(
        default_factory=HistoryStack, compare=False
    )
    moves: list[Move] = field(default_factory=list)

    @classmethod
    def new_game(cls, settings: Optional[EngineSettings] = None) -> Self:
        """Standard starting position, White to move."""
        settings = settings or EngineSettings()
        return cls(
            board=Board.chess_start(),
            settings=settings,
            history=HistoryStack(limit=settings.history_limit),
        )

    @property
    def winner(self) -> Optional[Color]:
        """Given it is checkmate, the side that was asked to move got mated."""
        if self.status != Status.CHECKMATE:
            return None
        return self.turn.opponent

    # --- DOMAIN LAYER API ---
    def legal_moves(self, square: Square) -> set[Square]:
        """
        Destinations for the piece on `square`
        ----

        1. the piece's own movement rule
        2. add the en passant target (pawns only, and only when diagonally in front of the pawn)
        3. remove moves that leave your own king under threat (if enabled in the settings)
        """
        piece = self.board.piece(square)
        if piece is None:
            return set()

        candidates = generate_moves(self.board, square)
        if self._can_take_en_passant(square, piece):
            assert self.en_passant_target is not None
            candidates.add(self.en_passant_target)

        if not self.settings.prevent_self_check:
            return candidates
        return {
            target
            for target in candidates
            if not self._is_putting_yourself_in_check(square, target)
        }

    def all_legal_moves(self) -> dict[Square, set[Square]]:
        """Legal moves of every piece of the side to move (pieces without moves are left out)."""
        all_moves = {
            square: self.legal_moves(square)
            for square in self.board.locate_color(self.turn)
        }
        return {square: targets for square, targets in all_moves.items() if targets}

    def threatened(self) -> set[Square]:
        return threatened_pieces(self.board)

    def attempt_move(self, origin: Square, destination: Square) -> MoveOutcome:
        """
        Attempt to make a move
        -----

        1. the origin must hold a piece of the side to move
        2. the destination must be one of its legal moves
        3. record the position before the move
        4. apply (incl. en passant capture / promotion / en passant target)
        5. switch turn
        6. evaluate check / checkmate for the side now on turn

        Any rejection leaves the game untouched.
        """
        if self.status == Status.CHECKMATE:
            raise GameStateError("Game is over: checkmate.")
        piece = self._validate_move(origin, destination)

        board = self.board.copy()
        move = self._apply_move(board, origin, destination)

        self._save_state()
        self.board = board
        self.en_passant_target = self._determine_en_passant_target(move)
        self.moves.append(move)
        self.turn = self.turn.opponent
        logger.info("%s played %s", piece.color, move.to_algebraic())

        return self._evaluate_position(move)

    def undo(self, n: int = 1) -> None:
        """Go back n moves: board, side to move, en passant target and status are all restored."""
        position = self.history.undo(n)
        self.board = position.board
        self.turn = position.turn
        self.en_passant_target = position.en_passant_target
        self.status = position.status
        del self.moves[len(self.moves) - n :]
        logger.info("Undid %d move(s), %s to move", n, self.turn)

    # -- PRIVATE HELPERS ---
    def _validate_move(self, origin: Square, destination: Square) -> Piece:
        for square in (origin, destination):
            if not square.is_within_bounds():
                raise InvalidCoordinateError(f"Square {square} is not on the board.")

        piece = self.board.piece(origin)
        if piece is None:
            raise NoPieceAtOriginError(f"No piece on {origin.to_algebraic()}.")
        if piece.color != self.turn:
            raise NotYourTurnError(
                f"Piece on {origin.to_algebraic()} is {piece.color}, but it is {self.turn}'s turn."
            )
        if destination not in self.legal_moves(origin):
            logger.debug(
                "Rejected %s%s: not a legal move",
                origin.to_algebraic(),
                destination.to_algebraic(),
            )
            # the generated set without self-check filtering tells us why it was refused
            if self.settings.prevent_self_check and destination in generate_moves(
                self.board, origin
            ):
                raise SelfCheckError(
                    f"Move not allowed: {origin.to_algebraic()}{destination.to_algebraic()} leaves your king under threat."
                )
            raise IllegalMoveError(
                f"Move not allowed: {origin.to_algebraic()}{destination.to_algebraic()}"
            )
        return piece

    def _apply_move(self, board: Board, origin: Square, destination: Square) -> Move:
        """
        Board update
        ----

        1. en passant: remove the pawn that gets taken (one rank behind the destination)
        2. move the piece
        3. promotion: a pawn reaching the farthest rank becomes a new Queen
        4. mark the piece as moved
        """
        piece = board.piece(origin)
        assert piece is not None

        is_en_passant = (
            piece.kind == PieceKind.PAWN and destination == self.en_passant_target
        )
        captured_square: Optional[Square] = None
        if is_en_passant:
            captured_square = destination.offset(-piece.forward(), 0)
            board.remove_piece(captured_square)

        captured = board.move_piece(origin, destination)
        if captured is not None:
            captured_square = destination

        promote_to: Optional[PieceKind] = None
        if piece.kind == PieceKind.PAWN and piece.reached_farthest_row(destination.row):
            promote_to = PieceKind.QUEEN
            piece = Piece(PieceKind.QUEEN, piece.color)
            board.place_piece(piece, destination)

        piece.has_moved = True
        return Move(
            from_square=origin,
            to_square=destination,
            is_capture=captured_square is not None,
            is_double_step=(
                piece.kind == PieceKind.PAWN
                and abs(destination.row - origin.row) == 2
            ),
            is_en_passant=is_en_passant,
            promote_to=promote_to,
            captured_square=captured_square,
        )

    def _save_state(self) -> None:
        self.history.save_state(
            ChessPosition(
                board=self.board,
                turn=self.turn,
                en_passant_target=self.en_passant_target,
                status=self.status,
            )
        )

    def _evaluate_position(self, move: Move) -> MoveOutcome:
        """
        Check / checkmate for the side that is now on turn.

        NOTE: only King moves are tried as a way out of check. Blocking or capturing the attacker with
        another piece is not looked for, so some positions count as checkmate that in tournament chess would not.
        """
        king_square = self.board.locate_king(self.turn)
        if king_square is None or not is_under_threat(
            self.board, king_square, self.turn
        ):
            self.status = Status.IN_PROGRESS
            return MoveOutcome(self._quiet_outcome_kind(move), move)

        if self._king_can_escape(king_square):
            self.status = Status.CHECK
            logger.info("Check: %s king on %s", self.turn, king_square.to_algebraic())
            return MoveOutcome(OutcomeKind.APPLIED_WITH_CHECK, move)

        self.status = Status.CHECKMATE
        logger.info("Checkmate: %s wins", self.turn.opponent)
        return MoveOutcome(OutcomeKind.APPLIED_CHECKMATE, move, winner=self.turn.opponent)

    def _king_can_escape(self, king_square: Square) -> bool:
        """Try every king move on a copy of the board: is the new square safe?"""
        for target in generate_moves(self.board, king_square):
            board = self.board.copy()
            board.move_piece(king_square, target)
            if not is_under_threat(board, target, self.turn):
                return True
        return False

    def _quiet_outcome_kind(self, move: Move) -> OutcomeKind:
        if move.promote_to is not None:
            return OutcomeKind.APPLIED_PROMOTION
        if move.is_en_passant:
            return OutcomeKind.APPLIED_EN_PASSANT
        return OutcomeKind.APPLIED

    def _is_king_threatened(self, board: Board, color: Color) -> bool:
        king_square = board.locate_king(color)
        return king_square is not None and is_under_threat(board, king_square, color)

    def _is_putting_yourself_in_check(self, origin: Square, destination: Square) -> bool:
        """
        plan:
        1. Copy the board
        2. make the candidate move
        3. determine if own king is under threat on the new board
        """
        piece = self.board.piece(origin)
        assert piece is not None
        board = self.board.copy()
        self._apply_move(board, origin, destination)
        return self._is_king_threatened(board, piece.color)

    # --- EN PASSANT RULE HELPERS ----
    def _can_take_en_passant(self, square: Square, piece: Piece) -> bool:
        """Pawn of the side to move, standing diagonally behind the en passant target"""
        target = self.en_passant_target
        if target is None or piece.kind != PieceKind.PAWN or piece.color != self.turn:
            return False
        return target.row == square.row + piece.forward() and abs(target.col - square.col) == 1

    def _determine_en_passant_target(self, move: Move) -> Optional[Square]:
        """The possible en passant square for the next turn: the square the pawn skipped."""
        if not move.is_double_step:
            return None
        return Square(
            (move.from_square.row + move.to_square.row) // 2, move.from_square.col
        )


def new_chess_game(settings: Optional[EngineSettings] = None) -> ChessGame:
    return ChessGame.new_game(settings)
