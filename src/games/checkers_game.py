"""
The CheckersGame class orchestrates a turn of checkers:
validate -> apply (incl. jump capture) -> crown -> offer capture continuations -> switch turn.

A turn can span several calls: as long as the active piece can keep jumping, the game waits in a
"pending capture" state until the player continues the chain or skips it.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.config import EngineSettings
from src.core.exceptions import (
    CaptureInProgressError,
    GameStateError,
    IllegalMoveError,
    InvalidContinuationError,
    InvalidCoordinateError,
    NoPieceAtOriginError,
    NotYourTurnError,
)
from src.core.shared_types import Color, OutcomeKind
from src.engine.board import Board
from src.engine.moves import Move, generate_moves, is_jump, jump_moves, jumped_square
from src.engine.square import Square
from src.games.outcomes import MoveOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingCapture:
    """The piece in the middle of a capture chain, and where it may jump next"""

    square: Square
    destinations: frozenset[Square]


@dataclass
class CheckersGame:
    board: Board
    turn: Color = Color.WHITE
    pending_capture: Optional[PendingCapture] = None
    settings: EngineSettings = field(default_factory=EngineSettings)
    moves: list[Move] = field(default_factory=list)

    @classmethod
    def new_game(cls, settings: Optional[EngineSettings] = None) -> Self:
        """Pieces on the dark squares of the first and last three rows, White to move."""
        return cls(board=Board.checkers_start(), settings=settings or EngineSettings())

    # --- DOMAIN LAYER API ---
    def legal_moves(self, square: Square) -> set[Square]:
        """While a capture chain is pending, only the active piece's jumps are allowed."""
        if self.pending_capture is not None:
            if square != self.pending_capture.square:
                return set()
            return set(self.pending_capture.destinations)
        return generate_moves(self.board, square)

    def all_legal_moves(self) -> dict[Square, set[Square]]:
        all_moves = {
            square: self.legal_moves(square)
            for square in self.board.locate_color(self.turn)
        }
        return {square: targets for square, targets in all_moves.items() if targets}

    def attempt_move(self, origin: Square, destination: Square) -> MoveOutcome:
        """
        Initial move of a turn
        -----

        1. the origin must hold a piece of the side to move, the destination must be one of its moves
        2. move (a jump also removes the piece jumped over)
        3. a man reaching the farthest row gets crowned
        4. further jumps available from the new square? The turn stays open (MUST_CONTINUE_CAPTURE).

        While a chain is pending, a move from the active piece is a continuation.
        """
        if self.pending_capture is not None:
            if origin == self.pending_capture.square:
                return self.continue_capture(destination)
            raise CaptureInProgressError(
                f"Piece on {self.pending_capture.square.to_algebraic()} is in the middle of a capture. Continue or skip first."
            )
        self._validate_move(origin, destination)

        move = self._apply_move(origin, destination)
        if move.promote_to is not None:
            logger.info("%s checker crowned on %s", self.turn, destination.to_algebraic())

        continuations = (
            jump_moves(self.board, destination)
            if move.is_jump or self.settings.capture_chain_after_step
            else set()
        )
        if continuations:
            return self._await_continuation(move, continuations)

        self._end_turn()
        kind = (
            OutcomeKind.APPLIED_PROMOTION
            if move.promote_to is not None
            else OutcomeKind.APPLIED
        )
        return MoveOutcome(kind, move)

    def continue_capture(self, destination: Square) -> MoveOutcome:
        """
        Next jump of a capture chain
        ----

        NOTE: an invalid destination ends the turn. The jumps already made stand (no rollback).
        A square off the board is rejected before that and leaves the chain pending.
        Crowning ends the chain immediately.
        """
        pending = self.pending_capture
        if pending is None:
            raise GameStateError("No capture in progress.")
        if not destination.is_within_bounds():
            raise InvalidCoordinateError(f"Square {destination} is not on the board.")

        if destination not in pending.destinations:
            logger.warning(
                "Capture chain of %s aborted: %s is not a valid jump",
                self.turn,
                destination.to_algebraic(),
            )
            self._end_turn()
            raise InvalidContinuationError(
                f"Cannot continue to {destination.to_algebraic()}. Options were: {', '.join(sorted(sq.to_algebraic() for sq in pending.destinations))}. Turn ended."
            )

        move = self._apply_move(pending.square, destination)
        if move.promote_to is not None:
            logger.info("%s checker crowned on %s", self.turn, destination.to_algebraic())
            self._end_turn()
            return MoveOutcome(OutcomeKind.APPLIED_PROMOTION, move)

        continuations = jump_moves(self.board, destination)
        if continuations:
            return self._await_continuation(move, continuations)

        self._end_turn()
        return MoveOutcome(OutcomeKind.TURN_COMPLETE, move)

    def skip_capture(self) -> MoveOutcome:
        """Decline the rest of the capture chain."""
        if self.pending_capture is None or not self.moves:
            raise GameStateError("No capture in progress.")
        last_move = self.moves[-1]
        self._end_turn()
        return MoveOutcome(OutcomeKind.TURN_COMPLETE, last_move)

    # -- PRIVATE HELPERS ---
    def _validate_move(self, origin: Square, destination: Square) -> None:
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
        if destination not in generate_moves(self.board, origin):
            logger.debug(
                "Rejected %s%s: not a legal move",
                origin.to_algebraic(),
                destination.to_algebraic(),
            )
            raise IllegalMoveError(
                f"Move not allowed: {origin.to_algebraic()}{destination.to_algebraic()}"
            )

    def _apply_move(self, origin: Square, destination: Square) -> Move:
        """Move the piece, remove the piece jumped over (if any) and crown if needed."""
        piece = self.board.piece(origin)
        assert piece is not None

        captured_square: Optional[Square] = None
        jump = is_jump(origin, destination)
        if jump:
            captured_square = jumped_square(origin, destination)
            self.board.remove_piece(captured_square)
        self.board.move_piece(origin, destination)

        crowned = not piece.is_king and piece.reached_farthest_row(destination.row)
        if crowned:
            piece.is_king = True
        piece.has_moved = True

        move = Move(
            from_square=origin,
            to_square=destination,
            is_capture=jump,
            is_jump=jump,
            promote_to=piece.kind if crowned else None,
            captured_square=captured_square,
        )
        self.moves.append(move)
        logger.info("%s played %s", self.turn, move.to_algebraic())
        return move

    def _await_continuation(self, move: Move, continuations: set[Square]) -> MoveOutcome:
        destinations = frozenset(continuations)
        self.pending_capture = PendingCapture(move.to_square, destinations)
        return MoveOutcome(
            OutcomeKind.MUST_CONTINUE_CAPTURE, move, continuations=destinations
        )

    def _end_turn(self) -> None:
        self.pending_capture = None
        self.turn = self.turn.opponent


def new_checkers_game(settings: Optional[EngineSettings] = None) -> CheckersGame:
    return CheckersGame.new_game(settings)
