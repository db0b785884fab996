"""Orchestration of communication from the request models to the game classes and the repository (and the reverse direction)."""

import logging
from contextlib import contextmanager
from threading import Lock
from typing import Iterator, Optional
from uuid import UUID

from src.api.models import (
    ContinueCaptureRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    SkipCaptureRequest,
    UndoRequest,
)
from src.core.config import EngineSettings, configure_logging
from src.core.exceptions import GameStateError, RepositoryError
from src.core.shared_types import Status, Variant
from src.db.memory_repository import InMemoryGameRepository
from src.db.repository import Game, GameRepository
from src.engine.square import Square
from src.games.checkers_game import CheckersGame
from src.games.chess_game import ChessGame
from src.games.outcomes import MoveOutcome

logger = logging.getLogger(__name__)


class GameService:
    """
    Orchestration of layers for both variants.

    The game classes assume a single caller at a time: every operation on a game runs while holding that game's lock.
    """

    def __init__(
        self, repository: GameRepository, settings: Optional[EngineSettings] = None
    ) -> None:
        self.repo = repository
        self.settings = settings or EngineSettings()
        self._locks: dict[UUID, Lock] = {}
        self._locks_guard = Lock()

    # -- request handlers ---
    def create_game(self, request: CreateGameRequest) -> GameResponse:
        game: Game = (
            ChessGame.new_game(self.settings)
            if request.variant == Variant.CHESS
            else CheckersGame.new_game(self.settings)
        )
        game_id = self.repo.add_game(game)
        logger.info("Created %s game %s", request.variant, game_id)
        return self._create_game_response(game_id, game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        with self._locked_game(request.game_id) as game:
            return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        with self._locked_game(request.game_id) as game:
            targets = game.legal_moves(Square.from_algebraic(request.square))
            return LegalMovesResponse(
                game_id=request.game_id,
                square=request.square,
                legal_moves=sorted(target.to_algebraic() for target in targets),
            )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Make a move attempt. Errors of the game classes are propagated as-is."""
        with self._locked_game(request.game_id) as game:
            outcome = game.attempt_move(
                Square.from_algebraic(request.from_square),
                Square.from_algebraic(request.to_square),
            )
            return self._create_move_response(request.game_id, game, outcome)

    def continue_capture(self, request: ContinueCaptureRequest) -> MoveResponse:
        with self._locked_game(request.game_id) as game:
            checkers_game = self._as_checkers(game)
            outcome = checkers_game.continue_capture(
                Square.from_algebraic(request.to_square)
            )
            return self._create_move_response(request.game_id, game, outcome)

    def skip_capture(self, request: SkipCaptureRequest) -> MoveResponse:
        with self._locked_game(request.game_id) as game:
            outcome = self._as_checkers(game).skip_capture()
            return self._create_move_response(request.game_id, game, outcome)

    def undo(self, request: UndoRequest) -> GameResponse:
        """Only chess games keep a history."""
        with self._locked_game(request.game_id) as game:
            if not isinstance(game, ChessGame):
                raise GameStateError("Undo is only available in chess games.")
            game.undo(request.steps)
            return self._create_game_response(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        with self._locked_game(request.game_id):
            self.repo.delete_game(request.game_id)
        with self._locks_guard:
            self._locks.pop(request.game_id, None)
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    @contextmanager
    def _locked_game(self, game_id: UUID) -> Iterator[Game]:
        """
        Fetch the game and hold its lock for the duration of the block.

        Locks only get created for games that exist, delete_game() drops them again.
        """
        with self._locks_guard:
            self._fetch_game(game_id)
            lock = self._locks.setdefault(game_id, Lock())
        with lock:
            yield self._fetch_game(game_id)

    def _fetch_game(self, game_id: UUID) -> Game:
        """Attempt to find the game in the repository and raise error if it fails."""
        game = self.repo.get_game(game_id)
        if game is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game

    def _as_checkers(self, game: Game) -> CheckersGame:
        if not isinstance(game, CheckersGame):
            raise GameStateError("Capture chains only exist in checkers games.")
        return game

    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        if isinstance(game, ChessGame):
            return GameResponse(
                game_id=game_id,
                variant=Variant.CHESS,
                turn=game.turn,
                status=game.status,
                position=game.board.to_fen(),
                threatened=sorted(square.to_algebraic() for square in game.threatened()),
                pending_capture=None,
                move_history=[move.to_algebraic() for move in game.moves],
            )
        pending = game.pending_capture
        return GameResponse(
            game_id=game_id,
            variant=Variant.CHECKERS,
            turn=game.turn,
            status=Status.IN_PROGRESS,
            position=game.board.to_fen(),
            threatened=[],
            pending_capture=pending.square.to_algebraic() if pending else None,
            move_history=[move.to_algebraic() for move in game.moves],
        )

    def _create_move_response(
        self, game_id: UUID, game: Game, outcome: MoveOutcome
    ) -> MoveResponse:
        return MoveResponse(
            outcome=outcome.kind,
            move=outcome.move.to_algebraic(),
            winner=outcome.winner,
            continuations=sorted(square.to_algebraic() for square in outcome.continuations),
            game=self._create_game_response(game_id, game),
        )


def create_service(settings: Optional[EngineSettings] = None) -> GameService:
    """Composition root: settings (from the environment unless given), logging, repository."""
    settings = settings or EngineSettings.from_env()
    configure_logging(settings)
    return GameService(InMemoryGameRepository(), settings)
