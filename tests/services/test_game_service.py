"""Unit tests for src/services/game_service.py"""

import logging
from threading import Barrier, Thread
from uuid import UUID, uuid4

import pytest

from src.api.models import (
    ContinueCaptureRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GetGameRequest,
    LegalMovesRequest,
    MoveRequest,
    MoveResponse,
    SkipCaptureRequest,
    UndoRequest,
)
from src.core.config import EngineSettings
from src.core.exceptions import (
    GameError,
    MoveError,
    GameStateError,
    InsufficientHistoryError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.shared_types import Color, OutcomeKind, Status, Variant
from src.db.memory_repository import InMemoryGameRepository
from src.engine.board import CHECKERS_STARTING_FEN, CHESS_STARTING_FEN, Board
from src.games.checkers_game import CheckersGame
from src.services.game_service import GameService, create_service


def create(service: GameService, variant: Variant) -> UUID:
    return service.create_game(CreateGameRequest(variant=variant)).game_id


def move(
    service: GameService, game_id: UUID, from_square: str, to_square: str
) -> MoveResponse:
    return service.make_move(
        MoveRequest(game_id=game_id, from_square=from_square, to_square=to_square)
    )


@pytest.fixture
def chain_game_id(service: GameService) -> UUID:
    """Checkers game where White's c3 can jump d4 and then f6"""
    game = CheckersGame(board=Board.from_fen("8/8/5c2/8/3c4/2C5/8/8"))
    return service.repo.add_game(game)


# --- SERVICE - CREATE / GET ----
@pytest.mark.parametrize(
    "variant, position",
    [(Variant.CHESS, CHESS_STARTING_FEN), (Variant.CHECKERS, CHECKERS_STARTING_FEN)],
)
def test_create_game(service: GameService, variant: Variant, position: str) -> None:
    response = service.create_game(CreateGameRequest(variant=variant))

    assert response.variant == variant
    assert response.turn == Color.WHITE
    assert response.status == Status.IN_PROGRESS
    assert response.position == position
    assert response.move_history == []
    assert service.repo.get_game(response.game_id) is not None


def test_get_game_state(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    move(service, game_id, "e2", "e4")

    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.turn == Color.BLACK
    assert response.move_history == ["e2e4"]
    assert response.position == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR"


def test_unknown_game(service: GameService) -> None:
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=uuid4()))


# --- SERVICE - LEGAL MOVES ----
def test_legal_moves(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="G1"))
    assert response.square == "g1"
    assert response.legal_moves == ["f3", "h3"]


def test_legal_moves_of_empty_square(service: GameService) -> None:
    game_id = create(service, Variant.CHECKERS)
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="d4"))
    assert response.legal_moves == []


# --- SERVICE - MOVES ----
def test_make_move(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    response = move(service, game_id, "e2", "e4")

    assert response.outcome == OutcomeKind.APPLIED
    assert response.move == "e2e4"
    assert response.winner is None
    assert response.continuations == []
    assert response.game.turn == Color.BLACK


def test_rejected_move_propagates_game_error(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    with pytest.raises(NotYourTurnError):
        move(service, game_id, "e7", "e5")
    with pytest.raises(GameError):
        move(service, game_id, "e2", "e5")
    assert service.get_game_state(GetGameRequest(game_id=game_id)).move_history == []


def test_checkmate_through_service(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    for from_square, to_square in [("f2", "f3"), ("e7", "e5"), ("g2", "g4")]:
        move(service, game_id, from_square, to_square)
    response = move(service, game_id, "d8", "h4")

    assert response.outcome == OutcomeKind.APPLIED_CHECKMATE
    assert response.winner == Color.BLACK
    assert response.game.status == Status.CHECKMATE
    with pytest.raises(GameStateError):
        move(service, game_id, "a2", "a3")


def test_threatened_pieces_reported(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    for from_square, to_square in [("e2", "e4"), ("d7", "d5")]:
        move(service, game_id, from_square, to_square)

    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.threatened == ["d5", "e4"]


# --- SERVICE - CHECKERS CAPTURE CHAINS ----
def test_checkers_chain(service: GameService, chain_game_id: UUID) -> None:
    response = move(service, chain_game_id, "c3", "e5")
    assert response.outcome == OutcomeKind.MUST_CONTINUE_CAPTURE
    assert response.continuations == ["g7"]
    assert response.game.pending_capture == "e5"
    assert response.game.turn == Color.WHITE

    response = service.continue_capture(
        ContinueCaptureRequest(game_id=chain_game_id, to_square="g7")
    )
    assert response.outcome == OutcomeKind.TURN_COMPLETE
    assert response.game.pending_capture is None
    assert response.game.turn == Color.BLACK
    assert response.game.position == "8/6C1/8/8/8/8/8/8"


def test_checkers_skip(service: GameService, chain_game_id: UUID) -> None:
    move(service, chain_game_id, "c3", "e5")
    response = service.skip_capture(SkipCaptureRequest(game_id=chain_game_id))

    assert response.outcome == OutcomeKind.TURN_COMPLETE
    assert response.move == "c3e5"
    assert response.game.turn == Color.BLACK
    assert response.game.position == "8/8/5c2/4C3/8/8/8/8"


def test_capture_chains_only_in_checkers(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    with pytest.raises(GameStateError):
        service.skip_capture(SkipCaptureRequest(game_id=game_id))
    with pytest.raises(GameStateError):
        service.continue_capture(ContinueCaptureRequest(game_id=game_id, to_square="e4"))


# --- SERVICE - UNDO ----
def test_undo_chess(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    move(service, game_id, "e2", "e4")
    move(service, game_id, "e7", "e5")

    response = service.undo(UndoRequest(game_id=game_id, steps=2))
    assert response.position == CHESS_STARTING_FEN
    assert response.turn == Color.WHITE
    assert response.move_history == []

    with pytest.raises(InsufficientHistoryError):
        service.undo(UndoRequest(game_id=game_id))


def test_undo_checkers_not_supported(service: GameService) -> None:
    game_id = create(service, Variant.CHECKERS)
    move(service, game_id, "c3", "d4")
    with pytest.raises(GameStateError):
        service.undo(UndoRequest(game_id=game_id))


# --- SERVICE - DELETE ----
def test_delete_game(service: GameService) -> None:
    game_id = create(service, Variant.CHECKERS)
    service.delete_game(DeleteGameRequest(game_id=game_id))

    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=game_id))
    with pytest.raises(RepositoryError):
        service.delete_game(DeleteGameRequest(game_id=game_id))


# --- SERVICE - CONCURRENCY ----
def test_concurrent_moves_on_one_game(service: GameService) -> None:
    """Two callers race for the same move: the game lock lets exactly one of them through"""
    game_id = create(service, Variant.CHESS)
    barrier = Barrier(2)
    results: list[object] = []

    def play_e4() -> None:
        barrier.wait()
        try:
            results.append(move(service, game_id, "e2", "e4"))
        except MoveError as error:
            results.append(error)

    threads = [Thread(target=play_e4) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 2
    assert len([result for result in results if isinstance(result, MoveError)]) == 1
    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.move_history == ["e2e4"]
    assert response.turn == Color.BLACK


def test_unknown_games_do_not_leave_locks_behind(service: GameService) -> None:
    for _ in range(10):
        with pytest.raises(RepositoryError):
            service.get_game_state(GetGameRequest(game_id=uuid4()))
    assert service._locks == {}


def test_delete_drops_the_game_lock(service: GameService) -> None:
    game_id = create(service, Variant.CHESS)
    service.get_game_state(GetGameRequest(game_id=game_id))
    assert game_id in service._locks

    service.delete_game(DeleteGameRequest(game_id=game_id))
    assert service._locks == {}
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=game_id))
    assert service._locks == {}


# --- COMPOSITION ROOT ----
def test_create_service(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: None)
    monkeypatch.setenv("BOARDGAMES_HISTORY_LIMIT", "3")

    service = create_service()

    assert isinstance(service.repo, InMemoryGameRepository)
    assert service.settings.history_limit == 3


def test_settings_reach_the_games() -> None:
    service = GameService(
        InMemoryGameRepository(), EngineSettings(capture_chain_after_step=False)
    )
    game_id = create(service, Variant.CHECKERS)
    game = service.repo.get_game(game_id)
    assert game.settings.capture_chain_after_step is False
