"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.core.config import EngineSettings
from src.db.memory_repository import InMemoryGameRepository
from src.engine.board import Board
from src.engine.pieces import Piece
from src.engine.square import Square
from src.services.game_service import GameService

# square name -> FEN character of the piece, ex. {"e1": "K", "e8": "k"}
Placement = dict[str, str]


@pytest.fixture
def board_with() -> Callable[[Placement], Board]:
    """Call the inner function with the pieces to put on an otherwise empty board"""

    def _create_board(placement: Placement) -> Board:
        board = Board.empty()
        for square_name, fen_char in placement.items():
            board.place_piece(Piece.from_fen(fen_char), Square.from_algebraic(square_name))
        return board

    return _create_board


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def service(settings: EngineSettings) -> GameService:
    """Service on top of a fresh in-memory repository"""
    return GameService(InMemoryGameRepository(), settings)
