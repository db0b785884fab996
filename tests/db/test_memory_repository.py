from uuid import uuid4

import pytest

from src.db.memory_repository import InMemoryGameRepository
from src.games.checkers_game import new_checkers_game
from src.games.chess_game import new_chess_game


@pytest.fixture
def repo() -> InMemoryGameRepository:
    return InMemoryGameRepository()


def test_add_and_get(repo: InMemoryGameRepository) -> None:
    game = new_chess_game()
    game_id = repo.add_game(game)
    assert repo.get_game(game_id) is game
    assert len(repo) == 1


def test_games_get_distinct_ids(repo: InMemoryGameRepository) -> None:
    chess_id = repo.add_game(new_chess_game())
    checkers_id = repo.add_game(new_checkers_game())
    assert chess_id != checkers_id
    assert len(repo) == 2


def test_unknown_id(repo: InMemoryGameRepository) -> None:
    assert repo.get_game(uuid4()) is None


def test_delete(repo: InMemoryGameRepository) -> None:
    game = new_checkers_game()
    game_id = repo.add_game(game)

    assert repo.delete_game(game_id) is game
    assert repo.get_game(game_id) is None
    assert repo.delete_game(game_id) is None
    assert len(repo) == 0
