"""Protocol repository (games are kept in memory, see memory_repository.py)"""

from typing import Protocol
from uuid import UUID

from src.games.checkers_game import CheckersGame
from src.games.chess_game import ChessGame

Game = ChessGame | CheckersGame


class GameRepository(Protocol):
    """Storage of live games"""

    def get_game(self, game_id: UUID) -> Game | None:
        """Get game by ID, if it exists."""
        ...

    def add_game(self, game: Game) -> UUID:
        """Store new game and return the newly created game ID."""
        ...

    def delete_game(self, game_id: UUID) -> Game | None:
        """Remove a game."""
        ...
