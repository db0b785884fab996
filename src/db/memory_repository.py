"""Implementation of (Game)Repository keeping the game objects in a dictionary"""

import logging
from threading import Lock
from uuid import UUID, uuid4

from src.db.repository import Game

logger = logging.getLogger(__name__)


class InMemoryGameRepository:
    """Games live for as long as the process does."""

    def __init__(self) -> None:
        self._games: dict[UUID, Game] = {}
        # guards the dictionary itself, not the games in it
        self._lock = Lock()

    def get_game(self, game_id: UUID) -> Game | None:
        """Get game by ID, if it exists."""
        with self._lock:
            return self._games.get(game_id)

    def add_game(self, game: Game) -> UUID:
        """Store new game and return the newly created game ID."""
        new_id = uuid4()
        with self._lock:
            self._games[new_id] = game
        logger.debug("Stored game %s", new_id)
        return new_id

    def delete_game(self, game_id: UUID) -> Game | None:
        """Remove a game."""
        with self._lock:
            return self._games.pop(game_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
