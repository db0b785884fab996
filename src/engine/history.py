"""
History stack used for undo.

Snapshots are deep copies: whatever happens to the live pieces afterwards (promotion, has_moved flags, ...)
never changes what was recorded.
"""

import logging
from copy import deepcopy
from typing import Generic, Optional, TypeVar

from src.core.exceptions import HistoryError, InsufficientHistoryError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistoryStack(Generic[T]):
    """Ordered snapshots, most recent last."""

    def __init__(self, limit: Optional[int] = None) -> None:
        self._snapshots: list[T] = []
        self.limit = limit

    def __len__(self) -> int:
        return len(self._snapshots)

    def save_state(self, snapshot: T) -> None:
        """Push a snapshot, taken right before a move is applied."""
        self._snapshots.append(deepcopy(snapshot))
        if self.limit is not None and len(self._snapshots) > self.limit:
            # drop the oldest
            del self._snapshots[0]

    def undo(self, n: int = 1) -> T:
        """
        Go back n entries.
        ----

        Returns the snapshot n entries back and forgets it (and everything after it).
        Fails without touching the stack if not enough snapshots are recorded.
        """
        if n < 1:
            raise HistoryError(f"Number of steps to undo must be positive, got {n}.")
        if n > len(self._snapshots):
            raise InsufficientHistoryError(
                f"Cannot undo {n} move(s): only {len(self._snapshots)} recorded."
            )
        snapshot = self._snapshots[-n]
        del self._snapshots[-n:]
        logger.debug("Undid %d step(s), %d left", n, len(self._snapshots))
        return snapshot
