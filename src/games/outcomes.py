"""What the game classes report back after a move was accepted."""

from dataclasses import dataclass, field
from typing import Optional

from src.core.shared_types import Color, OutcomeKind
from src.engine.moves import Move
from src.engine.square import Square


@dataclass(frozen=True)
class MoveOutcome:
    kind: OutcomeKind
    move: Move
    # only set on checkmate
    winner: Optional[Color] = None
    # checkers: where the active piece must / may jump next
    continuations: frozenset[Square] = field(default_factory=frozenset)
