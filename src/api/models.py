"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, OutcomeKind, Status, Variant

SquareName = str


def _is_algebraic_notation(value: str) -> bool:
    if len(value) != 2:
        return False
    file, rank = value[0].lower(), value[1]
    return file in "abcdefgh" and rank in "12345678"


def validate_square_name(value: str) -> str:
    """Shared validator: squares are sent as 'e2', 'h8', ..."""
    value = value.strip()
    if not _is_algebraic_notation(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value.lower()


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    variant: Variant


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: SquareName
    to_square: SquareName

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)


class ContinueCaptureRequest(BaseModel):
    game_id: UUID
    to_square: SquareName

    @field_validator("to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)


class SkipCaptureRequest(BaseModel):
    game_id: UUID


class UndoRequest(BaseModel):
    game_id: UUID
    steps: int = Field(default=1, ge=1)


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    variant: Variant
    turn: Color
    status: Status
    # FEN-like placement string, row 0 (8th rank) first
    position: str
    threatened: list[SquareName]
    pending_capture: Optional[SquareName]
    move_history: list[str]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: SquareName
    legal_moves: list[SquareName]


class MoveResponse(BaseModel):
    outcome: OutcomeKind
    move: str
    winner: Optional[Color]
    continuations: list[SquareName]
    game: GameResponse
