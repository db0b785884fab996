"""
Engine settings + logging setup.

Settings are a pydantic model so values coming from the environment (strings) get validated/converted the same way request data does.
"""

import logging
import os
from typing import Optional, Self

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "BOARDGAMES_"


class EngineSettings(BaseModel):
    """Rule switches and ambient options for one engine/service instance."""

    # Reject chess moves that leave the mover's own king under threat.
    prevent_self_check: bool = True
    # Checkers: offer jump continuations after a plain step too (not only after a jump).
    capture_chain_after_step: bool = True
    # Max number of snapshots kept for undo. None: unbounded.
    history_limit: Optional[int] = Field(default=None, ge=1)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> Self:
        """Read BOARDGAMES_<FIELD> variables. Missing ones keep their defaults."""
        environ = dict(os.environ) if environ is None else environ
        values = {
            name: environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name.upper()}" in environ
        }
        return cls.model_validate(values)


def configure_logging(settings: EngineSettings) -> None:
    """Only call this from the composition root (see services/game_service.py)."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
