"""Runtime settings, read from DOMINO_* environment variables."""

import os
from typing import Mapping, Optional, Self

from pydantic import BaseModel, Field, field_validator

from src.core.shared_types import TurnDirection

ENV_PREFIX = "DOMINO_"


class Settings(BaseModel):
    # Match rules
    winning_score: int = Field(default=100, gt=0)
    turn_direction: TurnDirection = TurnDirection.ASCENDING
    # Seconds before the gateway submits a pass for a seat with no legal move. 0 disables.
    auto_pass_seconds: float = Field(default=0.0, ge=0)

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Only the variables that are actually set override the defaults."""
        environ = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            if name == "cors_origins":
                values[name] = [origin.strip() for origin in raw.split(",") if origin.strip()]
            else:
                values[name] = raw
        return cls.model_validate(values)
