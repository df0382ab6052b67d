"""Game configuration loaded from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field, field_validator

from seabattle.engine.fleet import RULESETS, Ruleset

FieldAccess = Literal["turn_holder", "always"]


class GameSettings(BaseModel):
    """Board size, fleet rules and the own-field viewing policy."""

    rows: int = Field(default=10, ge=1, le=26)
    cols: int = Field(default=10, ge=1, le=26)
    ruleset: str = "post_soviet"
    # "turn_holder" only lets the player holding the move view their field.
    field_access: FieldAccess = "turn_holder"

    @field_validator("ruleset")
    @classmethod
    def _known_ruleset(cls, value: str) -> str:
        name = value.strip().lower()
        if name not in RULESETS:
            raise ValueError(f"Unknown ruleset {value!r}; expected one of {sorted(RULESETS)}")
        return name

    @property
    def rules(self) -> Ruleset:
        return RULESETS[self.ruleset]

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameSettings":
        """Construct settings from `SEABATTLE_*` env vars; keyword overrides win."""

        data: Dict[str, Any] = {}
        env_names = {
            "rows": "SEABATTLE_ROWS",
            "cols": "SEABATTLE_COLS",
            "ruleset": "SEABATTLE_RULESET",
            "field_access": "SEABATTLE_FIELD_ACCESS",
        }
        for name, env_name in env_names.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[name] = value.strip()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)


@lru_cache(maxsize=1)
def load_settings() -> GameSettings:
    """Load and cache game settings from the environment."""

    return GameSettings.from_env()
