"""
Environment configuration using pydantic-settings.

This module provides typed access to environment-based configuration for:
- bot seats (difficulty, pacing, random seed)
- the game supervisor (turn and auction timeouts)

Rule constants of a single game live in `tycoon.game.config.GameConfig`.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tycoon.agents.profiles import Difficulty


class BotSettings(BaseSettings):
    """
    Defaults for bot seats.

    Environment variables (prefix: BOT_):
        BOT_DIFFICULTY   - easy | medium | hard (default: medium)
        BOT_DELAY_SCALE  - multiplier on deliberation delays; 0 disables them
        BOT_SEED         - optional seed for reproducible bot behaviour
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="BOT_",
    )

    difficulty: Difficulty = Field(
        default=Difficulty.MEDIUM,
        description="Difficulty tier for bots that do not ask for one explicitly.",
    )
    delay_scale: float = Field(
        default=1.0,
        ge=0,
        description="Multiplier applied to every deliberation delay.",
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the bots' random source.",
    )

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SupervisorSettings(BaseSettings):
    """
    Liveness limits enforced by the game supervisor.

    Environment variables (prefix: SUPERVISOR_):
        SUPERVISOR_TURN_TIMEOUT_SECONDS     - idle time before a turn is skipped (default: 30)
        SUPERVISOR_AUCTION_TIMEOUT_SECONDS  - idle time before an auction is settled (default: 20)
        SUPERVISOR_WATCHDOG_INTERVAL_SECONDS- how often the watchdog checks (default: 1)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="SUPERVISOR_",
    )

    turn_timeout_seconds: float = Field(default=30.0, gt=0)
    auction_timeout_seconds: float = Field(default=20.0, gt=0)
    watchdog_interval_seconds: float = Field(default=1.0, gt=0)


@lru_cache
def get_bot_settings() -> BotSettings:
    """Cached bot settings instance."""
    return BotSettings()


@lru_cache
def get_supervisor_settings() -> SupervisorSettings:
    """Cached supervisor settings instance."""
    return SupervisorSettings()
