"""Configuration management for the encounter engine.

This module provides centralized configuration management using pydantic-settings,
supporting environment variables, .env files, and runtime configuration overrides.
The engine only reads game defaults from here when a caller leaves the
corresponding argument unset.

Example:
    >>> from dnd_encounter.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.game.default_hit_die)
    8

Environment Variables:
    DND_ENCOUNTER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DND_ENCOUNTER_LOG_JSON: Emit JSON log lines instead of console output
    DND_ENCOUNTER_GAME_DEFAULT_HIT_DIE: Hit die used by short rests
    DND_ENCOUNTER_GAME_BLESS_MAX_TARGETS: Target cap for Bless
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_encounter.core.exceptions import ConfigurationError, DiceRollError


class GameSettings(BaseSettings):
    """Configuration for rules defaults.

    Attributes:
        default_hit_die: Hit die size used when a short rest does not name one.
        default_proficiency_bonus: Proficiency bonus for proficient rolls
            made without an explicit bonus.
        bless_max_targets: Number of unique creatures Bless can affect.
        unarmed_damage: Damage expression for actors without a weapon profile.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_ENCOUNTER_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_hit_die: int = Field(
        default=8,
        ge=4,
        le=12,
        description="Hit die used by short rests",
    )
    default_proficiency_bonus: int = Field(
        default=2,
        ge=2,
        le=6,
        description="Fallback proficiency bonus",
    )
    bless_max_targets: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Unique targets Bless can affect",
    )
    unarmed_damage: str = Field(
        default="1d4",
        min_length=1,
        description="Damage expression for unarmed strikes",
    )

    @field_validator("unarmed_damage", mode="after")
    @classmethod
    def validate_damage_expression(cls, value: str) -> str:
        """Ensure the unarmed damage expression parses.

        Args:
            value: The configured expression.

        Returns:
            The expression unchanged.

        Raises:
            ConfigurationError: If the expression is not valid dice notation.
        """
        from dnd_encounter.engine.dice import parse_expression

        try:
            parse_expression(value)
        except DiceRollError as exc:
            raise ConfigurationError(
                f"unarmed_damage is not a valid dice expression: {value!r}",
                config_key="unarmed_damage",
            ) from exc
        return value


class Settings(BaseSettings):
    """Main application settings.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        log_json: Render log lines as JSON.
        game: Rules defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_ENCOUNTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="D&D Encounter Engine",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    game: GameSettings = Field(default_factory=GameSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    This is primarily useful for testing or when environment variables
    have changed at runtime.
    """
    get_settings.cache_clear()


__all__ = [
    "GameSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
