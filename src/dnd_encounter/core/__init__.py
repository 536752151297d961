"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DndEncounterError: Base exception for all engine errors.
        ConfigurationError, ValidationError: Setup and input errors.
        GameEngineError and subclasses: Rules and state errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from dnd_encounter.core.config import (
    GameSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dnd_encounter.core.exceptions import (
    CombatError,
    ConcentrationError,
    ConfigurationError,
    DiceRollError,
    DndEncounterError,
    GameEngineError,
    RestTargetError,
    SpellTargetError,
    TurnManagementError,
    UnknownActorError,
    ValidationError,
)
from dnd_encounter.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "DndEncounterError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Game engine exceptions
    "GameEngineError",
    "DiceRollError",
    "UnknownActorError",
    "CombatError",
    "TurnManagementError",
    "ConcentrationError",
    "SpellTargetError",
    "RestTargetError",
    # Configuration
    "Settings",
    "GameSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
