"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DndNarratorError: Base exception for all package errors.
        DirectiveError: Unusable directive payloads.
        ResourceExhaustedError: Spell slots, hit dice or charges ran out.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        session_log_context: Bind a session id for a block.
"""

from __future__ import annotations

from dnd_narrator.core.config import (
    GenerationSettings,
    NarrationSettings,
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_narrator.core.exceptions import (
    CombatError,
    ConfigurationError,
    DiceRollError,
    DirectiveError,
    DndNarratorError,
    GameEngineError,
    GenerationError,
    ResourceExhaustedError,
    StorageError,
    ValidationError,
)
from dnd_narrator.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    session_log_context,
)


__all__ = [
    # Configuration
    "GenerationSettings",
    "NarrationSettings",
    "RulesSettings",
    "Settings",
    "StorageSettings",
    "clear_settings_cache",
    "get_settings",
    # Exceptions
    "CombatError",
    "ConfigurationError",
    "DiceRollError",
    "DirectiveError",
    "DndNarratorError",
    "GameEngineError",
    "GenerationError",
    "ResourceExhaustedError",
    "StorageError",
    "ValidationError",
    # Logging
    "bind_context",
    "clear_context",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "session_log_context",
]
