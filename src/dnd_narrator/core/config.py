"""Configuration management for the narration interpreter.

Settings are loaded with pydantic-settings from environment variables and
an optional .env file. Rules constants live here rather than in code so a
table can tune them without a release.

Example:
    >>> from dnd_narrator.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.rules.concentration_min_dc
    10

Environment Variables:
    DND_NARRATOR_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DND_NARRATOR_DATABASE_PATH: Path to the SQLite database
    DND_NARRATOR_SAVE_DEBOUNCE_SECONDS: Delay before a coalesced save is written
    DND_NARRATOR_RULES_CONCENTRATION_MIN_DC: Floor for concentration save DCs
    DND_NARRATOR_GENERATION_ENABLED: Use the external item/spell generator
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_narrator.core.exceptions import ConfigurationError


class RulesSettings(BaseSettings):
    """Tunable rules constants.

    Attributes:
        concentration_min_dc: Minimum DC of a concentration save.
        medium_armor_dex_cap: Maximum dexterity bonus under medium armor.
        default_shield_bonus: AC bonus of a shield that does not state one.
        short_rest_minutes: Default short rest length.
        long_rest_hours: Default long rest length.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_NARRATOR_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    concentration_min_dc: int = Field(
        default=10,
        ge=1,
        le=30,
        description="Minimum concentration save DC",
    )
    medium_armor_dex_cap: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Dexterity cap for medium armor",
    )
    default_shield_bonus: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Shield AC bonus when the item omits one",
    )
    short_rest_minutes: int = Field(
        default=60,
        ge=1,
        description="Default short rest length in minutes",
    )
    long_rest_hours: int = Field(
        default=8,
        ge=1,
        description="Default long rest length in hours",
    )


class GenerationSettings(BaseSettings):
    """Configuration for the external item/spell generator.

    Attributes:
        enabled: Call the generator when one is wired in.
        max_attempts: Attempts per request before falling back.
        backoff_min_seconds: Lower bound of the exponential backoff.
        backoff_max_seconds: Upper bound of the exponential backoff.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_NARRATOR_GENERATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Use the external generator")
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum generator attempts per request",
    )
    backoff_min_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Minimum retry backoff",
    )
    backoff_max_seconds: float = Field(
        default=8.0,
        ge=0,
        description="Maximum retry backoff",
    )

    @model_validator(mode="after")
    def validate_backoff_window(self) -> "GenerationSettings":
        """Ensure the backoff window is ordered.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the minimum exceeds the maximum.
        """
        if self.backoff_min_seconds > self.backoff_max_seconds:
            raise ConfigurationError(
                f"backoff_min_seconds ({self.backoff_min_seconds}) must not exceed "
                f"backoff_max_seconds ({self.backoff_max_seconds})",
                config_key="backoff_min_seconds",
            )
        return self


class StorageSettings(BaseSettings):
    """Configuration for the durable store.

    Attributes:
        database_path: Path to the SQLite database file.
        save_debounce_seconds: Quiet period before a coalesced save is written.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_NARRATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path.home() / ".dnd_narrator" / "narrator.db",
        description="Path to SQLite database",
    )
    save_debounce_seconds: float = Field(
        default=0.3,
        ge=0,
        le=30,
        description="Debounce window for coalesced saves",
    )


class NarrationSettings(BaseSettings):
    """Configuration for the dispatch orchestrator.

    Attributes:
        max_derived_depth: How many times derived directives may spawn more.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_NARRATOR_NARRATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_derived_depth: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum re-injection depth for derived directives",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        debug: Enable debug mode (console logging).
        log_level: Application logging level.
        rules: Rules constants.
        generation: External generator settings.
        storage: Durable store settings.
        narration: Orchestrator settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_NARRATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="D&D Narration Interpreter",
        description="Application name",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    narration: NarrationSettings = Field(default_factory=NarrationSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "RulesSettings",
    "GenerationSettings",
    "StorageSettings",
    "NarrationSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
