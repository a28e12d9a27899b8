"""Configuration management for the dungeon turn engine.

Centralized configuration using pydantic-settings, supporting environment
variables, .env files and explicit overrides at construction time.

Example:
    >>> from dungeon_engine.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.world.width
    50

Environment Variables:
    DUNGEON_ENGINE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DUNGEON_ENGINE_LOG_IDLE_ACTIONS: Record idle NPC turns in the event log
    DUNGEON_ENGINE_WORLD_WIDTH / DUNGEON_ENGINE_WORLD_HEIGHT: Dungeon size
    DUNGEON_ENGINE_COMBAT_DISTANCE_METRIC: 'manhattan' or 'chebyshev'
    DUNGEON_ENGINE_COMBAT_CHASE_AXIS_PRIORITY: 'horizontal' or 'vertical'
    DUNGEON_ENGINE_MODE_SURVIVAL_TURN_LIMIT: Default Survival turn limit
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dungeon_engine.core import constants
from dungeon_engine.core.exceptions import ConfigurationError


class WorldSettings(BaseSettings):
    """Configuration for dungeon construction.

    Attributes:
        width: Dungeon width in tiles.
        height: Dungeon height in tiles.
        player_start_x: Player spawn column.
        player_start_y: Player spawn row.
        border_walls: Surround the dungeon with a solid wall ring.
        log_capacity: Number of events kept in the session log.
        treasure_hunt_density: Random wall density for TreasureHunt.
        survival_density: Random wall density for Survival.
        collection_density: Random wall density for Collection.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_ENGINE_WORLD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    width: int = Field(default=constants.DEFAULT_WORLD_WIDTH, ge=3, le=500)
    height: int = Field(default=constants.DEFAULT_WORLD_HEIGHT, ge=3, le=500)
    player_start_x: int = Field(default=constants.DEFAULT_PLAYER_START[0], ge=0)
    player_start_y: int = Field(default=constants.DEFAULT_PLAYER_START[1], ge=0)
    border_walls: bool = Field(default=True, description="Enclose the map in walls")
    log_capacity: int = Field(
        default=constants.EVENT_LOG_CAPACITY,
        ge=1,
        le=10_000,
        description="Retained event log entries",
    )
    treasure_hunt_density: float = Field(default=0.08, ge=0.0, lt=1.0)
    survival_density: float = Field(default=0.05, ge=0.0, lt=1.0)
    collection_density: float = Field(default=0.06, ge=0.0, lt=1.0)

    @model_validator(mode="after")
    def validate_player_start(self) -> "WorldSettings":
        """Ensure the player spawns inside the playable area.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the spawn cell is outside the map or on
                the border wall ring.
        """
        margin = 1 if self.border_walls else 0
        inside_x = margin <= self.player_start_x < self.width - margin
        inside_y = margin <= self.player_start_y < self.height - margin
        if not (inside_x and inside_y):
            raise ConfigurationError(
                f"Player start ({self.player_start_x}, {self.player_start_y}) is not "
                f"inside the playable {self.width}x{self.height} area",
                config_key="player_start",
            )
        return self


class CombatSettings(BaseSettings):
    """Configuration for damage, healing and chase rules.

    Attributes:
        player_max_health: Starting and maximum player health.
        player_attack_min: Minimum player bump-attack damage.
        player_attack_max: Maximum player bump-attack damage.
        potion_heal: Health restored by a potion.
        distance_metric: Metric used for hunting detection and chase.
        chase_axis_priority: Axis preferred when displacement ties.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_ENGINE_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    player_max_health: int = Field(default=constants.PLAYER_MAX_HEALTH, ge=1)
    player_attack_min: int = Field(default=constants.PLAYER_ATTACK_DAMAGE[0], ge=0)
    player_attack_max: int = Field(default=constants.PLAYER_ATTACK_DAMAGE[1], ge=0)
    potion_heal: int = Field(default=constants.POTION_HEAL_AMOUNT, ge=0)
    distance_metric: Literal["manhattan", "chebyshev"] = Field(default="manhattan")
    chase_axis_priority: Literal["horizontal", "vertical"] = Field(default="horizontal")

    @model_validator(mode="after")
    def validate_attack_range(self) -> "CombatSettings":
        """Ensure the attack damage range is not inverted.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If player_attack_min > player_attack_max.
        """
        if self.player_attack_min > self.player_attack_max:
            raise ConfigurationError(
                f"player_attack_min ({self.player_attack_min}) must not exceed "
                f"player_attack_max ({self.player_attack_max})",
                config_key="player_attack_min",
            )
        return self


class ModeSettings(BaseSettings):
    """Defaults for game mode parameters.

    Attributes:
        survival_turn_limit: Turn limit used when Survival is selected
            without an explicit limit.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_ENGINE_MODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    survival_turn_limit: int = Field(default=constants.DEFAULT_SURVIVAL_TURNS, ge=1)


class Settings(BaseSettings):
    """Main engine settings aggregating all configuration sections.

    Attributes:
        app_name: Application name.
        debug: Enable debug mode.
        log_level: Engine logging level.
        log_json: Render logs as JSON lines.
        log_idle_actions: Record idle NPC turns in the event log.
        world: Dungeon construction settings.
        combat: Damage and chase settings.
        modes: Game mode defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="Dungeon Engine")
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
    )
    log_json: bool = Field(default=False)
    log_idle_actions: bool = Field(
        default=False,
        description="Append idle NPC turns to the event log",
    )

    world: WorldSettings = Field(default_factory=WorldSettings)
    combat: CombatSettings = Field(default_factory=CombatSettings)
    modes: ModeSettings = Field(default_factory=ModeSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the engine settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load engine settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "WorldSettings",
    "CombatSettings",
    "ModeSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
