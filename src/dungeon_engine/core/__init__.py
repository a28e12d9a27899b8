"""Core infrastructure: configuration, constants, exceptions and logging."""

from __future__ import annotations

from dungeon_engine.core.config import Settings, clear_settings_cache, get_settings
from dungeon_engine.core.exceptions import (
    ConfigurationError,
    DiceRollError,
    DungeonEngineError,
    GameEngineError,
    InvalidGameStateError,
    InvalidModeConfigurationError,
    OutOfBoundsError,
    PlacementError,
)
from dungeon_engine.core.logging import (
    configure_from_settings,
    configure_logging,
    get_logger,
    session_context,
)


__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "DungeonEngineError",
    "GameEngineError",
    "OutOfBoundsError",
    "PlacementError",
    "InvalidGameStateError",
    "DiceRollError",
    "ConfigurationError",
    "InvalidModeConfigurationError",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "session_context",
]
