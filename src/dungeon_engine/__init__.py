"""Dungeon Engine - turn-based dungeon simulation.

A shared world of tiles, ground items and NPCs, advanced one turn at a time
by a player intent followed by randomized NPC behavior and gated by a
pluggable win/loss condition. Rendering and input mapping belong to the
presentation layer; this package owns the rules and the state.

Example:
    >>> from dungeon_engine import GameSession, GameMode, PlayerIntent, Direction
    >>>
    >>> session = GameSession.create(GameMode.SURVIVAL, turn_limit=50, seed=7)
    >>> outcome = session.submit(PlayerIntent.move(Direction.EAST))
    >>> print(session.goal_text, session.turn, session.status)

Modules:
    core: Configuration, logging, constants and exceptions.
    models: Pydantic V2 models for the grid, actors, items and events.
    engine: Movement rules, NPC behavior, win/loss conditions and the turn loop.
"""

from __future__ import annotations

# Core
from dungeon_engine.core.config import Settings, get_settings
from dungeon_engine.core.exceptions import (
    ConfigurationError,
    DungeonEngineError,
    GameEngineError,
    InvalidModeConfigurationError,
    OutOfBoundsError,
    PlacementError,
)
from dungeon_engine.core.logging import configure_from_settings, configure_logging, get_logger

# Models
from dungeon_engine.models import (
    Direction,
    GameMode,
    GameStatus,
    Grid,
    ItemKind,
    NPCKind,
    Position,
    RejectionReason,
    Tile,
    TurnEvent,
    WorldSnapshot,
)

# Engine
from dungeon_engine.engine import (
    GameSession,
    PlayerIntent,
    TurnOutcome,
    TurnStatus,
    build_condition,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "Settings",
    "get_settings",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "DungeonEngineError",
    "GameEngineError",
    "OutOfBoundsError",
    "PlacementError",
    "ConfigurationError",
    "InvalidModeConfigurationError",
    # Models
    "Direction",
    "GameMode",
    "GameStatus",
    "Grid",
    "ItemKind",
    "NPCKind",
    "Position",
    "RejectionReason",
    "Tile",
    "TurnEvent",
    "WorldSnapshot",
    # Engine
    "GameSession",
    "PlayerIntent",
    "TurnOutcome",
    "TurnStatus",
    "build_condition",
]
