"""Pydantic V2 models for the dungeon turn engine.

Submodules:
    enums: Closed vocabularies (TileKind, ItemKind, NPCKind, GameMode, ...)
    grid: Position, Tile and the bounds-checked Grid
    items: Immutable items and ground items
    entities: Player, NPC and actor references
    registry: EntityRegistry owning actors and ground items
    events: TurnEvent and the bounded EventLog
    world: World container and read-only WorldSnapshot

Example:
    >>> from dungeon_engine.models import Grid, Position, Player, EntityRegistry
    >>> grid = Grid(10, 8)
    >>> registry = EntityRegistry(Player(position=Position(x=1, y=1)))
    >>> registry.occupant_at(Position(x=1, y=1)).is_player
    True
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from dungeon_engine.models.enums import (
    ActionType,
    ActorKind,
    Direction,
    GameMode,
    GameStatus,
    HazardKind,
    IntentKind,
    ItemKind,
    NPCKind,
    RejectionReason,
    TileKind,
)

# =============================================================================
# World Model
# =============================================================================
from dungeon_engine.models.grid import Grid, Position, Tile
from dungeon_engine.models.items import ITEM_CATALOG, Item, WorldItem, make_item
from dungeon_engine.models.entities import (
    NPC,
    NPC_PROFILES,
    ActorRef,
    NPCProfile,
    Player,
    create_npc,
)
from dungeon_engine.models.registry import EntityRegistry
from dungeon_engine.models.events import EventLog, TurnEvent
from dungeon_engine.models.world import World, WorldSnapshot


__all__ = [
    # Enums
    "ActionType",
    "ActorKind",
    "Direction",
    "GameMode",
    "GameStatus",
    "HazardKind",
    "IntentKind",
    "ItemKind",
    "NPCKind",
    "RejectionReason",
    "TileKind",
    # Grid
    "Grid",
    "Position",
    "Tile",
    # Items
    "ITEM_CATALOG",
    "Item",
    "WorldItem",
    "make_item",
    # Entities
    "ActorRef",
    "NPC",
    "NPCProfile",
    "NPC_PROFILES",
    "Player",
    "create_npc",
    # Registry and events
    "EntityRegistry",
    "EventLog",
    "TurnEvent",
    # World
    "World",
    "WorldSnapshot",
]
