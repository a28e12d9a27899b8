"""Enumeration types for the dungeon turn engine.

These enums are the closed vocabularies shared by the world model, the
behavior engine and the turn engine. Display glyphs are kept here so the
presentation layer can render any snapshot without a lookup table of its own.
"""

from __future__ import annotations

from enum import StrEnum


class TileKind(StrEnum):
    """Terrain classification of a grid cell."""

    FLOOR = "floor"
    WALL = "wall"
    DOOR = "door"
    HAZARD = "hazard"
    STAIRS = "stairs"

    @property
    def glyph(self) -> str:
        """Single-character map symbol (closed door shown as '+')."""
        return _TILE_GLYPHS[self]


_TILE_GLYPHS = {
    TileKind.FLOOR: ".",
    TileKind.WALL: "#",
    TileKind.DOOR: "+",
    TileKind.HAZARD: "^",
    TileKind.STAIRS: ">",
}


class HazardKind(StrEnum):
    """Kinds of hazardous terrain. Walkable, but harmful to enter."""

    LAVA = "lava"
    SPIKES = "spikes"
    POISON_GAS = "poison_gas"

    @property
    def damage(self) -> int:
        """Damage dealt to the player on entering the cell."""
        return _HAZARD_DAMAGE[self]


_HAZARD_DAMAGE = {
    HazardKind.LAVA: 15,
    HazardKind.SPIKES: 5,
    HazardKind.POISON_GAS: 3,
}


class Direction(StrEnum):
    """Orthogonal movement directions. y grows downward."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> tuple[int, int]:
        """Offset ``(dx, dy)`` of one step in this direction."""
        return _DIRECTION_DELTAS[self]


_DIRECTION_DELTAS = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}


class ItemKind(StrEnum):
    """Kinds of items. Each kind has its own use effect."""

    KEY = "key"
    TREASURE_CHEST = "treasure_chest"
    TREASURE = "treasure"
    GEM = "gem"
    SCROLL = "scroll"
    POTION = "potion"

    @property
    def glyph(self) -> str:
        """Single-character map symbol."""
        return _ITEM_GLYPHS[self]


_ITEM_GLYPHS = {
    ItemKind.KEY: "-",
    ItemKind.TREASURE_CHEST: "=",
    ItemKind.TREASURE: "$",
    ItemKind.GEM: "*",
    ItemKind.SCROLL: "?",
    ItemKind.POTION: "!",
}


class NPCKind(StrEnum):
    """Kinds of non-player characters."""

    MERCHANT = "merchant"
    ORC = "orc"
    GOBLIN = "goblin"
    SKELETON = "skeleton"
    GUARD = "guard"

    @property
    def glyph(self) -> str:
        """Single-character map symbol."""
        return _NPC_GLYPHS[self]

    @property
    def is_hostile(self) -> bool:
        """Whether this kind fights the player."""
        return self in _HOSTILE_KINDS


_NPC_GLYPHS = {
    NPCKind.MERCHANT: "M",
    NPCKind.ORC: "O",
    NPCKind.GOBLIN: "g",
    NPCKind.SKELETON: "S",
    NPCKind.GUARD: "G",
}

_HOSTILE_KINDS = frozenset({NPCKind.ORC, NPCKind.GOBLIN, NPCKind.SKELETON})


class ActorKind(StrEnum):
    """Kinds of blocking actors that can occupy a cell."""

    PLAYER = "player"
    NPC = "npc"


class ActionType(StrEnum):
    """What an actor did on its turn, as recorded in a TurnEvent."""

    MOVE = "move"
    ATTACK = "attack"
    DROP = "drop"
    PICK_UP = "pick_up"
    USE_ITEM = "use_item"
    WAIT = "wait"
    IDLE = "idle"
    DESPAWN = "despawn"
    DEATH = "death"


class IntentKind(StrEnum):
    """Kinds of player intents accepted by the turn engine."""

    MOVE = "move"
    USE_ITEM = "use_item"
    PICK_UP = "pick_up"
    WAIT = "wait"


class GameMode(StrEnum):
    """Selectable game modes, each bound to a win/loss condition."""

    TREASURE_HUNT = "treasure_hunt"
    SURVIVAL = "survival"
    COLLECTION = "collection"


class GameStatus(StrEnum):
    """Result of evaluating the win/loss condition."""

    ONGOING = "ongoing"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        """Whether the game has ended."""
        return self is not GameStatus.ONGOING


class RejectionReason(StrEnum):
    """Why a player intent was refused without advancing the turn."""

    OUT_OF_BOUNDS = "out_of_bounds"
    BLOCKED = "blocked"
    OCCUPIED = "occupied"
    INVALID_ITEM_INDEX = "invalid_item_index"
    NOTHING_HERE = "nothing_here"
    GAME_OVER = "game_over"


__all__ = [
    "TileKind",
    "HazardKind",
    "Direction",
    "ItemKind",
    "NPCKind",
    "ActorKind",
    "ActionType",
    "IntentKind",
    "GameMode",
    "GameStatus",
    "RejectionReason",
]
