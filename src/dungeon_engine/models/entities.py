"""Actor models: the player, NPCs and references to either.

The player and NPCs are mutable pydantic models with ``validate_assignment``
so that every write through the engine is re-checked against the field
constraints (health never negative, turn counter never negative).

Models:
    ActorRef: Lightweight, hashable reference to a blocking actor.
    Player: The single player character.
    NPCProfile: Per-kind default behavior parameters.
    NPC: A non-player character.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from dungeon_engine.core import constants
from dungeon_engine.models.enums import ActorKind, ItemKind, NPCKind
from dungeon_engine.models.grid import Position
from dungeon_engine.models.items import Item


# =============================================================================
# Actor Reference
# =============================================================================


class ActorRef(BaseModel):
    """Identifies the occupant of a cell: the player or one NPC."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ActorKind
    npc_id: str | None = None

    @model_validator(mode="after")
    def validate_identity(self) -> Self:
        if self.kind is ActorKind.NPC and not self.npc_id:
            raise ValueError("NPC references require an npc_id")
        if self.kind is ActorKind.PLAYER and self.npc_id is not None:
            raise ValueError("player references cannot carry an npc_id")
        return self

    @classmethod
    def player(cls) -> ActorRef:
        return _PLAYER_REF

    @classmethod
    def npc(cls, npc_id: str) -> ActorRef:
        return cls(kind=ActorKind.NPC, npc_id=npc_id)

    @property
    def is_player(self) -> bool:
        return self.kind is ActorKind.PLAYER

    def __str__(self) -> str:
        return "player" if self.is_player else f"npc:{self.npc_id}"


_PLAYER_REF = ActorRef(kind=ActorKind.PLAYER)


# =============================================================================
# Player
# =============================================================================


class Player(BaseModel):
    """The player character.

    Attributes:
        position: Current cell.
        health: Current health, clamped to ``[0, max_health]``.
        max_health: Health ceiling.
        inventory: Carried items in pickup order.
        turn: Completed turn counter. Increases by exactly one per
            applied player action.
        experience: Experience earned from defeating hostile NPCs.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    position: Position
    health: int = Field(default=constants.PLAYER_MAX_HEALTH, ge=0)
    max_health: int = Field(default=constants.PLAYER_MAX_HEALTH, ge=1)
    inventory: list[Item] = Field(default_factory=list)
    turn: int = Field(default=0, ge=0)
    experience: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_health(self) -> Self:
        if self.health > self.max_health:
            raise ValueError(
                f"health ({self.health}) cannot exceed max_health ({self.max_health})"
            )
        return self

    @computed_field(description="Level derived from experience")
    @property
    def level(self) -> int:
        return 1 + self.experience // constants.EXPERIENCE_PER_LEVEL

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def take_damage(self, amount: int) -> int:
        """Apply damage, flooring health at zero.

        Returns:
            Health actually lost.
        """
        if amount <= 0:
            return 0
        before = self.health
        self.health = max(0, self.health - amount)
        return before - self.health

    def heal(self, amount: int) -> int:
        """Restore health up to ``max_health``.

        Returns:
            Health actually restored.
        """
        if amount <= 0:
            return 0
        before = self.health
        self.health = min(self.max_health, self.health + amount)
        return self.health - before

    def grant_experience(self, amount: int) -> bool:
        """Add experience. Returns True if the player gained a level."""
        if amount <= 0:
            return False
        before = self.level
        self.experience += amount
        return self.level > before

    def inventory_counts(self) -> Counter[ItemKind]:
        """Tally carried items by kind."""
        return Counter(item.kind for item in self.inventory)

    def has_item_kind(self, kind: ItemKind) -> bool:
        return any(item.kind is kind for item in self.inventory)


# =============================================================================
# NPC
# =============================================================================


class NPCProfile(BaseModel):
    """Default parameters for one NPC kind."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    health: int = Field(ge=1)
    aggression_radius: int = Field(default=0, ge=0)
    damage_min: int = Field(default=0, ge=0)
    damage_max: int = Field(default=0, ge=0)
    move_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    drop_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    despawn_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    experience_value: int = Field(default=0, ge=0)


NPC_PROFILES: dict[NPCKind, NPCProfile] = {
    NPCKind.MERCHANT: NPCProfile(
        name="The Merchant",
        health=20,
        move_chance=constants.MERCHANT_MOVE_CHANCE,
        drop_chance=constants.MERCHANT_DROP_CHANCE,
    ),
    NPCKind.ORC: NPCProfile(
        name="Orc Brute",
        health=30,
        aggression_radius=constants.ORC_AGGRESSION_RADIUS,
        damage_min=constants.ORC_DAMAGE[0],
        damage_max=constants.ORC_DAMAGE[1],
        experience_value=25,
    ),
    NPCKind.GOBLIN: NPCProfile(
        name="Grob",
        health=15,
        aggression_radius=3,
        damage_min=2,
        damage_max=8,
        experience_value=10,
    ),
    NPCKind.SKELETON: NPCProfile(
        name="Bonecrusher",
        health=25,
        aggression_radius=4,
        damage_min=4,
        damage_max=12,
        experience_value=20,
    ),
    NPCKind.GUARD: NPCProfile(name="Guard Captain", health=40),
}
"""Per-kind defaults used by ``create_npc``."""


class NPC(BaseModel):
    """A non-player character.

    Attributes:
        npc_id: Identity, unique within a session.
        kind: NPC kind; selects the behavior function.
        name: Display name.
        position: Current cell.
        health: Current health. The NPC is removed at zero.
        aggression_radius: Detection distance for hunters.
        damage_min: Minimum attack damage.
        damage_max: Maximum attack damage.
        move_chance: Per-turn random step probability (wanderers).
        drop_chance: Per-turn item drop probability (traders).
        despawn_chance: Per-turn probability of leaving the dungeon.
        experience_value: Experience granted to the player on defeat.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    npc_id: str = Field(min_length=1, max_length=64)
    kind: NPCKind
    name: str = Field(min_length=1, max_length=80)
    position: Position
    health: int = Field(ge=0)
    aggression_radius: int = Field(default=0, ge=0)
    damage_min: int = Field(default=0, ge=0)
    damage_max: int = Field(default=0, ge=0)
    move_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    drop_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    despawn_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    experience_value: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_damage_range(self) -> Self:
        if self.damage_min > self.damage_max:
            raise ValueError(
                f"damage_min ({self.damage_min}) cannot exceed damage_max ({self.damage_max})"
            )
        return self

    @property
    def ref(self) -> ActorRef:
        return ActorRef.npc(self.npc_id)

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def is_hostile(self) -> bool:
        return self.kind.is_hostile

    @property
    def glyph(self) -> str:
        return self.kind.glyph

    def take_damage(self, amount: int) -> int:
        """Apply damage, flooring health at zero. Returns health lost."""
        if amount <= 0:
            return 0
        before = self.health
        self.health = max(0, self.health - amount)
        return before - self.health


def create_npc(
    kind: NPCKind,
    npc_id: str,
    position: Position,
    **overrides: Any,
) -> NPC:
    """Create an NPC from its kind's profile.

    Args:
        kind: NPC kind.
        npc_id: Unique identity within the session.
        position: Spawn cell.
        **overrides: Field values replacing the profile defaults.

    Returns:
        The new NPC.

    Example:
        >>> orc = create_npc(NPCKind.ORC, "orc-1", Position(x=4, y=4))
        >>> orc.aggression_radius
        5
    """
    fields = NPC_PROFILES[kind].model_dump()
    fields.update(overrides)
    return NPC(npc_id=npc_id, kind=kind, position=position, **fields)


__all__ = [
    "ActorRef",
    "Player",
    "NPCProfile",
    "NPC_PROFILES",
    "NPC",
    "create_npc",
]
