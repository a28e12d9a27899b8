"""Movement and collision validation.

``can_move`` only answers whether a destination cell may be entered; it
never mutates anything and does not check the step direction. Callers
restrict movement to orthogonal single steps.

An ``OCCUPIED`` rejection is not always final: when mover and occupant
are mutually hostile, the turn engine and the behavior engine resolve the
bump as an attack instead of a refused move.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from dungeon_engine.models.entities import ActorRef
from dungeon_engine.models.enums import RejectionReason, TileKind
from dungeon_engine.models.grid import Grid, Position
from dungeon_engine.models.registry import EntityRegistry


class MoveRejection(BaseModel):
    """Why a destination cannot be entered.

    Attributes:
        reason: OUT_OF_BOUNDS, BLOCKED or OCCUPIED.
        tile: Blocking terrain kind (WALL or DOOR) for BLOCKED.
        occupant: Actor on the cell for OCCUPIED.
    """

    model_config = ConfigDict(frozen=True)

    reason: RejectionReason
    tile: TileKind | None = None
    occupant: ActorRef | None = None

    def describe(self) -> str:
        if self.reason is RejectionReason.OUT_OF_BOUNDS:
            return "That way leads out of the dungeon."
        if self.reason is RejectionReason.BLOCKED:
            if self.tile is TileKind.DOOR:
                return "The door is closed."
            return "A wall blocks the way."
        return "Someone is in the way."


def can_move(
    actor_pos: Position,
    target_pos: Position,
    grid: Grid,
    registry: EntityRegistry,
) -> MoveRejection | None:
    """Decide whether the actor at ``actor_pos`` may occupy ``target_pos``.

    Args:
        actor_pos: Current position of the moving actor.
        target_pos: Destination cell.
        grid: Terrain to check against.
        registry: Occupancy to check against.

    Returns:
        None if the move is legal, otherwise the rejection.
    """
    if not grid.is_valid_position(target_pos):
        return MoveRejection(reason=RejectionReason.OUT_OF_BOUNDS)

    tile = grid.tile_at(target_pos)
    if not tile.is_passable:
        return MoveRejection(reason=RejectionReason.BLOCKED, tile=tile.kind)

    if target_pos == actor_pos:
        return None

    occupant = registry.occupant_at(target_pos)
    if occupant is not None:
        return MoveRejection(reason=RejectionReason.OCCUPIED, occupant=occupant)

    return None


def is_hostile(first: ActorRef, second: ActorRef, registry: EntityRegistry) -> bool:
    """Whether two actors fight each other.

    The player and a hostile NPC are mutually hostile. NPCs never fight
    other NPCs.
    """
    if first.is_player == second.is_player:
        return False
    npc_ref = second if first.is_player else first
    npc = registry.get_npc(npc_ref.npc_id or "")
    return npc is not None and npc.is_hostile


__all__ = [
    "MoveRejection",
    "can_move",
    "is_hostile",
]
