"""NPC behavior engine.

Each NPC kind maps to one behavior function. The turn engine calls
``run_npc_turn`` exactly once per living NPC per turn, after the player's
action has been applied. Behaviors apply their mutations to the registry
immediately and report what happened as an ``NPCAction``.

Behaviors:
    wander_and_trade: Merchants step randomly and drop stock items.
    hunt: Orcs, goblins and skeletons chase and attack a nearby player.
    stand_guard: Guards hold their post.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from dungeon_engine.core.exceptions import GameEngineError
from dungeon_engine.core.logging import get_logger
from dungeon_engine.engine.dice import DiceRoller
from dungeon_engine.engine.movement import can_move
from dungeon_engine.models.entities import NPC
from dungeon_engine.models.enums import ActionType, Direction, ItemKind, NPCKind, RejectionReason
from dungeon_engine.models.grid import Grid, Position
from dungeon_engine.models.items import make_item
from dungeon_engine.models.registry import EntityRegistry


logger = get_logger(__name__)

DistanceMetric = Literal["manhattan", "chebyshev"]
AxisPriority = Literal["horizontal", "vertical"]

MERCHANT_STOCK: tuple[ItemKind, ...] = (
    ItemKind.GEM,
    ItemKind.SCROLL,
    ItemKind.POTION,
    ItemKind.KEY,
)
"""Item kinds a merchant may drop."""


# =============================================================================
# Context and Result
# =============================================================================


@dataclass(frozen=True)
class BehaviorContext:
    """Everything a behavior may observe or mutate during its turn.

    Attributes:
        grid: Terrain.
        registry: Actors and ground items.
        roller: Session randomness.
        distance_metric: Metric for detection and chase.
        axis_priority: Axis preferred when displacement ties.
    """

    grid: Grid
    registry: EntityRegistry
    roller: DiceRoller
    distance_metric: DistanceMetric = "manhattan"
    axis_priority: AxisPriority = "horizontal"

    def distance(self, first: Position, second: Position) -> int:
        if self.distance_metric == "chebyshev":
            return first.chebyshev_to(second)
        return first.manhattan_to(second)


@dataclass
class NPCAction:
    """What one NPC did on its turn.

    Attributes:
        npc_id: Acting NPC.
        name: Display name at the time of acting.
        action: Most significant effect of the turn.
        outcome: Human-readable description.
        details: Structured data about the effect.
    """

    npc_id: str
    name: str
    action: ActionType
    outcome: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_idle(self) -> bool:
        return self.action is ActionType.IDLE


Behavior = Callable[[NPC, BehaviorContext], NPCAction]


def _idle(npc: NPC, outcome: str, **details: Any) -> NPCAction:
    return NPCAction(
        npc_id=npc.npc_id,
        name=npc.name,
        action=ActionType.IDLE,
        outcome=outcome,
        details=details,
    )


# =============================================================================
# Chase Geometry
# =============================================================================


def step_toward(origin: Position, target: Position, priority: AxisPriority) -> Direction:
    """Direction of one orthogonal step from ``origin`` toward ``target``.

    Moves along the axis with the greater displacement. On a tie the
    configured priority axis wins.
    """
    dx = target.x - origin.x
    dy = target.y - origin.y
    if abs(dx) > abs(dy):
        horizontal = True
    elif abs(dx) < abs(dy):
        horizontal = False
    else:
        horizontal = priority == "horizontal"

    if horizontal and dx != 0:
        return Direction.EAST if dx > 0 else Direction.WEST
    if dy != 0:
        return Direction.SOUTH if dy > 0 else Direction.NORTH
    return Direction.EAST if dx > 0 else Direction.WEST


# =============================================================================
# Behaviors
# =============================================================================


def wander_and_trade(npc: NPC, ctx: BehaviorContext) -> NPCAction:
    """Merchant turn.

    The move and the drop are sampled independently: a merchant may do
    both, either or neither in the same turn. A drop onto a cell that
    already holds a ground item destroys that item and replaces it.
    """
    details: dict[str, Any] = {}
    parts: list[str] = []

    if ctx.roller.chance(npc.move_chance):
        direction = ctx.roller.choice(tuple(Direction))
        target = npc.position.offset(direction)
        rejection = can_move(npc.position, target, ctx.grid, ctx.registry)
        if rejection is None:
            details["from"] = npc.position.as_tuple()
            npc.position = target
            details["to"] = target.as_tuple()
            parts.append(f"{npc.name} wanders {direction.value}.")
        else:
            details["blocked"] = rejection.reason.value

    if ctx.roller.chance(npc.drop_chance):
        item = make_item(ctx.roller.choice(MERCHANT_STOCK))
        replaced = ctx.registry.place_item(npc.position, item)
        details["dropped"] = item.kind.value
        details["dropped_uid"] = str(item.uid)
        details["at"] = npc.position.as_tuple()
        if replaced is not None:
            details["destroyed"] = replaced.kind.value
            parts.append(f"{npc.name} tosses aside a {replaced.label} and leaves a {item.label}.")
        else:
            parts.append(f"{npc.name} leaves a {item.label} behind.")

    if npc.despawn_chance > 0.0 and ctx.roller.chance(npc.despawn_chance):
        ctx.registry.remove_npc(npc.npc_id)
        parts.append(f"{npc.name} packs up and leaves the dungeon.")
        details["despawned"] = True
        return NPCAction(
            npc_id=npc.npc_id,
            name=npc.name,
            action=ActionType.DESPAWN,
            outcome=" ".join(parts),
            details=details,
        )

    if "dropped" in details:
        action = ActionType.DROP
    elif "to" in details:
        action = ActionType.MOVE
    else:
        return _idle(npc, f"{npc.name} browses their wares.", **details)

    return NPCAction(
        npc_id=npc.npc_id,
        name=npc.name,
        action=action,
        outcome=" ".join(parts),
        details=details,
    )


def hunt(npc: NPC, ctx: BehaviorContext) -> NPCAction:
    """Hostile turn: chase the player within the aggression radius.

    A step that would land on the player resolves as an attack instead.
    Beyond the radius, or when the step is blocked, the hunter idles.
    """
    player = ctx.registry.player
    if not player.is_alive:
        return _idle(npc, f"{npc.name} stands over its prey.")

    distance = ctx.distance(npc.position, player.position)
    if distance > npc.aggression_radius:
        return _idle(npc, f"{npc.name} prowls.", distance=distance)

    direction = step_toward(npc.position, player.position, ctx.axis_priority)
    target = npc.position.offset(direction)
    rejection = can_move(npc.position, target, ctx.grid, ctx.registry)

    if rejection is None:
        origin = npc.position
        npc.position = target
        return NPCAction(
            npc_id=npc.npc_id,
            name=npc.name,
            action=ActionType.MOVE,
            outcome=f"{npc.name} closes in.",
            details={"from": origin.as_tuple(), "to": target.as_tuple(), "distance": distance},
        )

    if (
        rejection.reason is RejectionReason.OCCUPIED
        and rejection.occupant is not None
        and rejection.occupant.is_player
    ):
        rolled = ctx.roller.roll_range(npc.damage_min, npc.damage_max)
        dealt = player.take_damage(rolled)
        return NPCAction(
            npc_id=npc.npc_id,
            name=npc.name,
            action=ActionType.ATTACK,
            outcome=f"{npc.name} hits you for {rolled} damage!",
            details={"damage": rolled, "dealt": dealt, "player_health": player.health},
        )

    return _idle(npc, f"{npc.name} is blocked.", blocked=rejection.reason.value)


def stand_guard(npc: NPC, ctx: BehaviorContext) -> NPCAction:
    """Guard turn: hold position."""
    return _idle(npc, f"{npc.name} keeps watch.")


BEHAVIORS: dict[NPCKind, Behavior] = {
    NPCKind.MERCHANT: wander_and_trade,
    NPCKind.ORC: hunt,
    NPCKind.GOBLIN: hunt,
    NPCKind.SKELETON: hunt,
    NPCKind.GUARD: stand_guard,
}
"""Behavior function selected by NPC kind."""


def run_npc_turn(npc: NPC, ctx: BehaviorContext) -> NPCAction:
    """Run one NPC's turn.

    Raises:
        GameEngineError: If no behavior is registered for the NPC's kind.
    """
    behavior = BEHAVIORS.get(npc.kind)
    if behavior is None:
        raise GameEngineError(
            f"No behavior registered for NPC kind {npc.kind}",
            details={"npc_id": npc.npc_id, "kind": str(npc.kind)},
        )
    action = behavior(npc, ctx)
    logger.debug(
        "NPC acted",
        npc_id=npc.npc_id,
        kind=npc.kind.value,
        action=action.action.value,
        position=npc.position.as_tuple(),
    )
    return action


__all__ = [
    "MERCHANT_STOCK",
    "BEHAVIORS",
    "Behavior",
    "BehaviorContext",
    "NPCAction",
    "hunt",
    "run_npc_turn",
    "stand_guard",
    "step_toward",
    "wander_and_trade",
]
