"""Game session construction and the read-only query surface.

``GameSession.create`` is the single entry point for starting a game: it
validates the mode, picks spawn cells, generates the grid around them,
populates NPCs and ground items and binds the win/loss condition. After
construction the presentation layer only ever calls ``submit`` and the
query methods, which hand out copies so that callers can never mutate
engine state behind the turn engine's back.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from uuid import uuid4

from dungeon_engine.core.config import Settings, get_settings
from dungeon_engine.core.exceptions import ConfigurationError, PlacementError
from dungeon_engine.core.logging import get_logger, session_context
from dungeon_engine.engine.conditions import Verdict, build_condition
from dungeon_engine.engine.dice import DiceRoller
from dungeon_engine.engine.loop import (
    Condition,
    PlayerIntent,
    TurnCallback,
    TurnEngine,
    TurnOutcome,
    TurnPhase,
)
from dungeon_engine.models.entities import NPC, NPC_PROFILES, Player, create_npc
from dungeon_engine.models.enums import GameMode, GameStatus, ItemKind, NPCKind
from dungeon_engine.models.events import EventLog, TurnEvent
from dungeon_engine.models.grid import Grid, Position, Tile
from dungeon_engine.models.items import WorldItem, make_item
from dungeon_engine.models.registry import EntityRegistry
from dungeon_engine.models.world import World, WorldSnapshot


logger = get_logger(__name__)


# =============================================================================
# Population Plans
# =============================================================================


@dataclass(frozen=True)
class PopulationPlan:
    """What a new session of one mode starts with.

    Attributes:
        npcs: Number of NPCs per kind, spawned in this order.
        items: Ground items scattered anywhere.
        distant_items: Ground items placed as far from the player as the
            map allows.
    """

    npcs: Mapping[NPCKind, int] = field(default_factory=dict)
    items: Mapping[ItemKind, int] = field(default_factory=dict)
    distant_items: Mapping[ItemKind, int] = field(default_factory=dict)


POPULATION_PLANS: dict[GameMode, PopulationPlan] = {
    GameMode.TREASURE_HUNT: PopulationPlan(
        npcs={
            NPCKind.ORC: 3,
            NPCKind.GOBLIN: 1,
            NPCKind.SKELETON: 1,
            NPCKind.MERCHANT: 1,
            NPCKind.GUARD: 1,
        },
        items={ItemKind.POTION: 3, ItemKind.KEY: 1},
        distant_items={ItemKind.TREASURE: 1, ItemKind.TREASURE_CHEST: 1},
    ),
    GameMode.SURVIVAL: PopulationPlan(
        npcs={NPCKind.ORC: 5, NPCKind.SKELETON: 1, NPCKind.MERCHANT: 1},
        items={ItemKind.POTION: 4},
    ),
    GameMode.COLLECTION: PopulationPlan(
        npcs={NPCKind.MERCHANT: 2, NPCKind.ORC: 2, NPCKind.GUARD: 1},
        items={ItemKind.POTION: 2},
    ),
}
"""Starting population per mode. Collection adds its required items on top."""


def _obstacle_density(settings: Settings, mode: GameMode) -> float:
    world = settings.world
    if mode is GameMode.SURVIVAL:
        return world.survival_density
    if mode is GameMode.COLLECTION:
        return world.collection_density
    return world.treasure_hunt_density


# =============================================================================
# Spawn Selection
# =============================================================================


class SpawnPicker:
    """Chooses distinct spawn cells from a fixed candidate set.

    Candidates are the interior cells of a map that is about to be
    generated, or the walkable cells of an authored grid. Every pick is
    removed from the pool so no two spawns share a cell.
    """

    def __init__(self, candidates: list[Position], roller: DiceRoller) -> None:
        self._free = list(candidates)
        self._roller = roller

    @classmethod
    def for_generation(
        cls,
        width: int,
        height: int,
        roller: DiceRoller,
        *,
        border_walls: bool,
    ) -> SpawnPicker:
        margin = 1 if border_walls else 0
        cells = [
            Position(x=x, y=y)
            for y in range(margin, height - margin)
            for x in range(margin, width - margin)
        ]
        return cls(cells, roller)

    @classmethod
    def for_grid(cls, grid: Grid, roller: DiceRoller) -> SpawnPicker:
        return cls(grid.walkable_positions(), roller)

    @property
    def remaining(self) -> int:
        return len(self._free)

    def __contains__(self, pos: object) -> bool:
        return pos in self._free

    def claim(self, pos: Position) -> None:
        """Remove a fixed cell, such as the player start, from the pool."""
        if pos in self._free:
            self._free.remove(pos)

    def pick(self, *, origin: Position | None = None, min_distance: int = 0) -> Position:
        """Pick a free cell, preferring cells farther than ``min_distance`` from ``origin``.

        Raises:
            PlacementError: If no free cell is left.
        """
        if not self._free:
            raise PlacementError("No free cell left to spawn into")
        pool = self._free
        if origin is not None and min_distance > 0:
            distant = [pos for pos in self._free if pos.manhattan_to(origin) > min_distance]
            if distant:
                pool = distant
        chosen = self._roller.choice(pool)
        self._free.remove(chosen)
        return chosen

    def pick_farthest(self, origin: Position) -> Position:
        """Pick among the free cells in the farthest quarter from ``origin``.

        Raises:
            PlacementError: If no free cell is left.
        """
        if not self._free:
            raise PlacementError("No free cell left to spawn into")
        ranked = sorted(self._free, key=lambda pos: pos.manhattan_to(origin), reverse=True)
        chosen = self._roller.choice(ranked[: max(1, len(ranked) // 4)])
        self._free.remove(chosen)
        return chosen


# =============================================================================
# Game Session
# =============================================================================


class GameSession:
    """A running game: world, turn engine and the bound win/loss condition.

    Example:
        >>> session = GameSession.create(GameMode.SURVIVAL, turn_limit=10, seed=42)
        >>> outcome = session.submit(PlayerIntent.wait())
        >>> outcome.turn
        1
    """

    def __init__(
        self,
        *,
        session_id: str,
        mode: GameMode,
        world: World,
        engine: TurnEngine,
        roller: DiceRoller,
    ) -> None:
        self.session_id = session_id
        self.mode = mode
        self._world = world
        self._engine = engine
        self._roller = roller

    @classmethod
    def create(
        cls,
        mode: GameMode,
        *,
        turn_limit: int | None = None,
        required_counts: Mapping[ItemKind, int] | None = None,
        seed: int | None = None,
        settings: Settings | None = None,
        grid: Grid | None = None,
        player_start: Position | None = None,
    ) -> GameSession:
        """Build a new session for ``mode``.

        Args:
            mode: Game mode to play.
            turn_limit: Survival turn limit. Defaults to the configured limit.
            required_counts: Collection targets, required for Collection.
            seed: Seed for the session's randomness.
            settings: Engine settings. Defaults to the global settings.
            grid: Authored map to play on instead of a generated one.
            player_start: Player spawn. Defaults to the configured start.

        Returns:
            The ready-to-play session.

        Raises:
            InvalidModeConfigurationError: If the mode parameters are unusable.
            ConfigurationError: If the player start is not walkable.
            PlacementError: If the map has no room for the population.
        """
        settings = settings or get_settings()
        condition = build_condition(
            mode,
            turn_limit=turn_limit,
            required_counts=dict(required_counts) if required_counts is not None else None,
            settings=settings,
        )
        mode = condition.mode

        session_id = uuid4().hex[:12]
        with session_context(session_id, mode=mode.value):
            return cls._assemble(
                session_id,
                condition,
                settings=settings,
                seed=seed,
                grid=grid,
                player_start=player_start,
            )

    @classmethod
    def _assemble(
        cls,
        session_id: str,
        condition: Condition,
        *,
        settings: Settings,
        seed: int | None,
        grid: Grid | None,
        player_start: Position | None,
    ) -> GameSession:
        mode = condition.mode
        roller = DiceRoller(seed=seed)
        world_settings = settings.world
        start = player_start or Position(
            x=world_settings.player_start_x,
            y=world_settings.player_start_y,
        )

        if grid is None:
            picker = SpawnPicker.for_generation(
                world_settings.width,
                world_settings.height,
                roller,
                border_walls=world_settings.border_walls,
            )
            if start not in picker:
                raise ConfigurationError(
                    f"Player start {start} is not inside the playable area",
                    config_key="player_start",
                )
        else:
            if not grid.is_walkable(start):
                raise ConfigurationError(
                    f"Player start {start} is not walkable on the supplied grid",
                    config_key="player_start",
                )
            picker = SpawnPicker.for_grid(grid, roller)
        picker.claim(start)

        plan = POPULATION_PLANS[mode]
        npc_spawns = _plan_npcs(plan, picker, start)
        item_spawns = _plan_items(plan, condition, picker, start)

        if grid is None:
            reserved = [start, *(pos for _, pos in npc_spawns), *(pos for _, pos in item_spawns)]
            grid = Grid.generate(
                world_settings.width,
                world_settings.height,
                roller,
                obstacle_density=_obstacle_density(settings, mode),
                reserved=reserved,
                border_walls=world_settings.border_walls,
            )

        player = Player(
            position=start,
            health=settings.combat.player_max_health,
            max_health=settings.combat.player_max_health,
        )
        registry = EntityRegistry(player)
        for npc in _build_npcs(npc_spawns):
            registry.add_npc(npc)
        for kind, pos in item_spawns:
            registry.place_item(pos, make_item(kind))

        world = World(grid=grid, registry=registry, log=EventLog(world_settings.log_capacity))
        engine = TurnEngine(world, condition, roller, settings=settings)

        logger.info(
            "Session created",
            width=grid.width,
            height=grid.height,
            npcs=registry.npc_count,
            items=registry.item_count,
            seed=seed,
            goal=condition.win_description,
        )
        return cls(session_id=session_id, mode=mode, world=world, engine=engine, roller=roller)

    # -------------------------------------------------------------------------
    # Play
    # -------------------------------------------------------------------------

    def submit(self, intent: PlayerIntent) -> TurnOutcome:
        """Run one turn. See ``TurnEngine.submit``."""
        with session_context(self.session_id, mode=self.mode.value):
            return self._engine.submit(intent)

    def add_turn_callback(self, callback: TurnCallback) -> None:
        self._engine.add_turn_callback(callback)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def seed(self) -> int | None:
        return self._roller.seed

    @property
    def condition(self) -> Condition:
        return self._engine.condition

    @property
    def phase(self) -> TurnPhase:
        return self._engine.phase

    @property
    def width(self) -> int:
        return self._world.grid.width

    @property
    def height(self) -> int:
        return self._world.grid.height

    def tile_at(self, pos: Position) -> Tile:
        return self._world.grid.tile_at(pos)

    @property
    def player(self) -> Player:
        """Detached copy of the player."""
        return self._world.player.model_copy(deep=True)

    @property
    def npcs(self) -> list[NPC]:
        """Detached copies of all NPCs, in turn order."""
        return [npc.model_copy(deep=True) for npc in self._world.registry.iter_npcs()]

    @property
    def ground_items(self) -> list[WorldItem]:
        return list(self._world.registry.iter_items())

    @property
    def turn(self) -> int:
        return self._world.player.turn

    @property
    def status(self) -> GameStatus:
        return self._engine.status

    @property
    def verdict(self) -> Verdict:
        return self._engine.verdict

    @property
    def goal_text(self) -> str:
        return self.condition.win_description

    @property
    def loss_text(self) -> str:
        return self.condition.loss_description

    def recent_events(self, count: int | None = None) -> list[TurnEvent]:
        """Newest events from the log, oldest first."""
        return self._world.log.recent(count)

    def snapshot(self) -> WorldSnapshot:
        return self._world.snapshot(status=self.status, goal_text=self.goal_text)


# =============================================================================
# Population Helpers
# =============================================================================


def _plan_npcs(
    plan: PopulationPlan,
    picker: SpawnPicker,
    start: Position,
) -> list[tuple[NPCKind, Position]]:
    """Choose NPC cells. Hunters start outside their detection radius when possible."""
    spawns: list[tuple[NPCKind, Position]] = []
    for kind, count in plan.npcs.items():
        radius = NPC_PROFILES[kind].aggression_radius
        for _ in range(count):
            spawns.append((kind, picker.pick(origin=start, min_distance=radius + 1)))
    return spawns


def _plan_items(
    plan: PopulationPlan,
    condition: Condition,
    picker: SpawnPicker,
    start: Position,
) -> list[tuple[ItemKind, Position]]:
    spawns: list[tuple[ItemKind, Position]] = []
    for kind, count in plan.distant_items.items():
        for _ in range(count):
            spawns.append((kind, picker.pick_farthest(start)))

    items = dict(plan.items)
    required = getattr(condition, "required_counts", None)
    if required:
        for kind, count in required.items():
            items[kind] = items.get(kind, 0) + count

    total = sum(items.values())
    if total > picker.remaining:
        raise PlacementError(
            f"Cannot place {total} items with only {picker.remaining} free cells",
            details={"requested": total, "available": picker.remaining},
        )
    for kind, count in items.items():
        for _ in range(count):
            spawns.append((kind, picker.pick()))
    return spawns


def _build_npcs(spawns: list[tuple[NPCKind, Position]]) -> list[NPC]:
    npcs: list[NPC] = []
    counters: dict[NPCKind, int] = {}
    for kind, pos in spawns:
        counters[kind] = counters.get(kind, 0) + 1
        npcs.append(create_npc(kind, f"{kind.value}-{counters[kind]}", pos))
    return npcs


__all__ = [
    "POPULATION_PLANS",
    "GameSession",
    "PopulationPlan",
    "SpawnPicker",
]
