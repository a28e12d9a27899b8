"""World container and read-only snapshots.

``World`` groups the mutable state a session owns. ``WorldSnapshot`` is the
fully materialized copy handed to the presentation layer between turns;
nothing in a snapshot aliases live engine state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

from dungeon_engine.models.entities import NPC, Player
from dungeon_engine.models.enums import GameStatus
from dungeon_engine.models.events import EventLog, TurnEvent
from dungeon_engine.models.grid import Grid, Position, Tile
from dungeon_engine.models.items import WorldItem
from dungeon_engine.models.registry import EntityRegistry


@dataclass
class World:
    """All mutable state of one session.

    Attributes:
        grid: Tile map.
        registry: Player, NPCs and ground items.
        log: Bounded log of recent events.
    """

    grid: Grid
    registry: EntityRegistry
    log: EventLog = field(default_factory=EventLog)

    @property
    def player(self) -> Player:
        return self.registry.player

    def snapshot(self, *, status: GameStatus, goal_text: str) -> WorldSnapshot:
        """Materialize a detached, read-only copy of the world."""
        return WorldSnapshot(
            width=self.grid.width,
            height=self.grid.height,
            tiles=self.grid.rows(),
            player=self.player.model_copy(deep=True),
            npcs=tuple(npc.model_copy(deep=True) for npc in self.registry.iter_npcs()),
            items=tuple(self.registry.iter_items()),
            turn=self.player.turn,
            status=status,
            goal_text=goal_text,
            events=tuple(self.log.recent()),
        )


class WorldSnapshot(BaseModel):
    """Immutable view of the world between turns.

    Attributes:
        width: Grid width.
        height: Grid height.
        tiles: Tile rows, indexed ``[y][x]``.
        player: Copy of the player.
        npcs: Copies of all NPCs in registry order.
        items: Ground items.
        turn: Turn counter.
        status: Current win/loss status.
        goal_text: Description of the active win condition.
        events: Recent event log, oldest first.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(ge=1)
    height: int = Field(ge=1)
    tiles: tuple[tuple[Tile, ...], ...]
    player: Player
    npcs: tuple[NPC, ...] = ()
    items: tuple[WorldItem, ...] = ()
    turn: int = Field(ge=0)
    status: GameStatus
    goal_text: str
    events: tuple[TurnEvent, ...] = ()

    def tile_at(self, pos: Position) -> Tile:
        return self.tiles[pos.y][pos.x]

    def to_ascii(self) -> str:
        """Render tiles, items and actors as text. Debugging aid."""
        canvas = [[tile.glyph for tile in row] for row in self.tiles]
        for ground in self.items:
            canvas[ground.position.y][ground.position.x] = ground.item.glyph
        for npc in self.npcs:
            canvas[npc.position.y][npc.position.x] = npc.glyph
        canvas[self.player.position.y][self.player.position.x] = "@"
        return "\n".join("".join(row) for row in canvas)


__all__ = [
    "World",
    "WorldSnapshot",
]
