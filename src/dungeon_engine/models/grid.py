"""Tile grid for the dungeon.

The grid is a fixed-size 2D array of immutable Tile values indexed
``[y][x]`` with the origin at the top-left. Its shape never changes after
construction; the only in-play mutation is opening or closing doors.

Models:
    Position: Hashable (x, y) cell coordinate.
    Tile: Immutable terrain description of one cell.
    Grid: Bounds-checked tile map with walkability queries.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dungeon_engine.core.exceptions import ConfigurationError, OutOfBoundsError
from dungeon_engine.core.logging import get_logger
from dungeon_engine.models.enums import Direction, HazardKind, TileKind


if TYPE_CHECKING:
    from dungeon_engine.engine.dice import DiceRoller

logger = get_logger(__name__)


# =============================================================================
# Position
# =============================================================================


class Position(BaseModel):
    """A cell coordinate. x grows to the right, y grows downward.

    Positions carry no bounds; the grid validates them.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    x: int
    y: int

    def offset(self, direction: Direction) -> Position:
        """Return the neighboring position one step in ``direction``."""
        dx, dy = direction.delta
        return Position(x=self.x + dx, y=self.y + dy)

    def manhattan_to(self, other: Position) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def chebyshev_to(self, other: Position) -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def as_tuple(self) -> tuple[int, int]:
        return (self.x, self.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


# =============================================================================
# Tile
# =============================================================================


class Tile(BaseModel):
    """Terrain of a single cell.

    Attributes:
        kind: Terrain classification.
        is_open: Door state; meaningful only for doors.
        hazard: Hazard type; required for and limited to hazard tiles.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: TileKind = Field(default=TileKind.FLOOR)
    is_open: bool = Field(default=False, description="Door state")
    hazard: HazardKind | None = Field(default=None, description="Hazard type")

    @model_validator(mode="after")
    def validate_hazard(self) -> Self:
        """Ensure the hazard field matches the tile kind."""
        if self.kind is TileKind.HAZARD and self.hazard is None:
            raise ValueError("hazard tiles require a hazard kind")
        if self.kind is not TileKind.HAZARD and self.hazard is not None:
            raise ValueError(f"{self.kind} tiles cannot carry a hazard")
        return self

    @classmethod
    def floor(cls) -> Tile:
        return _FLOOR

    @classmethod
    def wall(cls) -> Tile:
        return _WALL

    @classmethod
    def door(cls, *, open: bool = False) -> Tile:  # noqa: A002
        return cls(kind=TileKind.DOOR, is_open=open)

    @classmethod
    def hazardous(cls, hazard: HazardKind) -> Tile:
        return cls(kind=TileKind.HAZARD, hazard=hazard)

    @classmethod
    def stairs(cls) -> Tile:
        return cls(kind=TileKind.STAIRS)

    @property
    def is_passable(self) -> bool:
        """Whether an actor may stand on this tile."""
        if self.kind is TileKind.WALL:
            return False
        if self.kind is TileKind.DOOR:
            return self.is_open
        return True

    @property
    def glyph(self) -> str:
        if self.kind is TileKind.DOOR and self.is_open:
            return "'"
        return self.kind.glyph


_FLOOR = Tile(kind=TileKind.FLOOR)
_WALL = Tile(kind=TileKind.WALL)


# =============================================================================
# Grid
# =============================================================================


class Grid:
    """A bounds-checked 2D tile map.

    All cell access goes through methods that validate coordinates, so no
    caller ever indexes the backing rows directly.

    Example:
        >>> grid = Grid(5, 4)
        >>> grid.set_tile(Position(x=2, y=1), Tile.wall())
        >>> grid.is_walkable(Position(x=2, y=1))
        False
    """

    __slots__ = ("_width", "_height", "_tiles")

    def __init__(self, width: int, height: int, *, fill: Tile | None = None) -> None:
        """Create a grid filled with one tile (floor by default).

        Args:
            width: Number of columns.
            height: Number of rows.
            fill: Tile placed in every cell.

        Raises:
            ConfigurationError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {width}x{height}",
                config_key="grid_size",
            )
        tile = fill or _FLOOR
        self._width = width
        self._height = height
        self._tiles: list[list[Tile]] = [[tile] * width for _ in range(height)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_valid_position(self, pos: Position) -> bool:
        """Pure bounds check: ``0 <= x < width`` and ``0 <= y < height``."""
        return 0 <= pos.x < self._width and 0 <= pos.y < self._height

    def tile_at(self, pos: Position) -> Tile:
        """Return the tile at ``pos``.

        Raises:
            OutOfBoundsError: If ``pos`` lies outside the grid.
        """
        if not self.is_valid_position(pos):
            raise OutOfBoundsError(
                f"Position {pos} is outside the grid",
                x=pos.x,
                y=pos.y,
                width=self._width,
                height=self._height,
            )
        return self._tiles[pos.y][pos.x]

    def is_walkable(self, pos: Position) -> bool:
        """True iff ``pos`` is in bounds and not a wall or a closed door."""
        if not self.is_valid_position(pos):
            return False
        return self._tiles[pos.y][pos.x].is_passable

    def neighbors(self, pos: Position) -> Iterator[Position]:
        """Yield in-bounds orthogonal neighbors of ``pos``."""
        for direction in Direction:
            candidate = pos.offset(direction)
            if self.is_valid_position(candidate):
                yield candidate

    def iter_positions(self) -> Iterator[Position]:
        """Yield every cell in row-major order."""
        for y in range(self._height):
            for x in range(self._width):
                yield Position(x=x, y=y)

    def walkable_positions(self) -> list[Position]:
        return [pos for pos in self.iter_positions() if self.is_walkable(pos)]

    def rows(self) -> tuple[tuple[Tile, ...], ...]:
        """Return an immutable copy of every row."""
        return tuple(tuple(row) for row in self._tiles)

    def to_ascii(self) -> str:
        """Render terrain only, one text line per row. Debugging aid."""
        return "\n".join("".join(tile.glyph for tile in row) for row in self._tiles)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def set_tile(self, pos: Position, tile: Tile) -> None:
        """Place ``tile`` at ``pos``. Intended for map authoring before play.

        Raises:
            OutOfBoundsError: If ``pos`` lies outside the grid.
        """
        self.tile_at(pos)
        self._tiles[pos.y][pos.x] = tile

    def open_door(self, pos: Position) -> bool:
        """Open the door at ``pos``.

        Returns:
            True if a closed door was opened, False otherwise.
        """
        tile = self.tile_at(pos)
        if tile.kind is not TileKind.DOOR or tile.is_open:
            return False
        self._tiles[pos.y][pos.x] = Tile.door(open=True)
        logger.debug("Door opened", position=pos.as_tuple())
        return True

    def close_door(self, pos: Position) -> bool:
        """Close the door at ``pos``.

        Returns:
            True if an open door was closed, False otherwise.
        """
        tile = self.tile_at(pos)
        if tile.kind is not TileKind.DOOR or not tile.is_open:
            return False
        self._tiles[pos.y][pos.x] = Tile.door(open=False)
        logger.debug("Door closed", position=pos.as_tuple())
        return True

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def generate(
        cls,
        width: int,
        height: int,
        roller: DiceRoller,
        *,
        obstacle_density: float = 0.0,
        reserved: Iterable[Position] = (),
        border_walls: bool = True,
    ) -> Grid:
        """Build a grid with uniformly random wall placement.

        Each interior cell independently becomes a wall with probability
        ``obstacle_density``. Reserved cells (spawn points) are skipped and
        always stay floor.

        Args:
            width: Number of columns.
            height: Number of rows.
            roller: Random source for obstacle placement.
            obstacle_density: Per-cell wall probability in ``[0, 1)``.
            reserved: Cells that must remain walkable.
            border_walls: Enclose the map in a ring of walls.

        Returns:
            The generated grid.

        Raises:
            ConfigurationError: If the density is out of range or a reserved
                cell lies on the border ring or outside the grid.
        """
        if not 0.0 <= obstacle_density < 1.0:
            raise ConfigurationError(
                f"obstacle_density must be in [0, 1), got {obstacle_density}",
                config_key="obstacle_density",
            )

        grid = cls(width, height)
        keep = frozenset(reserved)

        for pos in keep:
            on_border = pos.x in (0, width - 1) or pos.y in (0, height - 1)
            if not grid.is_valid_position(pos) or (border_walls and on_border):
                raise ConfigurationError(
                    f"Reserved cell {pos} is not inside the playable area",
                    config_key="reserved",
                )

        walls = 0
        for pos in grid.iter_positions():
            on_border = pos.x in (0, width - 1) or pos.y in (0, height - 1)
            if border_walls and on_border:
                grid._tiles[pos.y][pos.x] = _WALL
                continue
            if pos in keep:
                continue
            if obstacle_density > 0.0 and roller.chance(obstacle_density):
                grid._tiles[pos.y][pos.x] = _WALL
                walls += 1

        logger.info(
            "Grid generated",
            width=width,
            height=height,
            obstacle_density=obstacle_density,
            obstacles=walls,
            reserved=len(keep),
        )
        return grid


__all__ = [
    "Position",
    "Tile",
    "Grid",
]
