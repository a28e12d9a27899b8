"""Tests for positions, tiles and the grid."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from dungeon_engine.core.exceptions import ConfigurationError, OutOfBoundsError
from dungeon_engine.engine.dice import DiceRoller
from dungeon_engine.models.enums import Direction, HazardKind, TileKind
from dungeon_engine.models.grid import Grid, Position, Tile


class TestPosition:
    """Tests for Position."""

    @pytest.mark.parametrize(
        ("direction", "expected"),
        [
            (Direction.NORTH, (3, 2)),
            (Direction.SOUTH, (3, 4)),
            (Direction.EAST, (4, 3)),
            (Direction.WEST, (2, 3)),
        ],
    )
    def test_offset(self, direction: Direction, expected: tuple[int, int]) -> None:
        """Test one step in each direction; y grows downward."""
        assert Position(x=3, y=3).offset(direction).as_tuple() == expected

    def test_distances(self) -> None:
        """Test Manhattan and Chebyshev distances."""
        a = Position(x=1, y=1)
        b = Position(x=4, y=3)
        assert a.manhattan_to(b) == 5
        assert a.chebyshev_to(b) == 3

    def test_hashable_and_frozen(self) -> None:
        """Test positions work as dict keys and cannot be mutated."""
        pos = Position(x=1, y=2)
        assert {pos: "here"}[Position(x=1, y=2)] == "here"
        with pytest.raises(ValidationError):
            pos.x = 5  # type: ignore[misc]

    def test_str(self) -> None:
        """Test string rendering."""
        assert str(Position(x=7, y=0)) == "(7, 0)"


class TestTile:
    """Tests for Tile."""

    def test_passability(self) -> None:
        """Test which tiles can be stood on."""
        assert Tile.floor().is_passable
        assert Tile.stairs().is_passable
        assert Tile.hazardous(HazardKind.LAVA).is_passable
        assert Tile.door(open=True).is_passable
        assert not Tile.door().is_passable
        assert not Tile.wall().is_passable

    def test_hazard_requires_kind(self) -> None:
        """Test hazard tiles must name their hazard."""
        with pytest.raises(ValidationError):
            Tile(kind=TileKind.HAZARD)

    def test_hazard_only_on_hazard_tiles(self) -> None:
        """Test non-hazard tiles cannot carry a hazard."""
        with pytest.raises(ValidationError):
            Tile(kind=TileKind.FLOOR, hazard=HazardKind.SPIKES)

    def test_glyphs(self) -> None:
        """Test display glyphs."""
        assert Tile.wall().glyph == "#"
        assert Tile.door().glyph == "+"
        assert Tile.door(open=True).glyph == "'"
        assert Tile.floor().glyph == "."


class TestGrid:
    """Tests for Grid queries and mutation."""

    @pytest.mark.parametrize(("width", "height"), [(0, 5), (5, 0), (-1, 3)])
    def test_non_positive_dimensions(self, width: int, height: int) -> None:
        """Test that dimensions must be positive."""
        with pytest.raises(ConfigurationError):
            Grid(width, height)

    def test_tile_at_out_of_bounds(self, open_grid: Any) -> None:
        """Test that lookups outside the grid raise."""
        with pytest.raises(OutOfBoundsError) as exc_info:
            open_grid.tile_at(Position(x=10, y=0))

        assert exc_info.value.details["grid_size"] == (10, 8)

    @pytest.mark.parametrize(
        ("x", "y", "valid"),
        [(0, 0, True), (9, 7, True), (10, 7, False), (9, 8, False), (-1, 0, False)],
    )
    def test_is_valid_position(self, open_grid: Any, x: int, y: int, valid: bool) -> None:
        """Test the bounds check at every edge."""
        assert open_grid.is_valid_position(Position(x=x, y=y)) is valid

    def test_is_walkable(self, open_grid: Any) -> None:
        """Test walkability follows terrain and bounds."""
        wall = Position(x=2, y=2)
        door = Position(x=3, y=2)
        open_grid.set_tile(wall, Tile.wall())
        open_grid.set_tile(door, Tile.door())

        assert not open_grid.is_walkable(wall)
        assert not open_grid.is_walkable(door)
        assert not open_grid.is_walkable(Position(x=-1, y=0))
        assert open_grid.is_walkable(Position(x=4, y=2))

    def test_door_toggle(self, open_grid: Any) -> None:
        """Test opening and closing a door."""
        door = Position(x=5, y=5)
        open_grid.set_tile(door, Tile.door())

        assert open_grid.open_door(door) is True
        assert open_grid.is_walkable(door)
        assert open_grid.open_door(door) is False
        assert open_grid.close_door(door) is True
        assert not open_grid.is_walkable(door)

    def test_open_door_on_floor(self, open_grid: Any) -> None:
        """Test that only doors can be opened."""
        assert open_grid.open_door(Position(x=1, y=1)) is False

    def test_neighbors_at_corner(self, open_grid: Any) -> None:
        """Test neighbors exclude out-of-bounds cells."""
        neighbors = {pos.as_tuple() for pos in open_grid.neighbors(Position(x=0, y=0))}
        assert neighbors == {(1, 0), (0, 1)}

    def test_set_tile_out_of_bounds(self, open_grid: Any) -> None:
        """Test authoring outside the grid raises."""
        with pytest.raises(OutOfBoundsError):
            open_grid.set_tile(Position(x=20, y=1), Tile.wall())

    def test_to_ascii(self) -> None:
        """Test the terrain dump."""
        grid = Grid(3, 2)
        grid.set_tile(Position(x=1, y=0), Tile.wall())
        assert grid.to_ascii() == ".#.\n..."


class TestGridGenerate:
    """Tests for random grid generation."""

    def test_border_walls(self) -> None:
        """Test the outer ring is solid wall."""
        grid = Grid.generate(8, 6, DiceRoller(seed=1))

        for pos in grid.iter_positions():
            on_border = pos.x in (0, 7) or pos.y in (0, 5)
            assert grid.is_walkable(pos) is not on_border

    def test_reserved_cells_stay_walkable(self) -> None:
        """Test spawn cells are never walled, even at high density."""
        reserved = [Position(x=1, y=1), Position(x=5, y=4), Position(x=3, y=2)]
        grid = Grid.generate(
            10,
            8,
            DiceRoller(seed=3),
            obstacle_density=0.95,
            reserved=reserved,
        )

        assert all(grid.is_walkable(pos) for pos in reserved)

    def test_same_seed_same_map(self) -> None:
        """Test generation is reproducible from the seed."""
        first = Grid.generate(20, 12, DiceRoller(seed=9), obstacle_density=0.3)
        second = Grid.generate(20, 12, DiceRoller(seed=9), obstacle_density=0.3)

        assert first.to_ascii() == second.to_ascii()

    @pytest.mark.parametrize("density", [-0.1, 1.0, 1.5])
    def test_invalid_density(self, density: float) -> None:
        """Test density must lie in [0, 1)."""
        with pytest.raises(ConfigurationError):
            Grid.generate(5, 5, DiceRoller(seed=1), obstacle_density=density)

    def test_reserved_on_border(self) -> None:
        """Test a reserved cell on the wall ring is rejected."""
        with pytest.raises(ConfigurationError):
            Grid.generate(5, 5, DiceRoller(seed=1), reserved=[Position(x=0, y=2)])

    def test_without_border_walls(self) -> None:
        """Test an open map when border walls are disabled."""
        grid = Grid.generate(4, 4, DiceRoller(seed=1), border_walls=False)

        assert all(grid.is_walkable(pos) for pos in grid.iter_positions())
