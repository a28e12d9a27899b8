"""Integration tests for full game sessions.

Tests session construction for every mode and complete play-throughs
from the first intent to a terminal verdict.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

import pytest

from dungeon_engine.core.config import Settings
from dungeon_engine.core.exceptions import (
    ConfigurationError,
    InvalidModeConfigurationError,
    PlacementError,
)
from dungeon_engine.engine.loop import PlayerIntent, TurnPhase
from dungeon_engine.engine.session import GameSession
from dungeon_engine.models.entities import NPC_PROFILES
from dungeon_engine.models.enums import (
    Direction,
    GameMode,
    GameStatus,
    ItemKind,
    NPCKind,
    RejectionReason,
)
from dungeon_engine.models.grid import Grid, Position, Tile


def _layout(session: GameSession) -> tuple[Any, ...]:
    """Positions of everything placed at creation, ignoring item identities."""
    snapshot = session.snapshot()
    return (
        snapshot.tiles,
        snapshot.player.position,
        tuple((npc.npc_id, npc.position) for npc in snapshot.npcs),
        tuple(sorted((g.position.as_tuple(), g.item.kind.value) for g in snapshot.items)),
    )


class TestSessionCreation:
    """Test building sessions for each mode."""

    @pytest.mark.parametrize("mode", list(GameMode))
    def test_placements_are_walkable_and_distinct(self, settings: Any, mode: GameMode) -> None:
        """Every actor and item stands on its own walkable cell."""
        session = GameSession.create(
            mode,
            required_counts={ItemKind.GEM: 2} if mode is GameMode.COLLECTION else None,
            seed=3,
            settings=settings,
        )

        actors = [session.player.position, *(npc.position for npc in session.npcs)]
        items = [ground.position for ground in session.ground_items]

        assert len(set(actors)) == len(actors)
        assert len(set(items)) == len(items)
        for pos in actors + items:
            assert session.tile_at(pos).is_passable
        assert session.status is GameStatus.ONGOING
        assert session.phase is TurnPhase.AWAITING_PLAYER_INPUT
        assert session.turn == 0

    def test_player_starts_at_configured_cell(self, settings: Any) -> None:
        """The player spawns at the configured start with full health."""
        session = GameSession.create(GameMode.TREASURE_HUNT, seed=1, settings=settings)

        assert session.player.position == Position(x=10, y=15)
        assert session.player.health == 100
        assert session.width == 50
        assert session.height == 30

    def test_same_seed_same_dungeon(self, settings: Any) -> None:
        """Two sessions with one seed are laid out identically."""
        first = GameSession.create(GameMode.TREASURE_HUNT, seed=99, settings=settings)
        second = GameSession.create(GameMode.TREASURE_HUNT, seed=99, settings=settings)

        assert _layout(first) == _layout(second)
        assert first.seed == 99
        assert first.session_id != second.session_id

    def test_treasure_hunt_population(self, settings: Any) -> None:
        """Treasure hunt places the treasure, a chest and a full cast."""
        session = GameSession.create(GameMode.TREASURE_HUNT, seed=5, settings=settings)

        ground = Counter(g.item.kind for g in session.ground_items)
        kinds = Counter(npc.kind for npc in session.npcs)

        assert ground[ItemKind.TREASURE] == 1
        assert ground[ItemKind.TREASURE_CHEST] == 1
        assert kinds[NPCKind.ORC] == 3
        assert kinds[NPCKind.MERCHANT] == 1
        assert session.goal_text == "Find and collect the treasure!"
        assert session.loss_text == "Don't let your health reach zero!"

    def test_hunters_start_out_of_range(self, settings: Any) -> None:
        """Hostiles spawn beyond their detection radius."""
        session = GameSession.create(GameMode.SURVIVAL, seed=8, settings=settings)
        start = session.player.position

        for npc in session.npcs:
            if npc.kind.is_hostile:
                assert npc.position.manhattan_to(start) > npc.aggression_radius

    def test_collection_places_required_items(self, settings: Any) -> None:
        """Collection scatters at least the required items."""
        required = {ItemKind.GEM: 3, ItemKind.SCROLL: 2, ItemKind.POTION: 1}

        session = GameSession.create(
            GameMode.COLLECTION,
            required_counts=required,
            seed=12,
            settings=settings,
        )

        ground = Counter(g.item.kind for g in session.ground_items)
        for kind, count in required.items():
            assert ground[kind] >= count
        assert "3 gem" in session.goal_text

    def test_survival_default_limit(self, settings: Any) -> None:
        """Survival falls back to the configured limit."""
        session = GameSession.create(GameMode.SURVIVAL, seed=2, settings=settings)

        assert session.condition.turn_limit == 200

    def test_environment_configuration(
        self,
        mock_env_vars: dict[str, str],
        tmp_path: Any,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Environment settings shape the generated session."""
        monkeypatch.chdir(tmp_path)

        session = GameSession.create(GameMode.SURVIVAL, seed=4, settings=Settings())

        assert session.width == 40
        assert session.condition.turn_limit == 75


class TestInvalidSessions:
    """Test rejected session configurations."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"mode": GameMode.SURVIVAL, "turn_limit": 0},
            {"mode": GameMode.SURVIVAL, "turn_limit": -5},
            {"mode": GameMode.COLLECTION},
            {"mode": GameMode.COLLECTION, "required_counts": {}},
            {"mode": GameMode.COLLECTION, "required_counts": {ItemKind.GEM: 0}},
            {"mode": GameMode.COLLECTION, "required_counts": {"diamond": 1}},
            {"mode": GameMode.SURVIVAL, "turn_limit": "soon"},
            {"mode": GameMode.SURVIVAL, "turn_limit": 2.5},
        ],
    )
    def test_bad_mode_parameters(self, settings: Any, kwargs: dict[str, Any]) -> None:
        """Unusable mode parameters are refused before anything is built."""
        with pytest.raises(InvalidModeConfigurationError):
            GameSession.create(settings=settings, **kwargs)

    def test_unwalkable_custom_start(self, settings: Any) -> None:
        """A player start on a wall of an authored grid is refused."""
        grid = Grid(12, 12)
        grid.set_tile(Position(x=1, y=1), Tile.wall())

        with pytest.raises(ConfigurationError):
            GameSession.create(
                GameMode.SURVIVAL,
                settings=settings,
                grid=grid,
                player_start=Position(x=1, y=1),
            )

    def test_start_outside_playable_area(self, settings: Any) -> None:
        """A start on the border ring of a generated map is refused."""
        with pytest.raises(ConfigurationError):
            GameSession.create(
                GameMode.SURVIVAL,
                settings=settings,
                player_start=Position(x=0, y=5),
            )

    def test_grid_too_small(self, settings: Any) -> None:
        """A map without room for the population cannot be populated."""
        with pytest.raises(PlacementError):
            GameSession.create(
                GameMode.TREASURE_HUNT,
                settings=settings,
                grid=Grid(3, 3),
                player_start=Position(x=1, y=1),
            )


class TestSessionPlay:
    """Test complete play-throughs."""

    @pytest.mark.parametrize("turn_limit", [1, 4, 10])
    def test_survival_won_at_limit(self, settings: Any, turn_limit: int) -> None:
        """Waiting out the clock wins exactly on the limit turn."""
        session = GameSession.create(
            GameMode.SURVIVAL,
            turn_limit=turn_limit,
            seed=21,
            settings=settings,
        )

        for _ in range(turn_limit - 1):
            assert session.submit(PlayerIntent.wait()).game_status is GameStatus.ONGOING

        final = session.submit(PlayerIntent.wait())

        assert final.game_status is GameStatus.WON
        assert session.turn == turn_limit
        assert session.phase is TurnPhase.TERMINAL

        after = session.submit(PlayerIntent.wait())
        assert after.reason is RejectionReason.GAME_OVER
        assert session.turn == turn_limit

    def test_same_seed_same_play(self, settings: Any) -> None:
        """Identical seeds and intents replay identically."""
        intents = [PlayerIntent.wait(), PlayerIntent.move(Direction.EAST)] * 10

        def play() -> tuple[Any, ...]:
            session = GameSession.create(GameMode.SURVIVAL, seed=77, settings=settings)
            for intent in intents:
                session.submit(intent)
            return (
                session.player.position,
                session.player.health,
                tuple((npc.npc_id, npc.position) for npc in session.npcs),
                tuple(str(event) for event in session.recent_events()),
            )

        assert play() == play()

    def test_event_log_bounded(self, settings: Any) -> None:
        """The session log keeps at most fifty events."""
        session = GameSession.create(GameMode.SURVIVAL, seed=6, settings=settings)

        for _ in range(80):
            session.submit(PlayerIntent.wait())

        events = session.recent_events()
        assert len(events) == 50
        assert events[-1].turn == 80
        assert len(session.recent_events(5)) == 5
        assert [e.turn for e in events] == sorted(e.turn for e in events)

    def test_queries_are_detached(self, settings: Any) -> None:
        """Mutating query results never reaches the engine."""
        session = GameSession.create(GameMode.TREASURE_HUNT, seed=10, settings=settings)

        player = session.player
        player.health = 1
        player.inventory.clear()
        snapshot = session.snapshot()
        snapshot.player.health = 2
        npcs = session.npcs
        npcs[0].health = 0

        assert session.player.health == 100
        assert session.npcs[0].health > 0
        assert session.snapshot().player.health == 100

    def test_collection_on_authored_grid(self, settings: Any) -> None:
        """An authored map is used as given and everything lands on open cells."""
        grid = Grid(12, 12)
        for y in range(3, 9):
            grid.set_tile(Position(x=3, y=y), Tile.wall())
        start = Position(x=6, y=6)
        session = GameSession.create(
            GameMode.COLLECTION,
            required_counts={ItemKind.GEM: 1},
            seed=31,
            settings=settings,
            grid=grid,
            player_start=start,
        )

        assert session.width == 12
        assert session.height == 12
        assert session.player.position == start
        assert session.status is GameStatus.ONGOING
        assert session.goal_text == "Collect all required items: 1 gem!"
        for y in range(12):
            for x in range(12):
                pos = Position(x=x, y=y)
                assert session.tile_at(pos) == grid.tile_at(pos)
        placed = [npc.position for npc in session.npcs]
        placed += [g.position for g in session.ground_items]
        assert placed
        assert all(session.tile_at(pos).is_passable for pos in placed)
        assert any(g.item.kind is ItemKind.GEM for g in session.ground_items)


_MIXED_INTENTS = [
    PlayerIntent.move(Direction.NORTH),
    PlayerIntent.move(Direction.EAST),
    PlayerIntent.pick_up(),
    PlayerIntent.move(Direction.EAST),
    PlayerIntent.move(Direction.SOUTH),
    PlayerIntent.wait(),
    PlayerIntent.move(Direction.SOUTH),
    PlayerIntent.use_item(0),
    PlayerIntent.move(Direction.WEST),
    PlayerIntent.move(Direction.WEST),
    PlayerIntent.pick_up(),
    PlayerIntent.move(Direction.NORTH),
    PlayerIntent.use_item(3),
]


class TestLongRuns:
    """World invariants hold across many seeded turns."""

    @pytest.mark.parametrize(
        "mode_kwargs",
        [
            {"mode": GameMode.TREASURE_HUNT},
            {"mode": GameMode.SURVIVAL, "turn_limit": 120},
            {"mode": GameMode.COLLECTION, "required_counts": {ItemKind.GEM: 3, ItemKind.SCROLL: 2}},
        ],
        ids=["treasure_hunt", "survival", "collection"],
    )
    @pytest.mark.parametrize("seed", [3, 58, 911])
    def test_invariants_every_turn(
        self,
        settings: Any,
        mode_kwargs: dict[str, Any],
        seed: int,
    ) -> None:
        """Actors stay on distinct open cells, health stays in range, turns count applied actions."""
        session = GameSession.create(seed=seed, settings=settings, **mode_kwargs)

        for step in range(150):
            before = session.turn
            outcome = session.submit(_MIXED_INTENTS[step % len(_MIXED_INTENTS)])

            assert session.turn - before == (1 if outcome.applied else 0)
            assert outcome.turn == session.turn

            player = session.player
            assert 0 <= player.health <= player.max_health
            positions = [player.position] + [npc.position for npc in session.npcs]
            assert len(set(positions)) == len(positions)
            assert all(session.tile_at(pos).is_passable for pos in positions)
            for npc in session.npcs:
                assert 0 < npc.health <= NPC_PROFILES[npc.kind].health

            if outcome.game_status.is_terminal:
                assert session.phase is TurnPhase.TERMINAL
                assert session.submit(PlayerIntent.wait()).reason is RejectionReason.GAME_OVER
                break
        else:
            assert session.phase is TurnPhase.AWAITING_PLAYER_INPUT
