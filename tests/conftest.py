"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the dungeon engine test suite.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dungeon_engine.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DUNGEON_ENGINE_DEBUG": "true",
        "DUNGEON_ENGINE_LOG_LEVEL": "DEBUG",
        "DUNGEON_ENGINE_LOG_IDLE_ACTIONS": "true",
        "DUNGEON_ENGINE_WORLD_WIDTH": "40",
        "DUNGEON_ENGINE_COMBAT_DISTANCE_METRIC": "chebyshev",
        "DUNGEON_ENGINE_MODE_SURVIVAL_TURN_LIMIT": "75",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def settings(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Any:
    """Create default Settings isolated from any local .env file.

    Returns:
        Settings instance with default values.
    """
    from dungeon_engine.core.config import Settings

    monkeypatch.chdir(tmp_path)
    return Settings()


# =============================================================================
# Randomness Fixtures
# =============================================================================


class ScriptedRandom(random.Random):
    """A ``random.Random`` whose draws are dictated by the test.

    Each queue is consumed front to back. Once a queue is exhausted, draws
    of that kind fall back to a fixed-seed generator.
    """

    def __init__(
        self,
        *,
        floats: Iterable[float] = (),
        ints: Iterable[int] = (),
        choices: Iterable[Any] = (),
    ) -> None:
        super().__init__()
        self.floats = list(floats)
        self.ints = list(ints)
        self.choices = list(choices)
        self._fallback = random.Random(0)

    def random(self) -> float:
        if self.floats:
            return self.floats.pop(0)
        return self._fallback.random()

    def randint(self, a: int, b: int) -> int:
        if self.ints:
            value = self.ints.pop(0)
            assert a <= value <= b, f"scripted int {value} outside [{a}, {b}]"
            return value
        return self._fallback.randint(a, b)

    def choice(self, seq: Sequence[Any]) -> Any:
        if self.choices:
            value = self.choices.pop(0)
            assert value in seq, f"scripted choice {value!r} not offered"
            return value
        return self._fallback.choice(seq)

    def sample(self, population: Sequence[Any], k: int, **kwargs: Any) -> list[Any]:
        return self._fallback.sample(population, k, **kwargs)


@pytest.fixture
def dice_roller() -> Any:
    """Create a DiceRoller with a fixed seed for reproducible tests.

    Returns:
        DiceRoller instance with fixed seed.
    """
    from dungeon_engine.engine.dice import DiceRoller

    return DiceRoller(seed=42)


@pytest.fixture
def scripted_roller() -> Callable[..., Any]:
    """Factory for DiceRollers driven by a ScriptedRandom.

    Returns:
        Function accepting ``floats``, ``ints`` and ``choices`` queues.
    """
    from dungeon_engine.engine.dice import DiceRoller

    def factory(**script: Any) -> Any:
        return DiceRoller(rng=ScriptedRandom(**script))

    return factory


# =============================================================================
# World Fixtures
# =============================================================================


@pytest.fixture
def open_grid() -> Any:
    """Create a 10x8 grid of floor tiles.

    Returns:
        Grid instance without walls.
    """
    from dungeon_engine.models.grid import Grid

    return Grid(10, 8)


@pytest.fixture
def player() -> Any:
    """Create a full-health player at (2, 2).

    Returns:
        Player instance.
    """
    from dungeon_engine.models.entities import Player
    from dungeon_engine.models.grid import Position

    return Player(position=Position(x=2, y=2))


@pytest.fixture
def registry(player: Any) -> Any:
    """Create an EntityRegistry holding only the player.

    Args:
        player: The player fixture.

    Returns:
        EntityRegistry instance.
    """
    from dungeon_engine.models.registry import EntityRegistry

    return EntityRegistry(player)


@pytest.fixture
def world(open_grid: Any, registry: Any) -> Any:
    """Create a World around the open grid and registry.

    Returns:
        World instance.
    """
    from dungeon_engine.models.world import World

    return World(grid=open_grid, registry=registry)


@pytest.fixture
def make_engine(world: Any, settings: Any, dice_roller: Any) -> Callable[..., Any]:
    """Factory for TurnEngines over the shared world.

    Returns:
        Function accepting an optional ``condition``, ``roller`` and ``settings``.
    """
    from dungeon_engine.engine.conditions import TreasureHuntCondition
    from dungeon_engine.engine.loop import TurnEngine

    def factory(
        condition: Any = None,
        roller: Any = None,
        engine_settings: Any = None,
    ) -> Any:
        return TurnEngine(
            world,
            condition or TreasureHuntCondition(),
            roller or dice_roller,
            settings=engine_settings or settings,
        )

    return factory
