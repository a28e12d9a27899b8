"""Engine-wide constants for the dungeon turn engine.

Values here are defaults; anything a game designer is expected to tune
is also exposed through ``dungeon_engine.core.config.Settings``.
"""

from __future__ import annotations

# =============================================================================
# World
# =============================================================================

DEFAULT_WORLD_WIDTH = 50
"""Default dungeon width in tiles."""

DEFAULT_WORLD_HEIGHT = 30
"""Default dungeon height in tiles."""

DEFAULT_PLAYER_START = (10, 15)
"""Default player spawn cell (x, y)."""

EVENT_LOG_CAPACITY = 50
"""Number of TurnEvents retained by the session log (oldest evicted first)."""

# =============================================================================
# Player
# =============================================================================

PLAYER_MAX_HEALTH = 100
"""Starting and maximum player health."""

EXPERIENCE_PER_LEVEL = 100
"""Experience required per player level."""

PLAYER_ATTACK_DAMAGE = (5, 15)
"""Inclusive damage range of a player bump attack."""

POTION_HEAL_AMOUNT = 25
"""Health restored by drinking a potion."""

# =============================================================================
# NPC Behavior
# =============================================================================

MERCHANT_MOVE_CHANCE = 0.24
"""Per-turn probability that a merchant attempts a random step."""

MERCHANT_DROP_CHANCE = 0.15
"""Per-turn probability that a merchant drops an item from its stock."""

ORC_AGGRESSION_RADIUS = 5
"""Distance at which an orc notices and hunts the player."""

ORC_DAMAGE = (5, 20)
"""Inclusive damage range of an orc attack."""

# =============================================================================
# Game Modes
# =============================================================================

DEFAULT_SURVIVAL_TURNS = 200
"""Default turn limit for Survival mode."""
