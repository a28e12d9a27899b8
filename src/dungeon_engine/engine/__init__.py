"""Turn engine for the dungeon simulation.

Submodules:
    dice: Session-local, seedable randomness
    movement: Destination legality (bounds, terrain, occupancy)
    behavior: Per-kind NPC behavior functions
    conditions: Win/loss conditions for each game mode
    loop: Turn engine state machine
    session: Session construction and the read-only query surface

Example:
    >>> from dungeon_engine.engine import GameSession, PlayerIntent
    >>> from dungeon_engine.models import Direction, GameMode
    >>>
    >>> session = GameSession.create(GameMode.TREASURE_HUNT, seed=1)
    >>> outcome = session.submit(PlayerIntent.move(Direction.NORTH))
    >>> if outcome.rejected:
    ...     print(outcome.reason, outcome.message)
"""

from __future__ import annotations

# =============================================================================
# Randomness and Movement
# =============================================================================
from dungeon_engine.engine.dice import DiceRoller
from dungeon_engine.engine.movement import MoveRejection, can_move, is_hostile

# =============================================================================
# NPC Behavior
# =============================================================================
from dungeon_engine.engine.behavior import (
    BEHAVIORS,
    MERCHANT_STOCK,
    BehaviorContext,
    NPCAction,
    run_npc_turn,
    step_toward,
)

# =============================================================================
# Win/Loss Conditions
# =============================================================================
from dungeon_engine.engine.conditions import (
    CollectionCondition,
    GameCondition,
    SurvivalCondition,
    TreasureHuntCondition,
    Verdict,
    build_condition,
)

# =============================================================================
# Turn Engine and Sessions
# =============================================================================
from dungeon_engine.engine.loop import (
    PlayerIntent,
    TurnEngine,
    TurnOutcome,
    TurnPhase,
    TurnStatus,
)
from dungeon_engine.engine.session import POPULATION_PLANS, GameSession, PopulationPlan


__all__ = [
    # Randomness and movement
    "DiceRoller",
    "MoveRejection",
    "can_move",
    "is_hostile",
    # Behavior
    "BEHAVIORS",
    "MERCHANT_STOCK",
    "BehaviorContext",
    "NPCAction",
    "run_npc_turn",
    "step_toward",
    # Conditions
    "CollectionCondition",
    "GameCondition",
    "SurvivalCondition",
    "TreasureHuntCondition",
    "Verdict",
    "build_condition",
    # Turn engine
    "PlayerIntent",
    "TurnEngine",
    "TurnOutcome",
    "TurnPhase",
    "TurnStatus",
    # Sessions
    "POPULATION_PLANS",
    "GameSession",
    "PopulationPlan",
]
