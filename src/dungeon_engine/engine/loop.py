"""Turn engine: the state machine that advances the dungeon one turn at a time.

A turn is driven by exactly one player intent:

1. AWAITING_PLAYER_INPUT: an intent is submitted.
2. APPLYING_PLAYER_ACTION: the intent is validated and applied. A rejected
   intent leaves the world untouched and returns to step 1 without
   advancing the turn counter.
3. RUNNING_NPC_PHASE: every NPC present at the start of the phase acts
   once, in registry order. NPCs removed earlier in the phase are skipped.
4. EVALUATING: the win/loss condition is checked. An ongoing game returns
   to step 1; a won or lost game moves to TERMINAL.

TERMINAL is absorbing: later intents are rejected with GAME_OVER. A turn
that raises partway through leaves the engine FAILED, since the world may
hold a half-applied turn; further submissions raise InvalidGameStateError.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, model_validator

from dungeon_engine.core.config import Settings, get_settings
from dungeon_engine.core.exceptions import GameEngineError, InvalidGameStateError
from dungeon_engine.core.logging import get_logger
from dungeon_engine.engine.behavior import BehaviorContext, run_npc_turn
from dungeon_engine.engine.conditions import (
    CollectionCondition,
    SurvivalCondition,
    TreasureHuntCondition,
    Verdict,
)
from dungeon_engine.engine.dice import DiceRoller
from dungeon_engine.engine.movement import can_move, is_hostile
from dungeon_engine.models.entities import NPC, ActorRef
from dungeon_engine.models.enums import (
    ActionType,
    Direction,
    GameStatus,
    IntentKind,
    ItemKind,
    RejectionReason,
    TileKind,
)
from dungeon_engine.models.events import TurnEvent
from dungeon_engine.models.items import make_item
from dungeon_engine.models.world import World


logger = get_logger(__name__)

PLAYER_NAME = "You"

Condition = TreasureHuntCondition | SurvivalCondition | CollectionCondition


# =============================================================================
# Phases, Intents and Outcomes
# =============================================================================


class TurnPhase(StrEnum):
    """Phase of the turn engine state machine."""

    AWAITING_PLAYER_INPUT = "awaiting_player_input"
    """Idle, waiting for the next intent."""

    APPLYING_PLAYER_ACTION = "applying_player_action"
    """Validating and applying the player's intent."""

    RUNNING_NPC_PHASE = "running_npc_phase"
    """NPCs are acting."""

    EVALUATING = "evaluating"
    """Checking the win/loss condition."""

    TERMINAL = "terminal"
    """The game is over. Absorbing."""

    FAILED = "failed"
    """A turn raised before completing. Absorbing."""


class TurnStatus(StrEnum):
    """Whether a submitted intent took effect."""

    APPLIED = "applied"
    REJECTED = "rejected"


class PlayerIntent(BaseModel):
    """A single player command.

    Use the constructors rather than building instances directly:

    Example:
        >>> PlayerIntent.move(Direction.NORTH).kind
        <IntentKind.MOVE: 'move'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: IntentKind
    direction: Direction | None = None
    item_index: int | None = None

    @model_validator(mode="after")
    def validate_arguments(self) -> Self:
        if self.kind is IntentKind.MOVE and self.direction is None:
            raise ValueError("move intents require a direction")
        if self.kind is IntentKind.USE_ITEM and self.item_index is None:
            raise ValueError("use_item intents require an item_index")
        return self

    @classmethod
    def move(cls, direction: Direction) -> PlayerIntent:
        return cls(kind=IntentKind.MOVE, direction=direction)

    @classmethod
    def use_item(cls, index: int) -> PlayerIntent:
        return cls(kind=IntentKind.USE_ITEM, item_index=index)

    @classmethod
    def pick_up(cls) -> PlayerIntent:
        return cls(kind=IntentKind.PICK_UP)

    @classmethod
    def wait(cls) -> PlayerIntent:
        return cls(kind=IntentKind.WAIT)


@dataclass
class TurnOutcome:
    """Result of submitting one intent.

    Attributes:
        status: APPLIED or REJECTED.
        turn: Turn counter after the submission.
        game_status: Win/loss status after the submission.
        message: Human-readable summary of the player's action.
        reason: Rejection reason; None when applied.
        events: Events produced by this turn, in order.
        verdict: Condition verdict after evaluation.
    """

    status: TurnStatus
    turn: int
    game_status: GameStatus
    message: str = ""
    reason: RejectionReason | None = None
    events: list[TurnEvent] = field(default_factory=list)
    verdict: Verdict | None = None

    @property
    def applied(self) -> bool:
        return self.status is TurnStatus.APPLIED

    @property
    def rejected(self) -> bool:
        return self.status is TurnStatus.REJECTED

    @property
    def is_terminal(self) -> bool:
        return self.game_status.is_terminal


TurnCallback = Callable[[TurnOutcome], None]


@dataclass
class _Effect:
    """A player-side effect, turned into a TurnEvent once the turn number is known."""

    action: ActionType
    outcome: str
    details: dict[str, Any] = field(default_factory=dict)
    actor: str = PLAYER_NAME
    actor_ref: ActorRef = field(default_factory=ActorRef.player)


@dataclass
class _Rejection:
    reason: RejectionReason
    message: str


# =============================================================================
# Turn Engine
# =============================================================================


class TurnEngine:
    """Advances one session's world in response to player intents.

    Attributes:
        world: The session's mutable state.
        condition: Win/loss condition for the session's mode.
    """

    def __init__(
        self,
        world: World,
        condition: Condition,
        roller: DiceRoller,
        *,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the turn engine.

        Args:
            world: Grid, registry and event log to drive.
            condition: Win/loss condition to evaluate after every turn.
            roller: Session randomness.
            settings: Engine settings. Defaults to the global settings.
        """
        self.world = world
        self.condition = condition
        self._roller = roller
        self._settings = settings or get_settings()
        self._turn_callbacks: list[TurnCallback] = []

        self._verdict = condition.evaluate(world.registry)
        self._phase = (
            TurnPhase.TERMINAL if self._verdict.is_terminal else TurnPhase.AWAITING_PLAYER_INPUT
        )

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def verdict(self) -> Verdict:
        return self._verdict

    @property
    def status(self) -> GameStatus:
        return self._verdict.status

    def add_turn_callback(self, callback: TurnCallback) -> None:
        """Add a callback to be invoked after each submission.

        Args:
            callback: Function to call with the TurnOutcome.
        """
        self._turn_callbacks.append(callback)

    def _invoke_callbacks(self, outcome: TurnOutcome) -> None:
        for callback in self._turn_callbacks:
            try:
                callback(outcome)
            except Exception:
                logger.exception("Turn callback failed", turn=outcome.turn)

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def submit(self, intent: PlayerIntent) -> TurnOutcome:
        """Run one full turn driven by ``intent``.

        Args:
            intent: The player's command.

        Returns:
            The outcome of the turn. Rejections are reported here, never raised.

        Raises:
            InvalidGameStateError: If called while a turn is already in progress,
                or after an earlier turn failed.
            GameEngineError: If the intent or world state is malformed. The
                engine is left FAILED.
        """
        if self._phase is TurnPhase.TERMINAL:
            outcome = self._reject(
                _Rejection(RejectionReason.GAME_OVER, "The game is over.")
            )
            self._invoke_callbacks(outcome)
            return outcome

        if self._phase is not TurnPhase.AWAITING_PLAYER_INPUT:
            problem = (
                "a previous turn failed"
                if self._phase is TurnPhase.FAILED
                else "a turn is in progress"
            )
            raise InvalidGameStateError(
                f"Cannot submit an intent: {problem}",
                current_state=self._phase.value,
                expected_states=[TurnPhase.AWAITING_PLAYER_INPUT.value],
            )

        self._phase = TurnPhase.APPLYING_PLAYER_ACTION
        try:
            result = self._apply_player_action(intent)
            if isinstance(result, _Rejection):
                self._phase = TurnPhase.AWAITING_PLAYER_INPUT
                outcome = self._reject(result)
            else:
                outcome = self._complete_turn(result)
        except Exception:
            logger.exception("Turn failed", intent=intent.kind.value, phase=self._phase.value)
            self._phase = TurnPhase.FAILED
            raise

        self._invoke_callbacks(outcome)
        return outcome

    def _reject(self, rejection: _Rejection) -> TurnOutcome:
        player = self.world.player
        logger.info(
            "Intent rejected",
            reason=rejection.reason.value,
            turn=player.turn,
            position=player.position.as_tuple(),
        )
        return TurnOutcome(
            status=TurnStatus.REJECTED,
            turn=player.turn,
            game_status=self.status,
            message=rejection.message,
            reason=rejection.reason,
            verdict=self._verdict,
        )

    def _complete_turn(self, effects: list[_Effect]) -> TurnOutcome:
        player = self.world.player
        turn = player.turn + 1

        events = [
            TurnEvent(
                turn=turn,
                actor=effect.actor,
                actor_ref=effect.actor_ref,
                action=effect.action,
                outcome=effect.outcome,
                details=effect.details,
            )
            for effect in effects
        ]

        self._phase = TurnPhase.RUNNING_NPC_PHASE
        events.extend(self._run_npc_phase(turn))

        player.turn = turn
        self._phase = TurnPhase.EVALUATING
        self._verdict = self.condition.evaluate(self.world.registry)
        self.world.log.extend(events)

        if self._verdict.is_terminal:
            self._phase = TurnPhase.TERMINAL
            logger.info(
                "Game over",
                status=self._verdict.status.value,
                reason=self._verdict.reason,
                turn=turn,
            )
        else:
            self._phase = TurnPhase.AWAITING_PLAYER_INPUT

        logger.debug("Turn applied", turn=turn, events=len(events), health=player.health)

        message = " ".join(effect.outcome for effect in effects if effect.actor_ref.is_player)
        return TurnOutcome(
            status=TurnStatus.APPLIED,
            turn=turn,
            game_status=self._verdict.status,
            message=message,
            events=events,
            verdict=self._verdict,
        )

    # -------------------------------------------------------------------------
    # Player Actions
    # -------------------------------------------------------------------------

    def _apply_player_action(self, intent: PlayerIntent) -> list[_Effect] | _Rejection:
        """Validate and apply one intent. Rejections must not mutate anything."""
        if intent.kind is IntentKind.MOVE:
            if intent.direction is None:
                raise GameEngineError("Move intent without a direction")
            return self._move(intent.direction)
        if intent.kind is IntentKind.USE_ITEM:
            if intent.item_index is None:
                raise GameEngineError("Item intent without an item index")
            return self._use_item(intent.item_index)
        if intent.kind is IntentKind.PICK_UP:
            return self._pick_up()
        return [_Effect(ActionType.WAIT, "You wait.")]

    def _move(self, direction: Direction) -> list[_Effect] | _Rejection:
        grid = self.world.grid
        registry = self.world.registry
        player = registry.player
        target = player.position.offset(direction)

        rejection = can_move(player.position, target, grid, registry)
        if rejection is not None:
            occupant = rejection.occupant
            if occupant is not None and is_hostile(ActorRef.player(), occupant, registry):
                npc = registry.get_npc(occupant.npc_id or "")
                if npc is None:
                    raise GameEngineError(
                        "Hostile occupant is not registered",
                        details={"npc_id": occupant.npc_id, "position": target.as_tuple()},
                    )
                return self._attack(npc)
            if occupant is not None and not occupant.is_player:
                npc = registry.get_npc(occupant.npc_id or "")
                name = npc.name if npc is not None else "Someone"
                return _Rejection(rejection.reason, f"{name} is in the way.")
            return _Rejection(rejection.reason, rejection.describe())

        origin = player.position
        player.position = target
        details: dict[str, Any] = {"from": origin.as_tuple(), "to": target.as_tuple()}
        outcome = f"You move {direction.value}."

        tile = grid.tile_at(target)
        if tile.kind is TileKind.HAZARD and tile.hazard is not None:
            damage = player.take_damage(tile.hazard.damage)
            details.update(hazard=tile.hazard.value, damage=damage, player_health=player.health)
            outcome = f"You step into {tile.hazard.value.replace('_', ' ')} and take {damage} damage!"

        ground = registry.item_at(target)
        if ground is not None:
            details["item_here"] = ground.item.kind.value
            outcome = f"{outcome} There is a {ground.item.label} here."

        return [_Effect(ActionType.MOVE, outcome, details)]

    def _attack(self, npc: NPC) -> list[_Effect]:
        registry = self.world.registry
        player = registry.player
        combat = self._settings.combat

        rolled = self._roller.roll_range(combat.player_attack_min, combat.player_attack_max)
        dealt = npc.take_damage(rolled)
        effects = [
            _Effect(
                ActionType.ATTACK,
                f"You hit {npc.name} for {rolled} damage.",
                {"target": npc.npc_id, "damage": rolled, "dealt": dealt, "target_health": npc.health},
            )
        ]

        if not npc.is_alive:
            registry.remove_npc(npc.npc_id)
            leveled = player.grant_experience(npc.experience_value)
            outcome = f"{npc.name} is defeated!"
            if leveled:
                outcome = f"{outcome} You reached level {player.level}!"
            effects.append(
                _Effect(
                    ActionType.DEATH,
                    outcome,
                    {"experience": npc.experience_value, "level": player.level},
                    actor=npc.name,
                    actor_ref=npc.ref,
                )
            )
            logger.info("NPC defeated", npc_id=npc.npc_id, kind=npc.kind.value)

        return effects

    def _pick_up(self) -> list[_Effect] | _Rejection:
        registry = self.world.registry
        player = registry.player
        item = registry.take_item(player.position)
        if item is None:
            return _Rejection(RejectionReason.NOTHING_HERE, "There is nothing here to pick up.")
        player.inventory.append(item)
        return [
            _Effect(
                ActionType.PICK_UP,
                f"You pick up the {item.label}.",
                {"item": item.kind.value, "uid": str(item.uid)},
            )
        ]

    def _use_item(self, index: int) -> list[_Effect] | _Rejection:
        player = self.world.player
        if not 0 <= index < len(player.inventory):
            return _Rejection(
                RejectionReason.INVALID_ITEM_INDEX,
                f"You have no item in slot {index}.",
            )

        item = player.inventory[index]
        details: dict[str, Any] = {"item": item.kind.value, "index": index, "consumed": False}

        if item.kind is ItemKind.POTION:
            player.inventory.pop(index)
            healed = player.heal(self._settings.combat.potion_heal)
            details.update(consumed=True, healed=healed, player_health=player.health)
            outcome = f"You drink the {item.label} and recover {healed} health."

        elif item.kind is ItemKind.TREASURE_CHEST:
            player.inventory.pop(index)
            treasure = make_item(ItemKind.TREASURE)
            player.inventory.append(treasure)
            details.update(consumed=True, produced=treasure.kind.value)
            outcome = f"You open the {item.label} and find the {treasure.label}!"

        elif item.kind is ItemKind.KEY:
            opened = [
                pos.as_tuple()
                for pos in self.world.grid.neighbors(player.position)
                if self.world.grid.open_door(pos)
            ]
            if opened:
                player.inventory.pop(index)
                details.update(consumed=True, opened=opened)
                outcome = f"The {item.label} turns in the lock. The door swings open."
            else:
                outcome = f"There is no locked door here for the {item.label}."

        else:
            outcome = f"You examine the {item.label}. {item.description}"

        return [_Effect(ActionType.USE_ITEM, outcome, details)]

    # -------------------------------------------------------------------------
    # NPC Phase
    # -------------------------------------------------------------------------

    def _run_npc_phase(self, turn: int) -> list[TurnEvent]:
        registry = self.world.registry
        combat = self._settings.combat
        ctx = BehaviorContext(
            grid=self.world.grid,
            registry=registry,
            roller=self._roller,
            distance_metric=combat.distance_metric,
            axis_priority=combat.chase_axis_priority,
        )

        events: list[TurnEvent] = []
        for npc_id in registry.npc_order():
            npc = registry.get_npc(npc_id)
            if npc is None or not npc.is_alive:
                continue
            action = run_npc_turn(npc, ctx)
            if action.is_idle and not self._settings.log_idle_actions:
                continue
            events.append(
                TurnEvent(
                    turn=turn,
                    actor=action.name,
                    actor_ref=ActorRef.npc(action.npc_id),
                    action=action.action,
                    outcome=action.outcome,
                    details=action.details,
                )
            )
        return events


__all__ = [
    "Condition",
    "PlayerIntent",
    "TurnCallback",
    "TurnEngine",
    "TurnOutcome",
    "TurnPhase",
    "TurnStatus",
]
